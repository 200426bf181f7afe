"""Tests for apiscope.analysis.search."""

from __future__ import annotations

import pytest

from apiscope.analysis.search import find_endpoint, parse_endpoint_ref, search_endpoints
from apiscope.exceptions import InvalidUsageError
from apiscope.models import Complexity, EndpointFilters, EndpointRecord


def _labels(records: list[EndpointRecord]) -> list[str]:
    return [r.label for r in records]


class TestSearchEndpoints:
    def test_no_filters_returns_everything_in_order(
        self, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        assert search_endpoints(petstore_endpoints, EndpointFilters()) == petstore_endpoints

    def test_method_filter(self, make_document) -> None:
        ok = {"responses": {"200": {"description": "ok"}}}
        _, endpoints = make_document(
            paths={
                "/a": {"get": ok, "post": ok},
                "/b": {"get": ok, "post": ok},
                "/c": {"get": ok},
            }
        )
        results = search_endpoints(endpoints, EndpointFilters(methods=["GET"]))
        assert _labels(results) == ["GET /a", "GET /b", "GET /c"]

    def test_query_matches_summary_case_insensitively(
        self, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        results = search_endpoints(petstore_endpoints, EndpointFilters(query="INVENTORY"))
        assert _labels(results) == ["GET /store/inventory"]

    def test_query_matches_tags(self, petstore_endpoints: list[EndpointRecord]) -> None:
        results = search_endpoints(petstore_endpoints, EndpointFilters(query="store"))
        assert _labels(results) == ["GET /store/inventory", "POST /store/orders"]

    def test_tags_match_any(self, petstore_endpoints: list[EndpointRecord]) -> None:
        results = search_endpoints(petstore_endpoints, EndpointFilters(tags=["store"]))
        assert _labels(results) == ["GET /store/inventory", "POST /store/orders"]

    def test_filters_are_anded(self, petstore_endpoints: list[EndpointRecord]) -> None:
        filters = EndpointFilters(methods=["post"], tags=["pets"], has_request_body=True)
        assert _labels(search_endpoints(petstore_endpoints, filters)) == [
            "POST /pets",
            "POST /store/orders",
        ]

    def test_complexity_and_deprecated(self, petstore_endpoints: list[EndpointRecord]) -> None:
        low = search_endpoints(
            petstore_endpoints, EndpointFilters(complexity=[Complexity.LOW])
        )
        assert _labels(low) == ["DELETE /pets/{petId}", "GET /store/inventory"]
        deprecated = search_endpoints(petstore_endpoints, EndpointFilters(deprecated=True))
        assert _labels(deprecated) == ["DELETE /pets/{petId}"]

    def test_has_parameters(self, petstore_endpoints: list[EndpointRecord]) -> None:
        results = search_endpoints(petstore_endpoints, EndpointFilters(has_parameters=False))
        assert _labels(results) == ["POST /pets", "GET /store/inventory", "POST /store/orders"]


class TestFindEndpoint:
    def test_method_case_insensitive(self, petstore_endpoints: list[EndpointRecord]) -> None:
        record = find_endpoint(petstore_endpoints, "Get", "/pets/{petId}")
        assert record is not None
        assert record.operation_id == "getPet"

    def test_path_is_exact(self, petstore_endpoints: list[EndpointRecord]) -> None:
        assert find_endpoint(petstore_endpoints, "GET", "/pets/") is None


class TestParseEndpointRef:
    def test_splits_on_first_colon(self) -> None:
        assert parse_endpoint_ref("GET:/a:b") == ("GET", "/a:b")

    @pytest.mark.parametrize("ref", ["GET /pets", ":/pets", "GET:"])
    def test_invalid(self, ref: str) -> None:
        with pytest.raises(InvalidUsageError):
            parse_endpoint_ref(ref)
