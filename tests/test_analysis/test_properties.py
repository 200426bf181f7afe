"""Tests for apiscope.analysis.properties."""

from __future__ import annotations

import pytest

from apiscope.analysis.properties import compile_pattern, search_properties
from apiscope.exceptions import InvalidUsageError
from apiscope.models import EndpointRecord, PropertyCriteria, SpecDocument


def _search(doc: SpecDocument, endpoints: list[EndpointRecord], **criteria):
    return search_properties(doc, endpoints, PropertyCriteria(**criteria))


class TestSearchProperties:
    def test_name_follows_references(
        self, petstore_doc: SpecDocument, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        matches = _search(petstore_doc, petstore_endpoints, name="NAME")
        assert [m.path for m in matches] == ["NewPet.name", "NewPet.category.Category.name"]
        first = matches[0]
        assert first.endpoint == "POST /pets"
        assert first.media_type == "application/json"
        assert first.property_type == "string"
        assert first.required is True
        assert first.description == "The pet's name"

    def test_type(
        self, petstore_doc: SpecDocument, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        matches = _search(petstore_doc, petstore_endpoints, type="integer")
        assert [m.property_name for m in matches] == ["id", "petId", "quantity"]

    def test_required(
        self, petstore_doc: SpecDocument, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        matches = _search(petstore_doc, petstore_endpoints, required=True)
        assert [m.property_name for m in matches] == ["name", "petId", "quantity"]

    def test_pattern_matches_description(
        self, petstore_doc: SpecDocument, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        matches = _search(petstore_doc, petstore_endpoints, pattern="pet to")
        assert [m.path for m in matches] == ["petId"]

    def test_referenced_property_reports_ref_and_type(
        self, petstore_doc: SpecDocument, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        matches = _search(petstore_doc, petstore_endpoints, name="shipTo")
        assert len(matches) == 1
        assert matches[0].ref == "Address"
        assert matches[0].property_type == "object"

    def test_method_filter(
        self, petstore_doc: SpecDocument, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        assert _search(petstore_doc, petstore_endpoints, name="name", methods=["GET"]) == []

    def test_array_items_path(self, make_document) -> None:
        document, endpoints = make_document(
            paths={
                "/t": {
                    "post": {
                        "requestBody": {
                            "content": {
                                "application/json": {
                                    "schema": {
                                        "type": "object",
                                        "properties": {
                                            "tags": {
                                                "type": "array",
                                                "items": {
                                                    "type": "object",
                                                    "properties": {"label": {"type": "string"}},
                                                },
                                            }
                                        },
                                    }
                                }
                            }
                        }
                    }
                }
            }
        )
        matches = search_properties(document, endpoints, PropertyCriteria(name="label"))
        assert [m.path for m in matches] == ["tags[items].label"]


class TestCompilePattern:
    def test_empty_is_none(self) -> None:
        assert compile_pattern(None) is None
        assert compile_pattern("") is None

    def test_invalid_regex(self) -> None:
        with pytest.raises(InvalidUsageError, match="Invalid pattern"):
            compile_pattern("(unclosed")


class TestNonListRequired:
    def test_boolean_required_is_ignored(self, boolean_required_document) -> None:
        document, endpoints = boolean_required_document
        matches = search_properties(document, endpoints, PropertyCriteria())
        assert [m.path for m in matches] == ["Pet.name", "Pet.owner", "Pet.owner.email"]
        assert [m.required for m in matches] == [True, False, False]
