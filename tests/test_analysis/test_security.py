"""Tests for apiscope.analysis.security."""

from __future__ import annotations

from apiscope.analysis.security import (
    extract_auth_patterns,
    scheme_details,
    security_recommendations,
)
from apiscope.models import EndpointRecord, SpecDocument


class TestSchemeDetails:
    def test_api_key(self) -> None:
        assert scheme_details({"type": "apiKey", "in": "header", "name": "X-Key"}) == {
            "type": "apiKey",
            "in": "header",
            "name": "X-Key",
        }

    def test_http_drops_unset_fields(self) -> None:
        assert scheme_details({"type": "http", "scheme": "basic"}) == {
            "type": "http",
            "scheme": "basic",
        }

    def test_oauth2_lists_scopes(self) -> None:
        details = scheme_details(
            {
                "type": "oauth2",
                "flows": {
                    "implicit": {"scopes": {"a": "", "b": ""}},
                    "password": {"scopes": {"b": "", "c": ""}},
                },
            }
        )
        assert details["availableScopes"] == ["a", "b", "c"]

    def test_open_id_connect(self) -> None:
        details = scheme_details({"type": "openIdConnect", "openIdConnectUrl": "https://id"})
        assert details["openIdConnectUrl"] == "https://id"


class TestExtractAuthPatterns:
    def test_petstore_schemes(
        self, petstore_doc: SpecDocument, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        report = extract_auth_patterns(petstore_doc, petstore_endpoints)
        assert [(s.name, s.type) for s in report.security_schemes] == [
            ("apiKey", "apiKey"),
            ("oauth", "oauth2"),
        ]
        assert report.global_security == [{"apiKey": []}]

    def test_endpoint_mapping(
        self, petstore_doc: SpecDocument, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        report = extract_auth_patterns(petstore_doc, petstore_endpoints)
        by_endpoint = {e.endpoint: e for e in report.endpoint_security}
        assert by_endpoint["GET /pets"].auth_options == ["apiKey"]
        assert by_endpoint["DELETE /pets/{petId}"].auth_required is False
        assert by_endpoint["POST /store/orders"].auth_options == ["oauth"]

    def test_scope_analysis(
        self, petstore_doc: SpecDocument, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        scopes = extract_auth_patterns(petstore_doc, petstore_endpoints).scope_analysis
        assert scopes.scope_usage == {"write:orders": ["POST /store/orders"]}
        assert scopes.total_scopes == 1
        assert scopes.unused_scopes == ["read:orders"]

    def test_recommendations(
        self, petstore_doc: SpecDocument, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        report = extract_auth_patterns(petstore_doc, petstore_endpoints)
        assert report.recommendations == ["1 endpoints have no security requirements"]

    def test_optional_sections(
        self, petstore_doc: SpecDocument, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        report = extract_auth_patterns(
            petstore_doc,
            petstore_endpoints,
            include_endpoint_mapping=False,
            analyze_scopes=False,
        )
        assert report.endpoint_security is None
        assert report.scope_analysis is None

    def test_no_oauth_means_no_scope_analysis(self, make_document) -> None:
        document, endpoints = make_document(
            paths={"/a": {"get": {"responses": {}}}},
            components={"securitySchemes": {"key": {"type": "apiKey", "in": "query", "name": "k"}}},
        )
        report = extract_auth_patterns(document, endpoints)
        assert report.scope_analysis is None
        assert report.recommendations == [
            "Consider setting global security requirements",
            "Consider implementing OAuth2 for better security than API keys alone",
            "1 endpoints have no security requirements",
        ]


class TestSecurityRecommendations:
    def test_nothing_declared(self) -> None:
        assert security_recommendations({}, [], []) == [
            "Consider adding authentication schemes to secure your API",
            "Consider setting global security requirements",
        ]
