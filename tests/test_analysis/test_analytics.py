"""Tests for apiscope.analysis.analytics."""

from __future__ import annotations

import pytest

from apiscope.analysis.analytics import build_overview, generate_analytics, validate_design
from apiscope.exceptions import UnsupportedOptionError
from apiscope.models import DesignFocus, EndpointRecord, SpecDocument


class TestGenerateAnalytics:
    def test_distributions(self, petstore_endpoints: list[EndpointRecord]) -> None:
        analytics = generate_analytics(petstore_endpoints)
        assert analytics.total_endpoints == 6
        assert analytics.method_distribution == {"GET": 3, "POST": 2, "DELETE": 1}
        assert analytics.tag_distribution == {"pets": 5, "store": 2}
        assert analytics.complexity_distribution == {"medium": 4, "low": 2}
        assert analytics.response_code_distribution["200"] == 4
        assert analytics.deprecated_count == 1
        assert analytics.security_schemes == ["apiKey", "oauth"]

    def test_average_parameters(self, petstore_endpoints: list[EndpointRecord]) -> None:
        analytics = generate_analytics(petstore_endpoints)
        assert analytics.average_parameters_per_endpoint == pytest.approx(4 / 6)

    def test_path_patterns(self, petstore_endpoints: list[EndpointRecord]) -> None:
        assert generate_analytics(petstore_endpoints).path_patterns == [
            "/pets",
            "/pets/{id}",
            "/store",
            "/store/inventory",
            "/store/orders",
        ]

    def test_path_patterns_capped(self, make_document) -> None:
        ok = {"responses": {}}
        _, endpoints = make_document(paths={f"/r{i}/items": {"get": ok} for i in range(15)})
        assert len(generate_analytics(endpoints).path_patterns) == 20

    def test_empty(self) -> None:
        analytics = generate_analytics([])
        assert analytics.total_endpoints == 0
        assert analytics.average_parameters_per_endpoint == 0.0


class TestBuildOverview:
    def test_petstore(
        self, petstore_doc: SpecDocument, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        overview = build_overview(petstore_doc, petstore_endpoints)
        assert overview.title == "Petstore API"
        assert overview.openapi_version == "3.0.3"
        assert overview.description == "A sample pet store."
        assert overview.servers == ["https://petstore.example.com/v1"]
        assert overview.tags == ["pets", "store"]
        assert overview.methods == ["DELETE", "GET", "POST"]
        assert overview.analytics.total_endpoints == 6

    def test_camel_case_dump(
        self, petstore_doc: SpecDocument, petstore_endpoints: list[EndpointRecord]
    ) -> None:
        data = build_overview(petstore_doc, petstore_endpoints).model_dump(by_alias=True)
        assert "openapiVersion" in data
        assert "methodDistribution" in data["analytics"]


class TestValidateDesign:
    def test_all(self, petstore_endpoints: list[EndpointRecord]) -> None:
        report = validate_design(petstore_endpoints)
        assert report.focus is DesignFocus.ALL
        assert report.recommendations == [
            "Security: 1 endpoints have no security requirements. Review if this is intentional.",
            "Maintenance: 1 deprecated endpoints found. Consider a migration strategy.",
        ]
        assert report.security_coverage == 83.3
        assert report.documentation_coverage == 100.0
        assert report.tag_coverage == 100.0

    def test_focus_without_findings(self, petstore_endpoints: list[EndpointRecord]) -> None:
        report = validate_design(petstore_endpoints, "performance")
        assert report.recommendations == ["No major issues detected in your API design."]

    def test_documentation_focus(self, make_document) -> None:
        _, endpoints = make_document(paths={"/a": {"get": {"responses": {}}}})
        report = validate_design(endpoints, DesignFocus.DOCUMENTATION)
        assert report.recommendations == [
            "Documentation: 1 endpoints lack summaries or descriptions.",
            "Organization: 1 endpoints have no tags for better organization.",
        ]

    def test_no_security_schemes(self, make_document) -> None:
        _, endpoints = make_document(paths={"/a": {"get": {"responses": {}}}})
        report = validate_design(endpoints, "security")
        assert report.recommendations[0].startswith("Security: No security schemes detected.")
        assert report.security_coverage == 0.0

    def test_unknown_focus(self, petstore_endpoints: list[EndpointRecord]) -> None:
        with pytest.raises(UnsupportedOptionError, match="focus"):
            validate_design(petstore_endpoints, "style")
