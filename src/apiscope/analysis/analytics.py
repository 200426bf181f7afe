"""Whole-API statistics, the overview, and the design lint.

:func:`generate_analytics` only needs the endpoint records;
:func:`build_overview` adds document metadata; :func:`validate_design`
turns the numbers into recommendations for one focus area.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable

from apiscope.models import (
    ApiAnalytics,
    ApiOverview,
    Complexity,
    DesignFocus,
    DesignReport,
    EndpointRecord,
    ResponseTime,
    SpecDocument,
    coerce_option,
)
from apiscope.parser.extractor import collect_methods, collect_status_codes, collect_tags

MAX_PATH_PATTERNS = 20
HIGH_COMPLEXITY_RATIO = 0.3

_PLACEHOLDER = re.compile(r"\{[^}]+\}")


def generate_analytics(records: Iterable[EndpointRecord]) -> ApiAnalytics:
    """Distributions and totals over *records*.

    Path patterns are the first path segment (``/pets``) and the path with
    every placeholder replaced by ``{id}``, first-seen order, at most 20.
    """
    records = list(records)
    methods: Counter[str] = Counter()
    tags: Counter[str] = Counter()
    complexity: Counter[str] = Counter()
    codes: Counter[str] = Counter()
    schemes: dict[str, None] = {}
    patterns: dict[str, None] = {}
    deprecated = 0
    parameters = 0

    for record in records:
        methods[record.method.value.upper()] += 1
        tags.update(record.tags)
        complexity[record.complexity.value] += 1
        codes.update(record.responses)
        for requirement in record.security:
            schemes.update(dict.fromkeys(requirement))
        if record.path_segments:
            patterns.setdefault(f"/{record.path_segments[0]}")
            patterns.setdefault(_PLACEHOLDER.sub("{id}", record.path))
        if record.deprecated:
            deprecated += 1
        parameters += len(record.parameters)

    return ApiAnalytics(
        total_endpoints=len(records),
        method_distribution=dict(methods),
        tag_distribution=dict(tags),
        complexity_distribution=dict(complexity),
        response_code_distribution=dict(codes),
        deprecated_count=deprecated,
        security_schemes=list(schemes),
        average_parameters_per_endpoint=parameters / len(records) if records else 0.0,
        path_patterns=list(patterns)[:MAX_PATH_PATTERNS],
    )


def build_overview(document: SpecDocument, records: Iterable[EndpointRecord]) -> ApiOverview:
    return ApiOverview(
        title=document.title,
        version=document.version,
        openapi_version=document.openapi,
        description=document.info.get("description"),
        servers=[s["url"] for s in document.servers if isinstance(s, dict) and "url" in s],
        tags=collect_tags(document),
        methods=collect_methods(document),
        status_codes=collect_status_codes(document),
        analytics=generate_analytics(records),
    )


def _coverage(count: int, total: int) -> float:
    return round(count / total * 100, 1) if total else 0.0


def validate_design(
    records: Iterable[EndpointRecord], focus: DesignFocus | str = DesignFocus.ALL
) -> DesignReport:
    """Lint the API design in one *focus* area (or ``all``).

    Raises:
        UnsupportedOptionError: If *focus* is not a known area.
    """
    focus = coerce_option(DesignFocus, focus, "focus")
    records = list(records)
    analytics = generate_analytics(records)
    total = analytics.total_endpoints

    def wants(area: DesignFocus) -> bool:
        return focus in (area, DesignFocus.ALL)

    secured = sum(1 for r in records if r.security)
    documented = sum(1 for r in records if r.summary or r.description)
    tagged = sum(1 for r in records if r.tags)

    recommendations = []
    if wants(DesignFocus.SECURITY):
        if not analytics.security_schemes:
            recommendations.append(
                "Security: No security schemes detected. Consider adding "
                "authentication to protect your API."
            )
        if total - secured:
            recommendations.append(
                f"Security: {total - secured} endpoints have no security "
                "requirements. Review if this is intentional."
            )
    if wants(DesignFocus.DOCUMENTATION):
        if total - documented:
            recommendations.append(
                f"Documentation: {total - documented} endpoints lack summaries or descriptions."
            )
        if total - tagged:
            recommendations.append(
                f"Organization: {total - tagged} endpoints have no tags for better organization."
            )
    if wants(DesignFocus.DESIGN):
        if analytics.deprecated_count:
            recommendations.append(
                f"Maintenance: {analytics.deprecated_count} deprecated endpoints found. "
                "Consider a migration strategy."
            )
        complex_count = sum(1 for r in records if r.complexity is Complexity.HIGH)
        if complex_count > total * HIGH_COMPLEXITY_RATIO:
            recommendations.append(
                f"Design: High number of complex endpoints ({complex_count}). "
                "Consider simplifying API design."
            )
    if wants(DesignFocus.PERFORMANCE):
        slow = sum(1 for r in records if r.estimated_response_time is ResponseTime.SLOW)
        if slow:
            recommendations.append(
                f"Performance: {slow} endpoints estimated as slow. Consider optimization."
            )

    if not recommendations:
        recommendations.append("No major issues detected in your API design.")

    return DesignReport(
        focus=focus,
        recommendations=recommendations,
        total_endpoints=total,
        security_coverage=_coverage(secured, total),
        documentation_coverage=_coverage(documented, total),
        tag_coverage=_coverage(tagged, total),
    )
