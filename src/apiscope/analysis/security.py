"""Authentication patterns declared by a document.

Summarizes ``components.securitySchemes``, maps each endpoint to its
effective security requirements, tallies OAuth2 scope usage and produces a
short list of fixed recommendations. This reads declarations only; it is not
a security scanner.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from apiscope.models import (
    AuthPatternReport,
    EndpointRecord,
    EndpointSecurity,
    ScopeAnalysis,
    SecuritySchemeSummary,
    SpecDocument,
)


def _flow_scopes(scheme: dict[str, Any]) -> list[str]:
    scopes: dict[str, None] = {}
    for flow in (scheme.get("flows") or {}).values():
        if isinstance(flow, dict):
            scopes.update(dict.fromkeys(flow.get("scopes") or {}))
    return list(scopes)


def scheme_details(scheme: dict[str, Any]) -> dict[str, Any]:
    """Type-specific fields of one security scheme."""
    kind = scheme.get("type")
    details: dict[str, Any] = {"type": kind}
    if kind == "apiKey":
        details["in"] = scheme.get("in")
        details["name"] = scheme.get("name")
    elif kind == "http":
        details["scheme"] = scheme.get("scheme")
        details["bearerFormat"] = scheme.get("bearerFormat")
    elif kind == "oauth2":
        details["flows"] = scheme.get("flows")
        if scheme.get("flows"):
            details["availableScopes"] = _flow_scopes(scheme)
    elif kind == "openIdConnect":
        details["openIdConnectUrl"] = scheme.get("openIdConnectUrl")
    return {key: value for key, value in details.items() if value is not None}


def map_endpoint_security(records: Iterable[EndpointRecord]) -> list[EndpointSecurity]:
    return [
        EndpointSecurity(
            endpoint=record.label,
            security=record.security,
            auth_required=bool(record.security),
            auth_options=[name for requirement in record.security for name in requirement],
        )
        for record in records
    ]


def scope_usage(
    schemes: dict[str, Any], records: Iterable[EndpointRecord]
) -> Optional[ScopeAnalysis]:
    """Scope usage per endpoint; ``None`` when no OAuth2 scheme is defined."""
    oauth = [s for s in schemes.values() if isinstance(s, dict) and s.get("type") == "oauth2"]
    if not oauth:
        return None

    usage: dict[str, list[str]] = {}
    for record in records:
        for requirement in record.security:
            for scopes in requirement.values():
                if not isinstance(scopes, list):
                    continue
                for scope in scopes:
                    usage.setdefault(scope, []).append(record.label)

    defined = dict.fromkeys(scope for scheme in oauth for scope in _flow_scopes(scheme))
    return ScopeAnalysis(
        total_scopes=len(usage),
        scope_usage=usage,
        unused_scopes=[scope for scope in defined if scope not in usage],
    )


def security_recommendations(
    schemes: dict[str, Any],
    global_security: list[dict[str, Any]],
    records: list[EndpointRecord],
) -> list[str]:
    recommendations = []
    if not schemes:
        recommendations.append("Consider adding authentication schemes to secure your API")
    if not global_security:
        recommendations.append("Consider setting global security requirements")

    kinds = {s.get("type") for s in schemes.values() if isinstance(s, dict)}
    if "apiKey" in kinds and "oauth2" not in kinds:
        recommendations.append(
            "Consider implementing OAuth2 for better security than API keys alone"
        )

    unsecured = sum(1 for record in records if not record.security)
    if unsecured:
        recommendations.append(f"{unsecured} endpoints have no security requirements")
    return recommendations


def extract_auth_patterns(
    document: SpecDocument,
    records: Iterable[EndpointRecord],
    include_endpoint_mapping: bool = True,
    analyze_scopes: bool = True,
) -> AuthPatternReport:
    """Build an :class:`AuthPatternReport` for *document*.

    Args:
        document: The loaded document.
        records: Its endpoint records.
        include_endpoint_mapping: Include per-endpoint requirements.
        analyze_scopes: Include OAuth2 scope usage.
    """
    records = list(records)
    schemes = document.security_schemes
    return AuthPatternReport(
        security_schemes=[
            SecuritySchemeSummary(
                name=name,
                type=str(scheme.get("type", "unknown")),
                description=scheme.get("description"),
                details=scheme_details(scheme),
            )
            for name, scheme in schemes.items()
            if isinstance(scheme, dict)
        ],
        global_security=document.security,
        endpoint_security=map_endpoint_security(records) if include_endpoint_mapping else None,
        scope_analysis=scope_usage(schemes, records) if analyze_scopes else None,
        recommendations=security_recommendations(schemes, document.security, records),
    )
