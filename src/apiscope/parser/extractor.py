"""Extract endpoint records and their derived metrics from a normalized document.

This module walks the ``paths`` object of an OpenAPI 3 document and builds one
:class:`~apiscope.models.EndpointRecord` per path + HTTP method pair, in path
insertion order and then the fixed method order of
:class:`~apiscope.models.HTTPMethod`.

The single public entry point is :func:`extract_endpoints`. Each record also
carries four heuristic fields computed here:

* ``complexity`` -- :func:`score_complexity`.
* ``estimated_response_time`` -- :func:`estimate_response_time`.
* ``business_context`` -- :func:`business_context`.
* ``ai_suggestions`` -- :func:`suggest_usage`.

Parameter merging concatenates path-level parameters before operation-level
ones and keeps duplicates: a parameter declared at both levels appears twice.

Security follows the usual override rule: an operation-level ``security``
array replaces the global one, and an explicit empty array means "no auth
required".
"""

from __future__ import annotations

import logging
import re
from typing import Any

from apiscope.models import (
    Complexity,
    EndpointRecord,
    HTTPMethod,
    ResponseTime,
    SpecDocument,
)
from apiscope.schema import resolve_component

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_PLACEHOLDER = re.compile(r"\{([^}]*)\}")

_DETAIL_HINTS = [
    "Fetches a single record; suited to detail views in your app",
    "Can back detail views, edit forms, or data validation",
]
_LIST_HINTS = [
    "Suited to listing data in tables, dropdowns, or search results",
    "Consider implementing pagination if not already present",
]
_CREATE_HINTS = [
    "Use for creating new records from user forms",
    "Validate input data before submission",
]
_UPDATE_HINTS = [
    "Suited to edit forms and data updates",
    "Ensure proper authorization before allowing updates",
]
_DELETE_HINTS = [
    "Add confirmation dialogs before deleting",
    "Consider soft deletes for important business data",
]
_PAGINATION_HINT = "Supports pagination via a limit parameter"
_FILTERING_HINT = "Supports filtering, useful for search functionality"


def endpoint_id(method: str, path: str) -> str:
    """``METHOD_path`` with every non-alphanumeric character replaced by ``_``.

    Not injective: ``/a-b`` and ``/a_b`` map to the same id.
    """
    return f"{method.upper()}_{_NON_ALNUM.sub('_', path)}"


def extract_endpoints(document: SpecDocument) -> list[EndpointRecord]:
    """Build the ordered endpoint list for *document*.

    Parameter, request body and response ``$ref`` values are dereferenced
    against ``components`` when the target exists and left as-is otherwise.

    Args:
        document: A normalized document.

    Returns:
        One record per path + method pair. Non-dict path items and
        operations are skipped.
        Paths that differ only in punctuation (``/a-b`` and ``/a_b``) share an
        id; both records are kept and the collision is logged.
    """
    components = document.components
    records: list[EndpointRecord] = []
    labels_by_id: dict[str, str] = {}

    for path, path_item in document.paths.items():
        if not isinstance(path_item, dict):
            continue
        path_params = path_item.get("parameters") or []

        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue

            parameters = [
                resolve_component(param, components, "parameters")
                for param in [*path_params, *(operation.get("parameters") or [])]
                if isinstance(param, dict)
            ]
            request_body = operation.get("requestBody")
            if isinstance(request_body, dict):
                request_body = resolve_component(request_body, components, "requestBodies")
            else:
                request_body = None
            responses = {
                str(code): resolve_component(response, components, "responses")
                for code, response in (operation.get("responses") or {}).items()
                if isinstance(response, dict)
            }

            op_security = operation.get("security")
            security = op_security if op_security is not None else document.security
            tags = list(operation.get("tags") or [])
            summary = operation.get("summary")
            has_request_body = request_body is not None
            record_id = endpoint_id(method.value, path)
            label = f"{method.value.upper()} {path}"
            if record_id in labels_by_id:
                logger.debug(
                    "Endpoint id %s of %s collides with %s",
                    record_id,
                    label,
                    labels_by_id[record_id],
                )
            labels_by_id.setdefault(record_id, label)

            records.append(
                EndpointRecord(
                    id=record_id,
                    path=path,
                    method=method,
                    operation_id=operation.get("operationId"),
                    summary=summary,
                    description=operation.get("description"),
                    tags=tags,
                    parameters=parameters,
                    request_body=request_body,
                    responses=responses,
                    security=security,
                    deprecated=bool(operation.get("deprecated", False)),
                    path_segments=[s for s in path.split("/") if s],
                    has_path_params="{" in path,
                    has_query_params=any(
                        p.get("in") == "query" for p in parameters
                    ),
                    has_request_body=has_request_body,
                    response_types=list(responses),
                    complexity=score_complexity(
                        parameters, has_request_body, len(responses), security, tags
                    ),
                    estimated_response_time=estimate_response_time(
                        operation.get("operationId"), summary, parameters, has_request_body
                    ),
                    business_context=business_context(summary, tags),
                    ai_suggestions=suggest_usage(method, path, parameters),
                )
            )

    return records


def _param_names(parameters: list[dict[str, Any]]) -> list[str]:
    return [str(p.get("name", "")).lower() for p in parameters]


def score_complexity(
    parameters: list[dict[str, Any]],
    has_request_body: bool,
    response_count: int,
    security: list[dict[str, Any]],
    tags: list[str],
) -> Complexity:
    """Score ``0.5`` per parameter, ``2`` for a body, ``0.3`` per response,
    ``1`` for any security and ``0.5`` for more than one tag.

    ``<= 2`` is low, ``<= 5`` medium, anything above high.
    """
    score = 0.5 * len(parameters)
    if has_request_body:
        score += 2
    score += 0.3 * response_count
    if security:
        score += 1
    if len(tags) > 1:
        score += 0.5

    if score <= 2:
        return Complexity.LOW
    if score <= 5:
        return Complexity.MEDIUM
    return Complexity.HIGH


def estimate_response_time(
    operation_id: str | None,
    summary: str | None,
    parameters: list[dict[str, Any]],
    has_request_body: bool,
) -> ResponseTime:
    op_id = (operation_id or "").lower()
    text = (summary or "").lower()
    names = _param_names(parameters)

    score = 0
    if "get" in op_id or "get" in text or "list" in text:
        score -= 1
    if has_request_body:
        score += 1
    if len(parameters) > 5:
        score += 1
    if (
        "search" in text
        or "filter" in text
        or any("search" in n or "filter" in n for n in names)
    ):
        score += 1

    if score <= 0:
        return ResponseTime.FAST
    if score <= 1:
        return ResponseTime.MEDIUM
    return ResponseTime.SLOW


def business_context(summary: str | None, tags: list[str]) -> str:
    """Templated sentence picked by the first keyword group found in *summary*."""
    tag_text = ", ".join(tags) or "General"
    lowered_tags = tag_text.lower()
    text = (summary or "").lower()

    if "create" in text or "add" in text:
        return (
            f"Business Impact: Creates new {lowered_tags} resources. "
            "Use this endpoint to add new data to the system."
        )
    if "get" in text or "list" in text or "fetch" in text:
        return (
            f"Business Impact: Retrieves {lowered_tags} information. "
            "Use this endpoint to access and display data to users."
        )
    if "update" in text or "modify" in text:
        return (
            f"Business Impact: Updates existing {lowered_tags} resources. "
            "Use this endpoint to modify data based on user actions."
        )
    if "delete" in text or "remove" in text:
        return (
            f"Business Impact: Removes {lowered_tags} resources. "
            "Use this endpoint to clean up or delete data as requested by users."
        )
    return (
        f"Business Impact: {summary or 'No summary available'} - "
        f"Part of {tag_text} functionality."
    )


def has_identifier_placeholder(path: str) -> bool:
    """True when a ``{...}`` segment is named ``id`` or ends in ``id``."""
    return any(name.lower().endswith("id") for name in _PLACEHOLDER.findall(path))


def suggest_usage(
    method: HTTPMethod, path: str, parameters: list[dict[str, Any]]
) -> list[str]:
    """Fixed usage hints keyed on method, identifier placeholder and parameters."""
    if method is HTTPMethod.GET:
        hints = list(_DETAIL_HINTS if has_identifier_placeholder(path) else _LIST_HINTS)
    elif method is HTTPMethod.POST:
        hints = list(_CREATE_HINTS)
    elif method in (HTTPMethod.PUT, HTTPMethod.PATCH):
        hints = list(_UPDATE_HINTS)
    elif method is HTTPMethod.DELETE:
        hints = list(_DELETE_HINTS)
    else:
        hints = []

    names = _param_names(parameters)
    if any("limit" in n for n in names):
        hints.append(_PAGINATION_HINT)
    if any("filter" in n for n in names):
        hints.append(_FILTERING_HINT)
    return hints


def collect_tags(document: SpecDocument) -> list[str]:
    """Sorted union of document-level tag names and operation tags."""
    tags = {t["name"] for t in document.tags if isinstance(t, dict) and "name" in t}
    for operation in _iter_operations(document):
        tags.update(operation.get("tags") or [])
    return sorted(tags)


def collect_methods(document: SpecDocument) -> list[str]:
    """Sorted, upper-cased HTTP methods used anywhere in the document."""
    methods = set()
    for path_item in document.paths.values():
        if not isinstance(path_item, dict):
            continue
        for method in HTTPMethod:
            if isinstance(path_item.get(method.value), dict):
                methods.add(method.value.upper())
    return sorted(methods)


def collect_status_codes(document: SpecDocument) -> list[str]:
    codes = set()
    for operation in _iter_operations(document):
        codes.update(str(code) for code in (operation.get("responses") or {}))
    return sorted(codes)


def _iter_operations(document: SpecDocument):
    for path_item in document.paths.values():
        if not isinstance(path_item, dict):
            continue
        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if isinstance(operation, dict):
                yield operation
