"""Endpoint search and lookup.

:func:`search_endpoints` applies an :class:`~apiscope.models.EndpointFilters`
to a record list. Every filter that is set must match (logical AND); unset
filters match everything. Results keep the input order.
"""

from __future__ import annotations

from typing import Iterable, Optional

from apiscope.exceptions import InvalidUsageError
from apiscope.models import EndpointFilters, EndpointRecord


def _matches_query(record: EndpointRecord, term: str) -> bool:
    return (
        term in record.path.lower()
        or term in (record.summary or "").lower()
        or term in (record.description or "").lower()
        or any(term in tag.lower() for tag in record.tags)
    )


def search_endpoints(
    records: Iterable[EndpointRecord], filters: EndpointFilters
) -> list[EndpointRecord]:
    """Return the records matching every filter set on *filters*.

    Method names compare case-insensitively. ``query`` is a case-insensitive
    substring of the path, summary, description or any tag. ``tags`` keeps a
    record when it carries at least one of the listed tags.
    """
    term = filters.query.lower() if filters.query else None
    methods = {m.lower() for m in filters.methods}
    tags = set(filters.tags)
    complexity = set(filters.complexity)

    results = []
    for record in records:
        if term and not _matches_query(record, term):
            continue
        if methods and record.method.value not in methods:
            continue
        if tags and not tags.intersection(record.tags):
            continue
        if complexity and record.complexity not in complexity:
            continue
        if filters.deprecated is not None and record.deprecated != filters.deprecated:
            continue
        if (
            filters.has_parameters is not None
            and bool(record.parameters) != filters.has_parameters
        ):
            continue
        if (
            filters.has_request_body is not None
            and record.has_request_body != filters.has_request_body
        ):
            continue
        results.append(record)
    return results


def find_endpoint(
    records: Iterable[EndpointRecord], method: str, path: str
) -> Optional[EndpointRecord]:
    """Return the record for *method* (any case) and exact *path*, if any."""
    wanted = method.lower()
    for record in records:
        if record.method.value == wanted and record.path == path:
            return record
    return None


def parse_endpoint_ref(ref: str) -> tuple[str, str]:
    """Split ``"GET:/pets/{id}"`` into ``("GET", "/pets/{id}")``.

    Only the first colon separates, so paths may contain colons.

    Raises:
        InvalidUsageError: If *ref* has no colon or an empty side.
    """
    method, sep, path = ref.partition(":")
    method, path = method.strip(), path.strip()
    if not sep or not method or not path:
        raise InvalidUsageError(
            f"Invalid endpoint reference {ref!r}. Expected METHOD:/path, "
            "e.g. GET:/pets/{id}"
        )
    return method, path
