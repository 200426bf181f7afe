"""Deep search over request-body properties.

Every media type of every request body is walked with a
:class:`~apiscope.schema.SchemaWalker`, which follows ``$ref``, ``items``
and composition members. Each named property met on the way is matched
against a :class:`~apiscope.models.PropertyCriteria`; matches are returned
as a flat list of :class:`~apiscope.models.PropertyMatch`.

Paths read like ``Pet.tags[items].name``: referenced schema names, property
names, ``[items]`` suffixes and ``oneOf[0]`` style composition segments,
joined with dots.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Optional

from apiscope.exceptions import InvalidUsageError
from apiscope.models import EndpointRecord, PropertyCriteria, PropertyMatch, SpecDocument
from apiscope.schema import SchemaWalker, resolve_schema, schema_type


class PropertyCollector(SchemaWalker):
    """Collects the properties of one schema tree that satisfy *criteria*."""

    def __init__(
        self,
        schemas: dict[str, Any],
        criteria: PropertyCriteria,
        endpoint: str,
        media_type: str,
        pattern: Optional[re.Pattern[str]] = None,
    ) -> None:
        super().__init__(schemas)
        self.criteria = criteria
        self.endpoint = endpoint
        self.media_type = media_type
        self.pattern = pattern
        self.matches: list[PropertyMatch] = []

    def visit_property(self, name, prop, required, path, visited, depth) -> None:
        resolution = resolve_schema(prop, self.schemas, visited, depth)
        target = resolution.node
        prop_type = schema_type(prop) or schema_type(target) or "unknown"
        own = prop if isinstance(prop, dict) else {}
        description = own.get("description") or target.get("description")

        if self._accepts(name, prop_type, description, required):
            self.matches.append(
                PropertyMatch(
                    endpoint=self.endpoint,
                    media_type=self.media_type,
                    property_name=name,
                    property_type=prop_type,
                    path=".".join(path + (name,)),
                    required=required,
                    description=description,
                    format=target.get("format"),
                    example=target.get("example"),
                    enum=target.get("enum"),
                    ref=resolution.name,
                )
            )
        super().visit_property(name, prop, required, path, visited, depth)

    def _accepts(
        self, name: str, prop_type: str, description: Optional[str], required: bool
    ) -> bool:
        criteria = self.criteria
        if criteria.name and criteria.name.lower() not in name.lower():
            return False
        if criteria.type and prop_type != criteria.type:
            return False
        if criteria.required is not None and required != criteria.required:
            return False
        if self.pattern is not None and not (
            self.pattern.search(description or "") or self.pattern.search(name)
        ):
            return False
        return True


def compile_pattern(pattern: Optional[str]) -> Optional[re.Pattern[str]]:
    """Compile a case-insensitive search pattern.

    Raises:
        InvalidUsageError: If *pattern* is not a valid regular expression.
    """
    if not pattern:
        return None
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise InvalidUsageError(f"Invalid pattern {pattern!r}: {exc}") from exc


def search_properties(
    document: SpecDocument,
    records: Iterable[EndpointRecord],
    criteria: PropertyCriteria,
) -> list[PropertyMatch]:
    """Find request-body properties matching *criteria* across *records*.

    ``criteria.methods``, when set, limits the endpoints searched (any case).
    """
    pattern = compile_pattern(criteria.pattern)
    methods = {m.lower() for m in criteria.methods}

    matches: list[PropertyMatch] = []
    for record in records:
        if methods and record.method.value not in methods:
            continue
        content = (record.request_body or {}).get("content") or {}
        for media_type, media in content.items():
            if not isinstance(media, dict) or not isinstance(media.get("schema"), dict):
                continue
            collector = PropertyCollector(
                document.schemas, criteria, record.label, media_type, pattern
            )
            collector.walk(media["schema"])
            matches.extend(collector.matches)
    return matches
