"""Synthetic data that follows a schema's structure.

Values are produced with these precedences: an explicit ``example`` is
returned as-is, then an ``enum`` member is sampled, then the value is
generated from the (declared or inferred) type. Output is representative,
not reproducible: optional object properties are included with probability
0.7 and numbers, booleans and filler strings are random. Pass a seeded
:class:`random.Random` as *rng* to make a run deterministic.
"""

from __future__ import annotations

import json
import math
import random
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from apiscope.analysis.search import find_endpoint, parse_endpoint_ref
from apiscope.exceptions import InvalidUsageError, NotFoundError
from apiscope.models import EndpointRecord, MockFormat, SpecDocument, coerce_option
from apiscope.schema import (
    DEFAULT_REF_DEPTH,
    SchemaKind,
    dereference,
    required_names,
    schema_kind,
    schema_type,
)

OPTIONAL_PROPERTY_RATE = 0.7
MAX_ARRAY_ITEMS = 5
FILLER = "lorem ipsum"
FIXED_UUID = "550e8400-e29b-41d4-a716-446655440000"
EXAMPLE_URL = "https://example.com"

# Checked in order against the lower-cased field name.
_FIELD_HINTS = (
    ("name", "John Doe"),
    ("email", "john.doe@example.com"),
    ("phone", "+1-555-123-4567"),
    ("address", "123 Main St, Anytown, USA"),
    ("id", "abc123"),
    ("url", EXAMPLE_URL),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MockGenerator:
    """Generates values for schemas of one ``components.schemas`` map.

    Args:
        schemas: The document's ``components.schemas`` mapping.
        rng: Source of randomness.
        now: Clock used for ``date`` and ``date-time`` formats.
        realistic: Use field-name heuristics and randomized emails.
        count: Requested item count; arrays get ``min(count, 5)`` items.
    """

    def __init__(
        self,
        schemas: dict[str, Any],
        rng: Optional[random.Random] = None,
        now: Callable[[], datetime] = _utcnow,
        realistic: bool = True,
        count: int = 3,
    ) -> None:
        self.schemas = schemas
        self.rng = rng if rng is not None else random.Random()
        self.now = now
        self.realistic = realistic
        self.count = count

    def generate(self, schema: Any, field_name: Optional[str] = None) -> Any:
        return self._value(schema, field_name, frozenset(), DEFAULT_REF_DEPTH)

    def _value(self, schema, field_name, visited, depth) -> Any:
        resolution, visited, depth = dereference(schema, self.schemas, visited, depth)
        if not resolution.resolved:
            return None
        node = resolution.node

        if "example" in node:
            return node["example"]
        enum = node.get("enum")
        if isinstance(enum, list) and enum:
            return self.rng.choice(enum)

        if isinstance(node.get("allOf"), list) and node["allOf"]:
            return self._merge_all_of(node, field_name, visited, depth)
        for keyword in ("oneOf", "anyOf"):
            members = node.get(keyword)
            if isinstance(members, list) and members:
                return self._value(self.rng.choice(members), field_name, visited, depth)

        kind = schema_kind(node)
        declared = schema_type(node)
        if kind is SchemaKind.OBJECT:
            return self._object(node, visited, depth)
        if kind is SchemaKind.ARRAY:
            items = node.get("items")
            return [
                self._value(items, field_name, visited, depth)
                for _ in range(min(self.count, MAX_ARRAY_ITEMS))
            ]
        if declared == "string":
            return self.string_value(node, field_name)
        if declared in ("number", "integer"):
            return self.number_value(node)
        if declared == "boolean":
            return self.rng.random() > 0.5
        return None

    def _merge_all_of(self, node, field_name, visited, depth) -> Any:
        merged: dict[str, Any] = {}
        last: Any = None
        for member in node["allOf"]:
            last = self._value(member, field_name, visited, depth)
            if isinstance(last, dict):
                merged.update(last)
        if node.get("properties"):
            merged.update(self._object(node, visited, depth))
        return merged if merged or isinstance(last, dict) else last

    def _object(self, node, visited, depth) -> dict[str, Any]:
        required = set(required_names(node))
        result = {}
        for name, prop in (node.get("properties") or {}).items():
            if name in required or self.rng.random() < OPTIONAL_PROPERTY_RATE:
                result[name] = self._value(prop, name, visited, depth)
        return result

    def string_value(self, node: dict[str, Any], field_name: Optional[str] = None) -> str:
        fmt = node.get("format")
        if fmt == "email":
            if self.realistic:
                return f"user{self.rng.randint(0, 999)}@example.com"
            return "user@example.com"
        if fmt in ("uri", "url"):
            return EXAMPLE_URL
        if fmt == "date":
            return self.now().date().isoformat()
        if fmt == "date-time":
            return self.now().isoformat(timespec="milliseconds").replace("+00:00", "Z")
        if fmt == "uuid":
            return FIXED_UUID

        if self.realistic and field_name:
            lowered = field_name.lower()
            for keyword, value in _FIELD_HINTS:
                if keyword in lowered:
                    return value

        min_length = node.get("minLength") or 1
        max_length = min(node.get("maxLength") or 20, 50)
        if max_length < min_length:
            max_length = min_length
        length = self.rng.randint(min_length, max_length)
        return (FILLER * math.ceil(length / len(FILLER)))[:length]

    def number_value(self, node: dict[str, Any]) -> float | int:
        minimum = node.get("minimum")
        maximum = node.get("maximum")
        low = minimum if minimum is not None else 0
        high = maximum if maximum is not None else 100
        value = self.rng.uniform(low, high)
        if node.get("type") == "integer":
            return math.floor(value)
        return round(value, 2)


def generate_mock(
    document: SpecDocument,
    records: Iterable[EndpointRecord],
    schema_name: Optional[str] = None,
    endpoint: Optional[str] = None,
    count: int = 3,
    realistic: bool = True,
    rng: Optional[random.Random] = None,
) -> list[Any]:
    """Generate *count* values for a named schema or an endpoint's request body.

    For an endpoint (``METHOD:/path``) the schema of the first request-body
    media type is used; an endpoint without one yields an empty list.

    Raises:
        InvalidUsageError: If neither *schema_name* nor *endpoint* is given.
        NotFoundError: If the schema or endpoint does not exist.
    """
    generator = MockGenerator(document.schemas, rng=rng, realistic=realistic, count=count)

    if schema_name is not None:
        schema = document.schemas.get(schema_name)
        if schema is None:
            raise NotFoundError(f"Schema '{schema_name}' not found.")
    elif endpoint is not None:
        method, path = parse_endpoint_ref(endpoint)
        record = find_endpoint(records, method, path)
        if record is None:
            raise NotFoundError(f"Endpoint not found: {method.upper()} {path}")
        content = (record.request_body or {}).get("content") or {}
        media = next(iter(content.values()), None)
        if not isinstance(media, dict) or "schema" not in media:
            return []
        schema = media["schema"]
    else:
        raise InvalidUsageError("Provide a schema name or an endpoint (METHOD:/path).")

    return [generator.generate(schema) for _ in range(count)]


def render_mock(
    data: list[Any], fmt: MockFormat | str = MockFormat.JSON, type_name: str = "MockData"
) -> str:
    """Render mock values as JSON, a JavaScript constant, or a typed TypeScript constant.

    Raises:
        UnsupportedOptionError: If *fmt* is not a known format.
    """
    fmt = coerce_option(MockFormat, fmt, "format")
    body = json.dumps(data, indent=2, default=str)
    if fmt is MockFormat.JAVASCRIPT:
        return f"const mockData = {body};"
    if fmt is MockFormat.TYPESCRIPT:
        return f"const mockData: {type_name}[] = {body} as {type_name}[];"
    return body
