"""Structural validation of literal examples against their schemas.

This is a pragmatic subset of JSON Schema: types, string length and pattern,
numeric bounds, enums, required and extra object properties, array items and
sizes, and ``allOf``/``oneOf``/``anyOf``. Every mismatch becomes a
:class:`~apiscope.models.Violation`; nothing here raises on bad data, so a
batch run over a whole document always completes.

``integer`` and ``number`` are treated as the same runtime type. ``$ref``
chains are followed with the usual cycle and depth limits; an unresolvable
reference validates as anything.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Iterable, Iterator, Optional

from apiscope.analysis.search import find_endpoint, parse_endpoint_ref
from apiscope.exceptions import NotFoundError
from apiscope.models import EndpointRecord, ExampleViolation, SpecDocument, Violation
from apiscope.schema import (
    COMPOSITION_KEYWORDS,
    DEFAULT_REF_DEPTH,
    SchemaKind,
    dereference,
    required_names,
    resolve_component,
    schema_kind,
    schema_type,
)

REQUEST_ROOT = "requestBody"
RESPONSE_ROOT = "response"


def json_type(value: Any) -> str:
    """The JSON type name of a parsed value.

    ``date`` and ``datetime`` values count as strings: YAML parsed without
    the loader here turns unquoted dates into them.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, (str, date)):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _expected_type(node: dict[str, Any]) -> Optional[str]:
    declared = schema_type(node)
    if declared is None:
        kind = schema_kind(node)
        if kind is SchemaKind.OBJECT:
            declared = "object"
        elif kind is SchemaKind.ARRAY:
            declared = "array"
    return "number" if declared == "integer" else declared


class ExampleValidator:
    """Validates values against schemas from one ``components.schemas`` map.

    Args:
        schemas: The document's ``components.schemas`` mapping.
        strict: Also flag object properties the schema does not declare.
    """

    def __init__(self, schemas: dict[str, Any], strict: bool = False) -> None:
        self.schemas = schemas
        self.strict = strict

    def validate(self, value: Any, schema: Any, path: str = "") -> list[Violation]:
        return list(self._check(value, schema, path, frozenset(), DEFAULT_REF_DEPTH))

    def _check(
        self, value: Any, schema: Any, path: str, visited: frozenset[str], depth: int
    ) -> Iterator[Violation]:
        resolution, visited, depth = dereference(schema, self.schemas, visited, depth)
        if not resolution.resolved:
            return
        node = resolution.node

        if isinstance(value, date):
            value = value.isoformat()

        yield from self._check_compositions(value, node, path, visited, depth)

        actual = json_type(value)
        if value is None:
            expected = _expected_type(node)
            if expected is not None and not node.get("nullable"):
                yield Violation(
                    path=path,
                    message=f"Type mismatch: expected {expected}, got null",
                    expected=expected,
                    actual="null",
                )
            return

        expected = _expected_type(node)
        if expected is not None and expected != actual:
            yield Violation(
                path=path,
                message=f"Type mismatch: expected {expected}, got {actual}",
                expected=expected,
                actual=actual,
            )
            return

        enum = node.get("enum")
        if isinstance(enum, list) and actual not in ("object", "array") and value not in enum:
            yield Violation(
                path=path,
                message=f"Value not in enum: {', '.join(str(e) for e in enum)}",
                expected=", ".join(str(e) for e in enum),
                actual=str(value),
            )

        if actual == "string":
            yield from self._check_string(value, node, path)
        elif actual == "number":
            yield from self._check_number(value, node, path)
        elif actual == "object":
            yield from self._check_object(value, node, path, visited, depth)
        elif actual == "array":
            yield from self._check_array(value, node, path, visited, depth)

    def _check_compositions(self, value, node, path, visited, depth) -> Iterator[Violation]:
        for keyword in COMPOSITION_KEYWORDS:
            members = node.get(keyword)
            if not isinstance(members, list) or not members:
                continue
            if keyword == "allOf":
                for member in members:
                    yield from self._check(value, member, path, visited, depth)
                continue
            if not any(
                not list(self._check(value, member, path, visited, depth))
                for member in members
            ):
                yield Violation(
                    path=path,
                    message=f"Value does not match any schema in {keyword}",
                )

    def _check_string(self, value: str, node, path) -> Iterator[Violation]:
        min_length = node.get("minLength")
        max_length = node.get("maxLength")
        if min_length is not None and len(value) < min_length:
            yield Violation(
                path=path,
                message=f"String too short: {len(value)} < {min_length}",
                expected=f">= {min_length} characters",
                actual=str(len(value)),
            )
        if max_length is not None and len(value) > max_length:
            yield Violation(
                path=path,
                message=f"String too long: {len(value)} > {max_length}",
                expected=f"<= {max_length} characters",
                actual=str(len(value)),
            )
        pattern = node.get("pattern")
        if pattern:
            try:
                matched = re.search(pattern, value) is not None
            except re.error as exc:
                yield Violation(path=path, message=f"Invalid pattern in schema: {exc}")
                return
            if not matched:
                yield Violation(
                    path=path,
                    message=f"String doesn't match pattern: {pattern}",
                    expected=pattern,
                    actual=value,
                )

    def _check_number(self, value: float, node, path) -> Iterator[Violation]:
        minimum = node.get("minimum")
        maximum = node.get("maximum")
        exclusive_min = node.get("exclusiveMinimum")
        exclusive_max = node.get("exclusiveMaximum")

        # OpenAPI 3.0 uses boolean modifiers; numeric values are the newer form.
        if minimum is not None:
            if exclusive_min is True and value <= minimum:
                yield Violation(
                    path=path,
                    message=f"Number too small: {value} <= {minimum}",
                    expected=f"> {minimum}",
                    actual=str(value),
                )
            elif value < minimum:
                yield Violation(
                    path=path,
                    message=f"Number too small: {value} < {minimum}",
                    expected=f">= {minimum}",
                    actual=str(value),
                )
        if maximum is not None:
            if exclusive_max is True and value >= maximum:
                yield Violation(
                    path=path,
                    message=f"Number too large: {value} >= {maximum}",
                    expected=f"< {maximum}",
                    actual=str(value),
                )
            elif value > maximum:
                yield Violation(
                    path=path,
                    message=f"Number too large: {value} > {maximum}",
                    expected=f"<= {maximum}",
                    actual=str(value),
                )
        if json_type(exclusive_min) == "number" and value <= exclusive_min:
            yield Violation(
                path=path,
                message=f"Number too small: {value} <= {exclusive_min}",
                expected=f"> {exclusive_min}",
                actual=str(value),
            )
        if json_type(exclusive_max) == "number" and value >= exclusive_max:
            yield Violation(
                path=path,
                message=f"Number too large: {value} >= {exclusive_max}",
                expected=f"< {exclusive_max}",
                actual=str(value),
            )

    def _check_object(self, value: dict, node, path, visited, depth) -> Iterator[Violation]:
        properties = node.get("properties") or {}
        for name in required_names(node):
            if name not in value:
                yield Violation(path=_join(path, name), message="Required property missing")

        additional = node.get("additionalProperties")
        for name, item in value.items():
            item_path = _join(path, name)
            if name in properties:
                yield from self._check(item, properties[name], item_path, visited, depth)
            elif self.strict:
                yield Violation(
                    path=item_path,
                    message="Additional property not allowed in strict mode",
                )
            elif additional is False:
                yield Violation(path=item_path, message="Additional property not allowed")
            elif isinstance(additional, dict):
                yield from self._check(item, additional, item_path, visited, depth)

    def _check_array(self, value: list, node, path, visited, depth) -> Iterator[Violation]:
        min_items = node.get("minItems")
        max_items = node.get("maxItems")
        if min_items is not None and len(value) < min_items:
            yield Violation(
                path=path,
                message=f"Too few items: {len(value)} < {min_items}",
                expected=f">= {min_items} items",
                actual=str(len(value)),
            )
        if max_items is not None and len(value) > max_items:
            yield Violation(
                path=path,
                message=f"Too many items: {len(value)} > {max_items}",
                expected=f"<= {max_items} items",
                actual=str(len(value)),
            )
        items = node.get("items")
        if isinstance(items, dict):
            for index, item in enumerate(value):
                yield from self._check(item, items, f"{path}[{index}]", visited, depth)


def validate_example(
    value: Any,
    schema: Any,
    schemas: dict[str, Any],
    path: str = "",
    strict: bool = False,
) -> list[Violation]:
    """Return every violation of *value* against *schema*. Empty means valid."""
    return ExampleValidator(schemas, strict=strict).validate(value, schema, path)


def _media_examples(
    media: dict[str, Any], components: dict[str, Any]
) -> Iterator[tuple[Optional[str], Any]]:
    if "example" in media:
        yield None, media["example"]
    for name, entry in (media.get("examples") or {}).items():
        entry = resolve_component(entry, components, "examples")
        if isinstance(entry, dict) and "value" in entry:
            yield name, entry["value"]


def validate_examples(
    document: SpecDocument,
    records: Iterable[EndpointRecord],
    endpoint: Optional[str] = None,
    strict: bool = False,
) -> list[ExampleViolation]:
    """Validate every request and response example in the document.

    Args:
        document: The loaded document.
        records: Its endpoint records.
        endpoint: Optional ``METHOD:/path`` restricting the check to one
            endpoint.
        strict: Flag undeclared object properties.

    Raises:
        NotFoundError: If *endpoint* matches no record.
    """
    records = list(records)
    if endpoint is not None:
        method, path = parse_endpoint_ref(endpoint)
        record = find_endpoint(records, method, path)
        if record is None:
            raise NotFoundError(f"Endpoint not found: {method.upper()} {path}")
        records = [record]

    validator = ExampleValidator(document.schemas, strict=strict)
    components = document.components
    results: list[ExampleViolation] = []

    def check(record, source, root, status_code, content):
        for media_type, media in (content or {}).items():
            if not isinstance(media, dict) or "schema" not in media:
                continue
            for example_name, value in _media_examples(media, components):
                for violation in validator.validate(value, media["schema"], root):
                    results.append(
                        ExampleViolation(
                            **violation.model_dump(),
                            endpoint=record.label,
                            source=source,
                            media_type=media_type,
                            status_code=status_code,
                            example_name=example_name,
                        )
                    )

    for record in records:
        if record.request_body:
            check(record, "request", REQUEST_ROOT, None, record.request_body.get("content"))
        for status_code, response in record.responses.items():
            check(record, "response", RESPONSE_ROOT, status_code, response.get("content"))
    return results
