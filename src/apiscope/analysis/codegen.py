"""Client code snippets and TypeScript declarations.

:func:`generate_code_example` renders a request skeleton for one endpoint in
curl, JavaScript (``fetch``), Python (``httpx``) or TypeScript.
:func:`generate_typescript_types` renders component schemas, and optionally
inline request and response schemas, as TypeScript declarations.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Optional

from apiscope.exceptions import NotFoundError
from apiscope.models import (
    CodeLanguage,
    EndpointRecord,
    HTTPMethod,
    SpecDocument,
    TypeExportFormat,
    coerce_option,
)
from apiscope.schema import SchemaKind, ref_name, required_names, schema_kind, schema_type

_BODY_METHODS = (HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH)
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


# --- Code examples ---


def _sends_body(record: EndpointRecord) -> bool:
    return record.has_request_body and record.method in _BODY_METHODS


def _curl(record: EndpointRecord, url: str) -> str:
    lines = [f'curl -X {record.method.value.upper()} "{url}"']
    if _sends_body(record):
        lines.append('  -H "Content-Type: application/json"')
        lines.append("""  -d '{"example": "data"}'""")
    return " \\\n".join(lines)


def _fetch_call(record: EndpointRecord, url: str, body_cast: str = "") -> str:
    body = ""
    if _sends_body(record):
        body = (
            "\n  body: JSON.stringify({\n"
            "    // Add your request data here\n"
            f"  }}{body_cast}),"
        )
    return (
        f"const response = await fetch('{url}', {{\n"
        f"  method: '{record.method.value.upper()}',\n"
        "  headers: {\n"
        "    'Content-Type': 'application/json',\n"
        f"  }},{body}\n"
        "});"
    )


def _javascript(record: EndpointRecord, url: str) -> str:
    return (
        f"{_fetch_call(record, url)}\n\n"
        "const data = await response.json();\n"
        "console.log(data);"
    )


def _typescript(record: EndpointRecord, url: str) -> str:
    parts = ["interface ApiResponse {\n  // Define your response type here\n}\n"]
    if _sends_body(record):
        parts.append("interface RequestData {\n  // Define your request data type here\n}\n")
    cast = " as RequestData" if _sends_body(record) else ""
    parts.append(
        f"{_fetch_call(record, url, cast)}\n\n"
        "const data: ApiResponse = await response.json();\n"
        "console.log(data);"
    )
    return "\n".join(parts)


def _python(record: EndpointRecord, url: str) -> str:
    method = record.method.value
    lines = [
        "import httpx",
        "",
        f'url = "{url}"',
        'headers = {"Content-Type": "application/json"}',
        "",
    ]
    if _sends_body(record):
        lines += [
            "data = {",
            "    # Add your request data here",
            "}",
            "",
            f"response = httpx.request({method.upper()!r}, url, headers=headers, json=data)",
        ]
    else:
        lines.append(f"response = httpx.request({method.upper()!r}, url, headers=headers)")
    lines.append("print(response.json())")
    return "\n".join(lines)


_RENDERERS = {
    CodeLanguage.CURL: _curl,
    CodeLanguage.JAVASCRIPT: _javascript,
    CodeLanguage.PYTHON: _python,
    CodeLanguage.TYPESCRIPT: _typescript,
}


def generate_code_example(
    record: EndpointRecord,
    language: CodeLanguage | str = CodeLanguage.CURL,
    base_url: Optional[str] = None,
) -> str:
    """Render a request snippet for *record*.

    Args:
        record: The endpoint.
        language: ``curl``, ``javascript``, ``python`` or ``typescript``.
        base_url: Prefixed to the path (trailing ``/`` ignored).

    Raises:
        UnsupportedOptionError: If *language* is not supported.
    """
    language = coerce_option(CodeLanguage, language, "language")
    url = f"{base_url.rstrip('/')}{record.path}" if base_url else record.path
    return _RENDERERS[language](record, url)


# --- TypeScript types ---


def _ts_key(name: str) -> str:
    return name if _IDENTIFIER.match(name) else f"'{name}'"


def _ts_literal(value: Any) -> str:
    if isinstance(value, str):
        return "'" + value.replace("'", "\\'") + "'"
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def validation_decorators(schema: dict[str, Any]) -> list[str]:
    """class-validator style decorators implied by a property schema."""
    decorators = []
    kind = schema.get("type")
    if kind == "string":
        if schema.get("minLength") is not None:
            decorators.append(f"@MinLength({schema['minLength']})")
        if schema.get("maxLength") is not None:
            decorators.append(f"@MaxLength({schema['maxLength']})")
        if schema.get("pattern"):
            decorators.append(f"@Matches(/{schema['pattern']}/)")
        if schema.get("format") == "email":
            decorators.append("@IsEmail()")
        if schema.get("format") in ("uri", "url"):
            decorators.append("@IsUrl()")
    elif kind in ("number", "integer"):
        if schema.get("minimum") is not None:
            decorators.append(f"@Min({schema['minimum']})")
        if schema.get("maximum") is not None:
            decorators.append(f"@Max({schema['maximum']})")
        if kind == "integer":
            decorators.append("@IsInt()")
    return decorators


class TypeScriptRenderer:
    """Converts schema nodes into TypeScript type expressions.

    References render as the referenced name, so no ``$ref`` is ever
    followed and cyclic schemas need no special handling.
    """

    def __init__(self, add_validation: bool = False) -> None:
        self.add_validation = add_validation

    def render(self, schema: Any, indent: int = 0) -> str:
        if not isinstance(schema, dict):
            return "any"
        kind = schema_kind(schema)
        if kind is SchemaKind.REFERENCE:
            return ref_name(schema["$ref"]) or "any"

        rendered = self._render_kind(schema, kind, indent)
        if schema.get("nullable"):
            rendered = f"{rendered} | null"
        return rendered

    def _render_kind(self, schema: dict[str, Any], kind: SchemaKind, indent: int) -> str:
        if isinstance(schema.get("enum"), list) and schema["enum"]:
            return " | ".join(_ts_literal(v) for v in schema["enum"])
        if kind is SchemaKind.OBJECT:
            return self._object(schema, indent)
        if kind is SchemaKind.ARRAY:
            item = self.render(schema.get("items"), indent)
            return f"({item})[]" if " " in item else f"{item}[]"
        if kind is SchemaKind.COMPOSITION:
            for keyword, joiner in (("oneOf", " | "), ("anyOf", " | "), ("allOf", " & ")):
                if isinstance(schema.get(keyword), list):
                    return joiner.join(self.render(m, indent) for m in schema[keyword])
        declared = schema_type(schema)
        if declared in ("number", "integer"):
            return "number"
        if declared in ("string", "boolean"):
            return declared
        return "any"

    def _object(self, schema: dict[str, Any], indent: int) -> str:
        properties = schema.get("properties") or {}
        if not properties:
            return "Record<string, any>"
        required = set(required_names(schema))
        pad = "  " * (indent + 1)
        lines = ["{"]
        for name, prop in properties.items():
            prop = prop if isinstance(prop, dict) else {}
            if prop.get("description"):
                lines.append(f"{pad}/** {prop['description']} */")
            if self.add_validation:
                decorators = validation_decorators(prop)
                if name in required:
                    decorators.append("@IsNotEmpty()")
                lines.extend(f"{pad}{d}" for d in decorators)
            optional = "" if name in required else "?"
            lines.append(f"{pad}{_ts_key(name)}{optional}: {self.render(prop, indent + 1)};")
        lines.append("  " * indent + "}")
        return "\n".join(lines)

    def declaration(self, name: str, schema: Any) -> str:
        """``export interface`` for object literals, ``export type`` otherwise."""
        body = self.render(schema)
        description = schema.get("description") if isinstance(schema, dict) else None
        prefix = f"/** {description} */\n" if description else ""
        if body.startswith("{"):
            return f"{prefix}export interface {name} {body}"
        return f"{prefix}export type {name} = {body};"


def _type_name(record: EndpointRecord, suffix: str) -> str:
    return f"{record.method.value.upper()}{_NON_ALNUM.sub('', record.path)}{suffix}"


def _inline_schemas(content: Any) -> Iterable[dict[str, Any]]:
    for media in (content or {}).values():
        schema = media.get("schema") if isinstance(media, dict) else None
        if isinstance(schema, dict) and "$ref" not in schema:
            yield schema


def generate_typescript_types(
    document: SpecDocument,
    records: Iterable[EndpointRecord],
    schema_name: Optional[str] = None,
    include_request_bodies: bool = True,
    include_responses: bool = True,
    export_format: TypeExportFormat | str = TypeExportFormat.INDIVIDUAL,
    add_validation: bool = False,
) -> str:
    """Render TypeScript declarations for the document.

    Component schemas (only *schema_name* when given) come first, then
    inline request-body schemas named ``POSTpetsRequest`` and inline
    response schemas named ``GETpetsResponse200``. Referenced body schemas
    are already covered by their component declaration.

    ``individual`` prefixes each declaration with a ``// Name.ts`` marker;
    ``merged`` joins them plainly.

    Raises:
        NotFoundError: If *schema_name* is given but not defined.
        UnsupportedOptionError: If *export_format* is not known.
    """
    export_format = coerce_option(TypeExportFormat, export_format, "export format")
    schemas = document.schemas
    if schema_name is not None and schema_name not in schemas:
        raise NotFoundError(f"Schema '{schema_name}' not found.")

    renderer = TypeScriptRenderer(add_validation=add_validation)
    declarations: list[tuple[str, str]] = []
    for name, schema in schemas.items():
        if schema_name is None or name == schema_name:
            declarations.append((name, renderer.declaration(name, schema)))

    for record in records:
        if include_request_bodies and record.request_body:
            for schema in _inline_schemas(record.request_body.get("content")):
                name = _type_name(record, "Request")
                declarations.append((name, renderer.declaration(name, schema)))
        if include_responses:
            for status, response in record.responses.items():
                for schema in _inline_schemas(response.get("content")):
                    name = _type_name(record, f"Response{status}")
                    declarations.append((name, renderer.declaration(name, schema)))

    if export_format is TypeExportFormat.MERGED:
        return "\n\n".join(text for _, text in declarations)
    return "\n\n".join(f"// {name}.ts\n{text}" for name, text in declarations)
