"""Convert Swagger 2.0 documents into the OpenAPI 3.0.0 layout.

Every other module reads one shape only: ``components.schemas``,
``requestBody`` objects and ``content`` maps keyed by media type. This
module rewrites a Swagger 2.0 dict into that shape:

* ``host`` + ``basePath`` + ``schemes[0]`` become a single ``servers`` entry.
* ``in: body`` parameters become the operation's ``requestBody`` under
  ``application/json``; ``in: formData`` parameters accumulate as
  properties of an ``application/x-www-form-urlencoded`` object schema.
* response ``schema`` moves to ``content["application/json"].schema``.
* ``definitions`` become ``components.schemas`` and every
  ``#/definitions/X`` pointer becomes ``#/components/schemas/X``.
* ``securityDefinitions`` become ``components.securitySchemes``.

The input is never modified. Keys whose value would be ``None`` are left
out of the result instead of being written as nulls.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.0.0"
JSON_MEDIA_TYPE = "application/json"
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"

SWAGGER2_METHODS = ("get", "post", "put", "delete", "patch", "options", "head")

# Copied verbatim at every schema level.
_SCHEMA_FIELDS = (
    "type",
    "format",
    "title",
    "description",
    "enum",
    "default",
    "example",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "minLength",
    "maxLength",
    "pattern",
    "minItems",
    "maxItems",
    "uniqueItems",
    "readOnly",
    "required",
)

# Fields of a non-body parameter that describe its value.
_PARAM_SCHEMA_FIELDS = (
    "type",
    "format",
    "enum",
    "default",
    "items",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "minLength",
    "maxLength",
    "pattern",
    "minItems",
    "maxItems",
    "uniqueItems",
)

_OAUTH2_FLOWS = {
    "implicit": "implicit",
    "password": "password",
    "application": "clientCredentials",
    "accessCode": "authorizationCode",
}

_REF_PREFIXES = {
    "#/definitions/": "#/components/schemas/",
    "#/parameters/": "#/components/parameters/",
    "#/responses/": "#/components/responses/",
}


def _compact(mapping: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in mapping.items() if value is not None}


def _rewrite_ref(ref: str) -> str:
    for old, new in _REF_PREFIXES.items():
        if ref.startswith(old):
            return new + ref[len(old):]
    return ref


def convert_schema(schema: Any) -> dict[str, Any]:
    """Convert one Swagger 2.0 schema node (recursively).

    References are rewritten, constraint fields are copied, and
    ``items``, ``properties``, ``allOf`` and schema-valued
    ``additionalProperties`` are converted recursively.
    """
    if not isinstance(schema, dict):
        return {}

    if isinstance(schema.get("$ref"), str):
        return {"$ref": _rewrite_ref(schema["$ref"])}

    converted = _compact({key: schema.get(key) for key in _SCHEMA_FIELDS})
    if schema.get("x-nullable") is True:
        converted["nullable"] = True

    if "items" in schema:
        converted["items"] = convert_schema(schema["items"])

    if isinstance(schema.get("properties"), dict):
        converted["properties"] = {
            name: convert_schema(prop) for name, prop in schema["properties"].items()
        }

    if isinstance(schema.get("allOf"), list):
        converted["allOf"] = [convert_schema(member) for member in schema["allOf"]]

    additional = schema.get("additionalProperties")
    if isinstance(additional, bool):
        converted["additionalProperties"] = additional
    elif isinstance(additional, dict):
        converted["additionalProperties"] = convert_schema(additional)

    discriminator = schema.get("discriminator")
    if isinstance(discriminator, str):
        converted["discriminator"] = {"propertyName": discriminator}

    return converted


def _inline_parameter(param: dict[str, Any], swagger: dict[str, Any]) -> dict[str, Any]:
    """Replace a ``#/parameters/X`` reference with the shared definition."""
    ref = param.get("$ref")
    if isinstance(ref, str) and ref.startswith("#/parameters/"):
        shared = (swagger.get("parameters") or {}).get(ref[len("#/parameters/"):])
        if isinstance(shared, dict):
            return shared
    return param


def _convert_parameter(param: dict[str, Any]) -> dict[str, Any]:
    if isinstance(param.get("$ref"), str):
        return {"$ref": _rewrite_ref(param["$ref"])}

    converted = _compact(
        {
            "name": param.get("name"),
            "in": param.get("in"),
            "description": param.get("description"),
            "required": param.get("required"),
            "deprecated": param.get("deprecated"),
            "allowEmptyValue": param.get("allowEmptyValue"),
        }
    )
    if "schema" in param:
        converted["schema"] = convert_schema(param["schema"])
    else:
        converted["schema"] = convert_schema(
            {key: param[key] for key in _PARAM_SCHEMA_FIELDS if key in param}
        )
    return converted


def _form_field_schema(param: dict[str, Any]) -> dict[str, Any]:
    if param.get("type") == "file":
        field = {"type": "string", "format": "binary"}
    else:
        field = convert_schema(
            {key: param[key] for key in _PARAM_SCHEMA_FIELDS if key in param}
        )
    if param.get("description") is not None:
        field["description"] = param["description"]
    return field


def _add_form_field(
    request_body: dict[str, Any] | None, param: dict[str, Any]
) -> dict[str, Any]:
    if request_body is None:
        request_body = {"content": {}}
    media = request_body["content"].setdefault(
        FORM_MEDIA_TYPE, {"schema": {"type": "object", "properties": {}}}
    )
    schema = media["schema"]
    name = param.get("name", "")
    schema["properties"][name] = _form_field_schema(param)
    if param.get("required"):
        required = schema.setdefault("required", [])
        if name not in required:
            required.append(name)
    return request_body


def _set_body(
    request_body: dict[str, Any] | None, param: dict[str, Any]
) -> dict[str, Any]:
    content = dict(request_body["content"]) if request_body else {}
    content[JSON_MEDIA_TYPE] = {"schema": convert_schema(param.get("schema"))}
    converted = _compact(
        {"description": param.get("description"), "required": param.get("required")}
    )
    converted["content"] = content
    return converted


def _convert_response(response: Any) -> dict[str, Any]:
    if not isinstance(response, dict):
        return {"description": "Response"}
    if isinstance(response.get("$ref"), str):
        return {"$ref": _rewrite_ref(response["$ref"])}

    converted: dict[str, Any] = {"description": response.get("description") or "Response"}
    media: dict[str, Any] = {}
    if "schema" in response:
        media["schema"] = convert_schema(response["schema"])
    example = (response.get("examples") or {}).get(JSON_MEDIA_TYPE)
    if example is not None:
        media["example"] = example
    if media:
        converted["content"] = {JSON_MEDIA_TYPE: media}
    if response.get("headers"):
        converted["headers"] = response["headers"]
    return converted


def _convert_operation(operation: dict[str, Any], swagger: dict[str, Any]) -> dict[str, Any]:
    converted = _compact(
        {
            "summary": operation.get("summary"),
            "description": operation.get("description"),
            "operationId": operation.get("operationId"),
            "tags": operation.get("tags"),
            "deprecated": operation.get("deprecated"),
            "security": operation.get("security"),
            "externalDocs": operation.get("externalDocs"),
        }
    )

    parameters: list[dict[str, Any]] = []
    request_body: dict[str, Any] | None = None
    for raw in operation.get("parameters") or []:
        param = _inline_parameter(raw, swagger)
        location = param.get("in")
        if location == "body":
            request_body = _set_body(request_body, param)
        elif location == "formData":
            request_body = _add_form_field(request_body, param)
        else:
            parameters.append(_convert_parameter(param))

    if parameters:
        converted["parameters"] = parameters
    if request_body is not None:
        converted["requestBody"] = request_body

    converted["responses"] = {
        str(code): _convert_response(response)
        for code, response in (operation.get("responses") or {}).items()
    }
    return converted


def _convert_security_scheme(definition: dict[str, Any]) -> dict[str, Any]:
    kind = definition.get("type")
    if kind == "basic":
        scheme: dict[str, Any] = {"type": "http", "scheme": "basic"}
    elif kind == "apiKey":
        scheme = _compact(
            {"type": "apiKey", "name": definition.get("name"), "in": definition.get("in")}
        )
    elif kind == "oauth2":
        flow_name = _OAUTH2_FLOWS.get(definition.get("flow", ""), "implicit")
        flow = _compact(
            {
                "authorizationUrl": definition.get("authorizationUrl"),
                "tokenUrl": definition.get("tokenUrl"),
            }
        )
        flow["scopes"] = definition.get("scopes") or {}
        scheme = {"type": "oauth2", "flows": {flow_name: flow}}
    else:
        scheme = dict(definition)
    if definition.get("description") is not None:
        scheme["description"] = definition["description"]
    return scheme


def normalize_swagger2(swagger: dict[str, Any]) -> dict[str, Any]:
    """Return an OpenAPI 3.0.0 dict equivalent to the Swagger 2.0 *swagger*.

    Args:
        swagger: A parsed document with a ``swagger: "2.x"`` discriminator.

    Returns:
        A new dict with ``openapi: "3.0.0"``.
    """
    info = swagger.get("info") or {}
    document: dict[str, Any] = {
        "openapi": OPENAPI_VERSION,
        "info": _compact(
            {
                "title": info.get("title") or "API",
                "version": info.get("version") or "1.0.0",
                "description": info.get("description"),
                "termsOfService": info.get("termsOfService"),
                "contact": info.get("contact"),
                "license": info.get("license"),
            }
        ),
    }

    if swagger.get("host") or swagger.get("basePath"):
        scheme = (swagger.get("schemes") or ["https"])[0]
        host = swagger.get("host") or "localhost"
        base_path = swagger.get("basePath") or ""
        document["servers"] = [
            {
                "url": f"{scheme}://{host}{base_path}",
                "description": "Converted from Swagger 2.0",
            }
        ]

    if swagger.get("tags"):
        document["tags"] = swagger["tags"]
    if swagger.get("security"):
        document["security"] = swagger["security"]

    paths: dict[str, Any] = {}
    for path, item in (swagger.get("paths") or {}).items():
        if not isinstance(item, dict):
            continue
        converted_item: dict[str, Any] = {}
        for method in SWAGGER2_METHODS:
            if isinstance(item.get(method), dict):
                converted_item[method] = _convert_operation(item[method], swagger)
        if item.get("parameters"):
            converted_item["parameters"] = [
                _convert_parameter(_inline_parameter(param, swagger))
                for param in item["parameters"]
            ]
        paths[path] = converted_item
    document["paths"] = paths

    components: dict[str, Any] = {}
    if swagger.get("definitions"):
        components["schemas"] = {
            name: convert_schema(definition)
            for name, definition in swagger["definitions"].items()
        }
    shared_params = {
        name: _convert_parameter(param)
        for name, param in (swagger.get("parameters") or {}).items()
        if param.get("in") not in ("body", "formData")
    }
    if shared_params:
        components["parameters"] = shared_params
    if swagger.get("responses"):
        components["responses"] = {
            name: _convert_response(response)
            for name, response in swagger["responses"].items()
        }
    if swagger.get("securityDefinitions"):
        components["securitySchemes"] = {
            name: _convert_security_scheme(definition)
            for name, definition in swagger["securityDefinitions"].items()
        }
    if components:
        document["components"] = components

    logger.debug(
        "Converted Swagger %s document: %d paths, %d schemas",
        swagger.get("swagger"),
        len(paths),
        len(components.get("schemas", {})),
    )
    return document
