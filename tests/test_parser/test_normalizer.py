"""Tests for apiscope.parser.normalizer."""

from __future__ import annotations

import copy
from typing import Any

from apiscope.parser.normalizer import convert_schema, normalize_swagger2


class TestDocumentLevel:
    def test_minimal_document(self) -> None:
        swagger = {
            "swagger": "2.0",
            "info": {"title": "T", "version": "1"},
            "paths": {"/x": {"get": {"responses": {"200": {"description": "ok"}}}}},
        }
        result = normalize_swagger2(swagger)
        assert result["openapi"] == "3.0.0"
        assert result["paths"]["/x"]["get"]["responses"]["200"]["description"] == "ok"
        assert "servers" not in result
        assert "components" not in result

    def test_input_not_modified(self, swagger2_raw: dict[str, Any]) -> None:
        before = copy.deepcopy(swagger2_raw)
        normalize_swagger2(swagger2_raw)
        assert swagger2_raw == before

    def test_server_from_host_base_path_and_first_scheme(
        self, swagger2_raw: dict[str, Any]
    ) -> None:
        servers = normalize_swagger2(swagger2_raw)["servers"]
        assert servers == [
            {"url": "https://api.example.com/v2", "description": "Converted from Swagger 2.0"}
        ]

    def test_info_defaults(self) -> None:
        result = normalize_swagger2({"swagger": "2.0", "paths": {}})
        assert result["info"] == {"title": "API", "version": "1.0.0"}

    def test_tags_and_security_carried(self, swagger2_raw: dict[str, Any]) -> None:
        result = normalize_swagger2(swagger2_raw)
        assert result["tags"] == [{"name": "pets"}]
        assert result["security"] == [{"basicAuth": []}]

    def test_definitions_become_component_schemas(self, swagger2_raw: dict[str, Any]) -> None:
        schemas = normalize_swagger2(swagger2_raw)["components"]["schemas"]
        assert set(schemas) == {"Pet", "Tag"}
        assert schemas["Pet"]["properties"]["tags"]["items"] == {
            "$ref": "#/components/schemas/Tag"
        }

    def test_shared_parameters_become_components(self, swagger2_raw: dict[str, Any]) -> None:
        params = normalize_swagger2(swagger2_raw)["components"]["parameters"]
        assert params["LimitParam"] == {
            "name": "limit",
            "in": "query",
            "schema": {"type": "integer", "maximum": 50},
        }


class TestSecuritySchemes:
    def test_scheme_mapping(self, swagger2_raw: dict[str, Any]) -> None:
        schemes = normalize_swagger2(swagger2_raw)["components"]["securitySchemes"]
        assert schemes["basicAuth"] == {"type": "http", "scheme": "basic"}
        assert schemes["key"] == {"type": "apiKey", "name": "api_key", "in": "header"}
        assert schemes["petstore_auth"] == {
            "type": "oauth2",
            "flows": {
                "authorizationCode": {
                    "authorizationUrl": "https://example.com/oauth/dialog",
                    "tokenUrl": "https://example.com/oauth/token",
                    "scopes": {"read:pets": "read your pets"},
                }
            },
        }

    def test_application_flow_is_client_credentials(self) -> None:
        result = normalize_swagger2(
            {
                "swagger": "2.0",
                "paths": {},
                "securityDefinitions": {
                    "cc": {"type": "oauth2", "flow": "application", "tokenUrl": "https://t"}
                },
            }
        )
        flows = result["components"]["securitySchemes"]["cc"]["flows"]
        assert flows == {"clientCredentials": {"tokenUrl": "https://t", "scopes": {}}}


class TestOperations:
    def test_body_parameter_becomes_request_body(self, swagger2_raw: dict[str, Any]) -> None:
        post = normalize_swagger2(swagger2_raw)["paths"]["/pets"]["post"]
        assert "parameters" not in post
        assert post["requestBody"] == {
            "description": "Pet to add",
            "required": True,
            "content": {
                "application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}
            },
        }

    def test_body_round_trip_preserves_structure(self) -> None:
        body_schema = {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "age": {"type": "integer", "minimum": 0},
            },
        }
        swagger = {
            "swagger": "2.0",
            "paths": {
                "/people": {
                    "post": {
                        "parameters": [{"name": "body", "in": "body", "schema": body_schema}],
                        "responses": {"201": {"description": "created"}},
                    }
                }
            },
        }
        request_body = normalize_swagger2(swagger)["paths"]["/people"]["post"]["requestBody"]
        assert list(request_body["content"]) == ["application/json"]
        schema = request_body["content"]["application/json"]["schema"]
        assert schema["type"] == "object"
        assert schema["required"] == ["name"]
        assert schema["properties"] == body_schema["properties"]

    def test_shared_parameter_ref_is_inlined(self, swagger2_raw: dict[str, Any]) -> None:
        get = normalize_swagger2(swagger2_raw)["paths"]["/pets"]["get"]
        assert get["parameters"] == [
            {"name": "limit", "in": "query", "schema": {"type": "integer", "maximum": 50}}
        ]

    def test_form_data_accumulates(self, swagger2_raw: dict[str, Any]) -> None:
        post = normalize_swagger2(swagger2_raw)["paths"]["/pets/{petId}/photo"]["post"]
        media = post["requestBody"]["content"]["application/x-www-form-urlencoded"]
        assert media["schema"] == {
            "type": "object",
            "properties": {
                "caption": {"type": "string"},
                "file": {"type": "string", "format": "binary", "description": "Image"},
            },
            "required": ["caption"],
        }

    def test_body_after_form_data_keeps_both(self) -> None:
        swagger = {
            "swagger": "2.0",
            "paths": {
                "/mixed": {
                    "post": {
                        "parameters": [
                            {"name": "note", "in": "formData", "type": "string"},
                            {"name": "body", "in": "body", "schema": {"type": "object"}},
                        ],
                        "responses": {},
                    }
                }
            },
        }
        content = normalize_swagger2(swagger)["paths"]["/mixed"]["post"]["requestBody"]["content"]
        assert set(content) == {"application/x-www-form-urlencoded", "application/json"}

    def test_path_level_parameters_converted(self, swagger2_raw: dict[str, Any]) -> None:
        item = normalize_swagger2(swagger2_raw)["paths"]["/pets/{petId}/photo"]
        assert item["parameters"] == [
            {"name": "petId", "in": "path", "required": True, "schema": {"type": "integer"}}
        ]

    def test_response_schema_and_example_move_to_content(
        self, swagger2_raw: dict[str, Any]
    ) -> None:
        response = normalize_swagger2(swagger2_raw)["paths"]["/pets"]["get"]["responses"]["200"]
        assert response["content"]["application/json"] == {
            "schema": {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}},
            "example": [{"id": 1, "name": "Rex"}],
        }

    def test_response_description_defaults(self, swagger2_raw: dict[str, Any]) -> None:
        response = normalize_swagger2(swagger2_raw)["paths"]["/pets"]["post"]["responses"]["201"]
        assert response == {"description": "Response"}


class TestConvertSchema:
    def test_x_nullable(self) -> None:
        assert convert_schema({"type": "string", "x-nullable": True}) == {
            "type": "string",
            "nullable": True,
        }

    def test_ref_rewritten_and_siblings_dropped(self) -> None:
        assert convert_schema({"$ref": "#/definitions/Pet", "description": "x"}) == {
            "$ref": "#/components/schemas/Pet"
        }

    def test_all_of_and_additional_properties(self) -> None:
        result = convert_schema(
            {
                "allOf": [{"$ref": "#/definitions/Base"}, {"type": "object"}],
                "additionalProperties": {"$ref": "#/definitions/Value"},
            }
        )
        assert result["allOf"][0] == {"$ref": "#/components/schemas/Base"}
        assert result["additionalProperties"] == {"$ref": "#/components/schemas/Value"}

    def test_discriminator_string(self) -> None:
        assert convert_schema({"type": "object", "discriminator": "kind"})["discriminator"] == {
            "propertyName": "kind"
        }

    def test_non_dict(self) -> None:
        assert convert_schema(None) == {}
