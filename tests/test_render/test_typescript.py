"""Tests for the TypeScript language model and its filters."""

from __future__ import annotations

from typing import Any

import pytest
from jinja2 import Environment

from small_openapi_codegen.languages import typescript
from small_openapi_codegen.models import (
    ApiSpec,
    FlattenedOperation,
    GenerationOptions,
    HTTPMethod,
)
from small_openapi_codegen.render.helpers import TemplateHelpers


def _env(schemas: dict[str, Any] | None = None, snake: bool = False) -> Environment:
    env = Environment()
    env.globals.update(TemplateHelpers(GenerationOptions(snake=snake), schemas).as_globals())
    return env


# ---------------------------------------------------------------------------
# ts_type
# ---------------------------------------------------------------------------


class TestTsType:
    """Test the schema to TypeScript type mapping."""

    @pytest.mark.parametrize(
        ("schema", "expected"),
        [
            ({"type": "string"}, "string"),
            ({"type": "string", "format": "binary"}, "Buffer | string"),
            ({"type": "integer"}, "number"),
            ({"type": "number"}, "number"),
            ({"type": "boolean"}, "boolean"),
            ({"type": "string", "enum": ["a", "b"]}, '"a" | "b"'),
            ({"type": ["string", "null"]}, "string | null"),
            ({"type": "string", "nullable": True}, "string | null"),
            ({"type": "array", "items": {"type": "integer"}}, "Array<number>"),
            ({"type": "object"}, "Record<string, any>"),
            (
                {"type": "object", "additionalProperties": {"type": "boolean"}},
                "Record<string, boolean>",
            ),
            (
                {"type": "object", "required": ["id"], "properties": {"id": {"type": "string"}, "x-y": {}}},
                '{ id: string; "x-y"?: any }',
            ),
            ({"oneOf": [{"type": "string"}, {"type": "integer"}]}, "(string | number)"),
            (
                {"allOf": [{"type": "object", "properties": {"a": {"type": "string"}}}, {"type": "object", "properties": {"b": {"type": "number"}}}]},
                "{ a?: string } & { b?: number }",
            ),
            ({}, "any"),
            (None, "any"),
        ],
    )
    def test_mapping(self, schema: Any, expected: str) -> None:
        assert typescript.ts_type(_env(), schema) == expected

    def test_named_components_are_referenced(self) -> None:
        pet = {"type": "object", "properties": {"name": {"type": "string"}}}
        env = _env({"Pet": pet})
        assert typescript.ts_type(env, {"type": "array", "items": pet}) == "Array<Pet>"
        assert typescript.ts_type(env, pet) == "Pet"
        assert typescript.ts_type(env, pet, named=False) == "{ name?: string }"

    def test_anonymous_cycles_terminate(self) -> None:
        node: dict[str, Any] = {"type": "object", "properties": {}}
        node["properties"]["next"] = node
        assert typescript.ts_type(_env(), node) == "{ next?: any }"

    def test_named_self_reference(self, sample_serv_document: dict[str, Any]) -> None:
        schemas = sample_serv_document["components"]["schemas"]
        result = typescript.ts_type(_env(schemas), schemas["Category"], named=False)
        assert result == "{ name?: string; parent?: Category }"


# ---------------------------------------------------------------------------
# Other filters
# ---------------------------------------------------------------------------


class TestFilters:
    """Test the string, path and response filters."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("id", "id"), ("$meta", "$meta"), ("x-rate", '"x-rate"'), ("1st", '"1st"'), (200, '"200"')],
    )
    def test_ts_key(self, name: Any, expected: str) -> None:
        assert typescript.ts_key(name) == expected

    def test_ts_string(self) -> None:
        assert typescript.ts_string('say "hi"') == '"say \\"hi\\""'
        assert typescript.ts_string(None) == '""'

    def test_ts_path_encodes_parameters(self) -> None:
        op = FlattenedOperation(
            path="/v2/pets/{pet-id}/photos",
            path_pattern="/pets/{pet-id}/photos",
            method=HTTPMethod.GET,
        )
        expected = "`/v2/pets/${encodeURIComponent(String(params.petId))}/photos`"
        assert typescript.ts_path(_env(), op) == expected

    def test_ts_path_follows_snake_option(self) -> None:
        op = FlattenedOperation(path="/pets/{petId}", path_pattern="/pets/{petId}", method=HTTPMethod.GET)
        assert "params.pet_id" in typescript.ts_path(_env(snake=True), op)

    def test_ts_response_type_uses_first_success_json(self) -> None:
        pet = {"type": "object"}
        responses = {
            "default": {"content": {"application/json": {"schema": {"type": "string"}}}},
            201: {"content": {"application/json": {"schema": pet}}},
        }
        assert typescript.ts_response_type(_env({"Pet": pet}), responses) == "Pet"

    @pytest.mark.parametrize(
        "responses",
        [None, {}, {"204": {"description": "No content"}}, {"200": {"content": {"text/plain": {}}}}],
    )
    def test_ts_response_type_void(self, responses: Any) -> None:
        assert typescript.ts_response_type(_env(), responses) == "void"

    @pytest.mark.parametrize(
        ("servers", "expected"),
        [
            ([{"url": "https://api.example.com/v2"}], "https://api.example.com"),
            ([{"url": "http://localhost:8080"}], "http://localhost:8080"),
            ([{"url": "/v2"}], ""),
            ([], ""),
            (None, ""),
        ],
    )
    def test_server_origin(self, servers: Any, expected: str) -> None:
        assert typescript.server_origin(servers) == expected


# ---------------------------------------------------------------------------
# prepare_model
# ---------------------------------------------------------------------------


class TestPrepareModel:
    """Test the package and service name derivation."""

    def test_package_name_with_namespace(self) -> None:
        spec = ApiSpec(document={}, options=GenerationOptions(name="pets-client", namespace="@acme"))
        prepared = typescript.prepare_model(spec)
        assert prepared.options.package_name == "@acme/pets-client"
        assert prepared.options.service_name == "pets"

    def test_package_name_without_namespace(self) -> None:
        spec = ApiSpec(document={}, options=GenerationOptions(name="pets"))
        prepared = typescript.prepare_model(spec)
        assert prepared.options.package_name == "pets"
        assert prepared.options.service_name == "pets"

    def test_input_is_not_mutated(self) -> None:
        document = {"openapi": "3.0.3"}
        spec = ApiSpec(document=document, options=GenerationOptions(name="a-client"))
        prepared = typescript.prepare_model(spec)
        assert spec.options.package_name is None
        assert prepared is not spec
        assert prepared.document is spec.document
