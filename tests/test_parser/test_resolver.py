"""Tests for small_openapi_codegen.parser.resolver."""

from __future__ import annotations

import asyncio
import copy
from pathlib import Path
from typing import Any, Callable

import pytest

from small_openapi_codegen.exceptions import ResolutionError
from small_openapi_codegen.parser.resolver import (
    bundle,
    dereference,
    resolve_pointer,
    resolve_spec,
)

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


def _pet_document() -> dict[str, Any]:
    return {
        "openapi": "3.0.3",
        "paths": {
            "/pets": {
                "get": {
                    "responses": {
                        "200": {
                            "content": {
                                "application/json": {
                                    "schema": {"$ref": "#/components/schemas/Pet"}
                                }
                            }
                        }
                    }
                }
            }
        },
        "components": {
            "schemas": {
                "Pet": {"type": "object", "properties": {"name": {"type": "string"}}},
            }
        },
    }


# ---------------------------------------------------------------------------
# dereference
# ---------------------------------------------------------------------------


class TestDereference:
    """Test in-memory replacement of internal references."""

    def test_replaces_ref_with_shared_target(self) -> None:
        resolved = dereference(_pet_document())
        schema = resolved["paths"]["/pets"]["get"]["responses"]["200"]["content"][
            "application/json"
        ]["schema"]
        assert schema == {"type": "object", "properties": {"name": {"type": "string"}}}
        assert schema is resolved["components"]["schemas"]["Pet"]

    def test_does_not_mutate_input(self) -> None:
        document = _pet_document()
        original = copy.deepcopy(document)
        dereference(document)
        assert document == original

    def test_self_reference_becomes_cycle(self) -> None:
        document = {
            "components": {
                "schemas": {
                    "Node": {
                        "type": "object",
                        "properties": {"next": {"$ref": "#/components/schemas/Node"}},
                    }
                }
            }
        }
        node = dereference(document)["components"]["schemas"]["Node"]
        assert node["properties"]["next"] is node

    def test_follows_ref_chains(self) -> None:
        document = {
            "components": {
                "schemas": {
                    "Alias": {"$ref": "#/components/schemas/Target"},
                    "Target": {"type": "string"},
                    "User": {"$ref": "#/components/schemas/Alias"},
                }
            }
        }
        schemas = dereference(document)["components"]["schemas"]
        assert schemas["User"] is schemas["Target"]
        assert schemas["Alias"] is schemas["Target"]

    def test_pure_ref_loop_raises(self) -> None:
        document = {
            "components": {
                "schemas": {
                    "A": {"$ref": "#/components/schemas/B"},
                    "B": {"$ref": "#/components/schemas/A"},
                }
            }
        }
        with pytest.raises(ResolutionError, match="Circular"):
            dereference(document)

    def test_missing_target_raises(self) -> None:
        document = {"paths": {"/x": {"$ref": "#/components/pathItems/Missing"}}}
        with pytest.raises(ResolutionError, match="'components' not found"):
            dereference(document)

    def test_external_ref_raises(self) -> None:
        document = {"components": {"schemas": {"A": {"$ref": "other.yaml#/A"}}}}
        with pytest.raises(ResolutionError, match="was not bundled"):
            dereference(document)

    def test_refs_inside_lists(self) -> None:
        document = {
            "components": {
                "schemas": {
                    "Cat": {"type": "object"},
                    "Pet": {"oneOf": [{"$ref": "#/components/schemas/Cat"}, {"type": "null"}]},
                }
            }
        }
        schemas = dereference(document)["components"]["schemas"]
        assert schemas["Pet"]["oneOf"][0] is schemas["Cat"]


# ---------------------------------------------------------------------------
# resolve_pointer
# ---------------------------------------------------------------------------


class TestResolvePointer:
    """Test JSON pointer navigation."""

    def test_empty_pointer_returns_document(self) -> None:
        document = {"a": 1}
        assert resolve_pointer(document, "") is document

    def test_unescapes_tokens(self) -> None:
        document = {"paths": {"/a/b": {"x~y": 5}}}
        assert resolve_pointer(document, "/paths/~1a~1b/x~0y") == 5

    def test_array_index(self) -> None:
        assert resolve_pointer({"list": ["a", "b"]}, "/list/1") == "b"

    def test_invalid_array_index_raises(self) -> None:
        with pytest.raises(ResolutionError, match="invalid array index"):
            resolve_pointer({"list": ["a"]}, "/list/7")

    def test_follows_refs_mid_path(self) -> None:
        document = {
            "components": {
                "schemas": {
                    "Alias": {"$ref": "#/components/schemas/Real"},
                    "Real": {"properties": {"id": {"type": "integer"}}},
                }
            }
        }
        result = resolve_pointer(document, "/components/schemas/Alias/properties/id")
        assert result == {"type": "integer"}

    def test_pointer_without_slash_raises(self) -> None:
        with pytest.raises(ResolutionError, match="invalid JSON pointer"):
            resolve_pointer({}, "components")


# ---------------------------------------------------------------------------
# bundle
# ---------------------------------------------------------------------------


class TestBundle:
    """Test inlining of external references."""

    def test_inlines_first_occurrence_and_points_later_ones_at_it(self) -> None:
        bundled = asyncio.run(bundle(FIXTURES_DIR / "external" / "main.yaml"))

        items = bundled["paths"]["/nodes"]["get"]["responses"]["200"]["content"][
            "application/json"
        ]["schema"]["items"]
        assert items["type"] == "object"
        assert "$ref" not in items

        first_pointer = "#/paths/~1nodes/get/responses/200/content/application~1json/schema/items"
        by_id = bundled["paths"]["/nodes/{id}"]["get"]["responses"]["200"]["content"][
            "application/json"
        ]["schema"]
        assert by_id == {"$ref": first_pointer}
        assert bundled["components"]["schemas"]["Local"]["properties"]["node"] == {
            "$ref": first_pointer
        }

    def test_cyclic_external_ref_becomes_internal_pointer(self) -> None:
        bundled = asyncio.run(bundle(FIXTURES_DIR / "external" / "main.yaml"))
        items = bundled["paths"]["/nodes"]["get"]["responses"]["200"]["content"][
            "application/json"
        ]["schema"]["items"]
        assert items["properties"]["children"]["items"] == {
            "$ref": "#/paths/~1nodes/get/responses/200/content/application~1json/schema/items"
        }

    def test_cyclic_yaml_alias_becomes_internal_pointer(
        self, write_spec: Callable[[str, str], Path]
    ) -> None:
        path = write_spec(
            "api.yaml",
            """
            openapi: 3.0.3
            info: {title: T, version: "1"}
            paths: {}
            components:
              schemas:
                Tree: &tree
                  type: object
                  properties:
                    child: *tree
                    siblings: {type: array, items: *tree}
            """,
        )
        bundled = asyncio.run(bundle(path))
        tree = bundled["components"]["schemas"]["Tree"]
        assert tree["properties"]["child"] == {"$ref": "#/components/schemas/Tree"}
        assert tree["properties"]["siblings"]["items"] == {"$ref": "#/components/schemas/Tree"}

        resolved = dereference(bundled)
        tree = resolved["components"]["schemas"]["Tree"]
        assert tree["properties"]["child"] is tree

    def test_keeps_internal_refs(self, sample_serv_path: Path) -> None:
        bundled = asyncio.run(bundle(sample_serv_path))
        schema = bundled["paths"]["/pets"]["post"]["requestBody"]["content"][
            "application/json"
        ]["schema"]
        assert schema == {"$ref": "#/components/schemas/Pet"}

    def test_missing_external_file_raises(self, write_spec: Callable[[str, str], Path]) -> None:
        path = write_spec(
            "api.yaml",
            """
            openapi: 3.0.3
            info: {title: T, version: "1"}
            paths: {}
            components:
              schemas:
                Broken:
                  $ref: "./nowhere.yaml#/Broken"
            """,
        )
        with pytest.raises(ResolutionError, match="not found"):
            asyncio.run(bundle(path))

    def test_missing_external_pointer_raises(self, write_spec: Callable[[str, str], Path]) -> None:
        write_spec("shared.yaml", "Thing:\n  type: string\n")
        path = write_spec(
            "api.yaml",
            """
            openapi: 3.0.3
            info: {title: T, version: "1"}
            paths: {}
            components:
              schemas:
                Broken:
                  $ref: "shared.yaml#/Other"
            """,
        )
        with pytest.raises(ResolutionError, match="'Other' not found"):
            asyncio.run(bundle(path))


# ---------------------------------------------------------------------------
# resolve_spec
# ---------------------------------------------------------------------------


class TestResolveSpec:
    """Test bundling followed by dereferencing."""

    def test_no_refs_remain_and_cycles_are_shared(self) -> None:
        document = asyncio.run(resolve_spec(FIXTURES_DIR / "external" / "main.yaml"))
        node = document["paths"]["/nodes"]["get"]["responses"]["200"]["content"][
            "application/json"
        ]["schema"]["items"]
        assert node["properties"]["children"]["items"] is node
        error = document["paths"]["/nodes"]["get"]["responses"]["default"]["content"][
            "application/json"
        ]["schema"]
        assert error is node["properties"]["error"]
        assert document["components"]["schemas"]["Local"]["properties"]["node"] is node

    def test_component_schemas_are_shared_with_use_sites(
        self, sample_serv_document: dict[str, Any]
    ) -> None:
        schemas = sample_serv_document["components"]["schemas"]
        listing = sample_serv_document["paths"]["/pets"]["get"]["responses"]["200"]["content"][
            "application/json"
        ]["schema"]
        assert listing["items"] is schemas["Pet"]
        assert schemas["Category"]["properties"]["parent"] is schemas["Category"]

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ResolutionError, match="not found"):
            asyncio.run(resolve_spec(tmp_path / "missing.yaml"))
