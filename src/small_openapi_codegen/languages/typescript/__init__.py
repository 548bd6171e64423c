"""TypeScript client language model.

Emits an npm package with a single ``src/index.ts`` module: one exported
type per component schema and one client class with a method per operation,
built on the platform ``fetch``.

Schema-to-type mapping is done by the :func:`ts_type` filter:

=======================  ===============================================
Schema                   TypeScript
=======================  ===============================================
named component          its component name
``string``/``binary``    ``Buffer | string``
``string``               ``string`` (or a union of ``enum`` literals)
``integer``/``number``   ``number``
``boolean``              ``boolean``
``array``                ``Array<T>``
``object``               inline object type or ``Record<string, T>``
``allOf``                intersection of the branches
``anyOf``/``oneOf``      union of the branches
``nullable: true``       ``T | null``
=======================  ===============================================
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

from jinja2 import pass_environment
from jinja2.environment import Environment

from small_openapi_codegen.generator.properties import json_content
from small_openapi_codegen.models import (
    ApiSpec,
    FlattenedOperation,
    LanguageModel,
    TemplateSpec,
)
from small_openapi_codegen.parser.schema import SchemaKind, combinator_branches, schema_kind

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``languages/typescript/templates/``)."""

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_PATH_PARAM = re.compile(r"\{([^}]+)\}")

_PRIMITIVES = {
    "integer": "number",
    "number": "number",
    "boolean": "boolean",
    "null": "null",
}


def prepare_model(spec: ApiSpec) -> ApiSpec:
    """Derive the npm package name and the service name from the options.

    ``package_name`` is ``namespace/name`` (or ``name`` without a namespace)
    and ``service_name`` is ``name`` without a trailing ``-client``.
    """
    options = spec.options
    name = options.name or ""
    package_name = f"{options.namespace}/{name}" if options.namespace else name
    service_name = re.sub(r"-client$", "", name)
    return spec.model_copy(
        update={
            "options": options.model_copy(
                update={"package_name": package_name, "service_name": service_name}
            )
        }
    )


# ------------------------------------------------------------------ #
# Filters
# ------------------------------------------------------------------ #


@pass_environment
def ts_type(environment: Environment, schema: Any, named: bool = True) -> str:
    """Return the TypeScript type for *schema*.

    With ``named=False`` the top-level schema is expanded even when it is a
    named component, which is what a component's own declaration needs.
    """
    schema_name = environment.globals["schema_name"]
    return _ts_type(schema, schema_name, set(), named)


def _ts_type(schema: Any, schema_name: Any, seen: set[int], named: bool) -> str:
    if named:
        name = schema_name(schema)
        if name:
            return name
    if not isinstance(schema, dict) or id(schema) in seen:
        return "any"

    seen = seen | {id(schema)}
    kind = schema_kind(schema)

    if kind is SchemaKind.COMBINATOR:
        result = _combinator_type(schema, schema_name, seen)
    elif kind is SchemaKind.ARRAY:
        result = f"Array<{_ts_type(schema.get('items'), schema_name, seen, True)}>"
    elif kind is SchemaKind.OBJECT:
        result = _object_type(schema, schema_name, seen)
    elif kind is SchemaKind.PRIMITIVE:
        result = _primitive_type(schema)
    else:
        result = "any"

    if schema.get("nullable") is True:
        result = f"{result} | null"
    return result


def _combinator_type(schema: dict[str, Any], schema_name: Any, seen: set[int]) -> str:
    intersection: list[str] = []
    union: list[str] = []
    for combinator, _, branch in combinator_branches(schema):
        branch_type = _parenthesize(_ts_type(branch, schema_name, seen, True))
        if combinator == "allOf":
            intersection.append(branch_type)
        else:
            union.append(branch_type)

    if schema.get("properties"):
        intersection.append(_object_type(schema, schema_name, seen))
    if union:
        intersection.append(_parenthesize(" | ".join(union)))
    return " & ".join(intersection) or "any"


def _object_type(schema: dict[str, Any], schema_name: Any, seen: set[int]) -> str:
    properties = schema.get("properties")
    if not isinstance(properties, dict) or not properties:
        additional = schema.get("additionalProperties")
        if isinstance(additional, dict):
            return f"Record<string, {_ts_type(additional, schema_name, seen, True)}>"
        return "Record<string, any>"

    required = schema.get("required")
    required_names = set(required) if isinstance(required, list) else set()
    members = []
    for name, prop in properties.items():
        optional = "" if name in required_names else "?"
        members.append(f"{ts_key(name)}{optional}: {_ts_type(prop, schema_name, seen, True)}")
    return "{ " + "; ".join(members) + " }"


def _primitive_type(schema: dict[str, Any]) -> str:
    enum_values = schema.get("enum")
    if isinstance(enum_values, list) and enum_values:
        return " | ".join(json.dumps(value) for value in enum_values)

    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        return " | ".join(_primitive_type({**schema, "type": t}) for t in schema_type)
    if schema_type == "string":
        return "Buffer | string" if schema.get("format") == "binary" else "string"
    return _PRIMITIVES.get(str(schema_type), "any")


def _parenthesize(type_text: str) -> str:
    if " " in type_text and not type_text.startswith("{"):
        return f"({type_text})"
    return type_text


def ts_key(name: Any) -> str:
    """Return *name* as an object key, quoted when it is not an identifier."""
    text = str(name)
    return text if _IDENTIFIER.match(text) else json.dumps(text)


def ts_string(value: Any) -> str:
    """Return *value* as a double-quoted TypeScript string literal."""
    return json.dumps("" if value is None else str(value))


@pass_environment
def ts_path(environment: Environment, operation: FlattenedOperation, params: str = "params") -> str:
    """Return the request path of *operation* as a template literal.

    Path parameters are read from the *params* object and URI-encoded.
    """
    js = environment.globals["js"]

    def _substitute(match: re.Match[str]) -> str:
        return f"${{encodeURIComponent(String({params}.{js(match.group(1))}))}}"

    return "`" + _PATH_PARAM.sub(_substitute, operation.path) + "`"


@pass_environment
def ts_response_type(environment: Environment, responses: Any) -> str:
    """Return the result type of an operation from its success responses.

    The first ``2xx`` response with JSON content decides; without one the
    result is ``void``.
    """
    if not isinstance(responses, dict):
        return "void"
    schema_name = environment.globals["schema_name"]
    for code, response in responses.items():
        if not str(code).startswith("2"):
            continue
        media = json_content(response)
        if media and "schema" in media:
            return _ts_type(media["schema"], schema_name, set(), True)
    return "void"


def server_origin(servers: Optional[list[Any]]) -> str:
    """Return scheme and host of the first server URL, or ``""``."""
    if not servers or not isinstance(servers[0], dict):
        return ""
    parsed = urlparse(str(servers[0].get("url") or ""))
    if parsed.scheme and parsed.netloc:
        return f"{parsed.scheme}://{parsed.netloc}"
    return ""


MODEL = LanguageModel(
    name="ts",
    template_dir=TEMPLATE_DIR,
    templates=[
        TemplateSpec(source="package.json.j2", filename="package.json"),
        TemplateSpec(source="index.ts.j2", filename="src/index.ts"),
        TemplateSpec(source="tsconfig.json.j2", filename="tsconfig.json"),
        TemplateSpec(source="schema.ts.j2", partial="schema"),
        TemplateSpec(source="method.ts.j2", partial="method"),
    ],
    filters={
        "ts_type": ts_type,
        "ts_key": ts_key,
        "ts_string": ts_string,
        "ts_path": ts_path,
        "ts_response_type": ts_response_type,
        "server_origin": server_origin,
    },
    prepare_model=prepare_model,
)
