"""Validate an OpenAPI document before any code is generated.

:func:`validate_spec` runs two passes in sequence:

1. **Schema conformance** -- the document is bundled, its references are
   checked, its ``openapi`` version is checked, and it is validated against
   the OpenAPI meta-schema with ``openapi-spec-validator``. The first
   failure is reported as a single error and the second pass is skipped.
2. **Forbidden property names** -- :func:`find_forbidden_properties` walks
   every component schema, request body schema and response schema,
   including nested objects, array items and ``allOf``/``anyOf``/``oneOf``
   branches at any depth, and reports every property whose key is
   ``default`` in any letter case. Such properties break the generated
   clients of several target languages.

Problems are returned as a batch of
:class:`~small_openapi_codegen.models.ValidationIssue` values; nothing is
raised for an invalid document.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from jsonschema.exceptions import ValidationError as JsonSchemaValidationError
from openapi_spec_validator import validate as validate_openapi_document

from small_openapi_codegen.exceptions import ResolutionError, SchemaConformanceError
from small_openapi_codegen.models import HTTPMethod, Severity, ValidationIssue
from small_openapi_codegen.parser.loader import validate_openapi_version
from small_openapi_codegen.parser.resolver import bundle, dereference
from small_openapi_codegen.parser.schema import SchemaKind, combinator_branches, schema_kind

FORBIDDEN_PROPERTY_NAME = "default"

_HTTP_METHODS = tuple(m.value for m in HTTPMethod)


async def validate_spec(spec_path: str | Path) -> list[ValidationIssue]:
    """Validate the OpenAPI document at *spec_path*.

    Args:
        spec_path: Path or URL of the root OpenAPI document.

    Returns:
        Every issue found, in document order. An empty list means the
        document can be handed to the generator.

    Example::

        issues = asyncio.run(validate_spec("petstore.yaml"))
        for issue in issues:
            print(f"- {issue.path}: {issue.message}")
    """
    try:
        document = await bundle(spec_path)
        dereference(document)
        validate_openapi_version(document)
        await asyncio.to_thread(validate_openapi_document, document)
    except ResolutionError as exc:
        return [ValidationIssue(path="spec", message=str(exc), severity=Severity.ERROR)]
    except SchemaConformanceError as exc:
        return [
            ValidationIssue(path=exc.path or "spec", message=str(exc), severity=Severity.ERROR)
        ]
    except JsonSchemaValidationError as exc:
        return [
            ValidationIssue(
                path=_locator(exc.absolute_path) or "spec",
                message=exc.message,
                severity=Severity.ERROR,
            )
        ]
    except RecursionError:
        return [
            ValidationIssue(
                path="spec",
                message="Document is nested too deeply to be validated",
                severity=Severity.ERROR,
            )
        ]

    return find_forbidden_properties(document)


def find_forbidden_properties(document: dict[str, Any]) -> list[ValidationIssue]:
    """Report every property named ``default`` (any case) in *document*.

    *document* is expected to be bundled: ``$ref`` nodes are skipped rather
    than followed, so a component schema is reported once under
    ``components.schemas`` and not again at each use site.

    Args:
        document: A bundled OpenAPI document.

    Returns:
        One error issue per offending property occurrence.
    """
    scanner = _PropertyNameScanner()

    schemas = (document.get("components") or {}).get("schemas") or {}
    for name, schema in schemas.items():
        scanner.scan(schema, f"components.schemas.{name}")

    for path_pattern, path_item in (document.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        for method in _HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            prefix = f"paths.{path_pattern}.{method}"

            request_body = operation.get("requestBody")
            for media_type, schema in _content_schemas(request_body):
                scanner.scan(schema, f"{prefix}.requestBody.content.{media_type}.schema")

            responses = operation.get("responses")
            if isinstance(responses, dict):
                for status, response in responses.items():
                    for media_type, schema in _content_schemas(response):
                        scanner.scan(
                            schema,
                            f"{prefix}.responses.{status}.content.{media_type}.schema",
                        )

    return scanner.issues


def _content_schemas(holder: Any) -> Iterable[tuple[str, Any]]:
    """Yield ``(media_type, schema)`` of a request body or response object."""
    if not isinstance(holder, dict) or isinstance(holder.get("$ref"), str):
        return
    content = holder.get("content")
    if not isinstance(content, dict):
        return
    for media_type, media in content.items():
        if isinstance(media, dict) and "schema" in media:
            yield media_type, media["schema"]


def _locator(path: Iterable[Any]) -> str:
    return ".".join(str(segment) for segment in path)


class _PropertyNameScanner:
    """Depth-first scan collecting forbidden property names.

    ``_ancestors`` holds the identity of every schema on the current
    recursion stack. It stops cycles (YAML aliases can produce them) while
    still scanning a schema that is reused at several places.
    """

    def __init__(self) -> None:
        self.issues: list[ValidationIssue] = []
        self._ancestors: set[int] = set()

    def scan(self, schema: Any, path: str) -> None:
        kind = schema_kind(schema)
        if kind is SchemaKind.REFERENCE or kind is SchemaKind.PRIMITIVE:
            return
        if id(schema) in self._ancestors:
            return

        # keywords are checked independently of the node's kind
        self._ancestors.add(id(schema))
        try:
            self._scan_properties(schema.get("properties"), f"{path}.properties")
            if "items" in schema:
                self.scan(schema["items"], f"{path}.items")
            for combinator, index, branch in combinator_branches(schema):
                self.scan(branch, f"{path}.{combinator}[{index}]")
        finally:
            self._ancestors.discard(id(schema))

    def _scan_properties(self, properties: Any, path: str) -> None:
        if not isinstance(properties, dict):
            return

        for key in properties:
            if str(key).lower() == FORBIDDEN_PROPERTY_NAME:
                self.issues.append(
                    ValidationIssue(
                        path=f"{path}.{key}",
                        message=(
                            f"Property with key name '{key}' found. Properties named "
                            f"'{FORBIDDEN_PROPERTY_NAME}' (any case) can cause issues "
                            "in generated code."
                        ),
                        severity=Severity.ERROR,
                    )
                )

        for key, sub_schema in properties.items():
            self.scan(sub_schema, f"{path}.{key}")
