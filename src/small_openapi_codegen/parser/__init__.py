"""OpenAPI document parser -- load, bundle, dereference and validate.

This sub-package is responsible for the first half of the code generation
pipeline: turning an OpenAPI 3.x document (JSON or YAML, local file or remote
URL, optionally split across several files) into a single, fully dereferenced
dictionary, and deciding whether that document is fit for generation.

Typical usage::

    import asyncio

    from small_openapi_codegen.parser import resolve_spec, validate_spec

    issues = asyncio.run(validate_spec("petstore.yaml"))
    if not issues:
        document = asyncio.run(resolve_spec("petstore.yaml"))

Sub-modules:

* :mod:`~small_openapi_codegen.parser.loader` -- I/O layer (file, URL) plus
  format detection and OpenAPI version validation.
* :mod:`~small_openapi_codegen.parser.resolver` -- Bundling of external
  ``$ref`` pointers and dereferencing with structural sharing.
* :mod:`~small_openapi_codegen.parser.schema` -- Classification of schema
  nodes into :class:`~small_openapi_codegen.parser.schema.SchemaKind`.
* :mod:`~small_openapi_codegen.parser.validation` -- Meta-schema validation
  and the forbidden property name scan.
"""

from small_openapi_codegen.parser.loader import load_document, validate_openapi_version
from small_openapi_codegen.parser.resolver import bundle, dereference, resolve_spec
from small_openapi_codegen.parser.validation import validate_spec

__all__ = [
    "load_document",
    "validate_openapi_version",
    "bundle",
    "dereference",
    "resolve_spec",
    "validate_spec",
]
