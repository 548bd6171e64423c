"""small-openapi-codegen -- Generate typed API clients from OpenAPI 3.0/3.1 specs.

This package reads an OpenAPI specification, bundles and dereferences it,
validates it, and hands a flattened model to a set of language templates
that emit a client library (currently TypeScript).

Typical workflow::

    small-openapi-codegen ./petstore.yaml --output ./petstore-client

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: Configuration precedence resolution and atomic file writes.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stderr diagnostics with Rich support.
    parser: Document loading, ``$ref`` resolution and validation.
    generator: Operation flattening, property projection, naming and
        model assembly.
    render: Jinja2 rendering boundary and template helper context.
    languages: Target language models (templates + language hooks).
"""

__version__ = "0.3.0"
