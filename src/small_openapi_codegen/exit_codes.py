"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~small_openapi_codegen.exceptions.CodegenError`
subclass. CI scripts can inspect the exit code to tell a broken spec apart
from a spec that merely fails the structural checks.

Example::

    $ small-openapi-codegen api.yaml --output ./client
    $ echo $?
    8   # EXIT_VALIDATION_FAILURE -- the OpenAPI document failed validation
"""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI specification could not be loaded, resolved or parsed."""

EXIT_VALIDATION_FAILURE = 8
"""The OpenAPI specification loaded but failed validation."""
