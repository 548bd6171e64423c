"""Exception hierarchy for small-openapi-codegen.

All exceptions inherit from :class:`CodegenError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`small_openapi_codegen.exit_codes`. The top-level error handler in
:func:`small_openapi_codegen.app.main` catches ``CodegenError`` and exits
with the appropriate code, while unexpected exceptions produce a crash log
and exit with :data:`EXIT_GENERIC_FAILURE`.

Structural validation problems are *not* exceptions: they are collected as
:class:`~small_openapi_codegen.models.ValidationIssue` values and returned in
one batch. :class:`ValidationFailedError` only wraps such a batch when the CLI
decides to abort.

Subclass hierarchy::

    CodegenError (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- ConfigError             (exit 1)
    +-- ResolutionError         (exit 7)
    +-- SchemaConformanceError  (exit 7)
    +-- ProjectionError         (exit 1)
    +-- ValidationFailedError   (exit 8)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from small_openapi_codegen.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_VALIDATION_FAILURE,
)

if TYPE_CHECKING:
    from small_openapi_codegen.models import ValidationIssue


class CodegenError(Exception):
    """Base exception for all small-openapi-codegen errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`small_openapi_codegen.exit_codes`. The entry
    point catches this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(CodegenError):
    """Raised for invalid CLI arguments, missing paths or unknown languages."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(CodegenError):
    """Raised for configuration problems (invalid project config JSON or values)."""

    exit_code = EXIT_GENERIC_FAILURE


class ResolutionError(CodegenError):
    """Raised when a document cannot be loaded or a ``$ref`` cannot be resolved.

    Args:
        message: Description of the failure.
        location: The file, URL or ``$ref`` pointer that caused it, when
            known.
    """

    exit_code = EXIT_SPEC_PARSE_ERROR

    def __init__(self, message: str, location: Optional[str] = None):
        super().__init__(message)
        self.location = location


class SchemaConformanceError(CodegenError):
    """Raised when a document is not a supported OpenAPI 3.x document.

    Args:
        message: Description of the failure.
        path: Dotted locator of the offending node, when known.
    """

    exit_code = EXIT_SPEC_PARSE_ERROR

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ProjectionError(CodegenError):
    """Raised when a schema handed to the property projector is malformed."""

    exit_code = EXIT_GENERIC_FAILURE


class ValidationFailedError(CodegenError):
    """Raised by the CLI when validation returned one or more error issues.

    Args:
        issues: The full batch of issues returned by the validator.
    """

    exit_code = EXIT_VALIDATION_FAILURE

    def __init__(self, issues: list[ValidationIssue]):
        super().__init__(
            f"OpenAPI specification validation failed with {len(issues)} issue(s)"
        )
        self.issues = issues
