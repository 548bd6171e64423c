"""Canonical Pydantic models shared across all small-openapi-codegen modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The raw OpenAPI
document itself stays a plain ``dict`` so that arbitrary keywords pass
through to templates untouched. The models fall into three groups:

**Configuration models**:
    :class:`GenerationOptions` and :class:`CodegenConfig`.

**Parser / generator output models** -- derived from the resolved document
and consumed by templates:
    :class:`HTTPMethod`, :class:`Severity`, :class:`ValidationIssue`,
    :class:`FlattenedOperation`, :class:`PropertyDescriptor` and
    :class:`ApiSpec`.

**Rendering boundary models**:
    :class:`TemplateSpec`, :class:`LanguageModel` and :class:`RenderedFile`.

Models that spread OpenAPI fields use ``extra="allow"`` so that unknown keys
are preserved in ``model_extra`` and readable as attributes from templates.
Fields typed ``Any`` are never copied by pydantic, which keeps object
identity of shared schema nodes intact.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


class GenerationOptions(BaseModel):
    """Options controlling naming and packaging of the generated client.

    Any option not declared here (for example ``prettierConfig``) is kept as
    an extra field and handed to templates as-is.

    Example::

        GenerationOptions(namespace="@acme", name="pets-client")
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    namespace: Optional[str] = Field(
        default=None, description='Package namespace, like "@acme"'
    )
    name: Optional[str] = Field(
        default=None, description='Package name, e.g. "foobar-client"'
    )
    class_name: Optional[str] = Field(
        default=None, alias="className", description="API class name, e.g. FoobarClient"
    )
    snake: bool = Field(
        default=False, description="Emit snake_case identifiers instead of camelCase"
    )
    package_name: Optional[str] = Field(
        default=None, alias="packageName", description="Set by the language model"
    )
    service_name: Optional[str] = Field(
        default=None, alias="serviceName", description="Set by the language model"
    )


class CodegenConfig(BaseModel):
    """Effective configuration after precedence resolution.

    Produced by :func:`~small_openapi_codegen.config.resolve_config` from CLI
    flags, environment variables and the project-local config file.
    """

    language: str = Field(default="ts", description="Target language model name")
    options: GenerationOptions = Field(default_factory=GenerationOptions)


# --- Parser / generator output ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised as operations inside an OpenAPI path item."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class Severity(str, enum.Enum):
    """Severity of a :class:`ValidationIssue`."""

    ERROR = "error"
    WARNING = "warning"


class ValidationIssue(BaseModel):
    """A single diagnostic produced by the structural validator.

    ``path`` is a dotted locator from the document root, for example
    ``components.schemas.Pet.properties.default``.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    message: str
    severity: Severity = Severity.ERROR


class FlattenedOperation(BaseModel):
    """One path + HTTP method pair with its parameters merged.

    Every field of the OpenAPI *Operation Object* not declared here
    (``summary``, ``tags``, vendor extensions, ...) is preserved as an extra.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    path: str = Field(description="Full path including the server base path")
    path_pattern: str = Field(description="Path pattern as declared under ``paths``")
    method: HTTPMethod
    operation_id: Optional[str] = Field(default=None, alias="operationId")
    parameters: list[Any] = Field(default_factory=list)
    request_body: Any = Field(default=None, alias="requestBody")
    responses: Any = Field(default_factory=dict)


class PropertyDescriptor(BaseModel):
    """Normalised per-property metadata projected from an object schema.

    The property's own schema keywords (``type``, ``format``, ``items``,
    ``description``, ...) are spread onto the descriptor as extras. The
    original schema object is kept in :attr:`schema_` so that language
    models can name referenced types.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    is_required: bool = Field(default=False, alias="isRequired")
    is_binary: bool = Field(default=False, alias="isBinary")
    is_array: bool = Field(default=False, alias="isArray")
    is_file_array: bool = Field(default=False, alias="isFileArray")
    schema_: Any = Field(default=None, alias="schema", exclude=True)


class ApiSpec(BaseModel):
    """The model handed to the template renderer.

    Wraps the fully dereferenced OpenAPI document together with the resolved
    :class:`GenerationOptions`. Templates receive
    :meth:`template_context`, i.e. every top-level document field plus
    ``options``.
    """

    document: dict[str, Any]
    options: GenerationOptions = Field(default_factory=GenerationOptions)

    @property
    def openapi(self) -> Optional[str]:
        return self.document.get("openapi")

    @property
    def info(self) -> dict[str, Any]:
        return self.document.get("info") or {}

    @property
    def servers(self) -> list[dict[str, Any]]:
        return self.document.get("servers") or []

    @property
    def paths(self) -> dict[str, Any]:
        return self.document.get("paths") or {}

    @property
    def components(self) -> dict[str, Any]:
        return self.document.get("components") or {}

    @property
    def schemas(self) -> dict[str, Any]:
        return self.components.get("schemas") or {}

    def template_context(self) -> dict[str, Any]:
        """Return the mapping templates are rendered with."""
        context = dict(self.document)
        context.setdefault("servers", [])
        context.setdefault("paths", {})
        context.setdefault("components", {})
        context["options"] = self.options
        return context


# --- Rendering boundary ---


class TemplateSpec(BaseModel):
    """One template of a :class:`LanguageModel`.

    Partials are loadable by other templates (``{% import %}`` /
    ``{% include %}``) but produce no output file of their own.
    """

    source: str = Field(description="Template name relative to the template directory")
    filename: Optional[str] = Field(
        default=None, description="Output path relative to the output directory"
    )
    partial: Optional[str] = None


class LanguageModel(BaseModel):
    """A target language: its templates plus optional language hooks.

    ``prepare_model`` receives the :class:`ApiSpec` and returns a new one
    (it must not mutate its argument). ``prettify`` receives the render
    options, the output filename and the rendered text, and returns the
    formatted text or ``None`` to keep the input.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    template_dir: Path
    templates: list[TemplateSpec]
    filters: dict[str, Callable[..., Any]] = Field(default_factory=dict)
    prepare_model: Optional[Callable[[ApiSpec], ApiSpec]] = None
    prettify: Optional[Callable[[dict[str, Any], str, str], Optional[str]]] = None


class RenderedFile(BaseModel):
    """A rendered output file, not yet written to disk."""

    filename: str
    output: str
