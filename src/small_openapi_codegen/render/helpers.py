"""Template helper functions, scoped to a single render call.

A :class:`TemplateHelpers` instance is built by
:func:`~small_openapi_codegen.render.engine.render` for every call and its
functions are installed as globals of that call's Jinja2 environment only.
Two renders with different options (for instance ``snake`` on and off)
therefore never see each other's helpers.

Available in templates::

    {% for op in methods(paths, servers) %}
      {{ js(method_name(op)) }}
      {% for prop in multipart_form_data_properties(op.request_body, locator(op) ~ ".requestBody") %}
        ...
      {% endfor %}
    {% endfor %}
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from small_openapi_codegen.generator import naming, operations, properties
from small_openapi_codegen.models import FlattenedOperation, GenerationOptions, PropertyDescriptor


class TemplateHelpers:
    """Helper functions exposed to the templates of one render call.

    Args:
        options: Options of this render call. ``snake`` selects the casing
            applied by :meth:`js`.
        schemas: The document's ``components.schemas``, used by
            :meth:`schema_name`.
    """

    def __init__(
        self,
        options: Optional[GenerationOptions] = None,
        schemas: Optional[dict[str, Any]] = None,
    ) -> None:
        self.options = options if options is not None else GenerationOptions()
        self._names_by_id = {id(schema): name for name, schema in (schemas or {}).items()}

    def properties(self, schema: Any, path: str = "schema") -> list[PropertyDescriptor]:
        return properties.project_properties(schema, path)

    def methods(self, paths: Any, servers: Any = None) -> list[FlattenedOperation]:
        return operations.flatten_operations(paths, servers)

    def method_name(self, operation: FlattenedOperation) -> str:
        return operations.method_name(operation)

    def locator(self, operation: FlattenedOperation) -> str:
        """Return the dotted document path of *operation*, e.g. ``paths./pets.get``."""
        return f"paths.{operation.path_pattern}.{operation.method.value}"

    def js(self, name: str) -> str:
        """Return *name* as an identifier in the configured casing."""
        if self.options.snake:
            return naming.snake_case(name)
        return naming.camel_case(name)

    def json(self, holder: Any) -> Optional[dict[str, Any]]:
        return properties.json_content(holder)

    def is_multipart_form_data(self, body: Any) -> bool:
        return properties.is_multipart_form_data(body)

    def is_form_url_encoded(self, body: Any) -> bool:
        return properties.is_form_url_encoded(body)

    def multipart_form_data_properties(
        self, body: Any, path: str = "requestBody"
    ) -> list[PropertyDescriptor]:
        return properties.multipart_form_data_properties(body, path)

    def form_url_encoded_properties(
        self, body: Any, path: str = "requestBody"
    ) -> list[PropertyDescriptor]:
        return properties.form_url_encoded_properties(body, path)

    def status_codes(self, responses: Any) -> list[str]:
        return properties.status_codes(responses)

    def has_default(self, responses: Any) -> bool:
        return properties.has_default_response(responses)

    def schema_name(self, schema: Any) -> Optional[str]:
        """Return the ``components.schemas`` name of *schema*, if it has one.

        Lookup is by identity, which works because dereferencing shares
        component schemas with every place that referenced them.
        """
        return self._names_by_id.get(id(schema))

    def as_globals(self) -> dict[str, Callable[..., Any]]:
        """Return the helpers keyed by the names templates call them by."""
        return {
            "properties": self.properties,
            "methods": self.methods,
            "method_name": self.method_name,
            "locator": self.locator,
            "js": self.js,
            "json": self.json,
            "is_multipart_form_data": self.is_multipart_form_data,
            "is_form_url_encoded": self.is_form_url_encoded,
            "multipart_form_data_properties": self.multipart_form_data_properties,
            "form_url_encoded_properties": self.form_url_encoded_properties,
            "status_codes": self.status_codes,
            "has_default": self.has_default,
            "schema_name": self.schema_name,
        }
