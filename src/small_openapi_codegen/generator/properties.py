"""Project object schemas into per-property descriptors for templates.

:func:`project_properties` turns the ``properties`` mapping of an object
schema into an ordered list of
:class:`~small_openapi_codegen.models.PropertyDescriptor` values carrying the
flags generators branch on: required, binary, array and file array.

The remaining helpers inspect request bodies and responses by media type.
They are all pure and tolerate missing pieces (``None`` bodies, bodies without
``content``) by returning an empty or false result.
"""

from __future__ import annotations

from typing import Any, Optional

from small_openapi_codegen.exceptions import ProjectionError
from small_openapi_codegen.models import PropertyDescriptor

JSON = "application/json"
MULTIPART_FORM_DATA = "multipart/form-data"
FORM_URL_ENCODED = "application/x-www-form-urlencoded"


def project_properties(schema: Any, path: str = "schema") -> list[PropertyDescriptor]:
    """Return one descriptor per property of *schema*, in declaration order.

    A property is required only when the schema's ``required`` keyword is a
    list naming it; any other ``required`` value is ignored.

    Args:
        schema: An object schema. ``None`` is treated as a schema without
            properties.
        path: Dotted locator of *schema*, used in error messages.

    Returns:
        The descriptors. Empty when ``properties`` is absent or empty.

    Raises:
        ProjectionError: If *schema*, its ``properties`` or one of the
            property schemas is not a mapping.

    Example::

        project_properties({
            "type": "object",
            "required": ["file"],
            "properties": {"file": {"type": "string", "format": "binary"}},
        })
        # [PropertyDescriptor(name="file", is_required=True, is_binary=True, ...)]
    """
    if schema is None:
        return []
    if not isinstance(schema, dict):
        raise ProjectionError(
            f"Malformed schema at {path}: expected a mapping, got {type(schema).__name__}"
        )

    properties = schema.get("properties")
    if not properties:
        return []
    if not isinstance(properties, dict):
        raise ProjectionError(
            f"Malformed schema at {path}.properties: expected a mapping, "
            f"got {type(properties).__name__}"
        )

    required = schema.get("required")
    required_names = set(required) if isinstance(required, list) else set()

    descriptors: list[PropertyDescriptor] = []
    for name, prop in properties.items():
        if not isinstance(prop, dict):
            raise ProjectionError(
                f"Malformed schema at {path}.properties.{name}: expected a mapping, "
                f"got {type(prop).__name__}"
            )

        is_array = prop.get("type") == "array"
        items = prop.get("items")
        fields = dict(prop)
        fields.update(
            name=str(name),
            is_required=name in required_names,
            is_binary=prop.get("format") == "binary",
            is_array=is_array,
            is_file_array=is_array and isinstance(items, dict) and items.get("format") == "binary",
            schema_=prop,
        )
        descriptors.append(PropertyDescriptor.model_validate(fields))

    return descriptors


# ------------------------------------------------------------------ #
# Request bodies and responses
# ------------------------------------------------------------------ #


def _media(holder: Any, media_type: str) -> Optional[dict[str, Any]]:
    if not isinstance(holder, dict):
        return None
    content = holder.get("content")
    if not isinstance(content, dict):
        return None
    media = content.get(media_type)
    return media if isinstance(media, dict) else None


def _form_properties(body: Any, media_type: str, path: str) -> list[PropertyDescriptor]:
    media = _media(body, media_type)
    schema = media.get("schema") if media else None
    if isinstance(schema, dict) and schema.get("type") == "object" and schema.get("properties"):
        return project_properties(schema, f"{path}.content.{media_type}.schema")
    return []


def json_content(holder: Any) -> Optional[dict[str, Any]]:
    """Return the ``application/json`` media object of a body or response."""
    return _media(holder, JSON)


def is_multipart_form_data(body: Any) -> bool:
    """Return ``True`` if *body* declares ``multipart/form-data`` content."""
    return bool(_media(body, MULTIPART_FORM_DATA))


def is_form_url_encoded(body: Any) -> bool:
    """Return ``True`` if *body* declares URL-encoded form content."""
    return bool(_media(body, FORM_URL_ENCODED))


def multipart_form_data_properties(
    body: Any, path: str = "requestBody"
) -> list[PropertyDescriptor]:
    """Project the ``multipart/form-data`` schema of a request body.

    Returns an empty list unless that schema is an object declaring
    properties. *path* locates *body* in error messages.
    """
    return _form_properties(body, MULTIPART_FORM_DATA, path)


def form_url_encoded_properties(
    body: Any, path: str = "requestBody"
) -> list[PropertyDescriptor]:
    """Project the ``application/x-www-form-urlencoded`` schema of a request body.

    Returns an empty list unless that schema is an object declaring
    properties. *path* locates *body* in error messages.
    """
    return _form_properties(body, FORM_URL_ENCODED, path)


def status_codes(responses: Any) -> list[str]:
    """Return the explicit status codes of a ``responses`` object, as strings.

    ``default`` is excluded; document order is kept.
    """
    if not isinstance(responses, dict):
        return []
    return [str(code) for code in responses if str(code) != "default"]


def has_default_response(responses: Any) -> bool:
    """Return ``True`` if *responses* declares a ``default`` response."""
    return isinstance(responses, dict) and bool(responses.get("default"))
