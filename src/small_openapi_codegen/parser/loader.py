"""Load OpenAPI documents from a local file, ``file://`` URI or HTTP(S) URL.

This module handles all I/O for fetching raw OpenAPI documents (the root
spec and every document it references through ``$ref``) and converting them
into Python dictionaries. It supports both JSON and YAML formats with
automatic format detection.

Loading is asynchronous: local files are read on a worker thread via
:func:`asyncio.to_thread` and URLs are fetched with
:class:`httpx.AsyncClient`, so the resolver can suspend while following
references.

The public functions are:

* :func:`to_uri` -- Normalise a path or URL into an absolute URI used as
  the document's identity and ``$ref`` base.
* :func:`load_document` -- Load and parse a document from any supported URI.
* :func:`validate_openapi_version` -- Check and return the ``openapi``
  version string, rejecting Swagger 2.x and unsupported versions.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

import httpx
import yaml

from small_openapi_codegen.exceptions import ResolutionError, SchemaConformanceError

logger = logging.getLogger(__name__)

_REMOTE_SCHEMES = ("http", "https")


def to_uri(source: str | Path) -> str:
    """Return an absolute URI for a filesystem path, ``file://`` URI or URL.

    Args:
        source: A local path (relative or absolute) or an absolute URI.

    Returns:
        ``http(s)://`` and ``file://`` URIs unchanged, otherwise the
        ``file://`` URI of the resolved path.
    """
    text = str(source)
    if urlparse(text).scheme in (*_REMOTE_SCHEMES, "file"):
        return text
    return Path(text).expanduser().resolve().as_uri()


async def load_document(uri: str) -> dict[str, Any]:
    """Load an OpenAPI (or referenced) document.

    Args:
        uri: An absolute URI as produced by :func:`to_uri`. Fragments are
            ignored.

    Returns:
        The parsed document as a dictionary.

    Raises:
        ResolutionError: If the document cannot be read or parsed.
    """
    parsed = urlparse(uri)
    if parsed.scheme in _REMOTE_SCHEMES:
        return await _load_from_url(uri.split("#", 1)[0])
    if parsed.scheme == "file":
        return await _load_from_file(Path(unquote(parsed.path)))
    return await _load_from_file(Path(uri))


async def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document from URL. Supports JSON and YAML responses.

    Raises:
        ResolutionError: If the URL cannot be fetched or content cannot be parsed.
    """
    logger.debug("Fetching %s", url)
    try:
        async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ResolutionError(
            f"HTTP {exc.response.status_code} fetching document from {url}",
            location=url,
        ) from exc
    except httpx.RequestError as exc:
        raise ResolutionError(
            f"Failed to fetch document from {url}: {exc}", location=url
        ) from exc

    # Use content-type as a hint for parsing
    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint, location=url)


async def _load_from_file(path: Path) -> dict[str, Any]:
    """Load a document from a local file.

    Supports .json, .yaml, and .yml extensions. Falls back to content-based
    detection if the extension is not recognized.

    Raises:
        ResolutionError: If the file cannot be read or content cannot be parsed.
    """
    if not path.is_file():
        raise ResolutionError(f"Spec file not found: {path}", location=str(path))

    logger.debug("Reading %s", path)
    try:
        content = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except OSError as exc:
        raise ResolutionError(
            f"Failed to read spec file {path}: {exc}", location=str(path)
        ) from exc

    if not content.strip():
        raise ResolutionError(f"Spec file is empty: {path}", location=str(path))

    # Determine hint from file extension
    suffix = path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint, location=str(path))


def _parse_content(content: str, hint: str = "", location: str | None = None) -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').
        location: File or URL the content came from, for error messages.

    Returns:
        The parsed dictionary.

    Raises:
        ResolutionError: If the content cannot be parsed as either format.
    """
    where = f" in {location}" if location else ""
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise ResolutionError(f"Invalid JSON{where}: {exc}", location=location) from exc
        else:
            return _ensure_mapping(result, where, location)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        return _ensure_mapping(result, where, location)

    msg = f"Failed to parse document{where} as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise ResolutionError(msg, location=location)


def _ensure_mapping(result: Any, where: str, location: str | None) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise ResolutionError(
            f"Document{where} must be a JSON/YAML object (got {kind})",
            location=location,
        )
    return result


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Supports OpenAPI 3.0.x and 3.1.x.

    Args:
        spec: The parsed spec dictionary.

    Returns:
        The OpenAPI version string (e.g., '3.0.3', '3.1.0').

    Raises:
        SchemaConformanceError: If the version is missing, unsupported, or
            indicates Swagger 2.x.
    """
    if "swagger" in spec:
        raise SchemaConformanceError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.0.x and 3.1.x are supported. "
            "Consider converting with https://converter.swagger.io",
            path="swagger",
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise SchemaConformanceError(
            "Missing 'openapi' field. Is this an OpenAPI 3.x document?",
            path="openapi",
        )

    version_str = str(openapi_version)
    if version_str.startswith(("3.0.", "3.1.")):
        return version_str

    raise SchemaConformanceError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Only OpenAPI 3.0.x and 3.1.x are supported.",
        path="openapi",
    )
