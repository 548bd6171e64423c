"""Flatten the ``paths`` object into one record per path + HTTP method.

OpenAPI nests operations two levels deep (path pattern, then method) and lets
a path item declare ``parameters`` shared by all of its operations. Templates
want a flat sequence instead, so :func:`flatten_operations` walks every path
item and produces a :class:`~small_openapi_codegen.models.FlattenedOperation`
per operation with:

* the full request path, i.e. the server base path (see :func:`base_path`)
  followed by the path pattern;
* the operation-level parameters followed by the path-level ones. A
  path-level parameter whose ``name`` and ``in`` match an operation-level
  parameter is dropped, so the operation-level declaration wins.

Non-method keys of a path item (``summary``, ``description``, ``servers``,
``parameters``, ``$ref``) are never treated as operations.

Flattening is pure: the result is computed afresh on each call and the input
document is never modified.
"""

from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import urlparse

from small_openapi_codegen.models import FlattenedOperation, HTTPMethod

_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)

_BRACES = re.compile(r"[{}]")
_ABSOLUTE_URL = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


def base_path(servers: Optional[list[Any]]) -> str:
    """Return the path prefix contributed by the first server entry.

    Only the path component of a URL starting with ``<scheme>://`` is used;
    any other string (``/v1``, ``v1``, ``localhost:8080/api``) is taken as
    is. The result never ends with ``/``, so a bare ``/`` (or no server at
    all) yields ``""``.

    Args:
        servers: The document's ``servers`` array.

    Returns:
        The base path, e.g. ``"/v2"``.

    Example::

        base_path([{"url": "https://api.example.com/v2"}])  # "/v2"
        base_path([{"url": "/v3/"}])                         # "/v3"
        base_path([])                                        # ""
    """
    if not servers or not isinstance(servers[0], dict):
        return ""
    url = servers[0].get("url")
    if not url:
        return ""

    url = str(url)
    if _ABSOLUTE_URL.match(url):
        url = urlparse(url).path
    return url.rstrip("/")


def flatten_operations(
    paths: Optional[dict[str, Any]],
    servers: Optional[list[Any]] = None,
) -> list[FlattenedOperation]:
    """Flatten *paths* into one :class:`FlattenedOperation` per operation.

    Operations keep document order: path items in key order, methods in the
    order they are declared inside each path item.

    Args:
        paths: The document's ``paths`` object.
        servers: The document's ``servers`` array, used for the base path.

    Returns:
        The flattened operations. Every field of the source operation that
        is not modelled explicitly is carried as an extra.
    """
    prefix = base_path(servers)
    operations: list[FlattenedOperation] = []

    for path_pattern, path_item in (paths or {}).items():
        if not isinstance(path_item, dict):
            continue

        path_params = path_item.get("parameters") or []

        for method, operation in path_item.items():
            if method not in _HTTP_METHODS or not isinstance(operation, dict):
                continue

            fields = dict(operation)
            fields.update(
                path=f"{prefix}{path_pattern}",
                path_pattern=path_pattern,
                method=HTTPMethod(method),
                parameters=merge_parameters(path_params, operation.get("parameters") or []),
            )
            operations.append(FlattenedOperation.model_validate(fields))

    return operations


def merge_parameters(path_params: list[Any], op_params: list[Any]) -> list[Any]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters come first. A path-level parameter is appended
    only when no operation-level parameter has the same ``name`` and ``in``.

    Args:
        path_params: Parameters declared on the path item.
        op_params: Parameters declared on the operation.

    Returns:
        A new list; the parameter objects themselves are shared.
    """
    declared = {_parameter_key(param) for param in op_params}
    declared.discard(None)

    merged = list(op_params)
    for param in path_params:
        key = _parameter_key(param)
        if key is None or key not in declared:
            merged.append(param)
    return merged


def _parameter_key(param: Any) -> Optional[tuple[str, str]]:
    if not isinstance(param, dict) or "name" not in param:
        return None
    return str(param["name"]), str(param.get("in", ""))


def method_name(operation: FlattenedOperation) -> str:
    """Return the client method name for *operation*.

    The ``operationId`` is used verbatim when present. Otherwise the name is
    the HTTP method plus the path pattern, with braces removed and slashes
    turned into underscores: ``GET /pets/{petId}`` becomes ``get_pets_petId``.
    """
    if operation.operation_id:
        return operation.operation_id
    path = operation.path_pattern[1:] if operation.path_pattern.startswith("/") else operation.path_pattern
    return _BRACES.sub("", f"{operation.method.value}_{path}").replace("/", "_")
