"""Classify OpenAPI schema nodes into an explicit tagged variant.

Schema objects arrive as loosely-typed mappings. Every traversal in this
package (the forbidden-property scan, the property projector, language type
mappers) first classifies a node with :func:`schema_kind` and then handles
each :class:`SchemaKind` explicitly, so that no recursive case is probed ad
hoc.

Classification order matters: a node carrying ``$ref`` is a reference no
matter what else it holds; a node with ``allOf``/``anyOf``/``oneOf`` is a
combinator even when it also declares sibling ``properties`` (which callers
still honour).
"""

from __future__ import annotations

import enum
from typing import Any, Iterator

COMBINATORS: tuple[str, ...] = ("allOf", "anyOf", "oneOf")


class SchemaKind(str, enum.Enum):
    """The structural variants a schema node can take."""

    REFERENCE = "reference"
    COMBINATOR = "combinator"
    ARRAY = "array"
    OBJECT = "object"
    PRIMITIVE = "primitive"


def schema_kind(node: Any) -> SchemaKind:
    """Return the :class:`SchemaKind` of *node*.

    Non-mapping values (booleans allowed by OpenAPI 3.1, ``None``) are
    primitives.
    """
    if not isinstance(node, dict):
        return SchemaKind.PRIMITIVE
    if isinstance(node.get("$ref"), str):
        return SchemaKind.REFERENCE
    if any(isinstance(node.get(key), list) for key in COMBINATORS):
        return SchemaKind.COMBINATOR
    if node.get("type") == "array" or "items" in node:
        return SchemaKind.ARRAY
    if node.get("type") == "object" or "properties" in node:
        return SchemaKind.OBJECT
    return SchemaKind.PRIMITIVE


def combinator_branches(node: dict[str, Any]) -> Iterator[tuple[str, int, Any]]:
    """Yield ``(combinator, index, branch)`` for every combinator branch.

    Combinators are visited in ``allOf``, ``anyOf``, ``oneOf`` order and
    branches in array order.
    """
    for combinator in COMBINATORS:
        branches = node.get(combinator)
        if isinstance(branches, list):
            for index, branch in enumerate(branches):
                yield combinator, index, branch
