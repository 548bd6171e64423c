"""Bundle and dereference ``$ref`` JSON Reference pointers in OpenAPI documents.

OpenAPI documents commonly use ``$ref`` pointers, both internal
(``{"$ref": "#/components/schemas/Pet"}``) and external
(``{"$ref": "common.yaml#/Error"}``). This module turns such a document into
one self-contained, fully dereferenced in-memory document in two steps:

1. :func:`bundle` -- loads the root document and inlines every **external**
   reference. The first occurrence of an external target is copied in place;
   every later reference to the same target (including cyclic ones) is
   rewritten into an internal ``#/...`` pointer to that first occurrence.
   Internal references are left untouched, and YAML aliases that form a
   cycle are rewritten into internal references to their anchor, so a bundle
   is still a valid, acyclic OpenAPI document.
2. :func:`dereference` -- replaces every internal reference with the
   referenced *object itself*. References are shared, not copied: every use
   of ``#/components/schemas/Pet`` is the very same ``dict`` as
   ``components.schemas.Pet``. Self-referencing schemas therefore become
   cyclic Python structures instead of being truncated at the cycle point.

:func:`resolve_spec` chains both. All failures raise
:class:`~small_openapi_codegen.exceptions.ResolutionError`; no partial
document is ever returned.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urldefrag, urljoin

from small_openapi_codegen.exceptions import ResolutionError
from small_openapi_codegen.parser.loader import load_document, to_uri

logger = logging.getLogger(__name__)


async def resolve_spec(spec_path: str | Path) -> dict[str, Any]:
    """Load *spec_path* and return it bundled and fully dereferenced.

    Args:
        spec_path: Path or URL of the root OpenAPI document.

    Returns:
        A new document in which no ``$ref`` node is reachable.

    Raises:
        ResolutionError: If the document or one of its references is
            missing, malformed or unresolvable.

    Example::

        spec = asyncio.run(resolve_spec("petstore.yaml"))
        schema = spec["paths"]["/pets"]["get"]["responses"]["200"]["content"][
            "application/json"
        ]["schema"]
        assert schema["items"] is spec["components"]["schemas"]["Pet"]
    """
    return dereference(await bundle(spec_path))


async def bundle(spec_path: str | Path) -> dict[str, Any]:
    """Inline every external ``$ref`` of *spec_path* into one document.

    Args:
        spec_path: Path or URL of the root OpenAPI document.

    Returns:
        A new, self-contained document. Internal references are kept.

    Raises:
        ResolutionError: If a referenced document cannot be loaded or a
            pointer does not exist in it.
    """
    return await _Bundler(to_uri(spec_path)).run()


def dereference(document: dict[str, Any]) -> dict[str, Any]:
    """Replace every internal ``$ref`` in *document* with its target object.

    Works on a deep copy; the input is never mutated. Chains of references
    (a ``$ref`` whose target is itself a ``$ref``) are followed to the final
    target.

    Args:
        document: A bundled document (no external references left).

    Returns:
        The dereferenced copy. Targets are shared between all their use
        sites, so recursive schemas produce cyclic structures.

    Raises:
        ResolutionError: If a pointer does not exist, a reference is still
            external, or references form a loop with no schema in between.
    """
    root = copy.deepcopy(document)
    _inline(root, root, visited=set())
    return root


def resolve_pointer(document: Any, pointer: str, ref: str | None = None) -> Any:
    """Return the value at a JSON Pointer (RFC 6901) inside *document*.

    Internal references met along the way are followed, so
    ``#/components/schemas/Alias/properties/id`` works when ``Alias`` is
    itself a ``$ref``.

    Args:
        document: The document to navigate.
        pointer: The pointer without the leading ``#`` (``""`` selects the
            whole document).
        ref: The original ``$ref`` string, used in error messages.

    Raises:
        ResolutionError: If any segment does not exist.
    """
    return _walk_pointer(document, pointer, ref or f"#{pointer}", frozenset())


# ------------------------------------------------------------------ #
# Pointer helpers
# ------------------------------------------------------------------ #


def _is_ref(node: Any) -> bool:
    return isinstance(node, dict) and isinstance(node.get("$ref"), str)


def _escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def _walk_pointer(document: Any, pointer: str, ref: str, following: frozenset[str]) -> Any:
    if pointer == "":
        return document
    if not pointer.startswith("/"):
        raise ResolutionError(f"Cannot resolve $ref '{ref}': invalid JSON pointer", location=ref)

    current: Any = document
    for raw_segment in pointer[1:].split("/"):
        segment = _unescape(raw_segment)

        if _is_ref(current):
            current = _follow_local(current, document, ref, following)

        if isinstance(current, dict):
            if segment not in current:
                raise ResolutionError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path",
                    location=ref,
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise ResolutionError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'",
                    location=ref,
                ) from exc
        else:
            raise ResolutionError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}",
                location=ref,
            )

    return current


def _follow_local(node: dict[str, Any], document: Any, ref: str, following: frozenset[str]) -> Any:
    """Follow an internal reference met while walking a pointer."""
    inner = node["$ref"]
    if not inner.startswith("#"):
        raise ResolutionError(
            f"Cannot resolve $ref '{ref}': pointer passes through external $ref '{inner}'",
            location=ref,
        )
    if inner in following:
        raise ResolutionError(f"Circular $ref chain through '{inner}'", location=ref)
    return _walk_pointer(document, unquote(inner[1:]), ref, following | {inner})


# ------------------------------------------------------------------ #
# Dereferencing
# ------------------------------------------------------------------ #


def _inline(node: Any, root: dict[str, Any], visited: set[int]) -> None:
    """Replace reference children of *node* with their targets, depth-first."""
    if id(node) in visited:
        return
    visited.add(id(node))

    children = list(node.items()) if isinstance(node, dict) else list(enumerate(node))
    for key, value in children:
        if _is_ref(value):
            value = _final_target(value, root)
            node[key] = value
        if isinstance(value, (dict, list)):
            _inline(value, root, visited)


def _final_target(node: dict[str, Any], root: dict[str, Any]) -> Any:
    chain: list[str] = []
    current: Any = node
    while _is_ref(current):
        ref = current["$ref"]
        if ref in chain:
            raise ResolutionError(
                f"Circular $ref chain: {' -> '.join([*chain, ref])}", location=ref
            )
        if not ref.startswith("#"):
            raise ResolutionError(
                f"External $ref '{ref}' was not bundled", location=ref
            )
        chain.append(ref)
        current = resolve_pointer(root, unquote(ref[1:]), ref)
    return current


# ------------------------------------------------------------------ #
# Bundling
# ------------------------------------------------------------------ #


class _Bundler:
    """Inline external references of one root document.

    Loaded documents are cached per URI for the lifetime of one bundle run.
    ``_inlined`` maps an absolute target (``uri#fragment``) to the local
    pointer of its first inlined copy. ``_ancestors`` maps the identity of
    every mapping on the current path to its pointer; YAML aliases that point
    back to one of them are rewritten into internal references.
    """

    def __init__(self, root_uri: str) -> None:
        self._root_uri = urldefrag(root_uri)[0]
        self._documents: dict[str, dict[str, Any]] = {}
        self._inlined: dict[str, str] = {}
        self._visited: set[int] = set()
        self._ancestors: dict[int, str] = {}

    async def run(self) -> dict[str, Any]:
        root = copy.deepcopy(await self._document(self._root_uri))
        await self._visit(root, self._root_uri, "")
        return root

    async def _document(self, uri: str) -> dict[str, Any]:
        if uri not in self._documents:
            self._documents[uri] = await load_document(uri)
        return self._documents[uri]

    async def _visit(self, node: Any, base_uri: str, pointer: str) -> None:
        if id(node) in self._visited:
            return
        self._visited.add(id(node))
        if isinstance(node, dict):
            self._ancestors[id(node)] = pointer

        try:
            children = list(node.items()) if isinstance(node, dict) else list(enumerate(node))
            for key, value in children:
                child_pointer = f"{pointer}/{_escape(str(key))}"
                child_base = base_uri

                if isinstance(value, dict) and id(value) in self._ancestors:
                    logger.debug("Alias cycle at #%s", child_pointer)
                    node[key] = {"$ref": f"#{self._ancestors[id(value)]}"}
                    continue

                while _is_ref(value):
                    target_uri, fragment = urldefrag(urljoin(child_base, value["$ref"]))
                    if target_uri == self._root_uri:
                        node[key] = {"$ref": f"#{fragment}"}
                        value = None
                        break

                    target = f"{target_uri}#{fragment}"
                    if target in self._inlined:
                        node[key] = {"$ref": f"#{self._inlined[target]}"}
                        value = None
                        break

                    logger.debug("Inlining %s at #%s", target, child_pointer)
                    self._inlined[target] = child_pointer
                    document = await self._document(target_uri)
                    value = copy.deepcopy(resolve_pointer(document, unquote(fragment), target))
                    node[key] = value
                    child_base = target_uri

                if isinstance(value, (dict, list)):
                    await self._visit(value, child_base, child_pointer)
        finally:
            self._ancestors.pop(id(node), None)
