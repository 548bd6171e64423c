"""Identifier casing helpers and generation option defaults.

The casing helpers split text into words the way most JavaScript tooling
does: on any non-alphanumeric character, on lower-to-upper case changes, at
the end of an upper-case run (``XMLHttp`` is ``XML`` + ``Http``) and around
digit runs. So ``PET-ID`` becomes ``petId`` in camel case and ``pet_id`` in
snake case.

:func:`resolve_options` fills in the options that can be derived from the
spec file name.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import urlparse

from small_openapi_codegen.models import GenerationOptions

_WORDS = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")
_WHITESPACE = re.compile(r"\s")


def words(text: str) -> list[str]:
    """Split *text* into words."""
    return _WORDS.findall(str(text))


def upper_first(text: str) -> str:
    """Upper-case the first character of *text*, leaving the rest untouched."""
    return text[:1].upper() + text[1:]


def camel_case(text: str) -> str:
    """Return *text* in camel case: ``"pet store-client"`` -> ``"petStoreClient"``."""
    parts = [word.lower() for word in words(text)]
    if not parts:
        return ""
    return parts[0] + "".join(upper_first(part) for part in parts[1:])


def snake_case(text: str) -> str:
    """Return *text* in snake case: ``"petStoreClient"`` -> ``"pet_store_client"``."""
    return "_".join(word.lower() for word in words(text))


def spec_stem(spec_path: str | Path) -> str:
    """Return the file name of *spec_path* without its extension.

    URLs are reduced to the last segment of their path first.
    """
    text = str(spec_path)
    parsed = urlparse(text)
    if parsed.scheme in ("http", "https", "file"):
        return PurePosixPath(parsed.path).stem
    return Path(text).stem


def resolve_options(
    spec_path: str | Path,
    options: Optional[GenerationOptions] = None,
) -> GenerationOptions:
    """Fill in the generation options derived from *spec_path*.

    Only options that are absent are set; *options* itself is never modified.

    * ``name`` -- the spec file name without extension plus ``-client``.
    * ``class_name`` -- ``name`` in upper camel case with whitespace removed.

    Args:
        spec_path: Path or URL of the root OpenAPI document.
        options: Caller-supplied options.

    Returns:
        A new :class:`~small_openapi_codegen.models.GenerationOptions`.

    Example::

        options = resolve_options("specs/sample-serv.yaml")
        options.name        # "sample-serv-client"
        options.class_name  # "SampleServClient"
    """
    options = options if options is not None else GenerationOptions()

    name = options.name or f"{spec_stem(spec_path)}-client"
    class_name = options.class_name or _WHITESPACE.sub("", upper_first(camel_case(name)))

    return options.model_copy(update={"name": name, "class_name": class_name})
