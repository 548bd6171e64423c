"""Registry of target language models.

Languages are looked up by name in :data:`LANGUAGES`. Names are never used to
build filesystem paths, so an unknown name cannot load templates from
elsewhere.
"""

from __future__ import annotations

from small_openapi_codegen.exceptions import InvalidUsageError
from small_openapi_codegen.languages import typescript
from small_openapi_codegen.models import LanguageModel

LANGUAGES: dict[str, LanguageModel] = {
    "ts": typescript.MODEL,
}


def get_language(name: str) -> LanguageModel:
    """Return the language model registered as *name*.

    Raises:
        InvalidUsageError: If no language has that name.
    """
    try:
        return LANGUAGES[name]
    except KeyError:
        raise InvalidUsageError(
            f"Language not supported: {name!r} (available: {', '.join(sorted(LANGUAGES))})"
        ) from None
