"""Assemble the model handed to the template renderer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from small_openapi_codegen.generator.naming import resolve_options
from small_openapi_codegen.models import ApiSpec, GenerationOptions
from small_openapi_codegen.parser.resolver import resolve_spec

logger = logging.getLogger(__name__)


async def read_spec(
    spec_path: str | Path,
    options: Optional[GenerationOptions] = None,
) -> ApiSpec:
    """Resolve *spec_path* and combine it with the resolved options.

    Operations and property descriptors are not computed here; templates
    request them through the render helpers as they need them.

    Args:
        spec_path: Path or URL of the root OpenAPI document.
        options: Caller-supplied generation options.

    Returns:
        The :class:`~small_openapi_codegen.models.ApiSpec` for rendering.

    Raises:
        ResolutionError: If the document cannot be bundled or dereferenced.
    """
    document = await resolve_spec(spec_path)
    resolved = resolve_options(spec_path, options)
    logger.debug("Resolved %s as %s (%s)", spec_path, resolved.name, resolved.class_name)
    return ApiSpec(document=document, options=resolved)
