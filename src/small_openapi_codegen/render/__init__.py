"""Template rendering -- turn an assembled model into output files.

* :mod:`~small_openapi_codegen.render.helpers` -- :class:`TemplateHelpers`,
  the per-render set of functions templates call.
* :mod:`~small_openapi_codegen.render.engine` -- :func:`render`, which runs a
  language model's Jinja2 templates.
"""

from small_openapi_codegen.render.engine import render
from small_openapi_codegen.render.helpers import TemplateHelpers

__all__ = ["render", "TemplateHelpers"]
