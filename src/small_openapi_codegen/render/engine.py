"""Render a language model's templates against an assembled :class:`ApiSpec`.

Each call to :func:`render` builds its own Jinja2 environment:

1. The language's ``prepare_model`` hook derives the final model.
2. A :class:`~jinja2.Environment` is created over the language's template
   directory. Partials are additionally addressable by their partial name.
3. A fresh :class:`~small_openapi_codegen.render.helpers.TemplateHelpers`
   and the language's filters are installed on that environment.
4. Every non-partial template is rendered with
   :meth:`~small_openapi_codegen.models.ApiSpec.template_context`, then
   passed through the language's ``prettify`` hook when it has one.

Nothing is written to disk here; the caller decides where files go.
"""

from __future__ import annotations

import logging
from typing import Optional

from jinja2 import ChoiceLoader, DictLoader, Environment, FileSystemLoader

from small_openapi_codegen.models import (
    ApiSpec,
    GenerationOptions,
    LanguageModel,
    RenderedFile,
)
from small_openapi_codegen.render.helpers import TemplateHelpers

logger = logging.getLogger(__name__)


def render(
    language: LanguageModel,
    spec: ApiSpec,
    options: Optional[GenerationOptions] = None,
) -> list[RenderedFile]:
    """Render every output template of *language* for *spec*.

    Args:
        language: The target language model.
        spec: The assembled model, as returned by
            :func:`~small_openapi_codegen.generator.read_spec`. It is not
            modified.
        options: Options for this render call. Defaults to ``spec.options``
            after ``prepare_model`` has run.

    Returns:
        One :class:`~small_openapi_codegen.models.RenderedFile` per
        non-partial template, in template order.

    Example::

        from small_openapi_codegen.languages import get_language

        files = render(get_language("ts"), spec)
        for f in files:
            print(f.filename, len(f.output))
    """
    if language.prepare_model is not None:
        spec = language.prepare_model(spec)
    options = options if options is not None else spec.options

    env = _create_jinja_env(language)
    env.globals.update(TemplateHelpers(options, spec.schemas).as_globals())
    env.filters.update(language.filters)

    context = spec.template_context()
    prettify_config = options.model_dump(by_alias=True)

    outputs: list[RenderedFile] = []
    for template in language.templates:
        if template.partial or not template.filename:
            continue

        logger.debug("Rendering %s -> %s", template.source, template.filename)
        output = env.get_template(template.source).render(context)
        if language.prettify is not None:
            output = language.prettify(prettify_config, template.filename, output) or output
        outputs.append(RenderedFile(filename=template.filename, output=output))

    return outputs


def _create_jinja_env(language: LanguageModel) -> Environment:
    """Create the Jinja2 environment for one render call.

    Autoescape is off because the output is source code, not HTML. Block
    trimming and lstrip are enabled for cleaner template authoring.
    """
    template_dir = language.template_dir
    partials = {
        template.partial: (template_dir / template.source).read_text(encoding="utf-8")
        for template in language.templates
        if template.partial
    }
    return Environment(
        loader=ChoiceLoader([FileSystemLoader(str(template_dir)), DictLoader(partials)]),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
