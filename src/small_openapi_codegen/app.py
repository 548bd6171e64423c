"""Typer application and CLI entry point for small-openapi-codegen.

The command reads one OpenAPI document and writes a generated client into an
output directory::

    small-openapi-codegen ./petstore.yaml --output ./petstore-client

It runs the pipeline in order: configuration resolution, validation (which
aborts generation with exit code 8 when it reports errors), model assembly,
rendering and atomic file writes. Every written path is printed to stdout;
all diagnostics go to stderr.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under the
data directory.

See Also:
    :mod:`small_openapi_codegen.config`: Option precedence resolution.
    :mod:`small_openapi_codegen.output`: Output manager installed per run.
"""

from __future__ import annotations

import asyncio
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from small_openapi_codegen import __version__
from small_openapi_codegen.exceptions import (
    CodegenError,
    InvalidUsageError,
    ValidationFailedError,
)
from small_openapi_codegen.exit_codes import EXIT_GENERIC_FAILURE
from small_openapi_codegen.models import Severity


app = typer.Typer(
    name="small-openapi-codegen",
    help="Generate typed API clients from OpenAPI 3.0/3.1 specs.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"small-openapi-codegen {__version__}")
        raise typer.Exit()


@app.command()
def generate_command(
    spec: str = typer.Argument(..., help="OpenAPI spec file path or URL."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Directory the client is written to."
    ),
    language: Optional[str] = typer.Option(
        None, "--language", "-l", help="Target language (default: ts)."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", help="Package name (default: <spec file name>-client)."
    ),
    class_name: Optional[str] = typer.Option(
        None, "--class-name", help="Client class name (default: derived from --name)."
    ),
    namespace: Optional[str] = typer.Option(
        None, "--namespace", help='Package namespace, e.g. "@acme".'
    ),
    snake: bool = typer.Option(
        False, "--snake", help="Use snake_case identifiers instead of camelCase."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Generate a client library from an OpenAPI spec.

    Args:
        spec: Path or URL of the root OpenAPI document.
        output: Output directory. Required.
        language: Target language name; overrides ``OPENAPI_CODEGEN_LANGUAGE``
            and the project config.
        name: Package name override.
        class_name: Client class name override.
        namespace: Package namespace; overrides ``OPENAPI_CODEGEN_NAMESPACE``
            and the project config.
        snake: Emit snake_case identifiers.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
        version: If ``True``, print the version string and exit.

    Raises:
        typer.Exit: With the ``exit_code`` of any
            :class:`~small_openapi_codegen.exceptions.CodegenError` raised
            along the way (2 for usage errors, 7 for unreadable specs, 8 for
            validation failures).
    """
    from small_openapi_codegen.output import OutputManager, error, set_output

    manager = OutputManager(no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(manager)
    manager.configure_logging()

    try:
        _generate(
            spec,
            output,
            language,
            {
                "name": name,
                "class_name": class_name,
                "namespace": namespace,
                "snake": True if snake else None,
            },
        )
    except CodegenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _generate(
    spec: str,
    output: Optional[Path],
    language: Optional[str],
    cli_options: dict[str, Any],
) -> None:
    """Run the generation pipeline for one spec.

    Raises:
        InvalidUsageError: If *output* is missing or the language is unknown.
        ValidationFailedError: If validation reports any error.
        CodegenError: For configuration, resolution and projection failures.
    """
    from small_openapi_codegen.config import atomic_write, resolve_config
    from small_openapi_codegen.generator import read_spec
    from small_openapi_codegen.languages import get_language
    from small_openapi_codegen.output import debug, info, print_data, report, success, warning
    from small_openapi_codegen.parser import validate_spec
    from small_openapi_codegen.render import render

    if output is None:
        raise InvalidUsageError("Missing output path")

    config = resolve_config(cli_language=language, cli_options=cli_options)
    language_model = get_language(config.language)
    info(f"Generating {config.language} client from {spec}")

    issues = asyncio.run(validate_spec(spec))
    debug(f"Validation reported {len(issues)} issue(s)")
    errors = [issue for issue in issues if issue.severity is Severity.ERROR]
    for issue in issues:
        if issue.severity is Severity.WARNING:
            warning(f"{issue.path}: {issue.message}")
    if errors:
        report("OpenAPI specification validation failed:")
        for issue in errors:
            report(f"- {issue.path}: {issue.message}")
        raise ValidationFailedError(errors)

    api_spec = asyncio.run(read_spec(spec, config.options))
    files = render(language_model, api_spec)

    output_dir = output.resolve()
    for rendered in files:
        target = output_dir / rendered.filename
        atomic_write(target, rendered.output)
        print_data(str(target))

    success(f"Generated {len(files)} file(s) in {output_dir}")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from small_openapi_codegen.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(exc)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``small-openapi-codegen`` console script.

    Unhandled :class:`~small_openapi_codegen.exceptions.CodegenError`
    instances cause a clean exit with the error's ``exit_code``. All other
    exceptions produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from small_openapi_codegen.output import error

        if isinstance(exc, CodegenError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
