"""Shared test fixtures for small-openapi-codegen.

Provides reusable fixtures for locating OpenAPI fixtures, writing ad-hoc spec
files, isolating configuration from the environment, and managing output
state. These fixtures are automatically discovered by pytest and available
to all test modules without explicit imports.
"""

from __future__ import annotations

import asyncio
import textwrap
from pathlib import Path
from typing import Any, Callable

import pytest

from small_openapi_codegen.output import reset_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stderr at creation time.
    When Typer's CliRunner redirects those streams during a test and the
    test finishes, the cached references become stale ("I/O operation on
    closed file"). Resetting forces a fresh manager on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the developer's environment and data directory out of tests."""
    monkeypatch.delenv("OPENAPI_CODEGEN_LANGUAGE", raising=False)
    monkeypatch.delenv("OPENAPI_CODEGEN_NAMESPACE", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))


# ---------------------------------------------------------------------------
# Spec fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_serv_path() -> Path:
    """Path of the multi-operation sample spec."""
    return FIXTURES_DIR / "sample-serv.yaml"


@pytest.fixture
def sample_serv_document(sample_serv_path: Path) -> dict[str, Any]:
    """The sample spec, bundled and dereferenced."""
    from small_openapi_codegen.parser.resolver import resolve_spec

    return asyncio.run(resolve_spec(sample_serv_path))


@pytest.fixture
def write_spec(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper writing dedented spec text into ``tmp_path``.

    Example::

        path = write_spec("api.yaml", '''
            openapi: 3.0.3
            ...
        ''')
    """

    def _write(filename: str, content: str) -> Path:
        path = tmp_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
        return path

    return _write
