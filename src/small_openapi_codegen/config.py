"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for small-openapi-codegen:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.small-openapi-codegen/`` on macOS and Windows. Only the data
  directory is used (crash logs), see :func:`get_data_dir`.
* **Project config** -- an optional ``openapi-codegen.json`` in the working
  directory pinning the target language and default generation options for
  a repository.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config and defaults into a
  :class:`~small_openapi_codegen.models.CodegenConfig`.

All file writes (including generated client files) use an atomic
temp-file-then-rename strategy (:func:`atomic_write`) so that an interrupted
run never leaves a half-written file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from small_openapi_codegen.exceptions import ConfigError
from small_openapi_codegen.models import CodegenConfig, GenerationOptions

_APP_NAME = "small-openapi-codegen"
_PROJECT_CONFIG_FILENAME = "openapi-codegen.json"

ENV_LANGUAGE = "OPENAPI_CODEGEN_LANGUAGE"
ENV_NAMESPACE = "OPENAPI_CODEGEN_NAMESPACE"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/small-openapi-codegen/`` (default
    ``~/.local/share/small-openapi-codegen/``).
    On macOS/Windows: ``~/.small-openapi-codegen/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Project-local config ---


def load_project_config(directory: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``openapi-codegen.json``.

    Args:
        directory: Directory to look in. Defaults to the working directory.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_language: Optional[str] = None,
    cli_options: Optional[dict[str, Any]] = None,
    directory: Optional[Path] = None,
) -> CodegenConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_language``, non-``None`` entries of ``cli_options``)
        2. Environment variables (``OPENAPI_CODEGEN_LANGUAGE``,
           ``OPENAPI_CODEGEN_NAMESPACE``)
        3. Project config (``./openapi-codegen.json``: ``language`` plus an
           ``options`` object)
        4. Defaults

    Returns:
        The effective :class:`~small_openapi_codegen.models.CodegenConfig`.

    Raises:
        ConfigError: If the project config is malformed.
    """
    language: Optional[str] = None
    options: dict[str, Any] = {}

    # 3. Project-local config
    project = load_project_config(directory)
    if project is not None:
        language = project.get("language", language)
        project_options = project.get("options", {})
        if not isinstance(project_options, dict):
            raise ConfigError("Project config 'options' must be a JSON object")
        options.update(project_options)

    # 2. Environment variables
    env_language = os.environ.get(ENV_LANGUAGE)
    if env_language:
        language = env_language
    env_namespace = os.environ.get(ENV_NAMESPACE)
    if env_namespace:
        options["namespace"] = env_namespace

    # 1. CLI flags (highest precedence)
    if cli_language is not None:
        language = cli_language
    for key, value in (cli_options or {}).items():
        if value is not None:
            options[key] = value

    try:
        generation_options = GenerationOptions.model_validate(options)
        if language is None:
            return CodegenConfig(options=generation_options)
        return CodegenConfig(language=language, options=generation_options)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
