"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for rootly-tui:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.rootly-tui/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Config file** -- a single :class:`~rootly_tui.models.Config` JSON file
  holding the API key, endpoint, page size, request and cache settings.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, and the config file into the effective settings.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) so a crash never leaves a half-written config.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from rootly_tui.exceptions import ConfigError
from rootly_tui.models import Config

_APP_NAME = "rootly-tui"
_CONFIG_FILENAME = "config.json"

ENV_API_KEY = "ROOTLY_API_KEY"
ENV_ENDPOINT = "ROOTLY_ENDPOINT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory layout (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/rootly-tui/`` (default ``~/.config/rootly-tui/``).
    On macOS/Windows: ``~/.rootly-tui/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True, mode=0o700)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory path.

    Unlike the other directories this one is *not* created here: the
    durable cache creates it when it opens, and a failure to do so must
    degrade to running without a cache rather than raising.

    On Linux/BSD: ``$XDG_CACHE_HOME/rootly-tui/`` (default ``~/.cache/rootly-tui/``).
    On macOS/Windows: ``~/.rootly-tui/cache/``.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    return _fallback_base_dir() / "cache"


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/rootly-tui/`` (default ``~/.local/share/rootly-tui/``).
    On macOS/Windows: ``~/.rootly-tui/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. The file holds the
    API key, so it is created with owner-only permissions.
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
        os.chmod(tmp_path, 0o600)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Config file ---


def config_path() -> Path:
    """Path to the config file."""
    return get_config_dir() / _CONFIG_FILENAME


def config_exists() -> bool:
    """Return ``True`` if a config file has been written."""
    return config_path().is_file()


def load_config() -> Config:
    """Load the configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~rootly_tui.models.Config`. If the file
        does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = config_path()
    if not path.is_file():
        return Config()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: Config) -> None:
    """Persist the configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_config(
    cli_api_key: Optional[str] = None,
    cli_endpoint: Optional[str] = None,
) -> Config:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_api_key``, ``cli_endpoint``)
        2. Environment variables (``ROOTLY_API_KEY``, ``ROOTLY_ENDPOINT``)
        3. Config file (``~/.config/rootly-tui/config.json``)
        4. Defaults

    Returns:
        The effective :class:`~rootly_tui.models.Config`.
    """
    config = load_config()

    env_key = os.environ.get(ENV_API_KEY)
    env_endpoint = os.environ.get(ENV_ENDPOINT)
    updates: dict[str, str] = {}
    if env_key:
        updates["api_key"] = env_key
    if env_endpoint:
        updates["endpoint"] = env_endpoint
    if cli_api_key is not None:
        updates["api_key"] = cli_api_key
    if cli_endpoint is not None:
        updates["endpoint"] = cli_endpoint

    if updates:
        config = config.model_copy(update=updates)
    return config
