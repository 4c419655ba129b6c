"""Platform-aware path utilities.

Default locations for the scratch area and the persistent cache store
when the runner does not provide them (local runs, other CI systems).
"""

from __future__ import annotations

import os
import tempfile
from functools import lru_cache
from pathlib import Path

from .detection import is_windows

__all__ = [
    "home",
    "default_temp_dir",
    "default_cache_dir",
    "prepend_search_path",
]

# Application name used for directory naming
APP_NAME = "install-rain"


@lru_cache(maxsize=1)
def home() -> Path:
    """Get user's home directory.

    Uses USERPROFILE on Windows, HOME on Unix.
    Falls back to Path.home() which handles edge cases.
    """
    if is_windows():
        userprofile = os.environ.get("USERPROFILE")
        if userprofile:
            return Path(userprofile)
    else:
        home_env = os.environ.get("HOME")
        if home_env:
            return Path(home_env)

    return Path.home()


def default_temp_dir() -> Path:
    """System temp directory (the equivalent of os.tmpdir())."""
    return Path(tempfile.gettempdir())


@lru_cache(maxsize=1)
def default_cache_dir() -> Path:
    """User-level cache directory for the cache store.

    Location: ~/.cache/install-rain/ (Linux/macOS) or
    %LOCALAPPDATA%/install-rain/Cache (Windows)
    """
    if is_windows():
        local_app_data = os.environ.get("LOCALAPPDATA")
        if local_app_data:
            return Path(local_app_data) / APP_NAME / "Cache"
        return home() / "AppData" / "Local" / APP_NAME / "Cache"

    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    if xdg_cache:
        return Path(xdg_cache) / APP_NAME
    return home() / ".cache" / APP_NAME


def prepend_search_path(directory: Path, env: dict[str, str] | None = None) -> str:
    """Put ``directory`` first on PATH in ``env`` (defaults to os.environ).

    Returns:
        The new PATH value.
    """
    target = os.environ if env is None else env
    current = target.get("PATH", "")
    entry = str(directory)
    parts = [p for p in current.split(os.pathsep) if p and p != entry]
    value = os.pathsep.join([entry, *parts])
    target["PATH"] = value
    return value

