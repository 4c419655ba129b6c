"""Typed action configuration.

The configuration is read once, at the entry point, from the step inputs
and the runner environment. Everything downstream receives the resulting
``ActionConfig`` explicitly.

Environment variables:
    INPUT_VERSION           Requested version ("1.24.2", "v1.24.2", "latest")
    RUNNER_TEMP             Scratch area for downloads and the install dir
    INSTALL_RAIN_CACHE_DIR  Cache store location (overrides the default)
    RUNNER_TOOL_CACHE       Runner-wide tool cache, used when no override
    GITHUB_OUTPUT           File receiving step outputs
    GITHUB_PATH             File receiving search path additions
    RUNNER_DEBUG            "1" to echo debug messages
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from install_rain.platform.paths import default_cache_dir, default_temp_dir

from .errors import ConfigurationError
from .result import Err, Ok, Result

__all__ = ["ActionConfig", "load_config"]

INPUT_PREFIX = "INPUT_"


def _get_str(env: Mapping[str, str], key: str) -> str | None:
    """Get a stripped, non-empty string from the environment."""
    value = env.get(key)
    if value is None:
        return None
    s = value.strip()
    return s or None


def _get_path(env: Mapping[str, str], key: str) -> Path | None:
    value = _get_str(env, key)
    return Path(value) if value else None


def get_input(env: Mapping[str, str], name: str) -> str | None:
    """Read a step input the way the runner exposes it.

    Inputs are passed as ``INPUT_<NAME>`` with spaces replaced by
    underscores and the name upper-cased.
    """
    key = INPUT_PREFIX + name.replace(" ", "_").upper()
    return _get_str(env, key)


@dataclass(frozen=True, slots=True)
class ActionConfig:
    """Configuration for one install run.

    Attributes:
        version: Requested version as given (not yet normalized)
        temp_dir: Scratch area; holds the archive, the unpack dir and the
            install destination
        cache_dir: Root of the persistent cache store
        github_output: File receiving step outputs (None outside Actions)
        github_path: File receiving search path additions (None outside Actions)
        debug: Echo debug messages
        use_cache: Restore from and save to the cache store
    """

    version: str
    temp_dir: Path
    cache_dir: Path
    github_output: Path | None = None
    github_path: Path | None = None
    debug: bool = False
    use_cache: bool = True

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str],
        *,
        version: str | None = None,
        temp_dir: Path | None = None,
        cache_dir: Path | None = None,
        use_cache: bool = True,
    ) -> Result[ActionConfig, ConfigurationError]:
        """Build the configuration from an environment mapping.

        Explicit keyword arguments (from CLI options) win over the
        environment.
        """
        requested = (version or "").strip() or get_input(env, "version")
        if not requested:
            return Err(
                ConfigurationError(
                    "Input required and not supplied: version",
                    hint="Set the 'version' input, e.g. version: latest",
                )
            )

        tool_cache = _get_path(env, "RUNNER_TOOL_CACHE")
        resolved_cache = (
            cache_dir
            or _get_path(env, "INSTALL_RAIN_CACHE_DIR")
            or (tool_cache / "install-rain" if tool_cache else None)
            or default_cache_dir()
        )

        return Ok(
            cls(
                version=requested,
                temp_dir=temp_dir or _get_path(env, "RUNNER_TEMP") or default_temp_dir(),
                cache_dir=resolved_cache,
                github_output=_get_path(env, "GITHUB_OUTPUT"),
                github_path=_get_path(env, "GITHUB_PATH"),
                debug=_get_str(env, "RUNNER_DEBUG") == "1",
                use_cache=use_cache,
            )
        )


def load_config(
    *,
    version: str | None = None,
    temp_dir: Path | None = None,
    cache_dir: Path | None = None,
    use_cache: bool = True,
) -> Result[ActionConfig, ConfigurationError]:
    """Load configuration from the process environment."""
    return ActionConfig.from_env(
        os.environ,
        version=version,
        temp_dir=temp_dir,
        cache_dir=cache_dir,
        use_cache=use_cache,
    )
