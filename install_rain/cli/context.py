from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from install_rain.core.config import ActionConfig, load_config
from install_rain.core.errors import ErrorCode
from install_rain.core.result import Err
from install_rain.output.console import ConsoleProtocol, RichConsole, Style
from install_rain.output.runner import RunnerFiles
from install_rain.platform.detection import PlatformInfo, detect


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: ActionConfig
    platform: PlatformInfo
    console: ConsoleProtocol
    outputs: RunnerFiles


def build_console() -> ConsoleProtocol:
    return RichConsole(
        workflow_commands=os.environ.get("GITHUB_ACTIONS") == "true",
        debug=os.environ.get("RUNNER_DEBUG") == "1",
    )


def build_context(
    *,
    version: str | None = None,
    temp_dir: Path | None = None,
    cache_dir: Path | None = None,
    use_cache: bool = True,
) -> CLIContext:
    console = build_console()

    config_result = load_config(
        version=version, temp_dir=temp_dir, cache_dir=cache_dir, use_cache=use_cache
    )
    if isinstance(config_result, Err):
        error = config_result.error
        console.error(error.message)
        if error.hint:
            console.print(f"hint: {error.hint}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    config = config_result.value
    return CLIContext(
        config=config,
        platform=detect(),
        console=console,
        outputs=RunnerFiles(
            console=console,
            github_output=config.github_output,
            github_path=config.github_path,
        ),
    )
