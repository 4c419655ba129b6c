from __future__ import annotations

from pathlib import Path
from typing import TypeVar

import typer

from install_rain.cli.context import CLIContext, build_context
from install_rain.core.errors import error_exit_code
from install_rain.core.result import Err, Ok, Result
from install_rain.output.console import Style
from install_rain.platform.process import SubprocessRunner
from install_rain.services.install import InstallService
from install_rain.tools.cache import ToolCache
from install_rain.tools.http import RealHttpClient

T = TypeVar("T")
E = TypeVar("E")


app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def build_service(ctx: CLIContext) -> InstallService:
    return InstallService(
        config=ctx.config,
        platform=ctx.platform,
        console=ctx.console,
        http=RealHttpClient(),
        cache=ToolCache(ctx.config.cache_dir),
        runner=SubprocessRunner(),
        outputs=ctx.outputs,
    )


def exit_on_error(result: Result[T, E], ctx: CLIContext) -> None:
    """Report an Err as the step failure and exit with its code."""
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        raise typer.Exit(code=error_exit_code(error))


@app.command()
def install(
    version: str | None = typer.Option(
        None,
        "--version",
        help='Rain version, e.g. "1.24.2", "v1.24.2" or "latest". '
        "Defaults to the INPUT_VERSION step input.",
    ),
    cache_dir: Path | None = typer.Option(
        None,
        "--cache-dir",
        help="Cache store location (overrides INSTALL_RAIN_CACHE_DIR).",
    ),
    temp_dir: Path | None = typer.Option(
        None,
        "--temp-dir",
        help="Scratch area for the download and install directory (overrides RUNNER_TEMP).",
    ),
    cache: bool = typer.Option(
        True,
        "--cache/--no-cache",
        help="Use the local cache store. Disable when a separate cache step "
        "restores the install directory.",
    ),
) -> None:
    """Install rain and put it on PATH for later steps."""
    ctx = build_context(
        version=version, temp_dir=temp_dir, cache_dir=cache_dir, use_cache=cache
    )
    exit_on_error(build_service(ctx).run(), ctx)


@app.command()
def resolve(
    version: str | None = typer.Option(
        None,
        "--version",
        help='Rain version, e.g. "1.24.2", "v1.24.2" or "latest". '
        "Defaults to the INPUT_VERSION step input.",
    ),
    temp_dir: Path | None = typer.Option(
        None,
        "--temp-dir",
        help="Scratch area for the download and install directory (overrides RUNNER_TEMP).",
    ),
) -> None:
    """Resolve the version; output it with the cache key and install directory."""
    ctx = build_context(version=version, temp_dir=temp_dir)
    service = build_service(ctx)
    match service.plan():
        case Ok(plan):
            service.publish_plan(plan)
        case failed:
            exit_on_error(failed, ctx)


def main() -> None:
    app()
