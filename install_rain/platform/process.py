"""Subprocess execution and executable lookup with Result-based errors.

Usage:
    result = run(["rain", "--version"])
    match result:
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error}")
"""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from install_rain.core.result import Err, Ok, Result

__all__ = ["ProcessError", "ProcessRunner", "SubprocessRunner", "run", "which"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never started).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command, capturing its output.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory (current directory if None).
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def which(name: str, search_path: str | None = None) -> Path | None:
    """Resolve a bare command name on the search path.

    Args:
        name: Command name (e.g. "rain")
        search_path: PATH-style string; the current PATH if None

    Returns:
        Path to the executable as found on the search path, or None
    """
    if search_path is None:
        search_path = os.environ.get("PATH")
    found = shutil.which(name, path=search_path)
    return Path(found) if found else None


class ProcessRunner(Protocol):
    """Protocol for process execution (injectable for tests)."""

    def which(self, name: str) -> Path | None: ...

    def run(self, cmd: list[str]) -> Result[str, ProcessError]: ...


class SubprocessRunner:
    """Real runner backed by shutil.which and subprocess."""

    def which(self, name: str) -> Path | None:
        return which(name)

    def run(self, cmd: list[str]) -> Result[str, ProcessError]:
        return run(cmd)
