"""Step outputs and search path registration through runner files.

GitHub Actions collects step outputs from the file named by GITHUB_OUTPUT
and search path additions from the file named by GITHUB_PATH. Outside a
runner both are None: outputs fall back to the legacy ``::set-output``
command and the path is only added to the current process.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from pathlib import Path

from install_rain.output.console import ConsoleProtocol, escape_data
from install_rain.platform.paths import prepend_search_path

__all__ = ["RunnerFiles"]


def _key_value_message(name: str, value: str) -> str:
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in name or delimiter in value:
        raise ValueError(f"Unexpected input: value contains delimiter {delimiter}")
    return f"{name}<<{delimiter}{os.linesep}{value}{os.linesep}{delimiter}"


def _append_line(path: Path, line: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(f"{line}{os.linesep}")


@dataclass(frozen=True, slots=True)
class RunnerFiles:
    """Writes outputs and PATH entries for later steps.

    Attributes:
        console: Used for the legacy command fallback
        github_output: GITHUB_OUTPUT file, or None
        github_path: GITHUB_PATH file, or None
    """

    console: ConsoleProtocol
    github_output: Path | None = None
    github_path: Path | None = None

    def set_output(self, name: str, value: str) -> None:
        """Publish a step output."""
        if self.github_output is not None:
            _append_line(self.github_output, _key_value_message(name, value))
            return
        self.console.print(f"::set-output name={name}::{escape_data(value)}")

    def add_path(self, directory: Path) -> None:
        """Prepend ``directory`` to PATH for this process and later steps."""
        if self.github_path is not None:
            _append_line(self.github_path, str(directory))
        prepend_search_path(directory)
