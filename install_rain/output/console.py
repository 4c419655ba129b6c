"""Console output abstraction.

Services write through ``ConsoleProtocol`` and never print directly. The
production implementation uses Rich; on a GitHub Actions runner it also
emits workflow commands (``::group::``, ``::warning::``, ...) so the log
viewer folds groups and annotates warnings and the failure reason.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "escape_data",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DEBUG = auto()
    DIM = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


def escape_data(message: str) -> str:
    """Escape a message for a workflow command payload."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def debug(self, message: str) -> None: ...

    def group(self, title: str) -> None:
        """Start a collapsible log group."""
        ...

    def end_group(self) -> None:
        """Close the current log group."""
        ...


class RichConsole:
    """Console implementation using Rich library.

    Args:
        workflow_commands: Emit GitHub Actions workflow commands
        debug: Show debug messages (RUNNER_DEBUG=1)
    """

    def __init__(self, *, workflow_commands: bool = False, debug: bool = False) -> None:
        # Import Rich lazily to avoid import-time dependency
        from rich.console import Console
        from rich.markup import escape

        self._console = Console(soft_wrap=True)
        self._escape = escape
        self._workflow_commands = workflow_commands
        self._debug = debug
        self._style_map = {
            Style.DEFAULT: "",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DEBUG: "dim",
            Style.DIM: "dim",
            Style.HEADER: "blue bold",
        }

    def _command(self, name: str, message: str = "") -> None:
        # Runner parses these lines verbatim: no markup, no highlighting.
        self._console.print(
            f"::{name}::{escape_data(message)}", markup=False, highlight=False
        )

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def error(self, message: str) -> None:
        if self._workflow_commands:
            self._command("error", message)
        else:
            self._console.print(f"[red bold]error:[/red bold] {self._escape(message)}")

    def warning(self, message: str) -> None:
        if self._workflow_commands:
            self._command("warning", message)
        else:
            self._console.print(f"[yellow]warning:[/yellow] {self._escape(message)}")

    def info(self, message: str) -> None:
        self.print(message)

    def debug(self, message: str) -> None:
        if self._workflow_commands:
            # The runner hides these unless step debug logging is on.
            self._command("debug", message)
        elif self._debug:
            self.print(f"debug: {message}", Style.DEBUG)

    def group(self, title: str) -> None:
        if self._workflow_commands:
            self._command("group", title)
        else:
            self._console.print(f"\n[blue bold]{self._escape(title)}[/blue bold]")

    def end_group(self) -> None:
        if self._workflow_commands:
            self._command("endgroup")


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    groups: list[str] = field(default_factory=list)
    open_groups: int = 0

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.INFO))

    def debug(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"debug: {message}", Style.DEBUG))

    def group(self, title: str) -> None:
        self.groups.append(title)
        self.open_groups += 1
        self.outputs.append(OutputRecord(title, Style.HEADER))

    def end_group(self) -> None:
        self.open_groups -= 1

    # Test helper methods

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]
