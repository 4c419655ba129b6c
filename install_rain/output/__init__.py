"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .runner import RunnerFiles

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "RunnerFiles",
    "Style",
]
