"""Error codes and typed pipeline errors.

Each failure the installer can hit is a small frozen dataclass. They are
returned inside ``Err`` and turned into a message plus an exit code at the
CLI edge. ``CacheError`` is the only kind the pipeline tolerates.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

__all__ = [
    "ErrorCode",
    "ConfigurationError",
    "UnsupportedPlatform",
    "UnexpectedStatus",
    "MalformedResponse",
    "DownloadFailed",
    "ExtractFailed",
    "BinaryNotFound",
    "VerificationFailed",
    "CacheError",
    "error_exit_code",
]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Success
    - 1: Configuration error (missing/invalid input)
    - 2: Environment error (unsupported platform, binary not on PATH)
    - 3: Install error (archive could not be extracted or moved)
    - 4: Network error (download or release lookup failed)
    - 5: Verification error (self-check exited non-zero)
    """

    OK = 0
    CONFIG_ERROR = 1
    ENV_ERROR = 2
    INSTALL_ERROR = 3
    NETWORK_ERROR = 4
    VERIFY_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK


@dataclass(frozen=True, slots=True)
class ConfigurationError:
    """Required input missing or invalid."""

    message: str
    hint: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class UnsupportedPlatform:
    """No release asset exists for this OS/architecture pair.

    ``arch`` is None when the OS itself is not recognized.
    """

    platform: str
    arch: str | None = None

    @property
    def message(self) -> str:
        if self.arch is None:
            return "Unsupported OS (platform)"
        return f"Unsupported {self.platform} architecture ({self.arch})"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class UnexpectedStatus:
    """Latest-release lookup did not answer with a redirect."""

    url: str
    status: int
    reason: str

    @property
    def message(self) -> str:
        return f"Failed to fetch latest version: {self.status} {self.reason}"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class MalformedResponse:
    """Redirect target could not be parsed into a release tag."""

    location: str

    @property
    def message(self) -> str:
        return f"Invalid redirect URL: {self.location}"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class DownloadFailed:
    url: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class ExtractFailed:
    archive: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.archive}"


@dataclass(frozen=True, slots=True)
class BinaryNotFound:
    name: str

    @property
    def message(self) -> str:
        return f"{self.name} binary file not found in $PATH"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class VerificationFailed:
    command: tuple[str, ...]
    returncode: int
    stderr: str = ""

    @property
    def message(self) -> str:
        return f"{' '.join(self.command)} failed (exit {self.returncode})"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class CacheError:
    """Cache restore or save failed. Never fatal."""

    key: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (key: {self.key})"


def error_exit_code(error: object) -> int:
    """Map a pipeline error to a process exit code."""
    from install_rain.tools.http import HttpError

    match error:
        case ConfigurationError():
            return int(ErrorCode.CONFIG_ERROR)
        case UnsupportedPlatform() | BinaryNotFound():
            return int(ErrorCode.ENV_ERROR)
        case ExtractFailed():
            return int(ErrorCode.INSTALL_ERROR)
        case UnexpectedStatus() | MalformedResponse() | DownloadFailed() | HttpError():
            return int(ErrorCode.NETWORK_ERROR)
        case VerificationFailed():
            return int(ErrorCode.VERIFY_ERROR)
    return int(ErrorCode.INSTALL_ERROR)
