"""Platform and architecture detection.

This module provides enums and functions for detecting the operating system
and CPU architecture of the runner. Identifiers follow the tokens used in
release asset names and cache keys (``linux``, ``darwin``, ``windows`` and
``x32``, ``x64``, ``arm``, ``arm64``). Detection is cached.
"""

from __future__ import annotations

import os as _os
import platform as _platform
import sys as _sys
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

__all__ = [
    "Platform",
    "Arch",
    "PlatformInfo",
    "detect",
    "arch_label",
    "detect_arch",
    "detect_machine",
    "detect_platform",
    "is_windows",
]


class Platform(Enum):
    """Operating system platform. Values are the OS identifiers."""

    LINUX = "linux"
    MACOS = "darwin"
    WINDOWS = "windows"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        """Human name used in messages."""
        return {
            Platform.LINUX: "linux",
            Platform.MACOS: "macOS",
            Platform.WINDOWS: "Windows",
            Platform.UNKNOWN: "unknown",
        }[self]

    @property
    def is_unix(self) -> bool:
        """Check if this is a Unix-like platform (Linux or macOS)."""
        return self in (Platform.LINUX, Platform.MACOS)

    @property
    def exe_suffix(self) -> str:
        return ".exe" if self == Platform.WINDOWS else ""

    def exe_name(self, name: str) -> str:
        """Get executable name with platform-appropriate suffix.

        Example: exe_name("rain") -> "rain.exe" on Windows, "rain" elsewhere.
        """
        return f"{name}{self.exe_suffix}"


class Arch(Enum):
    """CPU architecture. Values are the architecture identifiers."""

    X32 = "x32"
    X64 = "x64"
    ARM = "arm"
    ARM64 = "arm64"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class PlatformInfo:
    """The (OS, architecture) pair a run targets.

    ``machine`` is the raw machine name, kept to label architectures
    that have no ``Arch`` member.

    Use the `detect()` function to get the runner's own pair.
    """

    platform: Platform
    arch: Arch
    machine: str = ""

    def __str__(self) -> str:
        return f"{self.platform}-{self.arch}"


_MACHINE_ARCH: dict[str, Arch] = {
    "x86_64": Arch.X64,
    "amd64": Arch.X64,
    "x64": Arch.X64,
    "aarch64": Arch.ARM64,
    "arm64": Arch.ARM64,
    "armv6l": Arch.ARM,
    "armv7l": Arch.ARM,
    "armv8l": Arch.ARM,
    "arm": Arch.ARM,
    "i386": Arch.X32,
    "i486": Arch.X32,
    "i586": Arch.X32,
    "i686": Arch.X32,
    "x86": Arch.X32,
}


def arch_from_machine(machine: str) -> Arch:
    """Map a machine string (uname / PROCESSOR_ARCHITECTURE) to an Arch."""
    return _MACHINE_ARCH.get(machine.strip().lower(), Arch.UNKNOWN)


def arch_label(arch: Arch, machine: str = "") -> str:
    """Identifier of ``arch``, or the raw machine name if it has none."""
    if arch == Arch.UNKNOWN and machine:
        return machine
    return str(arch)


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """Detect the current operating system (cached)."""
    # NOTE: avoid platform.system() on Windows, it may query WMI.
    system = _sys.platform.lower()
    if system.startswith("linux"):
        return Platform.LINUX
    if system.startswith("darwin"):
        return Platform.MACOS
    if system.startswith(("win32", "cygwin", "msys")):
        return Platform.WINDOWS
    return Platform.UNKNOWN


@lru_cache(maxsize=1)
def detect_machine() -> str:
    """Raw machine name, lower-cased (e.g. "x86_64", "s390x"; cached)."""
    if detect_platform() == Platform.WINDOWS:
        machine = (
            _os.environ.get("PROCESSOR_ARCHITEW6432")
            or _os.environ.get("PROCESSOR_ARCHITECTURE")
            or ""
        )
    else:
        machine = _platform.machine()
    return machine.strip().lower()


@lru_cache(maxsize=1)
def detect_arch() -> Arch:
    """Detect the current CPU architecture (cached)."""
    return arch_from_machine(detect_machine())


@lru_cache(maxsize=1)
def detect() -> PlatformInfo:
    """Detect the runner's platform and architecture (cached)."""
    return PlatformInfo(platform=detect_platform(), arch=detect_arch(), machine=detect_machine())


def is_windows() -> bool:
    """Check if running on Windows."""
    return detect_platform() == Platform.WINDOWS
