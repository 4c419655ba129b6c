"""Base definitions for installable tools.

This module defines the core abstractions:
- ToolSpec: Immutable tool metadata
- Tool: Abstract base class mapping (platform, arch, version) to a release
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from install_rain.core.errors import UnsupportedPlatform
    from install_rain.core.result import Result
    from install_rain.platform.detection import Arch, Platform
    from install_rain.tools.api import LatestVersionError
    from install_rain.tools.http import HttpClient

__all__ = [
    "ToolSpec",
    "Tool",
]


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Immutable tool metadata.

    Attributes:
        id: Unique identifier, also the binary name (e.g., "rain")
        name: Human-readable name (e.g., "Rain")
        version_args: Arguments for the post-install self-check
    """

    id: str
    name: str
    version_args: tuple[str, ...] = ("--version",)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Tool id cannot be empty")
        if not self.name:
            raise ValueError("Tool name cannot be empty")
        if not self.id.isidentifier() or not self.id.islower():
            raise ValueError(f"Tool id must be lowercase identifier: {self.id!r}")


class Tool(ABC):
    """Abstract base class for installable tools.

    Subclasses must define:
    - spec: ToolSpec with tool metadata
    - latest_version(): Resolve the newest release
    - download_url(): Archive URL for version/platform
    - archive_subdir(): Directory holding the binary inside the archive
    """

    spec: ToolSpec

    @abstractmethod
    def latest_version(self, http: HttpClient) -> Result[str, LatestVersionError]:
        """Resolve the latest release.

        Returns:
            Ok with version string (without 'v' prefix), or Err
        """
        ...

    @abstractmethod
    def download_url(
        self, version: str, platform: Platform, arch: Arch, *, machine: str = ""
    ) -> Result[str, UnsupportedPlatform]:
        """Get the archive URL, or Err if no asset exists for the target.

        ``machine`` is the raw machine name, used to label architectures
        that have no ``Arch`` member.
        """
        ...

    @abstractmethod
    def archive_subdir(
        self, version: str, platform: Platform, arch: Arch, *, machine: str = ""
    ) -> str:
        """Directory inside the extracted archive that holds the binary."""
        ...

    def binary_name(self, platform: Platform) -> str:
        """Binary file name: {id}.exe on Windows, {id} elsewhere."""
        return platform.exe_name(self.spec.id)

    def install_dir_name(self, version: str) -> str:
        """Install destination directory name, namespaced by version."""
        return f"{self.spec.id}-{version}"

    def cache_key(self, version: str, platform: Platform, arch: Arch) -> str:
        """Key identifying one installed-binary snapshot in the cache."""
        return f"{self.spec.id}-cache-{version}-{platform}-{arch}"
