"""Base class for tools distributed via GitHub Releases.

Download URL follows: github.com/{repo}/releases/download/v{version}/{asset}
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING

from install_rain.core.result import Err, Ok, Result
from install_rain.tools.api import github_latest_release_tag
from install_rain.tools.base import Tool

if TYPE_CHECKING:
    from install_rain.core.errors import UnsupportedPlatform
    from install_rain.platform.detection import Arch, Platform
    from install_rain.tools.api import LatestVersionError
    from install_rain.tools.http import HttpClient

__all__ = ["GitHubTool"]


class GitHubTool(Tool):
    """Base class for tools distributed via GitHub Releases.

    Subclasses must define:
    - spec: ToolSpec with tool metadata
    - repo: GitHub repository (e.g., "aws-cloudformation/rain")
    - asset_name(): Asset filename for platform/arch
    - archive_subdir(): Directory holding the binary inside the archive
    """

    repo: str

    def latest_version(self, http: HttpClient) -> Result[str, LatestVersionError]:
        return github_latest_release_tag(http, self.repo)

    def release_base_url(self, version: str) -> str:
        """Download prefix for one release tag."""
        return f"https://github.com/{self.repo}/releases/download/v{version}"

    def download_url(
        self, version: str, platform: Platform, arch: Arch, *, machine: str = ""
    ) -> Result[str, UnsupportedPlatform]:
        asset = self.asset_name(version, platform, arch, machine=machine)
        if isinstance(asset, Err):
            return asset
        return Ok(f"{self.release_base_url(version)}/{asset.value}")

    @abstractmethod
    def asset_name(
        self, version: str, platform: Platform, arch: Arch, *, machine: str = ""
    ) -> Result[str, UnsupportedPlatform]:
        """Get asset filename for platform/arch.

        Returns:
            Ok with the asset filename (e.g., "rain-v1.24.2_linux-amd64.zip"),
            or Err if the release has no asset for this target
        """
        ...
