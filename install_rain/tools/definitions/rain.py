"""Rain tool definition.

Rain is a CLI for working with AWS CloudFormation templates and stacks.

GitHub: https://github.com/aws-cloudformation/rain
"""

from __future__ import annotations

from install_rain.core.errors import UnsupportedPlatform
from install_rain.core.result import Err, Ok, Result
from install_rain.platform.detection import Arch, Platform, arch_label
from install_rain.tools.base import ToolSpec
from install_rain.tools.github import GitHubTool

__all__ = ["RainTool"]


# (Platform, Arch) -> release asset suffix
_ASSET_SUFFIXES: dict[tuple[Platform, Arch], str] = {
    (Platform.LINUX, Arch.X64): "linux-amd64",
    (Platform.LINUX, Arch.ARM64): "linux-arm64",
    (Platform.LINUX, Arch.ARM): "linux-arm",
    (Platform.LINUX, Arch.X32): "linux-i386",
    (Platform.MACOS, Arch.X64): "darwin-amd64",
    (Platform.MACOS, Arch.ARM64): "darwin-arm64",
    (Platform.WINDOWS, Arch.X64): "windows-amd64",
    (Platform.WINDOWS, Arch.X32): "windows-i386",
}

# Arch -> name used in the archive's inner directory.
# Anything else is used verbatim (the raw machine name when known).
_SUBDIR_ARCH: dict[Arch, str] = {
    Arch.X64: "amd64",
    Arch.X32: "i386",
    Arch.ARM64: "arm64",
    Arch.ARM: "arm",
}


class RainTool(GitHubTool):
    """Rain - zip releases with the binary in a versioned subdirectory.

    Archive layout: rain-v{version}_{os}-{arch}/rain[.exe]
    """

    spec = ToolSpec(id="rain", name="Rain")
    repo = "aws-cloudformation/rain"

    def asset_name(
        self, version: str, platform: Platform, arch: Arch, *, machine: str = ""
    ) -> Result[str, UnsupportedPlatform]:
        suffix = _ASSET_SUFFIXES.get((platform, arch))
        if suffix is None:
            if platform == Platform.UNKNOWN:
                return Err(UnsupportedPlatform(platform=str(platform)))
            return Err(
                UnsupportedPlatform(
                    platform=platform.display_name, arch=arch_label(arch, machine)
                )
            )
        return Ok(f"{self.spec.id}-v{version}_{suffix}.zip")

    def archive_subdir(
        self, version: str, platform: Platform, arch: Arch, *, machine: str = ""
    ) -> str:
        arch_name = _SUBDIR_ARCH.get(arch) or arch_label(arch, machine)
        return f"{self.spec.id}-v{version}_{platform}-{arch_name}"
