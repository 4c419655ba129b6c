"""Install pipeline: resolve version, install, verify.

Each step returns a Result and the pipeline stops at the first Err. The
two cache operations are the exception: a failed restore counts as a miss
and a failed save is only reported, so caching problems never fail a run.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from install_rain.core.errors import (
    BinaryNotFound,
    DownloadFailed,
    ExtractFailed,
    UnsupportedPlatform,
    VerificationFailed,
)
from install_rain.core.result import Err, Ok, Result
from install_rain.platform.files import remove_path
from install_rain.tools.api import LatestVersionError
from install_rain.tools.definitions.rain import RainTool
from install_rain.tools.download import Downloader
from install_rain.tools.installer import Installer
from install_rain.tools.version import is_latest, normalize_version

if TYPE_CHECKING:
    from install_rain.core.config import ActionConfig
    from install_rain.output.console import ConsoleProtocol
    from install_rain.output.runner import RunnerFiles
    from install_rain.platform.detection import PlatformInfo
    from install_rain.platform.process import ProcessRunner
    from install_rain.tools.base import Tool
    from install_rain.tools.cache import ToolCache
    from install_rain.tools.http import HttpClient

__all__ = ["InstallService", "InstallPaths", "InstallPlan"]

InstallStepError = UnsupportedPlatform | DownloadFailed | ExtractFailed
VerifyError = BinaryNotFound | VerificationFailed
PipelineError = InstallStepError | VerifyError | LatestVersionError
PlanError = LatestVersionError | UnsupportedPlatform


@dataclass(frozen=True, slots=True)
class InstallPaths:
    """Locations derived for one version.

    Attributes:
        install_dir: Install destination, also the cache payload
        unpack_dir: Scratch directory the archive is extracted to
        cache_key: Key of the install destination in the cache
    """

    install_dir: Path
    unpack_dir: Path
    cache_key: str


@dataclass(frozen=True, slots=True)
class InstallPlan:
    """A resolved version and where it will be installed.

    Attributes:
        version: Normalized version to install
        url: Release archive URL for the target platform
        paths: Derived locations and cache key
    """

    version: str
    url: str
    paths: InstallPaths


class InstallService:
    """Installs one tool release onto the runner."""

    def __init__(
        self,
        *,
        config: ActionConfig,
        platform: PlatformInfo,
        console: ConsoleProtocol,
        http: HttpClient,
        cache: ToolCache,
        runner: ProcessRunner,
        outputs: RunnerFiles,
        tool: Tool | None = None,
        installer: Installer | None = None,
    ) -> None:
        self._config = config
        self._platform = platform
        self._console = console
        self._http = http
        self._cache = cache
        self._runner = runner
        self._outputs = outputs
        self._tool = tool or RainTool()
        self._installer = installer or Installer()

    def paths_for(self, version: str) -> InstallPaths:
        temp_dir = self._config.temp_dir
        return InstallPaths(
            install_dir=temp_dir / self._tool.install_dir_name(version),
            unpack_dir=temp_dir / f"{self._tool.spec.id}.tmp",
            cache_key=self._tool.cache_key(
                version, self._platform.platform, self._platform.arch
            ),
        )

    def run(self) -> Result[Path, PipelineError]:
        """Resolve, install and verify. Returns the verified binary path."""
        version = self.resolve_version()
        if isinstance(version, Err):
            return version

        name = self._tool.spec.name

        self._console.group(f"Install {name}")
        installed = self.install(version.value)
        self._console.end_group()
        if isinstance(installed, Err):
            return installed

        self._console.group("Installation check")
        verified = self.verify()
        self._console.end_group()
        return verified

    def plan(self) -> Result[InstallPlan, PlanError]:
        """Resolve the version and check a release exists for this platform.

        Runs before any cache lookup so an external cache step can be keyed
        on the result.
        """
        version = self.resolve_version()
        if isinstance(version, Err):
            return version

        url = self._download_url(version.value)
        if isinstance(url, Err):
            return url

        return Ok(
            InstallPlan(version=version.value, url=url.value, paths=self.paths_for(version.value))
        )

    def publish_plan(self, plan: InstallPlan) -> None:
        """Expose the plan as step outputs."""
        self._outputs.set_output("version", plan.version)
        self._outputs.set_output("cache-key", plan.paths.cache_key)
        self._outputs.set_output("install-dir", str(plan.paths.install_dir))
        self._console.info(
            f"Resolved {self._tool.spec.name} {plan.version} (cache key: {plan.paths.cache_key})"
        )

    def resolve_version(self) -> Result[str, LatestVersionError]:
        """Normalize the requested version, resolving "latest" if needed."""
        requested = normalize_version(self._config.version)
        if not is_latest(requested):
            return Ok(requested)

        name = self._tool.spec.name
        self._console.debug(f"Requesting latest {name} version...")
        result = self._tool.latest_version(self._http)
        if isinstance(result, Ok):
            self._console.debug(f"Latest version: {result.value}")
        return result

    def install(self, version: str) -> Result[Path, InstallStepError]:
        """Install ``version``, from the cache when possible.

        An install destination that already holds the binary (restored by
        a cache step that ran before this one) counts as a cache hit.

        Returns:
            Ok with the install destination (already on PATH), or Err
        """
        paths = self.paths_for(version)
        name = self._tool.spec.name

        self._console.info(
            f"Version to install: {version} (target directory: {paths.install_dir})"
        )

        if self._installed(paths) or self._restore(paths):
            self._console.info(f"{name} restored from cache")
        else:
            fetched = self._fetch(version, paths)
            if isinstance(fetched, Err):
                return fetched
            self._save(paths)

        self._outputs.add_path(paths.install_dir)
        return Ok(paths.install_dir)

    def verify(self) -> Result[Path, VerifyError]:
        """Check the binary resolves on PATH and runs; publish its path."""
        tool_id = self._tool.spec.id
        bin_path = self._runner.which(tool_id)
        if bin_path is None:
            return Err(BinaryNotFound(name=tool_id))

        cmd = [str(bin_path), *self._tool.spec.version_args]
        result = self._runner.run(cmd)
        if isinstance(result, Err):
            error = result.error
            return Err(
                VerificationFailed(
                    command=(tool_id, *self._tool.spec.version_args),
                    returncode=error.returncode,
                    stderr=error.stderr,
                )
            )

        self._outputs.set_output(f"{tool_id}-bin", str(bin_path))
        self._console.info(f"{self._tool.spec.name} installed: {bin_path}")
        return Ok(bin_path)

    def _binary_path(self, paths: InstallPaths) -> Path:
        return paths.install_dir / self._tool.binary_name(self._platform.platform)

    def _installed(self, paths: InstallPaths) -> bool:
        return self._binary_path(paths).is_file()

    def _restore(self, paths: InstallPaths) -> bool:
        if not self._config.use_cache:
            return False
        result = self._cache.restore(paths.install_dir, paths.cache_key)
        if isinstance(result, Err):
            self._console.warning(str(result.error))
            return False
        return result.value

    def _save(self, paths: InstallPaths) -> None:
        if not self._config.use_cache:
            return
        result = self._cache.save(paths.install_dir, paths.cache_key)
        if isinstance(result, Err):
            self._console.warning(str(result.error))

    def _download_url(self, version: str) -> Result[str, UnsupportedPlatform]:
        target = self._platform
        return self._tool.download_url(
            version, target.platform, target.arch, machine=target.machine
        )

    def _fetch(self, version: str, paths: InstallPaths) -> Result[Path, InstallStepError]:
        """Download, extract and place the binary in the install destination."""
        platform, arch = self._platform.platform, self._platform.arch

        url = self._download_url(version)
        if isinstance(url, Err):
            return url

        downloaded = Downloader(self._http, self._config.temp_dir).download(url.value)
        if isinstance(downloaded, Err):
            return downloaded
        archive = downloaded.value.path

        # Releases are always zip archives
        extracted = self._installer.extract_zip(archive, paths.unpack_dir)
        if isinstance(extracted, Err):
            remove_path(archive)
            return extracted

        # The binary sits in a subdirectory named like rain-v{version}_{os}-{arch}
        subdir = self._tool.archive_subdir(
            version, platform, arch, machine=self._platform.machine
        )
        binary = paths.unpack_dir / subdir / self._tool.binary_name(platform)

        placed = self._installer.place_binary(
            binary, paths.install_dir, executable=platform.is_unix
        )
        remove_path(archive)
        return placed
