"""Tests for install_rain.services.install module.

The pipeline runs against real archives and a real cache directory; only
the network (MockHttpClient) and the self-check process are faked.
"""

from __future__ import annotations

import io
import os
import shutil
import stat
import zipfile
from pathlib import Path

import pytest

from install_rain.core.config import ActionConfig
from install_rain.core.errors import (
    BinaryNotFound,
    CacheError,
    DownloadFailed,
    ExtractFailed,
    UnexpectedStatus,
    UnsupportedPlatform,
    VerificationFailed,
)
from install_rain.core.result import Err, Ok, Result
from install_rain.output.console import MockConsole
from install_rain.output.runner import RunnerFiles
from install_rain.platform.detection import Arch, Platform, PlatformInfo
from install_rain.platform.process import ProcessError
from install_rain.services.install import InstallPaths, InstallPlan, InstallService
from install_rain.tools.cache import ToolCache
from install_rain.tools.http import MockHttpClient

LATEST_URL = "https://github.com/aws-cloudformation/rain/releases/latest"
DOWNLOAD = "https://github.com/aws-cloudformation/rain/releases/download"

LINUX_X64 = PlatformInfo(Platform.LINUX, Arch.X64)
DARWIN_ARM64 = PlatformInfo(Platform.MACOS, Arch.ARM64)
WINDOWS_X64 = PlatformInfo(Platform.WINDOWS, Arch.X64)


def release_zip(subdir: str, binary: str = "rain") -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        info = zipfile.ZipInfo(f"{subdir}/{binary}")
        info.external_attr = (stat.S_IFREG | 0o755) << 16
        zf.writestr(info, b"#!/bin/sh\necho rain\n")
        zf.writestr(f"{subdir}/README.md", b"rain")
    return buffer.getvalue()


class FakeRunner:
    """Looks binaries up on the live PATH; records self-check commands."""

    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.commands: list[list[str]] = []

    def which(self, name: str) -> Path | None:
        for entry in os.environ.get("PATH", "").split(os.pathsep):
            if not entry:
                continue
            for candidate in (name, f"{name}.exe"):
                path = Path(entry) / candidate
                if path.is_file():
                    return path
        return None

    def run(self, cmd: list[str]) -> Result[str, ProcessError]:
        self.commands.append(cmd)
        if self.returncode:
            return Err(
                ProcessError(
                    command=tuple(cmd), returncode=self.returncode, stdout="", stderr="boom"
                )
            )
        return Ok("rain v1.24.2 linux/amd64\n")


class FailingCache:
    def __init__(self, *, restore_fails: bool = False, save_fails: bool = False) -> None:
        self.restore_fails = restore_fails
        self.save_fails = save_fails
        self.saved: list[str] = []
        self.restored: list[str] = []

    def restore(self, path: Path, key: str) -> Result[bool, CacheError]:
        self.restored.append(key)
        if self.restore_fails:
            return Err(CacheError(key=key, message="Cache service unavailable"))
        return Ok(False)

    def save(self, path: Path, key: str) -> Result[None, CacheError]:
        self.saved.append(key)
        if self.save_fails:
            return Err(CacheError(key=key, message="Cache service unavailable"))
        return Ok(None)


@pytest.fixture(autouse=True)
def empty_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATH", "")


def make_config(tmp_path: Path, version: str, *, use_cache: bool = True) -> ActionConfig:
    return ActionConfig(
        version=version,
        use_cache=use_cache,
        temp_dir=tmp_path / "temp",
        cache_dir=tmp_path / "cache",
        github_output=tmp_path / "github_output",
        github_path=tmp_path / "github_path",
    )


def make_service(
    tmp_path: Path,
    *,
    version: str,
    platform: PlatformInfo,
    http: MockHttpClient,
    console: MockConsole,
    runner: FakeRunner | None = None,
    cache: object | None = None,
    use_cache: bool = True,
) -> InstallService:
    config = make_config(tmp_path, version, use_cache=use_cache)
    return InstallService(
        config=config,
        platform=platform,
        console=console,
        http=http,
        cache=cache or ToolCache(config.cache_dir),  # type: ignore[arg-type]
        runner=runner or FakeRunner(),
        outputs=RunnerFiles(
            console=console,
            github_output=config.github_output,
            github_path=config.github_path,
        ),
    )


class TestPaths:
    def test_paths_for(self, tmp_path: Path) -> None:
        service = make_service(
            tmp_path,
            version="1.24.2",
            platform=LINUX_X64,
            http=MockHttpClient(),
            console=MockConsole(),
        )

        paths = service.paths_for("1.24.2")

        assert paths.install_dir == tmp_path / "temp" / "rain-1.24.2"
        assert paths.unpack_dir == tmp_path / "temp" / "rain.tmp"
        assert paths.cache_key == "rain-cache-1.24.2-linux-x64"


class TestResolveVersion:
    def test_explicit_version_is_normalized(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        service = make_service(
            tmp_path, version="v1.24.2", platform=LINUX_X64, http=http, console=MockConsole()
        )

        assert service.resolve_version() == Ok("1.24.2")
        assert http.calls == []

    def test_latest_is_looked_up(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        http.set_redirect(
            LATEST_URL, "https://github.com/aws-cloudformation/rain/releases/tag/v1.25.0"
        )
        console = MockConsole()
        service = make_service(
            tmp_path, version="LATEST", platform=LINUX_X64, http=http, console=console
        )

        assert service.resolve_version() == Ok("1.25.0")
        assert "debug: Requesting latest Rain version..." in console.messages
        assert "debug: Latest version: 1.25.0" in console.messages

    def test_lookup_failure(self, tmp_path: Path) -> None:
        service = make_service(
            tmp_path,
            version="latest",
            platform=LINUX_X64,
            http=MockHttpClient(),
            console=MockConsole(),
        )

        result = service.resolve_version()

        assert isinstance(result, Err)
        assert result.error == UnexpectedStatus(url=LATEST_URL, status=404, reason="Not Found")


class TestPlan:
    def test_explicit_version(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        service = make_service(
            tmp_path, version="v1.24.2", platform=LINUX_X64, http=http, console=MockConsole()
        )

        result = service.plan()

        assert result == Ok(
            InstallPlan(
                version="1.24.2",
                url=f"{DOWNLOAD}/v1.24.2/rain-v1.24.2_linux-amd64.zip",
                paths=InstallPaths(
                    install_dir=tmp_path / "temp" / "rain-1.24.2",
                    unpack_dir=tmp_path / "temp" / "rain.tmp",
                    cache_key="rain-cache-1.24.2-linux-x64",
                ),
            )
        )
        assert http.calls == []

    def test_latest(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        http.set_redirect(
            LATEST_URL, "https://github.com/aws-cloudformation/rain/releases/tag/v1.25.0"
        )
        service = make_service(
            tmp_path, version="latest", platform=DARWIN_ARM64, http=http, console=MockConsole()
        )

        result = service.plan()

        assert isinstance(result, Ok)
        assert result.value.version == "1.25.0"
        assert result.value.paths.cache_key == "rain-cache-1.25.0-darwin-arm64"

    def test_unsupported_platform(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        service = make_service(
            tmp_path,
            version="1.0.0",
            platform=PlatformInfo(Platform.WINDOWS, Arch.ARM64),
            http=http,
            console=MockConsole(),
        )

        result = service.plan()

        assert result == Err(UnsupportedPlatform(platform="Windows", arch="arm64"))
        assert http.calls == []

    def test_publish_plan_writes_outputs(self, tmp_path: Path) -> None:
        service = make_service(
            tmp_path,
            version="1.24.2",
            platform=LINUX_X64,
            http=MockHttpClient(),
            console=MockConsole(),
        )
        planned = service.plan()
        assert isinstance(planned, Ok)

        service.publish_plan(planned.value)

        lines = (tmp_path / "github_output").read_text(encoding="utf-8").splitlines()
        values = {lines[i].split("<<")[0]: lines[i + 1] for i in range(0, len(lines), 3)}
        assert values == {
            "version": "1.24.2",
            "cache-key": "rain-cache-1.24.2-linux-x64",
            "install-dir": str(tmp_path / "temp" / "rain-1.24.2"),
        }


class TestRun:
    def test_linux_x64_explicit_version(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        url = f"{DOWNLOAD}/v1.24.2/rain-v1.24.2_linux-amd64.zip"
        http.set_download(url, release_zip("rain-v1.24.2_linux-amd64"))
        console = MockConsole()
        runner = FakeRunner()
        service = make_service(
            tmp_path,
            version="1.24.2",
            platform=LINUX_X64,
            http=http,
            console=console,
            runner=runner,
        )

        result = service.run()

        install_dir = tmp_path / "temp" / "rain-1.24.2"
        assert result == Ok(install_dir / "rain")
        assert http.calls == [("download", url)]
        assert runner.commands == [[str(install_dir / "rain"), "--version"]]

        # Installed on PATH for this process and later steps
        assert os.environ["PATH"].split(os.pathsep)[0] == str(install_dir)
        github_path = (tmp_path / "github_path").read_text(encoding="utf-8")
        assert github_path.strip() == str(install_dir)

        lines = (tmp_path / "github_output").read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("rain-bin<<ghadelimiter_")
        assert lines[1] == str(install_dir / "rain")

        # Scratch files are gone, the cache holds the install dir
        assert list((tmp_path / "temp").glob("*.zip")) == []
        assert ToolCache(tmp_path / "cache").has("rain-cache-1.24.2-linux-x64")

        assert console.groups == ["Install Rain", "Installation check"]
        assert console.open_groups == 0
        assert (
            f"Version to install: 1.24.2 (target directory: {install_dir})" in console.messages
        )
        assert f"Rain installed: {install_dir / 'rain'}" in console.messages

    def test_latest_on_darwin_arm64(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        http.set_redirect(
            LATEST_URL, "https://github.com/aws-cloudformation/rain/releases/tag/v1.25.0"
        )
        url = f"{DOWNLOAD}/v1.25.0/rain-v1.25.0_darwin-arm64.zip"
        http.set_download(url, release_zip("rain-v1.25.0_darwin-arm64"))
        service = make_service(
            tmp_path, version="latest", platform=DARWIN_ARM64, http=http, console=MockConsole()
        )

        result = service.run()

        assert result == Ok(tmp_path / "temp" / "rain-1.25.0" / "rain")
        assert http.calls == [("get_no_redirect", LATEST_URL), ("download", url)]
        assert ToolCache(tmp_path / "cache").has("rain-cache-1.25.0-darwin-arm64")

    def test_windows_binary_name(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        url = f"{DOWNLOAD}/v1.24.2/rain-v1.24.2_windows-amd64.zip"
        http.set_download(url, release_zip("rain-v1.24.2_windows-amd64", "rain.exe"))
        service = make_service(
            tmp_path, version="1.24.2", platform=WINDOWS_X64, http=http, console=MockConsole()
        )

        result = service.run()

        assert result == Ok(tmp_path / "temp" / "rain-1.24.2" / "rain.exe")

    def test_unsupported_architecture_makes_no_requests(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        console = MockConsole()
        service = make_service(
            tmp_path,
            version="1.0.0",
            platform=PlatformInfo(Platform.MACOS, Arch.ARM),
            http=http,
            console=console,
        )

        result = service.run()

        assert result == Err(UnsupportedPlatform(platform="macOS", arch="arm"))
        assert str(result.error) == "Unsupported macOS architecture (arm)"
        assert http.calls == []
        assert console.groups == ["Install Rain"]
        assert console.open_groups == 0
        assert not (tmp_path / "github_output").exists()

    def test_unmapped_architecture_is_named(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        service = make_service(
            tmp_path,
            version="1.0.0",
            platform=PlatformInfo(Platform.LINUX, Arch.UNKNOWN, machine="s390x"),
            http=http,
            console=MockConsole(),
        )

        result = service.run()

        assert result == Err(UnsupportedPlatform(platform="linux", arch="s390x"))
        assert str(result.error) == "Unsupported linux architecture (s390x)"
        assert http.calls == []

    def test_latest_lookup_failure_stops_before_install(self, tmp_path: Path) -> None:
        console = MockConsole()
        service = make_service(
            tmp_path,
            version="latest",
            platform=LINUX_X64,
            http=MockHttpClient(),
            console=console,
        )

        result = service.run()

        assert isinstance(result, Err)
        assert isinstance(result.error, UnexpectedStatus)
        assert console.groups == []

    def test_download_failure(self, tmp_path: Path) -> None:
        service = make_service(
            tmp_path,
            version="9.9.9",
            platform=LINUX_X64,
            http=MockHttpClient(),
            console=MockConsole(),
        )

        result = service.run()

        assert isinstance(result, Err)
        assert isinstance(result.error, DownloadFailed)
        assert not ToolCache(tmp_path / "cache").has("rain-cache-9.9.9-linux-x64")

    def test_archive_without_expected_layout(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        url = f"{DOWNLOAD}/v1.24.2/rain-v1.24.2_linux-amd64.zip"
        http.set_download(url, release_zip("unexpected"))
        service = make_service(
            tmp_path, version="1.24.2", platform=LINUX_X64, http=http, console=MockConsole()
        )

        result = service.run()

        assert isinstance(result, Err)
        assert isinstance(result.error, ExtractFailed)
        assert list((tmp_path / "temp").glob("*.zip")) == []
        assert not ToolCache(tmp_path / "cache").has("rain-cache-1.24.2-linux-x64")


class TestCaching:
    URL = f"{DOWNLOAD}/v1.24.2/rain-v1.24.2_linux-amd64.zip"

    def _http(self) -> MockHttpClient:
        http = MockHttpClient()
        http.set_download(self.URL, release_zip("rain-v1.24.2_linux-amd64"))
        return http

    def test_cache_hit_skips_download(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        first = make_service(
            tmp_path, version="1.24.2", platform=LINUX_X64, http=self._http(), console=MockConsole()
        )
        assert isinstance(first.run(), Ok)

        # A fresh runner: empty scratch area and PATH, same cache store
        monkeypatch.setenv("PATH", "")
        for name in ("temp", "github_output", "github_path"):
            target = tmp_path / name
            if target.is_dir():
                shutil.rmtree(target)
            else:
                target.unlink()

        http = MockHttpClient()
        console = MockConsole()
        second = make_service(
            tmp_path, version="1.24.2", platform=LINUX_X64, http=http, console=console
        )

        result = second.run()

        assert result == Ok(tmp_path / "temp" / "rain-1.24.2" / "rain")
        assert http.calls == []
        assert "Rain restored from cache" in console.messages
        assert not console.has_warning()

    def test_miss_downloads_once_and_saves(self, tmp_path: Path) -> None:
        http = self._http()
        cache = FailingCache()
        service = make_service(
            tmp_path,
            version="1.24.2",
            platform=LINUX_X64,
            http=http,
            console=MockConsole(),
            cache=cache,
        )

        assert isinstance(service.run(), Ok)
        assert http.calls == [("download", self.URL)]
        assert cache.saved == ["rain-cache-1.24.2-linux-x64"]

    def test_save_failure_is_a_warning(self, tmp_path: Path) -> None:
        console = MockConsole()
        service = make_service(
            tmp_path,
            version="1.24.2",
            platform=LINUX_X64,
            http=self._http(),
            console=console,
            cache=FailingCache(save_fails=True),
        )

        result = service.run()

        assert isinstance(result, Ok)
        assert console.has_warning()
        assert console.find("Cache service unavailable")
        assert (tmp_path / "github_output").exists()

    def test_restore_failure_is_a_miss(self, tmp_path: Path) -> None:
        http = self._http()
        console = MockConsole()
        service = make_service(
            tmp_path,
            version="1.24.2",
            platform=LINUX_X64,
            http=http,
            console=console,
            cache=FailingCache(restore_fails=True),
        )

        result = service.run()

        assert isinstance(result, Ok)
        assert http.calls == [("download", self.URL)]
        assert console.has_warning()

    def test_restored_install_dir_counts_as_hit(self, tmp_path: Path) -> None:
        # Left in place by a cache step that ran before the install step
        install_dir = tmp_path / "temp" / "rain-1.24.2"
        install_dir.mkdir(parents=True)
        (install_dir / "rain").write_bytes(b"#!/bin/sh\n")
        http = MockHttpClient()
        cache = FailingCache()
        console = MockConsole()
        service = make_service(
            tmp_path,
            version="1.24.2",
            platform=LINUX_X64,
            http=http,
            console=console,
            cache=cache,
        )

        result = service.run()

        assert result == Ok(install_dir / "rain")
        assert http.calls == []
        assert cache.saved == []
        assert "Rain restored from cache" in console.messages

    def test_disabled_cache_is_never_touched(self, tmp_path: Path) -> None:
        http = self._http()
        cache = FailingCache(restore_fails=True, save_fails=True)
        console = MockConsole()
        service = make_service(
            tmp_path,
            version="1.24.2",
            platform=LINUX_X64,
            http=http,
            console=console,
            cache=cache,
            use_cache=False,
        )

        result = service.run()

        assert isinstance(result, Ok)
        assert http.calls == [("download", self.URL)]
        assert cache.restored == []
        assert cache.saved == []
        assert not console.has_warning()


class TestVerify:
    def test_binary_not_on_path(self, tmp_path: Path) -> None:
        service = make_service(
            tmp_path,
            version="1.24.2",
            platform=LINUX_X64,
            http=MockHttpClient(),
            console=MockConsole(),
        )

        result = service.verify()

        assert result == Err(BinaryNotFound(name="rain"))
        assert str(result.error) == "rain binary file not found in $PATH"

    def test_self_check_fails(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        http.set_download(
            f"{DOWNLOAD}/v1.24.2/rain-v1.24.2_linux-amd64.zip",
            release_zip("rain-v1.24.2_linux-amd64"),
        )
        service = make_service(
            tmp_path,
            version="1.24.2",
            platform=LINUX_X64,
            http=http,
            console=MockConsole(),
            runner=FakeRunner(returncode=1),
        )

        result = service.run()

        assert result == Err(
            VerificationFailed(command=("rain", "--version"), returncode=1, stderr="boom")
        )
        assert not (tmp_path / "github_output").exists()
