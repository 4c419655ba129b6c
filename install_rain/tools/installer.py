"""Archive extraction and binary placement.

Rain releases are always zip archives, so only zip is supported. The
Installer extracts the archive to a scratch directory, then moves the one
binary the caller asks for into the install destination.
"""

from __future__ import annotations

import shutil
import stat
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from install_rain.core.errors import ExtractFailed
from install_rain.core.result import Err, Ok, Result

__all__ = ["Installer", "ExtractResult"]


@dataclass(frozen=True, slots=True)
class ExtractResult:
    """Result of an extraction.

    Attributes:
        dest_dir: Directory the archive was extracted to
        files_count: Number of files extracted
    """

    dest_dir: Path
    files_count: int


class Installer:
    """Zip extractor and file mover.

    Usage:
        installer = Installer()
        result = installer.extract_zip(archive, unpack_dir)
        if isinstance(result, Ok):
            installer.place_binary(unpack_dir / subdir / "rain", install_dir)
    """

    def _safe_relative_path(self, member_name: str) -> Path | None:
        """Return a sanitized relative extraction path, or None if unsafe."""
        normalized = member_name.replace("\\", "/")
        if normalized.startswith("/"):
            return None

        parts = PurePosixPath(normalized).parts
        if not parts:
            return None
        if any(part in {"", ".", ".."} for part in parts):
            return None
        if parts[0].endswith(":"):
            return None

        return Path(*parts)

    def _is_within_root(self, root: Path, target: Path) -> bool:
        try:
            return target.resolve().is_relative_to(root.resolve())
        except OSError:
            return False

    def extract_zip(self, archive: Path, dest_dir: Path) -> Result[ExtractResult, ExtractFailed]:
        """Extract a zip archive into ``dest_dir``.

        An existing ``dest_dir`` is removed first so leftovers from an
        earlier run cannot shadow the archive contents.
        """
        if not archive.exists():
            return Err(ExtractFailed(archive=archive, message="Archive not found"))

        try:
            if dest_dir.exists():
                shutil.rmtree(dest_dir)
            dest_dir.mkdir(parents=True, exist_ok=True)
            dest_root = dest_dir.resolve()

            files_count = 0

            with zipfile.ZipFile(archive, "r") as zf:
                for info in zf.infolist():
                    if info.is_dir():
                        continue

                    rel_path = self._safe_relative_path(info.filename)
                    if rel_path is None:
                        continue

                    # Skip symlinks in zip archives
                    file_type_bits = (info.external_attr >> 16) & 0o170000
                    if file_type_bits == stat.S_IFLNK:
                        continue

                    full_path = dest_dir / rel_path
                    if not self._is_within_root(dest_root, full_path):
                        continue

                    full_path.parent.mkdir(parents=True, exist_ok=True)
                    with zf.open(info) as src, open(full_path, "wb") as dst:
                        shutil.copyfileobj(src, dst)

                    # Preserve Unix permissions if available
                    unix_mode = (info.external_attr >> 16) & 0o777
                    if unix_mode:
                        full_path.chmod(unix_mode)

                    files_count += 1

            return Ok(ExtractResult(dest_dir=dest_dir, files_count=files_count))

        except zipfile.BadZipFile as e:
            return Err(ExtractFailed(archive=archive, message=f"Invalid zip file: {e}"))
        except OSError as e:
            return Err(ExtractFailed(archive=archive, message=f"IO error: {e}"))

    def place_binary(
        self, source: Path, install_dir: Path, *, executable: bool = True
    ) -> Result[Path, ExtractFailed]:
        """Create ``install_dir`` and move ``source`` into it.

        Args:
            source: Binary inside the extracted archive
            install_dir: Install destination
            executable: Set the executable bits (Unix)

        Returns:
            Ok with the placed binary path, or Err if the binary is missing
        """
        if not source.is_file():
            return Err(ExtractFailed(archive=source, message="Binary not found in archive"))

        target = install_dir / source.name
        try:
            install_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
            if executable:
                mode = target.stat().st_mode
                target.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except OSError as e:
            return Err(ExtractFailed(archive=source, message=f"IO error: {e}"))

        return Ok(target)
