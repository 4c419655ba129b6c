"""Archive downloader.

Downloads land in a scratch directory under a unique name; the caller
removes the file once it has been extracted.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from install_rain.core.errors import DownloadFailed
from install_rain.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from install_rain.tools.http import HttpClient

__all__ = ["Downloader", "DownloadResult"]


@dataclass(frozen=True, slots=True)
class DownloadResult:
    """Result of a download operation.

    Attributes:
        path: Path to the downloaded file
    """

    path: Path


class Downloader:
    """Downloads release archives into a scratch directory.

    Usage:
        downloader = Downloader(http_client, temp_dir)
        match downloader.download(url):
            case Ok(downloaded):
                print(f"Downloaded to: {downloaded.path}")
    """

    def __init__(self, http: HttpClient, dest_dir: Path) -> None:
        self._http = http
        self._dest_dir = dest_dir

    def _dest_path(self, url: str) -> Path:
        """Unique file name that keeps the asset name recognizable.

        Example: "rain-v1.24.2_linux-amd64.zip" -> "3f2a..._rain-v1.24.2_linux-amd64.zip"
        """
        filename = Path(urlparse(url).path).name or "download"
        return self._dest_dir / f"{uuid.uuid4().hex}_{filename}"

    def download(self, url: str) -> Result[DownloadResult, DownloadFailed]:
        """Download file from URL.

        Returns:
            Ok with DownloadResult, or Err with DownloadFailed
        """
        dest = self._dest_path(url)
        self._dest_dir.mkdir(parents=True, exist_ok=True)

        result = self._http.download(url, dest)

        if isinstance(result, Err):
            # Clean up partial download
            dest.unlink(missing_ok=True)
            error = result.error
            message = f"HTTP {error.status}: {error.message}" if error.status else error.message
            return Err(DownloadFailed(url=url, message=message))

        return Ok(DownloadResult(path=dest))
