"""Tools infrastructure.

This package provides:
- Tool specifications and base classes (base.py, github.py)
- HTTP client for lookups and downloads (http.py)
- Latest-release lookup (api.py)
- Download, extraction and caching (download.py, installer.py, cache.py)
- Tool definitions (definitions/)
"""

from install_rain.tools.base import Tool, ToolSpec
from install_rain.tools.cache import CacheEntry, ToolCache
from install_rain.tools.download import Downloader, DownloadResult
from install_rain.tools.github import GitHubTool
from install_rain.tools.http import (
    HttpClient,
    HttpError,
    HttpResponse,
    MockHttpClient,
    RealHttpClient,
)
from install_rain.tools.installer import ExtractResult, Installer
from install_rain.tools.version import is_latest, normalize_version

__all__ = [
    # Base types
    "Tool",
    "ToolSpec",
    "GitHubTool",
    # HTTP
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
    # Download / install / cache
    "Downloader",
    "DownloadResult",
    "Installer",
    "ExtractResult",
    "ToolCache",
    "CacheEntry",
    # Versions
    "is_latest",
    "normalize_version",
]
