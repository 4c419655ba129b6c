"""External lookups for tool version resolution.

All functions take an HttpClient parameter for testability.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from install_rain.core.errors import MalformedResponse, UnexpectedStatus
from install_rain.core.result import Err, Ok, Result
from install_rain.tools.http import HttpError
from install_rain.tools.version import normalize_version

if TYPE_CHECKING:
    from install_rain.tools.http import HttpClient

__all__ = ["github_latest_release_tag", "LatestVersionError"]

LatestVersionError = HttpError | UnexpectedStatus | MalformedResponse

_SCHEME = re.compile(r"^https?://")

# host/owner/repo/releases/tag/<tag>
_TAG_SEGMENT = 5


def github_latest_release_tag(http: HttpClient, repo: str) -> Result[str, LatestVersionError]:
    """Resolve the latest release version of a GitHub repository.

    Uses the ``/releases/latest`` page, which answers with a 302 to
    ``https://github.com/{repo}/releases/tag/{tag}``. Reading the tag off
    the redirect avoids the rate-limited REST API. The parse is tied to
    that URL layout: the tag must be the sixth slash-separated segment
    once the scheme is removed.

    Args:
        http: HTTP client to use
        repo: Repository in "owner/repo" format (e.g., "aws-cloudformation/rain")

    Returns:
        Ok with version string (without 'v' prefix), or Err
    """
    url = f"https://github.com/{repo}/releases/latest"
    result = http.get_no_redirect(url)
    if isinstance(result, Err):
        return result

    response = result.value
    if response.status != 302:
        return Err(UnexpectedStatus(url=url, status=response.status, reason=response.reason))

    location = _SCHEME.sub("", response.header("location") or "")
    parts = location.split("/")
    if len(parts) <= _TAG_SEGMENT:
        return Err(MalformedResponse(location=location))

    return Ok(normalize_version(parts[_TAG_SEGMENT]))
