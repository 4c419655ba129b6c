"""HTTP client abstraction for release lookups and downloads.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from install_rain import __version__
from install_rain.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpResponse",
    "RealHttpClient",
    "MockHttpClient",
    "HttpError",
    "USER_AGENT",
]

USER_AGENT = f"install-rain/{__version__}"


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


def _empty_headers() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Status line and headers of a response whose body was not needed.

    Header names are stored lower-cased.
    """

    url: str
    status: int
    reason: str
    headers: dict[str, str] = field(default_factory=_empty_headers)

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    This abstraction allows injecting mock clients for testing,
    avoiding real network calls in unit tests.
    """

    def get_no_redirect(self, url: str) -> Result[HttpResponse, HttpError]:
        """GET ``url`` without following redirects.

        Any status code (including 3xx and 4xx) is returned as Ok; Err is
        reserved for transport failures.
        """
        ...

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        """Download URL to file.

        Args:
            url: URL to download
            dest: Destination path

        Returns:
            Ok with dest path, or Err with HttpError
        """
        ...


class _NoRedirect(urllib.request.HTTPRedirectHandler):
    """Surface 3xx responses as HTTPError instead of following them."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):  # type: ignore[no-untyped-def]
        return None


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - Redirect inspection (no automatic follow)
    - Streaming download
    - Timeout handling
    """

    def __init__(self, timeout: float = 30.0, user_agent: str = USER_AGENT) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header value
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _request(self, url: str) -> urllib.request.Request:
        return urllib.request.Request(url, headers={"User-Agent": self.user_agent})

    def get_no_redirect(self, url: str) -> Result[HttpResponse, HttpError]:
        """GET without following redirects."""
        opener = urllib.request.build_opener(
            _NoRedirect(),
            urllib.request.HTTPSHandler(context=self._ssl_context),
        )
        try:
            with opener.open(self._request(url), timeout=self.timeout) as response:
                return Ok(
                    HttpResponse(
                        url=url,
                        status=response.status,
                        reason=response.reason,
                        headers={k.lower(): v for k, v in response.headers.items()},
                    )
                )
        except urllib.error.HTTPError as e:
            # 3xx and 4xx/5xx land here once redirects are disabled.
            headers = {k.lower(): v for k, v in e.headers.items()} if e.headers else {}
            return Ok(HttpResponse(url=url, status=e.code, reason=str(e.reason), headers=headers))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        """Download URL to file in chunks."""
        try:
            with urllib.request.urlopen(
                self._request(url),
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                chunk_size = 8192

                dest.parent.mkdir(parents=True, exist_ok=True)

                with open(dest, "wb") as f:
                    while True:
                        chunk = response.read(chunk_size)
                        if not chunk:
                            break
                        f.write(chunk)

                return Ok(dest)

        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Download timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_redirect(LATEST_URL, "https://github.com/o/r/releases/tag/v1.2.3")
        result = client.get_no_redirect(LATEST_URL)
        assert result.value.status == 302
    """

    def __init__(self) -> None:
        self._responses: dict[str, HttpResponse | HttpError] = {}
        self._download_responses: dict[str, bytes | HttpError] = {}
        self.calls: list[tuple[str, str]] = []

    def set_response(self, url: str, response: HttpResponse | HttpError) -> None:
        self._responses[url] = response

    def set_redirect(self, url: str, location: str, status: int = 302) -> None:
        """Shorthand for a redirect response with a Location header."""
        self._responses[url] = HttpResponse(
            url=url, status=status, reason="Found", headers={"location": location}
        )

    def set_download(self, url: str, response: bytes | HttpError) -> None:
        self._download_responses[url] = response

    def get_no_redirect(self, url: str) -> Result[HttpResponse, HttpError]:
        self.calls.append(("get_no_redirect", url))

        response = self._responses.get(url)
        if response is None:
            return Ok(HttpResponse(url=url, status=404, reason="Not Found"))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        """Mock download - writes predefined content to dest."""
        self.calls.append(("download", url))

        if url not in self._download_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = self._download_responses[url]
        if isinstance(response, HttpError):
            return Err(response)

        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(response)

        return Ok(dest)
