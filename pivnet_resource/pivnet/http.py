"""HTTP transport for the Pivotal Network API.

This module provides:
- PivnetError: a failed API call, classified by HTTP status
- Transport: Protocol for JSON requests and file downloads (injectable for tests)
- UrllibTransport: Real implementation using urllib
- MockTransport: In-memory implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol, runtime_checkable

from pivnet_resource import __version__
from pivnet_resource.core.errors import ResourceError
from pivnet_resource.core.result import Err, Ok, Result
from pivnet_resource.core.structured import StrDict, as_str_dict, get_str

__all__ = [
    "Method",
    "PivnetError",
    "Transport",
    "UrllibTransport",
    "MockTransport",
]

Method = Literal["GET", "POST", "PATCH", "DELETE"]

_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True, slots=True)
class PivnetError:
    """A failed release-service call.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Message from the API, or the transport failure
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"

    def to_resource_error(self) -> ResourceError:
        match self.status:
            case 404:
                return ResourceError(kind="not_found", message=str(self))
            case 401 | 403:
                return ResourceError(
                    kind="unauthorized",
                    message=str(self),
                    hint="check that api_token is valid and has access to the product",
                )
            case 429:
                return ResourceError(kind="rate_limited", message=str(self))
            case _:
                return ResourceError(kind="remote_failed", message=str(self))


@runtime_checkable
class Transport(Protocol):
    """Protocol for talking HTTP to the release service."""

    def request_json(
        self,
        method: Method,
        url: str,
        body: StrDict | None = None,
    ) -> Result[StrDict, PivnetError]:
        """Send a request and parse the JSON object in the reply.

        An empty reply body (e.g. 204 on DELETE) is returned as ``{}``.
        """
        ...

    def download(self, url: str, dest: Path) -> Result[Path, PivnetError]:
        """Download a product file to ``dest``.

        ``url`` is the file's download link; the release service answers with
        a redirect to the blob store, which must be fetched without the API
        token.
        """
        ...


class _NoRedirect(urllib.request.HTTPRedirectHandler):
    def redirect_request(self, req, fp, code, msg, headers, newurl):  # type: ignore[no-untyped-def]
        return None


class UrllibTransport:
    """Real transport using urllib.

    Handles:
    - Token authentication and JSON bodies
    - TLS with system certificates, or no verification when asked
    - Download redirects to the blob store without leaking the token
    """

    def __init__(
        self,
        api_token: str,
        *,
        skip_ssl_verification: bool = False,
        timeout: float = 60.0,
        user_agent: str = f"pivnet-resource/{__version__}",
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._api_token = api_token
        if skip_ssl_verification:
            self._ssl_context = ssl._create_unverified_context()
        else:
            self._ssl_context = ssl.create_default_context()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Token {self._api_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }

    def _send(
        self,
        req: urllib.request.Request,
        *,
        follow_redirects: bool = True,
    ) -> Result[bytes | str, PivnetError]:
        """Send a request.

        Returns the body, or the ``Location`` header as ``str`` when a
        redirect was not followed.
        """
        url = req.full_url
        handlers: list[urllib.request.BaseHandler] = [
            urllib.request.HTTPSHandler(context=self._ssl_context)
        ]
        if not follow_redirects:
            handlers.append(_NoRedirect())
        opener = urllib.request.build_opener(*handlers)

        try:
            with opener.open(req, timeout=self.timeout) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            if not follow_redirects and e.code in (301, 302, 303, 307, 308):
                location = e.headers.get("Location")
                if location:
                    return Ok(str(location))
            return Err(PivnetError(url=url, status=e.code, message=_api_message(e)))
        except urllib.error.URLError as e:
            return Err(PivnetError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(PivnetError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(PivnetError(url=url, status=0, message=str(e)))

    def request_json(
        self,
        method: Method,
        url: str,
        body: StrDict | None = None,
    ) -> Result[StrDict, PivnetError]:
        data = json.dumps(body).encode("utf-8") if body is not None else None
        req = urllib.request.Request(url, data=data, headers=self._headers(), method=method)

        result = self._send(req)
        if isinstance(result, Err):
            return result

        raw = result.value
        if isinstance(raw, str) or not raw.strip():
            return Ok({})
        try:
            parsed = as_str_dict(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(PivnetError(url=url, status=0, message=f"JSON parse error: {e}"))
        if parsed is None:
            return Err(PivnetError(url=url, status=0, message="Expected JSON object"))
        return Ok(parsed)

    def download(self, url: str, dest: Path) -> Result[Path, PivnetError]:
        req = urllib.request.Request(url, data=b"", headers=self._headers(), method="POST")
        located = self._send(req, follow_redirects=False)
        if isinstance(located, Err):
            return located
        if not isinstance(located.value, str):
            return Err(PivnetError(url=url, status=0, message="Expected a download redirect"))

        target = located.value
        fetch = urllib.request.Request(target, headers={"User-Agent": self.user_agent})
        try:
            with urllib.request.urlopen(
                fetch,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                dest.parent.mkdir(parents=True, exist_ok=True)
                with open(dest, "wb") as f:
                    while True:
                        chunk = response.read(_CHUNK_SIZE)
                        if not chunk:
                            break
                        f.write(chunk)
            return Ok(dest)
        except urllib.error.HTTPError as e:
            return Err(PivnetError(url=url, status=e.code, message=e.reason))
        except urllib.error.URLError as e:
            return Err(PivnetError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(PivnetError(url=url, status=0, message="Download timed out"))
        except (ValueError, OSError) as e:
            return Err(PivnetError(url=url, status=0, message=str(e)))


def _api_message(error: urllib.error.HTTPError) -> str:
    """Prefer the API's own message over the HTTP reason phrase."""
    try:
        payload = as_str_dict(json.loads(error.read().decode("utf-8")))
    except (json.JSONDecodeError, UnicodeDecodeError, OSError):
        payload = None
    if payload is not None:
        message = get_str(payload, "message")
        if message:
            return message
    return str(error.reason)


class MockTransport:
    """Mock transport for testing.

    Usage:
        transport = MockTransport()
        transport.set_json("GET", "https://network.pivotal.io/api/v2/products/p/releases", {...})
        client = PivnetAPIClient(transport, endpoint="https://network.pivotal.io")
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], StrDict | PivnetError] = {}
        self._downloads: dict[str, bytes | PivnetError] = {}
        self.calls: list[tuple[str, str, StrDict | None]] = []

    def set_json(self, method: Method, url: str, response: StrDict | PivnetError) -> None:
        self._responses[(method, url)] = response

    def set_download(self, url: str, response: bytes | PivnetError) -> None:
        self._downloads[url] = response

    def request_json(
        self,
        method: Method,
        url: str,
        body: StrDict | None = None,
    ) -> Result[StrDict, PivnetError]:
        self.calls.append((method, url, body))

        response = self._responses.get((method, url))
        if response is None:
            return Err(PivnetError(url=url, status=404, message="Not found (mock)"))
        if isinstance(response, PivnetError):
            return Err(response)
        return Ok(response)

    def download(self, url: str, dest: Path) -> Result[Path, PivnetError]:
        self.calls.append(("DOWNLOAD", url, None))

        response = self._downloads.get(url)
        if response is None:
            return Err(PivnetError(url=url, status=404, message="Not found (mock)"))
        if isinstance(response, PivnetError):
            return Err(response)

        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(response)
        return Ok(dest)
