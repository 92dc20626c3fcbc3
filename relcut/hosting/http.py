"""HTTP client abstraction for the hosting API.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- UrllibHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import threading
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, cast, runtime_checkable

from relcut.core.result import Err, Ok, Result
from relcut.core.structured import as_str_dict

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "UrllibHttpClient",
    "decode_json_object",
]

ACCEPTED_STATUSES = frozenset({200, 201})


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


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int
    body: bytes


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    Implementations return Err for transport failures and for any status
    outside ACCEPTED_STATUSES.
    """

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        data: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]: ...


def decode_json_object(url: str, response: HttpResponse) -> Result[dict[str, Any], HttpError]:
    """Parse a response body that must be a JSON object."""
    try:
        data_obj: object = json.loads(response.body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return Err(HttpError(url=url, status=response.status, message=f"JSON parse error: {e}"))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(HttpError(url=url, status=response.status, message="Expected JSON object"))
    # Values are dynamic; preserve as Any for callers.
    return Ok(cast(dict[str, Any], data))


class UrllibHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - Status filtering (only 200/201 are successes)
    - Timeout handling
    """

    def __init__(self, timeout: float = 60.0, user_agent: str = "relcut") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        data: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        req = urllib.request.Request(
            url,
            data=data,
            method=method,
            headers={"User-Agent": self.user_agent, **headers},
        )
        try:
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                status = int(response.status)
                body = response.read()
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

        if status not in ACCEPTED_STATUSES:
            return Err(HttpError(url=url, status=status, message="unexpected status code"))
        return Ok(HttpResponse(status=status, body=body))


@dataclass(frozen=True, slots=True)
class RecordedRequest:
    method: str
    url: str
    headers: dict[str, str]
    data: bytes | None


class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are keyed by (method, url). Unknown requests get a 404.

    Usage:
        client = MockHttpClient()
        client.set_json("GET", "https://api.example.com/data", {"key": "value"})
        result = client.request("GET", "https://api.example.com/data", headers={})
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], HttpResponse | HttpError] = {}
        self._lock = threading.Lock()
        self.calls: list[RecordedRequest] = []

    def set_json(self, method: str, url: str, payload: object, *, status: int = 200) -> None:
        body = json.dumps(payload).encode("utf-8")
        self._responses[(method, url)] = HttpResponse(status=status, body=body)

    def set_error(self, method: str, url: str, error: HttpError) -> None:
        self._responses[(method, url)] = error

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        data: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        with self._lock:
            self.calls.append(RecordedRequest(method, url, dict(headers), data))

        response = self._responses.get((method, url))
        if response is None:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        if isinstance(response, HttpError):
            return Err(response)
        if response.status not in ACCEPTED_STATUSES:
            return Err(HttpError(url=url, status=response.status, message="unexpected status code"))
        return Ok(response)
