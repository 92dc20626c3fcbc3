"""GitHub REST API gateway.

Only the three calls a release needs: the caller's permission on the
repository, release creation and asset upload. All failures come back as
`transport_failed` release errors.
"""

from __future__ import annotations

import base64
import json
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

from relcut.core.result import Err, Ok, Result
from relcut.core.structured import get_str
from relcut.hosting.http import HttpClient, HttpError, decode_json_object
from relcut.release.errors import ReleaseError

__all__ = [
    "GitHubApi",
    "HostingGateway",
    "RemoteRef",
    "default_api_url",
    "parse_remote",
    "strip_upload_template",
]

_HTTPS_REMOTE_RE = re.compile(r"^https://(?:[^@/]+@)?([^/]+)/([^/]+)/([^/]+?)(?:\.git)?/?$")
_SSH_REMOTE_RE = re.compile(r"^(?:ssh://)?git@([^:/]+)[:/]([^/]+)/([^/]+?)(?:\.git)?/?$")
_UPLOAD_TEMPLATE_RE = re.compile(r"\{[^{]*\}$")


@dataclass(frozen=True, slots=True)
class RemoteRef:
    host: str
    owner: str
    repo: str
    is_https: bool

    @property
    def web_link(self) -> str:
        return f"https://{self.host}/{self.owner}/{self.repo}"


def parse_remote(url: str) -> RemoteRef | None:
    """Split a git remote URL into host/owner/repo.

    Accepts `https://host/owner/repo(.git)` and `git@host:owner/repo(.git)`.
    """
    url = url.strip()
    m = _HTTPS_REMOTE_RE.match(url)
    if m is not None:
        return RemoteRef(host=m.group(1), owner=m.group(2), repo=m.group(3), is_https=True)
    m = _SSH_REMOTE_RE.match(url)
    if m is not None:
        return RemoteRef(host=m.group(1), owner=m.group(2), repo=m.group(3), is_https=False)
    return None


def default_api_url(host: str) -> str:
    if host == "github.com":
        return "https://api.github.com"
    # GitHub Enterprise Server
    return f"https://{host}/api/v3"


def strip_upload_template(upload_url: str) -> str:
    """Drop the RFC 6570 suffix, e.g. `.../assets{?name,label}`."""
    return _UPLOAD_TEMPLATE_RE.sub("", upload_url)


class HostingGateway(Protocol):
    """The hosting calls the release pipeline depends on."""

    def permission(self, owner: str, repo: str, user: str) -> Result[str, ReleaseError]: ...

    def create_release(
        self,
        owner: str,
        repo: str,
        *,
        tag: str,
        target: str,
        title: str,
        body: str,
    ) -> Result[str, ReleaseError]: ...

    def upload_asset(self, upload_url: str, path: Path) -> Result[None, ReleaseError]: ...


class GitHubApi:
    """HostingGateway over the GitHub v3 REST API with basic auth."""

    def __init__(self, http: HttpClient, *, api_url: str, user: str, secret: str) -> None:
        self._http = http
        self._api_url = api_url.rstrip("/")
        token = base64.b64encode(f"{user}:{secret}".encode("utf-8")).decode("ascii")
        self._headers = {
            "Accept": "application/vnd.github.v3+json",
            "Authorization": f"Basic {token}",
        }

    def __repr__(self) -> str:
        return f"GitHubApi(api_url={self._api_url!r})"

    def permission(self, owner: str, repo: str, user: str) -> Result[str, ReleaseError]:
        url = (
            f"{self._api_url}/repos/{quote(owner)}/{quote(repo)}"
            f"/collaborators/{quote(user)}/permission"
        )
        result = self._http.request("GET", url, headers=self._headers)
        if isinstance(result, Err):
            return Err(_transport_error(result.error))

        data = decode_json_object(url, result.value)
        if isinstance(data, Err):
            return Err(_transport_error(data.error))

        permission = get_str(data.value, "permission")
        if permission is None:
            return Err(
                ReleaseError(
                    kind="transport_failed",
                    message=f"Response from '{url}' has no permission field",
                )
            )
        return Ok(permission)

    def create_release(
        self,
        owner: str,
        repo: str,
        *,
        tag: str,
        target: str,
        title: str,
        body: str,
    ) -> Result[str, ReleaseError]:
        """Create a release and return its asset upload URL (template removed)."""
        url = f"{self._api_url}/repos/{quote(owner)}/{quote(repo)}/releases"
        payload = {
            "tag_name": tag,
            "target_commitish": target,
            "name": title,
            "body": body,
        }
        result = self._http.request(
            "POST",
            url,
            headers={**self._headers, "Content-Type": "application/json"},
            data=json.dumps(payload).encode("utf-8"),
        )
        if isinstance(result, Err):
            return Err(_transport_error(result.error))

        data = decode_json_object(url, result.value)
        if isinstance(data, Err):
            return Err(_transport_error(data.error))

        upload_url = get_str(data.value, "upload_url")
        if upload_url is None:
            return Err(
                ReleaseError(
                    kind="transport_failed",
                    message=f"Response from '{url}' has no upload_url",
                )
            )
        return Ok(strip_upload_template(upload_url))

    def upload_asset(self, upload_url: str, path: Path) -> Result[None, ReleaseError]:
        url = f"{upload_url}?name={quote(path.name)}"
        try:
            content = path.read_bytes()
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="assets_not_found",
                    message=f"Unable to read asset: {e}",
                    hint=str(path),
                )
            )

        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        result = self._http.request(
            "POST",
            url,
            headers={**self._headers, "Content-Type": content_type},
            data=content,
        )
        if isinstance(result, Err):
            return Err(_transport_error(result.error))
        return Ok(None)


def _transport_error(error: HttpError) -> ReleaseError:
    if error.status:
        message = (
            f"Request to '{error.url}' returned an unexpected status code: "
            f"{error.status} ({error.message})"
        )
    else:
        message = f"Request to '{error.url}' failed. {error.message}"
    return ReleaseError(kind="transport_failed", message=message)
