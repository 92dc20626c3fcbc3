"""Code-hosting service access (GitHub REST API over HTTP)."""

from .github import GitHubApi, HostingGateway, RemoteRef, parse_remote
from .http import HttpClient, HttpError, MockHttpClient, UrllibHttpClient

__all__ = [
    "GitHubApi",
    "HostingGateway",
    "RemoteRef",
    "parse_remote",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "UrllibHttpClient",
]
