"""Git repository abstraction.

This module provides the Repository class for the git operations a release
needs. All operations return Result types for proper error handling.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.remote_url("origin"):
        case Ok(url):
            print(f"origin: {url}")
        case Err(e):
            print(f"Error: {e.message}")

    match repo.differs_from("origin/master"):
        case Ok(True):
            print("local changes")
        case Ok(False):
            print("in sync")
        case Err(e):
            print(f"diff failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from relcut.core.result import Err, Ok, Result
from relcut.platform.process import ProcessError
from relcut.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "GitError",
    "Repository",
    "VcsGateway",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class VcsGateway(Protocol):
    """The git operations the release pipeline depends on."""

    def remote_url(self, remote: str = "origin") -> Result[str, GitError]: ...

    def fetch(self, remote: str = "origin") -> Result[None, GitError]: ...

    def current_branch(self) -> str | None: ...

    def differs_from(self, ref: str) -> Result[bool, GitError]: ...

    def add(self, paths: list[Path]) -> Result[None, GitError]: ...

    def commit(self, message: str) -> Result[None, GitError]: ...

    def push(
        self, url: str, refspec: str, *, redact: tuple[str, ...] = ()
    ) -> Result[None, GitError]: ...


class Repository:
    """A local git checkout.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def remote_url(self, remote: str = "origin") -> Result[str, GitError]:
        """Get the configured URL of a remote."""
        result = self._run(["remote", "get-url", remote])
        match result:
            case Err(e):
                return Err(_git_error(f"remote get-url {remote}", e, "no such remote"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def fetch(self, remote: str = "origin") -> Result[None, GitError]:
        """Fetch from a remote."""
        result = self._run(["fetch", remote])
        if isinstance(result, Err):
            return Err(_git_error(f"fetch {remote}", result.error, "fetch failed"))
        return Ok(None)

    def current_branch(self) -> str | None:
        """Get current branch name.

        Returns None if detached HEAD or error.
        """
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def differs_from(self, ref: str) -> Result[bool, GitError]:
        """Check whether the working tree differs from `ref`.

        `git diff --quiet` exits 1 when there are differences; any other
        non-zero code is a real failure (e.g. unknown ref).
        """
        result = self._run(["diff", "--quiet", ref])
        match result:
            case Ok(_):
                return Ok(False)
            case Err(e) if e.returncode == 1:
                return Ok(True)
            case Err(e):
                return Err(_git_error(f"diff {ref}", e, "diff failed"))

    def add(self, paths: list[Path]) -> Result[None, GitError]:
        """Stage files."""
        result = self._run(["add", "--", *(str(p) for p in paths)])
        if isinstance(result, Err):
            return Err(_git_error("add", result.error, "add failed"))
        return Ok(None)

    def commit(self, message: str) -> Result[None, GitError]:
        """Commit staged changes."""
        result = self._run(["commit", "-q", "-m", message])
        if isinstance(result, Err):
            return Err(_git_error("commit", result.error, "commit failed"))
        return Ok(None)

    def push(
        self, url: str, refspec: str, *, redact: tuple[str, ...] = ()
    ) -> Result[None, GitError]:
        """Push `refspec` to `url`.

        `url` may embed credentials; every string in `redact` (the secret in
        each form it appears in the URL) is masked in the returned error.
        """
        result = self._run(["push", "-q", url, refspec])
        if isinstance(result, Err):
            err = _git_error("push", result.error, "push failed")
            return Err(
                GitError(
                    command=err.command,
                    message=_mask(err.message, redact),
                    returncode=err.returncode,
                )
            )
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)


def _git_error(command: str, error: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=error.stderr.strip() or error.stdout.strip() or fallback,
        returncode=error.returncode,
    )


def _mask(text: str, secrets: tuple[str, ...]) -> str:
    # Longest first; one form of the secret may contain another.
    for secret in sorted((s for s in secrets if s), key=len, reverse=True):
        text = text.replace(secret, "***")
    return text
