"""Git operations used by a release.

Usage:
    from relcut.git import Repository

    repo = Repository(Path("."))
    branch = repo.current_branch()
"""

from relcut.git.repository import (
    GitError,
    Repository,
    VcsGateway,
)

__all__ = [
    "GitError",
    "Repository",
    "VcsGateway",
]
