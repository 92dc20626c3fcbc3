"""Cross-layer contracts for the release bounded context."""

from __future__ import annotations

from typing import Protocol

from relcut.release.planner import ReleaseType


class Prompter(Protocol):
    """Interactive input the release flow may ask for.

    The CLI backs this with terminal prompts; tests use canned answers.
    """

    def select_release_type(self, *, project: str, current: str) -> ReleaseType | None:
        """Pick patch/minor/major/custom; None cancels the release."""
        ...

    def ask_version(self) -> str: ...

    def ask_secret(self, message: str) -> str: ...

    def confirm(self, message: str) -> bool: ...
