"""Error types for the release bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

KEEP_A_CHANGELOG_URL = "http://keepachangelog.com/en/1.0.0/"
SEMVER_URL = "https://semver.org/"

ReleaseErrorKind = Literal[
    "configuration_invalid",
    "version_invalid",
    "changelog_missing",
    "no_unreleased_section",
    "empty_unreleased_section",
    "missing_unreleased_link",
    "permission_denied",
    "remote_mismatch",
    "hook_failed",
    "transport_failed",
    "assets_not_found",
    "io_failed",
    "aborted",
]

# Kinds that end the run without a failure exit code.
ABORT_KINDS: frozenset[ReleaseErrorKind] = frozenset({"aborted", "changelog_missing"})


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical release error payload.

    `kind` is the tag callers branch on; `message` is the single line shown
    to the operator and `hint` an optional pointer (URL, path, command).
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    @property
    def is_abort(self) -> bool:
        return self.kind in ABORT_KINDS

    def pretty(self) -> str:
        """Single-line rendering; multi-line git or hook output is joined with ` | `."""
        message = _one_line(self.message)
        hint = _one_line(self.hint) if self.hint else ""
        if hint:
            return f"{message} (see: {hint})"
        return message


def _one_line(text: str) -> str:
    return " | ".join(line.strip() for line in text.splitlines() if line.strip())


def aborted(message: str = "Aborted") -> ReleaseError:
    return ReleaseError(kind="aborted", message=message)
