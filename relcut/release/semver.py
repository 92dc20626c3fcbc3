from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal


ReleaseBump = Literal["major", "minor", "patch"]

_SEMVER_RE = re.compile(
    r"^v?(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)"
    r"(?:-((?:0|[1-9][0-9]*|[0-9]*[A-Za-z-][0-9A-Za-z-]*)(?:\.(?:0|[1-9][0-9]*|[0-9]*[A-Za-z-][0-9A-Za-z-]*))*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@dataclass(frozen=True, slots=True)
class SemVer:
    """A SemVer 2.0.0 version.

    Equality is structural (build metadata included); ordering follows SemVer
    precedence, which ignores build metadata.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    def __str__(self) -> str:
        out = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            out += "-" + ".".join(self.prerelease)
        if self.build:
            out += "+" + ".".join(self.build)
        return out

    def to_tag(self, prefix: str = "v") -> str:
        return f"{prefix}{self}"

    def bump(self, kind: ReleaseBump) -> SemVer:
        """Next release of the given kind, pre-release and build dropped.

        A pre-release that already sits on the target bumps to that release:
        1.3.0-rc.1 minor -> 1.3.0, not 1.4.0.
        """
        match kind:
            case "major":
                if self.prerelease and self.minor == 0 and self.patch == 0:
                    return SemVer(self.major, 0, 0)
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                if self.prerelease and self.patch == 0:
                    return SemVer(self.major, self.minor, 0)
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                if self.prerelease:
                    return SemVer(self.major, self.minor, self.patch)
                return SemVer(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")

    def compare(self, other: SemVer) -> int:
        """Return -1, 0 or 1 by SemVer precedence."""
        left = (self.major, self.minor, self.patch)
        right = (other.major, other.minor, other.patch)
        if left != right:
            return -1 if left < right else 1
        return _compare_prerelease(self.prerelease, other.prerelease)

    def __lt__(self, other: SemVer) -> bool:
        return self.compare(other) < 0

    def __le__(self, other: SemVer) -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: SemVer) -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: SemVer) -> bool:
        return self.compare(other) >= 0


def parse_version(text: str) -> SemVer | None:
    """Parse `1.2.3`, `v1.2.3-rc.1+build.5`; None when not valid SemVer."""
    m = _SEMVER_RE.match(text.strip())
    if m is None:
        return None
    prerelease = tuple(m.group(4).split(".")) if m.group(4) else ()
    build = tuple(m.group(5).split(".")) if m.group(5) else ()
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), prerelease, build)


def _compare_prerelease(a: tuple[str, ...], b: tuple[str, ...]) -> int:
    # A release outranks any of its pre-releases.
    if not a or not b:
        if a == b:
            return 0
        return 1 if not a else -1

    for x, y in zip(a, b):
        if x == y:
            continue
        x_num, y_num = x.isdigit(), y.isdigit()
        if x_num and y_num:
            return -1 if int(x) < int(y) else 1
        if x_num != y_num:
            # Numeric identifiers sort before alphanumeric ones.
            return -1 if x_num else 1
        return -1 if x < y else 1

    if len(a) == len(b):
        return 0
    return -1 if len(a) < len(b) else 1
