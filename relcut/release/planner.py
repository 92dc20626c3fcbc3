from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from relcut.core.result import Err, Ok, Result
from relcut.release.errors import SEMVER_URL, ReleaseError
from relcut.release.semver import ReleaseBump, SemVer, parse_version

ReleaseType = Literal["patch", "minor", "major", "custom"]

RELEASE_BUMPS: tuple[ReleaseBump, ...] = ("patch", "minor", "major")


@dataclass(frozen=True, slots=True)
class PlannedVersion:
    version: SemVer
    release_type: ReleaseType


def plan_version(old: SemVer, choice: str) -> Result[PlannedVersion, ReleaseError]:
    """Compute the next version from a bump kind or a literal version.

    `choice` is one of patch/minor/major, or any other string which must parse
    as SemVer and be strictly greater than `old`.
    """
    match choice:
        case "patch" | "minor" | "major":
            return Ok(PlannedVersion(version=old.bump(choice), release_type=choice))
        case _:
            pass

    new = parse_version(choice)
    if new is None:
        return Err(
            ReleaseError(
                kind="version_invalid",
                message=(
                    f"Invalid version specified: {choice}. "
                    "Version must conform to the SemVer specification"
                ),
                hint=SEMVER_URL,
            )
        )

    valid = validate_increase(old, new)
    if isinstance(valid, Err):
        return valid
    return Ok(PlannedVersion(version=new, release_type="custom"))


def validate_increase(old: SemVer, new: SemVer) -> Result[None, ReleaseError]:
    if new <= old:
        return Err(
            ReleaseError(
                kind="version_invalid",
                message=f"New version ({new}) is not greater than existing version ({old})!",
            )
        )
    return Ok(None)
