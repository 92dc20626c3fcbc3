"""Keep a Changelog rewriting.

`apply_release` turns the `## Unreleased` section of a changelog into a dated
release section and keeps the compare-link table at the bottom in sync:

    ## [Unreleased]                         ## [Unreleased]
    ### Fixed                        ->
    - y                                     ## [v1.1.0] - 2024-02-01
                                            ### Fixed
    ## [v1.0.0] - 2024-01-01                - y
    ...
                                            ## [v1.0.0] - 2024-01-01
    [Unreleased]: .../v1.0.0...HEAD         ...

                                            [Unreleased]: .../v1.1.0...HEAD
                                            [v1.1.0]: .../v1.0.0...v1.1.0

The document is scanned line by line; spans are line indices and the new
text is rebuilt by slicing, so nothing outside the released section and the
`[Unreleased]:` link line is touched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from relcut.core.result import Err, Ok, Result
from relcut.release.errors import KEEP_A_CHANGELOG_URL, ReleaseError, ReleaseErrorKind

__all__ = [
    "DEFAULT_TEMPLATE",
    "ChangelogUpdate",
    "UnreleasedSpan",
    "apply_release",
    "find_unreleased",
]

DEFAULT_TEMPLATE = f"""# Changelog
All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog]({KEEP_A_CHANGELOG_URL})
and this project adheres to [Semantic Versioning](http://semver.org/spec/v2.0.0.html).

## Unreleased
"""

_UNRELEASED_HEADING_RE = re.compile(r"^## \[?Unreleased\]?")
_SECTION_PREFIX = "## "
_CATEGORY_PREFIX = "### "
_UNRELEASED_LINK_PREFIX = "[Unreleased]:"


@dataclass(frozen=True, slots=True)
class UnreleasedSpan:
    """Line span of the Unreleased section: heading at `start`, ends before `end`."""

    start: int
    end: int
    is_first_release: bool


@dataclass(frozen=True, slots=True)
class ChangelogUpdate:
    new_text: str
    release_notes: str
    is_first_release: bool
    changed_text: str
    changed_link: str
    unreleased_link: str


def find_unreleased(lines: list[str]) -> UnreleasedSpan | None:
    start = next(
        (i for i, line in enumerate(lines) if _UNRELEASED_HEADING_RE.match(line)),
        None,
    )
    if start is None:
        return None

    end = next(
        (i for i in range(start + 1, len(lines)) if lines[i].startswith(_SECTION_PREFIX)),
        len(lines),
    )
    return UnreleasedSpan(start=start, end=end, is_first_release=end == len(lines))


def _error(kind: ReleaseErrorKind, message: str) -> Err[ReleaseError]:
    return Err(ReleaseError(kind=kind, message=message, hint=KEEP_A_CHANGELOG_URL))


def apply_release(
    text: str,
    *,
    new_tag: str,
    old_tag: str,
    repo_link: str,
    iso_date: str,
) -> Result[ChangelogUpdate, ReleaseError]:
    """Cut the Unreleased section of `text` into a `new_tag` release.

    Pure: the same inputs always give the same output. Running it again on
    its own output fails, since the fresh Unreleased section is empty.
    """
    lines = text.split("\n")

    span = find_unreleased(lines)
    if span is None:
        return _error(
            "no_unreleased_section",
            "Changelog does not have an 'Unreleased' section!",
        )

    body = lines[span.start + 1 : span.end]
    if not any(line.startswith(_CATEGORY_PREFIX) for line in body):
        return _error(
            "empty_unreleased_section",
            "There are no changes in the 'Unreleased' section of the Changelog!",
        )

    first = span.is_first_release
    if not first and not any(line.startswith(_UNRELEASED_LINK_PREFIX) for line in lines):
        return _error(
            "missing_unreleased_link",
            "There is no link on the 'Unreleased' section of the Changelog!",
        )

    link_label = new_tag if first else f"[{new_tag}]"
    released_body = "\n".join(body).strip()
    changed_text = f"## {link_label} - {iso_date}\n{released_body}"
    changed_link = "" if first else f"{link_label}: {repo_link}/compare/{old_tag}...{new_tag}"
    unreleased_link = f"{_UNRELEASED_LINK_PREFIX} {repo_link}/compare/{new_tag}...HEAD"

    new_lines = [
        *lines[: span.start],
        "## [Unreleased]",
        "",
        *changed_text.split("\n"),
        "",
        *lines[span.end :],
    ]
    if first:
        new_lines += [unreleased_link, ""]
    else:
        link_at = next(
            i for i, line in enumerate(new_lines) if line.startswith(_UNRELEASED_LINK_PREFIX)
        )
        new_lines[link_at : link_at + 1] = [unreleased_link, changed_link]

    release_notes = released_body if first else f"{released_body}\n\n{changed_link}"

    return Ok(
        ChangelogUpdate(
            new_text="\n".join(new_lines),
            release_notes=release_notes,
            is_first_release=first,
            changed_text=changed_text,
            changed_link=changed_link,
            unreleased_link=unreleased_link,
        )
    )
