from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path

from relcut.core.result import Err, Ok, Result
from relcut.core.structured import as_str_dict, get_str
from relcut.release.errors import ReleaseError

_VERSION_FIELD_RE = re.compile(r'"version"\s*:\s*"([^"]*)"')


@dataclass(frozen=True, slots=True)
class VersionFileInfo:
    version: str
    name: str | None


def read_version_file(path: Path) -> Result[VersionFileInfo, ReleaseError]:
    """Read the current version (and package name, when JSON) from `path`."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(
            ReleaseError(
                kind="configuration_invalid",
                message=f"Version file {path.name} not found",
                hint=str(path),
            )
        )
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"Unable to read version file {path.name}: {e}",
                hint=str(path),
            )
        )

    m = _VERSION_FIELD_RE.search(text)
    if m is None:
        return Err(
            ReleaseError(
                kind="configuration_invalid",
                message=f'No "version" field in {path.name}',
                hint=str(path),
            )
        )

    name: str | None = None
    try:
        data = as_str_dict(json.loads(text))
    except json.JSONDecodeError:
        data = None
    if data is not None:
        name = get_str(data, "name")

    return Ok(VersionFileInfo(version=m.group(1), name=name))


def replace_version(text: str, version: str) -> str | None:
    """Rewrite the first `"version": "..."` field; None if there is none."""
    m = _VERSION_FIELD_RE.search(text)
    if m is None:
        return None
    return f'{text[: m.start()]}"version": "{version}"{text[m.end() :]}'
