from __future__ import annotations

import glob
from pathlib import Path

from relcut.core.result import Err, Ok, Result
from relcut.release.errors import ReleaseError


def resolve_assets(patterns: tuple[str, ...], *, root: Path) -> Result[tuple[Path, ...], ReleaseError]:
    """Expand asset globs relative to `root`.

    Every pattern must match at least one file. Matches are de-duplicated and
    keep pattern order, sorted within a pattern.
    """
    found: list[Path] = []
    missing: list[str] = []
    for pattern in patterns:
        matches = sorted(glob.glob(pattern, root_dir=root, recursive=True))
        files = [p for p in (root / m for m in matches) if p.is_file()]
        if not files:
            missing.append(pattern)
            continue
        for path in files:
            resolved = path.resolve()
            if resolved not in found:
                found.append(resolved)

    if missing:
        return Err(
            ReleaseError(
                kind="assets_not_found",
                message=f"One or more assets could not be found: {', '.join(missing)}",
                hint=str(root),
            )
        )
    return Ok(tuple(found))
