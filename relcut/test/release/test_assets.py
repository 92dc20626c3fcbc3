from __future__ import annotations

from pathlib import Path

from relcut.core.result import Err, Ok
from relcut.release.assets import resolve_assets


def _touch(root: Path, *names: str) -> None:
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x")


def test_expands_patterns_in_order(tmp_path: Path) -> None:
    _touch(tmp_path, "dist/b.whl", "dist/a.whl", "dist/widget.tar.gz")

    result = resolve_assets(("dist/*.tar.gz", "dist/*.whl"), root=tmp_path)

    assert result == Ok(
        (
            (tmp_path / "dist/widget.tar.gz").resolve(),
            (tmp_path / "dist/a.whl").resolve(),
            (tmp_path / "dist/b.whl").resolve(),
        )
    )


def test_overlapping_patterns_are_deduplicated(tmp_path: Path) -> None:
    _touch(tmp_path, "dist/a.zip")

    result = resolve_assets(("dist/*", "dist/a.zip"), root=tmp_path)

    assert isinstance(result, Ok)
    assert len(result.value) == 1


def test_recursive_glob_skips_directories(tmp_path: Path) -> None:
    _touch(tmp_path, "out/linux/app.bin", "out/mac/app.bin")

    result = resolve_assets(("out/**",), root=tmp_path)

    assert isinstance(result, Ok)
    assert sorted(p.name for p in result.value) == ["app.bin", "app.bin"]


def test_every_pattern_must_match(tmp_path: Path) -> None:
    _touch(tmp_path, "dist/a.zip")

    result = resolve_assets(("dist/*.zip", "dist/*.dmg", "docs/*.pdf"), root=tmp_path)

    assert isinstance(result, Err)
    assert result.error.kind == "assets_not_found"
    assert result.error.message.endswith("dist/*.dmg, docs/*.pdf")
