from __future__ import annotations

import os
from pathlib import Path

import pytest

from relcut.platform.files import atomic_write_text


def test_atomic_write_text_creates_parent_dirs(tmp_path: Path) -> None:
    path = tmp_path / "docs" / "CHANGELOG.md"
    atomic_write_text(path, "# Changelog\n")

    assert path.read_text(encoding="utf-8") == "# Changelog\n"


def test_atomic_write_text_keeps_line_endings(tmp_path: Path) -> None:
    path = tmp_path / "package.json"
    path.write_text("{}", encoding="utf-8")

    atomic_write_text(path, '{\r\n  "version": "1.0.1"\r\n}\r\n')

    assert path.read_bytes() == b'{\r\n  "version": "1.0.1"\r\n}\r\n'


def test_atomic_write_text_leaves_original_on_failure(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    path = tmp_path / "CHANGELOG.md"
    path.write_text("original", encoding="utf-8")

    def fail_replace(_src: Path, _dst: Path) -> None:
        raise OSError("replace failed")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(OSError, match="replace failed"):
        atomic_write_text(path, "rewritten")

    assert path.read_text(encoding="utf-8") == "original"
    assert list(tmp_path.glob(".CHANGELOG.md.*.tmp")) == []
