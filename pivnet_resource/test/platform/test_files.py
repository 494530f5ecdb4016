from __future__ import annotations

import hashlib
from pathlib import Path

from pivnet_resource.platform.files import atomic_write_text, file_digest


def test_atomic_write_text_creates_parents(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "version"
    atomic_write_text(target, "1.2.3")
    assert target.read_text(encoding="utf-8") == "1.2.3"
    assert [p.name for p in target.parent.iterdir()] == ["version"]


def test_atomic_write_text_replaces(tmp_path: Path) -> None:
    target = tmp_path / "metadata.json"
    target.write_text("old", encoding="utf-8")
    atomic_write_text(target, "new")
    assert target.read_text(encoding="utf-8") == "new"


def test_file_digest(tmp_path: Path) -> None:
    path = tmp_path / "blob"
    path.write_bytes(b"pivnet")
    assert file_digest(path, "sha256") == hashlib.sha256(b"pivnet").hexdigest()
    assert file_digest(path, "md5") == hashlib.md5(b"pivnet").hexdigest()
