from __future__ import annotations

import io
import tarfile
import zipfile
from pathlib import Path

import pytest

from pivnet_resource.core.result import Err, Ok
from pivnet_resource.platform.archives import is_archive, unpack


def _make_zip(path: Path, entries: dict[str, bytes]) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return path


def _make_tar(path: Path, mode: str, entries: dict[str, bytes]) -> Path:
    with tarfile.open(path, mode) as tar:
        for name, data in entries.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return path


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("tile.zip", True),
        ("cli-1.2.3.tgz", True),
        ("stemcell.tar.gz", True),
        ("bundle.tar.xz", True),
        ("image.tar", True),
        ("product-1.2.3.pivotal", False),
        ("notes.txt", False),
    ],
)
def test_is_archive(name: str, expected: bool) -> None:
    assert is_archive(Path(name)) is expected


def test_unpack_zip(tmp_path: Path) -> None:
    archive = _make_zip(tmp_path / "a.zip", {"bin/tool": b"#!", "README": b"hi"})
    dest = tmp_path / "out"

    result = unpack(archive, dest)

    assert isinstance(result, Ok)
    assert result.value.files_count == 2
    assert (dest / "bin" / "tool").read_bytes() == b"#!"


@pytest.mark.parametrize(("suffix", "mode"), [(".tgz", "w:gz"), (".tar.xz", "w:xz"), (".tar", "w")])
def test_unpack_tar(tmp_path: Path, suffix: str, mode: str) -> None:
    archive = _make_tar(tmp_path / f"a{suffix}", mode, {"dir/file.txt": b"content"})
    dest = tmp_path / "out"

    result = unpack(archive, dest)

    assert isinstance(result, Ok)
    assert (dest / "dir" / "file.txt").read_text() == "content"


def test_unpack_keeps_existing_files(tmp_path: Path) -> None:
    dest = tmp_path / "out"
    dest.mkdir()
    (dest / "version").write_text("1.0")
    archive = _make_zip(tmp_path / "a.zip", {"x": b"1"})

    unpack(archive, dest)

    assert (dest / "version").read_text() == "1.0"


def test_unpack_skips_traversal(tmp_path: Path) -> None:
    archive = _make_tar(tmp_path / "evil.tar", "w", {"../escape.txt": b"x", "ok.txt": b"y"})
    dest = tmp_path / "out"

    result = unpack(archive, dest)

    assert isinstance(result, Ok)
    assert result.value.files_count == 1
    assert not (tmp_path / "escape.txt").exists()


def test_unpack_missing_archive(tmp_path: Path) -> None:
    result = unpack(tmp_path / "missing.zip", tmp_path / "out")
    assert isinstance(result, Err)
    assert result.error.message == "Archive not found"


def test_unpack_corrupt_zip(tmp_path: Path) -> None:
    archive = tmp_path / "bad.zip"
    archive.write_bytes(b"not a zip")
    result = unpack(archive, tmp_path / "out")
    assert isinstance(result, Err)
    assert "Invalid zip file" in result.error.message
