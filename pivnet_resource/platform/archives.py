"""Archive extraction for get steps with ``unpack: true``.

Supports .zip, .tar, .tar.gz/.tgz and .tar.xz/.txz. Entries that would land
outside the destination (absolute paths, ``..``, links) are skipped.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import stat
import tarfile
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from pivnet_resource.core.result import Err, Ok, Result

__all__ = ["UnpackError", "UnpackResult", "is_archive", "unpack"]

_TAR_MODES = {
    ".tar.gz": "r:gz",
    ".tgz": "r:gz",
    ".tar.xz": "r:xz",
    ".txz": "r:xz",
    ".tar": "r:",
}


@dataclass(frozen=True, slots=True)
class UnpackError:
    archive: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.archive}"


@dataclass(frozen=True, slots=True)
class UnpackResult:
    dest_dir: Path
    files_count: int


def _tar_mode(name: str) -> str | None:
    lowered = name.lower()
    for suffix, mode in _TAR_MODES.items():
        if lowered.endswith(suffix):
            return mode
    return None


def is_archive(path: Path) -> bool:
    # Path.suffixes misreads names like "product-1.2.3.zip", so match on the name.
    return path.name.lower().endswith(".zip") or _tar_mode(path.name) is not None


def unpack(archive: Path, dest_dir: Path) -> Result[UnpackResult, UnpackError]:
    """Extract ``archive`` into ``dest_dir``, keeping existing files."""
    if not archive.exists():
        return Err(UnpackError(archive=archive, message="Archive not found"))

    if archive.name.lower().endswith(".zip"):
        return _extract_zip(archive, dest_dir)
    mode = _tar_mode(archive.name)
    if mode is not None:
        return _extract_tar(archive, dest_dir, mode)
    return Err(
        UnpackError(archive=archive, message=f"Unsupported archive format: {archive.suffix}")
    )


def _safe_relative_path(member_name: str) -> Path | None:
    normalized = member_name.replace("\\", "/")
    if normalized.startswith("/"):
        return None
    parts = PurePosixPath(normalized).parts
    if not parts:
        return None
    if any(part in {"", ".", ".."} for part in parts):
        return None
    if parts[0].endswith(":"):
        return None
    return Path(*parts)


def _is_within_root(root: Path, target: Path) -> bool:
    try:
        return target.resolve().is_relative_to(root.resolve())
    except OSError:
        return False


def _extract_tar(archive: Path, dest_dir: Path, mode: str) -> Result[UnpackResult, UnpackError]:
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        root = dest_dir.resolve()
        files_count = 0

        with tarfile.open(archive, mode) as tar:  # type: ignore[call-overload]
            for member in tar.getmembers():
                # Only regular files; links and devices are dropped
                if not member.isreg():
                    continue
                rel_path = _safe_relative_path(member.name)
                if rel_path is None:
                    continue
                full_path = dest_dir / rel_path
                if not _is_within_root(root, full_path):
                    continue

                src = tar.extractfile(member)
                if src is None:
                    continue
                full_path.parent.mkdir(parents=True, exist_ok=True)
                with src, open(full_path, "wb") as dst:
                    shutil.copyfileobj(src, dst)

                perms = member.mode & 0o777
                if perms:
                    with contextlib.suppress(OSError):
                        os.chmod(full_path, perms)
                files_count += 1

        return Ok(UnpackResult(dest_dir=dest_dir, files_count=files_count))
    except tarfile.TarError as e:
        return Err(UnpackError(archive=archive, message=f"Tar extraction failed: {e}"))
    except OSError as e:
        return Err(UnpackError(archive=archive, message=f"IO error: {e}"))


def _extract_zip(archive: Path, dest_dir: Path) -> Result[UnpackResult, UnpackError]:
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        root = dest_dir.resolve()
        files_count = 0

        with zipfile.ZipFile(archive, "r") as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue
                rel_path = _safe_relative_path(info.filename)
                if rel_path is None:
                    continue
                unix_attrs = info.external_attr >> 16
                if (unix_attrs & 0o170000) == stat.S_IFLNK:
                    continue
                full_path = dest_dir / rel_path
                if not _is_within_root(root, full_path):
                    continue

                full_path.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(full_path, "wb") as dst:
                    shutil.copyfileobj(src, dst)

                if unix_attrs & 0o777:
                    with contextlib.suppress(OSError):
                        full_path.chmod(unix_attrs & 0o777)
                files_count += 1

        return Ok(UnpackResult(dest_dir=dest_dir, files_count=files_count))
    except zipfile.BadZipFile as e:
        return Err(UnpackError(archive=archive, message=f"Invalid zip file: {e}"))
    except OSError as e:
        return Err(UnpackError(archive=archive, message=f"IO error: {e}"))
