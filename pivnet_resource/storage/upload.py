"""Upload of the single build artifact matched by a put step's file glob."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from pivnet_resource.core.errors import ResourceError
from pivnet_resource.core.result import Err, Ok, Result
from pivnet_resource.output.console import ConsoleProtocol
from pivnet_resource.storage.s3 import ObjectStore

__all__ = ["UploadedFile", "Uploader", "match_single_file"]


@dataclass(frozen=True, slots=True)
class UploadedFile:
    local_path: Path
    bucket: str
    key: str


def match_single_file(file_glob: str, sources_dir: Path) -> Result[Path, ResourceError]:
    """Resolve ``file_glob`` under ``sources_dir`` to exactly one file.

    Directories never match. An ambiguous glob is an error rather than a
    pick of the first match.
    """
    try:
        matches = sorted(p for p in sources_dir.glob(file_glob) if p.is_file())
    except (ValueError, NotImplementedError, OSError) as e:
        return Err(
            ResourceError(kind="invalid_input", message=f"invalid file_glob '{file_glob}': {e}")
        )

    if not matches:
        return Err(
            ResourceError(kind="no_match", message=f"no matches found for pattern: '{file_glob}'")
        )
    if len(matches) > 1:
        listed = ", ".join(str(m) for m in matches)
        return Err(
            ResourceError(
                kind="multiple_matches",
                message=f"more than one match found for pattern: '{file_glob}': [{listed}]",
            )
        )
    return Ok(matches[0])


class Uploader:
    """Uploads a glob-matched file into a bucket."""

    def __init__(self, store: ObjectStore, bucket: str, console: ConsoleProtocol) -> None:
        self._store = store
        self._bucket = bucket
        self._console = console

    def upload(self, local_path: Path, to: str) -> Result[UploadedFile, ResourceError]:
        """Upload ``local_path`` to ``<to>/<file name>``."""
        key = str(PurePosixPath(to) / local_path.name)
        self._console.info(f"Uploading {local_path} to s3://{self._bucket}/{key}")

        result = self._store.upload_file(self._bucket, key, local_path)
        if isinstance(result, Err):
            return Err(result.error.to_resource_error())

        self._console.success(f"Uploaded '{local_path}' to 's3://{self._bucket}/{key}'")
        return Ok(UploadedFile(local_path=local_path, bucket=self._bucket, key=key))

    def remove(self, uploaded: UploadedFile) -> Result[None, ResourceError]:
        """Delete a previously uploaded object."""
        self._console.warning(f"Removing s3://{uploaded.bucket}/{uploaded.key}")
        return self._store.delete_file(uploaded.bucket, uploaded.key).map_err(
            lambda e: e.to_resource_error()
        )
