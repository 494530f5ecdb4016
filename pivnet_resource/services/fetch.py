"""The ``in`` operation: download one release into the destination directory."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pivnet_resource.concourse.models import InRequest, InResponse, Version
from pivnet_resource.core.errors import ResourceError
from pivnet_resource.core.result import Err, Ok, Result
from pivnet_resource.output.console import ConsoleProtocol
from pivnet_resource.pivnet.client import PivnetClient
from pivnet_resource.pivnet.models import ProductFile, Release, ReleaseDependency
from pivnet_resource.platform.archives import is_archive, unpack
from pivnet_resource.platform.files import atomic_write_text, file_digest
from pivnet_resource.services.globs import select_product_files
from pivnet_resource.services.metadata import metadata_json, release_metadata

__all__ = ["FetchService", "VERSION_FILE", "METADATA_FILE", "verify_checksum"]

VERSION_FILE = "version"
METADATA_FILE = "metadata.json"


def verify_checksum(path: Path, product_file: ProductFile) -> Result[None, ResourceError]:
    """Compare the downloaded file with the digest the release service published.

    sha256 is preferred; md5 is used for older files. Files without either
    are accepted as-is.
    """
    if product_file.sha256 is not None:
        algorithm, expected = "sha256", product_file.sha256
    elif product_file.md5 is not None:
        algorithm, expected = "md5", product_file.md5
    else:
        return Ok(None)

    try:
        actual = file_digest(path, algorithm)
    except OSError as e:
        return Err(ResourceError(kind="io_failed", message=f"could not read {path}: {e}"))

    if actual.lower() != expected.lower():
        return Err(
            ResourceError(
                kind="checksum_mismatch",
                message=f"checksum mismatch for {product_file.file_name}",
                hint=f"expected {algorithm} {expected}, got {actual}",
            )
        )
    return Ok(None)


@dataclass(frozen=True, slots=True)
class FetchService:
    client: PivnetClient
    console: ConsoleProtocol

    def run(self, request: InRequest, dest_dir: Path) -> Result[InResponse, ResourceError]:
        product_slug = request.source.product_slug or ""
        version = request.version.product_version or ""

        found = self.client.release_by_version(product_slug, version)
        if isinstance(found, Err):
            return Err(found.error.to_resource_error())
        release = found.value
        if release.id is None:
            return Err(
                ResourceError(kind="remote_failed", message=f"release {version} has no id")
            )

        self.console.debug(f"accepting EULA for {product_slug} {version}")
        accepted = self.client.accept_eula(product_slug, release.id)
        if isinstance(accepted, Err):
            return Err(accepted.error.to_resource_error())

        listed = self.client.product_files(product_slug, release.id)
        if isinstance(listed, Err):
            return Err(listed.error.to_resource_error())

        selected = select_product_files(listed.value, request.params.globs)
        if isinstance(selected, Err):
            return selected

        unpack_archives = request.params.unpack
        for product_file in selected.value:
            downloaded = self._download(product_file, dest_dir, unpack_archive=unpack_archives)
            if isinstance(downloaded, Err):
                return downloaded

        deps = self.client.release_dependencies(product_slug, release.id)
        if isinstance(deps, Err):
            return Err(deps.error.to_resource_error())

        written = self._write_metadata(dest_dir, release, listed.value, deps.value)
        if isinstance(written, Err):
            return written

        return Ok(
            InResponse(
                version=Version(product_version=release.version),
                metadata=release_metadata(release),
            )
        )

    def _download(
        self,
        product_file: ProductFile,
        dest_dir: Path,
        *,
        unpack_archive: bool,
    ) -> Result[Path, ResourceError]:
        target = dest_dir / product_file.file_name
        self.console.info(f"Downloading {product_file.file_name}")

        downloaded = self.client.download_product_file(product_file, target)
        if isinstance(downloaded, Err):
            target.unlink(missing_ok=True)
            return Err(downloaded.error.to_resource_error())

        verified = verify_checksum(target, product_file)
        if isinstance(verified, Err):
            target.unlink(missing_ok=True)
            return verified

        if unpack_archive and is_archive(target):
            unpacked = unpack(target, dest_dir)
            if isinstance(unpacked, Err):
                return Err(ResourceError(kind="io_failed", message=str(unpacked.error)))
            self.console.debug(f"unpacked {unpacked.value.files_count} files from {target.name}")

        self.console.success(f"Downloaded {product_file.file_name}")
        return Ok(target)

    def _write_metadata(
        self,
        dest_dir: Path,
        release: Release,
        product_files: list[ProductFile],
        dependencies: list[ReleaseDependency],
    ) -> Result[None, ResourceError]:
        try:
            atomic_write_text(dest_dir / VERSION_FILE, release.version)
            atomic_write_text(
                dest_dir / METADATA_FILE,
                metadata_json(release, product_files, dependencies),
            )
        except OSError as e:
            return Err(
                ResourceError(kind="io_failed", message=f"could not write to {dest_dir}: {e}")
            )
        return Ok(None)
