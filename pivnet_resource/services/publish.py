"""The ``out`` operation: create a release and optionally attach one uploaded file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from pivnet_resource.concourse.models import OutRequest, OutResponse, Source, Version
from pivnet_resource.core.errors import ResourceError
from pivnet_resource.core.result import Err, Ok, Result
from pivnet_resource.output.console import ConsoleProtocol
from pivnet_resource.pivnet.client import PivnetClient
from pivnet_resource.pivnet.models import ProductFile, Release
from pivnet_resource.platform.files import file_digest
from pivnet_resource.services.metadata import (
    MetadataFile,
    ProductFileFields,
    load_metadata_file,
    release_metadata,
)
from pivnet_resource.services.semver import sort_versions
from pivnet_resource.storage.upload import UploadedFile, Uploader, match_single_file

__all__ = ["PublishService", "S3_PRODUCT_FILES_PREFIX", "read_version_file", "build_release"]

S3_PRODUCT_FILES_PREFIX = "product_files"
DEFAULT_FILE_TYPE = "Software"


def read_version_file(path: Path) -> Result[str, ResourceError]:
    try:
        version = path.read_text(encoding="utf-8").strip()
    except OSError as e:
        return Err(
            ResourceError(kind="io_failed", message=f"version file could not be read: {e}")
        )
    if not version:
        return Err(ResourceError(kind="invalid_input", message=f"version file is empty: {path}"))
    return Ok(version)


def build_release(
    version: str,
    metadata: MetadataFile,
    source: Source,
    template: Release | None,
) -> Release:
    """Assemble the release to create.

    Precedence per field: metadata file, then ``source.release_type``, then
    ``template`` (the newest existing release, only when ``copy_metadata``
    is set).
    """
    fields = metadata.release
    base = template if source.copy_metadata else None

    release_type = fields.release_type or source.release_type
    release_notes_url = fields.release_notes_url
    description = fields.description
    eula_slug = fields.eula_slug
    availability = fields.availability
    controlled = fields.controlled

    if base is not None:
        release_type = release_type or base.release_type
        release_notes_url = release_notes_url or base.release_notes_url
        description = description or base.description
        eula_slug = eula_slug or base.eula_slug
        availability = availability or base.availability
        if controlled is None:
            controlled = base.controlled

    return Release(
        id=None,
        version=version,
        release_type=release_type,
        release_date=fields.release_date,
        release_notes_url=release_notes_url,
        description=description,
        eula_slug=eula_slug,
        availability=availability,
        controlled=bool(controlled),
    )


def _newest_other(releases: list[Release], version: str, sort_by: str) -> Release | None:
    """Newest release other than ``version``, ordered as check orders them."""
    others = [r for r in releases if r.version != version]
    ordered = sort_versions([r.version for r in others], sort_by)
    if not ordered:
        return None
    return next(r for r in others if r.version == ordered[0])


@dataclass(frozen=True, slots=True)
class PublishService:
    client: PivnetClient
    console: ConsoleProtocol
    uploader: Uploader | None = None

    def run(self, request: OutRequest, sources_dir: Path) -> Result[OutResponse, ResourceError]:
        source = request.source
        params = request.params
        product_slug = source.product_slug or ""

        version_result = read_version_file(sources_dir / (params.version_file or ""))
        if isinstance(version_result, Err):
            return version_result
        version = version_result.value

        metadata = MetadataFile()
        if params.metadata_file is not None:
            loaded = load_metadata_file(sources_dir / params.metadata_file)
            if isinstance(loaded, Err):
                return loaded
            metadata = loaded.value

        # Local inputs are resolved before anything remote changes.
        artifact: Path | None = None
        if params.file_glob is not None:
            if self.uploader is None:
                return Err(ResourceError(kind="missing_field", message="bucket must be provided"))
            matched = match_single_file(params.file_glob, sources_dir)
            if isinstance(matched, Err):
                return matched
            artifact = matched.value

        listed = self.client.releases(product_slug)
        if isinstance(listed, Err):
            return Err(listed.error.to_resource_error())

        existing = next((r for r in listed.value if r.version == version), None)
        template = _newest_other(listed.value, version, source.sort_by)

        if existing is not None:
            replaced = self._replace_existing(product_slug, existing, override=params.override)
            if isinstance(replaced, Err):
                return replaced

        release = build_release(version, metadata, source, template)
        self.console.info(f"Creating release {product_slug} {version}")
        created = self.client.create_release(product_slug, release)
        if isinstance(created, Err):
            return Err(created.error.to_resource_error())

        if artifact is not None:
            attached = self._attach_file(
                product_slug,
                created.value,
                artifact=artifact,
                prefix=params.s3_filepath_prefix or "",
                fields=metadata.product_file,
            )
            if isinstance(attached, Err):
                return attached

        self.console.success(f"Created release {product_slug} {version}")
        return Ok(
            OutResponse(
                version=Version(product_version=version),
                metadata=release_metadata(created.value),
            )
        )

    def _replace_existing(
        self,
        product_slug: str,
        existing: Release,
        *,
        override: bool,
    ) -> Result[None, ResourceError]:
        if not override:
            return Err(
                ResourceError(
                    kind="release_exists",
                    message=f"release already exists with version: '{existing.version}'",
                    hint="set params.override: true to replace it",
                )
            )
        if existing.id is None:
            return Err(
                ResourceError(
                    kind="remote_failed",
                    message=f"release {existing.version} has no id",
                )
            )

        self.console.warning(f"Deleting existing release {product_slug} {existing.version}")
        deleted = self.client.delete_release(product_slug, existing.id)
        if isinstance(deleted, Err):
            return Err(deleted.error.to_resource_error())
        return Ok(None)

    def _attach_file(
        self,
        product_slug: str,
        release: Release,
        *,
        artifact: Path,
        prefix: str,
        fields: ProductFileFields,
    ) -> Result[ProductFile, ResourceError]:
        if self.uploader is None:
            return Err(ResourceError(kind="missing_field", message="bucket must be provided"))
        if release.id is None:
            return Err(ResourceError(kind="remote_failed", message="created release has no id"))

        to = str(PurePosixPath(S3_PRODUCT_FILES_PREFIX) / prefix.strip("/"))
        uploaded = self.uploader.upload(artifact, to)
        if isinstance(uploaded, Err):
            return uploaded

        registered = self._register(product_slug, release, uploaded.value, fields)
        if isinstance(registered, Err):
            # Uploaded but unregistered objects are removed.
            removed = self.uploader.remove(uploaded.value)
            if isinstance(removed, Err):
                self.console.warning(removed.error.message)
        return registered

    def _register(
        self,
        product_slug: str,
        release: Release,
        uploaded: UploadedFile,
        fields: ProductFileFields,
    ) -> Result[ProductFile, ResourceError]:
        try:
            sha256 = file_digest(uploaded.local_path, "sha256")
            md5 = file_digest(uploaded.local_path, "md5")
        except OSError as e:
            message = f"could not read {uploaded.local_path}: {e}"
            return Err(ResourceError(kind="io_failed", message=message))

        product_file = ProductFile(
            id=None,
            name=fields.name or uploaded.local_path.name,
            aws_object_key=uploaded.key,
            file_type=fields.file_type or DEFAULT_FILE_TYPE,
            file_version=fields.file_version or release.version,
            description=fields.description,
            sha256=sha256,
            md5=md5,
        )

        created = self.client.create_product_file(product_slug, product_file)
        if isinstance(created, Err):
            return Err(created.error.to_resource_error())
        if created.value.id is None:
            message = "created product file has no id"
            return Err(ResourceError(kind="remote_failed", message=message))

        self.console.debug(f"attaching product file {created.value.id} to release {release.id}")
        added = self.client.add_product_file(product_slug, release.id or 0, created.value.id)
        if isinstance(added, Err):
            return Err(added.error.to_resource_error())
        return Ok(created.value)
