"""Release metadata: response pairs, the put step's metadata file, and
the ``metadata.json`` written by get steps."""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pivnet_resource.concourse.models import Metadata
from pivnet_resource.core.errors import ResourceError
from pivnet_resource.core.result import Err, Ok, Result
from pivnet_resource.core.structured import StrDict, as_str_dict, get_str, get_table
from pivnet_resource.pivnet.models import ProductFile, Release, ReleaseDependency

__all__ = [
    "MetadataFile",
    "ReleaseFields",
    "ProductFileFields",
    "release_metadata",
    "load_metadata_file",
    "metadata_json",
]


def release_metadata(release: Release) -> list[Metadata]:
    """Name/value pairs Concourse shows next to a version."""
    pairs = [
        ("version", release.version),
        ("release_type", release.release_type),
        ("release_date", release.release_date),
        ("description", release.description),
        ("release_notes_url", release.release_notes_url),
        ("eula_slug", release.eula_slug),
        ("availability", release.availability),
        ("controlled", str(release.controlled).lower()),
    ]
    return [Metadata(name=name, value=value) for name, value in pairs if value]


@dataclass(frozen=True, slots=True)
class ReleaseFields:
    """Release attributes a put step may set. None means "not given"."""

    release_type: str | None = None
    release_date: str | None = None
    release_notes_url: str | None = None
    description: str | None = None
    eula_slug: str | None = None
    availability: str | None = None
    controlled: bool | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseFields:
        controlled = data.get("controlled")
        return cls(
            release_type=get_str(data, "release_type"),
            release_date=get_str(data, "release_date"),
            release_notes_url=get_str(data, "release_notes_url"),
            description=get_str(data, "description"),
            eula_slug=get_str(data, "eula_slug"),
            availability=get_str(data, "availability"),
            controlled=controlled if isinstance(controlled, bool) else None,
        )


@dataclass(frozen=True, slots=True)
class ProductFileFields:
    name: str | None = None
    file_type: str | None = None
    file_version: str | None = None
    description: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ProductFileFields:
        return cls(
            name=get_str(data, "upload_as") or get_str(data, "name"),
            file_type=get_str(data, "file_type"),
            file_version=get_str(data, "file_version"),
            description=get_str(data, "description"),
        )


@dataclass(frozen=True, slots=True)
class MetadataFile:
    """Parsed ``metadata_file`` of a put step.

    Layout (JSON, or TOML when the file name ends in ``.toml``)::

        {
          "release": {"release_type": "...", "eula_slug": "...", ...},
          "product_file": {"upload_as": "...", "file_type": "...", ...}
        }
    """

    release: ReleaseFields = ReleaseFields()
    product_file: ProductFileFields = ProductFileFields()


def _parse(path: Path, text: str) -> Result[StrDict, ResourceError]:
    try:
        if path.name.lower().endswith(".toml"):
            data_obj: object = tomllib.loads(text)
        else:
            data_obj = json.loads(text)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        return Err(
            ResourceError(kind="invalid_input", message=f"invalid metadata file {path}: {e}")
        )

    data = as_str_dict(data_obj)
    if data is None:
        return Err(
            ResourceError(
                kind="invalid_input",
                message=f"invalid metadata file {path}: expected an object at the top level",
            )
        )
    return Ok(data)


def load_metadata_file(path: Path) -> Result[MetadataFile, ResourceError]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(
            ResourceError(kind="io_failed", message=f"metadata file could not be read: {e}")
        )

    parsed = _parse(path, text)
    if isinstance(parsed, Err):
        return parsed

    data = parsed.value
    return Ok(
        MetadataFile(
            release=ReleaseFields.from_dict(get_table(data, "release") or {}),
            product_file=ProductFileFields.from_dict(get_table(data, "product_file") or {}),
        )
    )


def metadata_json(
    release: Release,
    product_files: list[ProductFile],
    dependencies: list[ReleaseDependency],
) -> str:
    """Contents of the ``metadata.json`` a get step leaves next to the files."""
    data: StrDict = {
        "release": release.to_dict(),
        "product_files": [f.to_dict() for f in product_files],
        "dependencies": [d.to_dict() for d in dependencies],
    }
    return json.dumps(data, indent=2, sort_keys=True) + "\n"
