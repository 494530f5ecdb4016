"""Records returned by the Pivotal Network API.

Only the fields the resource reads or writes are modelled. ``from_dict``
returns None when a record lacks its identifying fields.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import PurePosixPath

from pivnet_resource.core.structured import StrDict, get_bool, get_int, get_str, get_table

__all__ = ["Release", "ProductFile", "ReleaseDependency"]


@dataclass(frozen=True, slots=True)
class Release:
    id: int | None
    version: str
    release_type: str | None = None
    release_date: str | None = None
    release_notes_url: str | None = None
    description: str | None = None
    eula_slug: str | None = None
    availability: str | None = None
    controlled: bool = False
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Release | None:
        version = get_str(data, "version")
        if version is None:
            return None
        eula = get_table(data, "eula")
        return cls(
            id=get_int(data, "id"),
            version=version,
            release_type=get_str(data, "release_type"),
            release_date=get_str(data, "release_date"),
            release_notes_url=get_str(data, "release_notes_url"),
            description=get_str(data, "description"),
            eula_slug=get_str(eula, "slug") if eula is not None else None,
            availability=get_str(data, "availability"),
            controlled=get_bool(data, "controlled"),
            updated_at=get_str(data, "updated_at"),
        )

    def with_id(self, release_id: int) -> Release:
        return replace(self, id=release_id)

    def to_dict(self) -> StrDict:
        """Serialize in the shape the API accepts on create."""
        data: StrDict = {"version": self.version}
        if self.id is not None:
            data["id"] = self.id
        optional = {
            "release_type": self.release_type,
            "release_date": self.release_date,
            "release_notes_url": self.release_notes_url,
            "description": self.description,
            "availability": self.availability,
            "updated_at": self.updated_at,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if self.eula_slug is not None:
            data["eula"] = {"slug": self.eula_slug}
        data["controlled"] = self.controlled
        return data


@dataclass(frozen=True, slots=True)
class ProductFile:
    id: int | None
    name: str
    aws_object_key: str
    file_type: str | None = None
    file_version: str | None = None
    description: str | None = None
    sha256: str | None = None
    md5: str | None = None
    download_url: str | None = None

    @property
    def file_name(self) -> str:
        """Name of the file on disk: the last component of the object key."""
        return PurePosixPath(self.aws_object_key).name

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ProductFile | None:
        key = get_str(data, "aws_object_key")
        if key is None:
            return None
        links = get_table(data, "_links") or {}
        download = get_table(links, "download") or {}
        return cls(
            id=get_int(data, "id"),
            name=get_str(data, "name") or PurePosixPath(key).name,
            aws_object_key=key,
            file_type=get_str(data, "file_type"),
            file_version=get_str(data, "file_version"),
            description=get_str(data, "description"),
            sha256=get_str(data, "sha256"),
            md5=get_str(data, "md5"),
            download_url=get_str(download, "href"),
        )

    def with_id(self, product_file_id: int) -> ProductFile:
        return replace(self, id=product_file_id)

    def to_dict(self) -> StrDict:
        data: StrDict = {"name": self.name, "aws_object_key": self.aws_object_key}
        if self.id is not None:
            data["id"] = self.id
        optional = {
            "file_type": self.file_type,
            "file_version": self.file_version,
            "description": self.description,
            "sha256": self.sha256,
            "md5": self.md5,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data


@dataclass(frozen=True, slots=True)
class ReleaseDependency:
    """A release another release depends on."""

    release_id: int | None
    version: str
    product_slug: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseDependency | None:
        release = get_table(data, "release")
        if release is None:
            return None
        version = get_str(release, "version")
        if version is None:
            return None
        product = get_table(release, "product") or {}
        return cls(
            release_id=get_int(release, "id"),
            version=version,
            product_slug=get_str(product, "slug"),
        )

    def to_dict(self) -> StrDict:
        return {
            "release": {
                "id": self.release_id,
                "version": self.version,
                "product": {"slug": self.product_slug},
            }
        }
