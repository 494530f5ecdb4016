"""Request and response envelopes exchanged with Concourse.

Concourse writes one JSON object to stdin and reads one JSON value from
stdout. The dataclasses here mirror that contract; parsing is lenient about
types (wrong-typed values read as missing) and validation of required fields
happens separately in ``concourse.validation``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

from pivnet_resource.core.errors import ResourceError
from pivnet_resource.core.result import Err, Ok, Result
from pivnet_resource.core.structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "DEFAULT_ENDPOINT",
    "DEFAULT_REGION",
    "SORT_BY_VALUES",
    "SortBy",
    "Source",
    "Version",
    "Metadata",
    "CheckRequest",
    "InParams",
    "InRequest",
    "OutParams",
    "OutRequest",
    "InResponse",
    "OutResponse",
    "parse_request_json",
    "check_response_json",
]

DEFAULT_ENDPOINT = "https://network.pivotal.io"
DEFAULT_REGION = "eu-west-1"

SortBy = Literal["none", "semver"]
SORT_BY_VALUES: tuple[str, ...] = ("none", "semver")


@dataclass(frozen=True, slots=True)
class Source:
    """The ``source`` block of a resource definition."""

    api_token: str | None = None
    product_slug: str | None = None
    product_version: str | None = None
    endpoint: str = DEFAULT_ENDPOINT
    access_key_id: str | None = None
    secret_access_key: str | None = None
    session_token: str | None = None
    bucket: str | None = None
    region: str = DEFAULT_REGION
    s3_endpoint: str | None = None
    release_type: str | None = None
    # Kept as the raw string so validation can reject unknown values.
    sort_by: str = "none"
    skip_ssl_verification: bool = False
    copy_metadata: bool = False
    verbose: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Source:
        return cls(
            api_token=get_str(data, "api_token"),
            product_slug=get_str(data, "product_slug"),
            product_version=get_str(data, "product_version"),
            endpoint=(get_str(data, "endpoint") or DEFAULT_ENDPOINT).rstrip("/"),
            access_key_id=get_str(data, "access_key_id"),
            secret_access_key=get_str(data, "secret_access_key"),
            session_token=get_str(data, "session_token"),
            bucket=get_str(data, "bucket"),
            region=get_str(data, "region") or DEFAULT_REGION,
            s3_endpoint=get_str(data, "s3_endpoint"),
            release_type=get_str(data, "release_type"),
            sort_by=get_str(data, "sort_by") or "none",
            skip_ssl_verification=get_bool(data, "skip_ssl_verification"),
            copy_metadata=get_bool(data, "copy_metadata"),
            verbose=get_bool(data, "verbose"),
        )


@dataclass(frozen=True, slots=True)
class Version:
    product_version: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object] | None) -> Version:
        if data is None:
            return cls()
        return cls(product_version=get_str(data, "product_version"))

    def to_dict(self) -> dict[str, str]:
        return {"product_version": self.product_version or ""}


@dataclass(frozen=True, slots=True)
class Metadata:
    name: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True, slots=True)
class CheckRequest:
    source: Source
    version: Version


@dataclass(frozen=True, slots=True)
class InParams:
    """``params`` of a get step.

    ``globs`` is None when the key is absent (download every file) and an
    empty list when the pipeline asked for no files at all.
    """

    globs: list[str] | None = None
    unpack: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, object] | None) -> InParams:
        if data is None:
            return cls()
        return cls(globs=get_str_list(data, "globs"), unpack=get_bool(data, "unpack"))


@dataclass(frozen=True, slots=True)
class InRequest:
    source: Source
    version: Version
    params: InParams


@dataclass(frozen=True, slots=True)
class OutParams:
    """``params`` of a put step."""

    file_glob: str | None = None
    s3_filepath_prefix: str | None = None
    version_file: str | None = None
    metadata_file: str | None = None
    override: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, object] | None) -> OutParams:
        if data is None:
            return cls()
        return cls(
            file_glob=get_str(data, "file_glob"),
            s3_filepath_prefix=get_str(data, "s3_filepath_prefix"),
            version_file=get_str(data, "version_file"),
            metadata_file=get_str(data, "metadata_file"),
            override=get_bool(data, "override"),
        )


@dataclass(frozen=True, slots=True)
class OutRequest:
    source: Source
    params: OutParams


def _empty_metadata() -> list[Metadata]:
    return []


@dataclass(frozen=True, slots=True)
class InResponse:
    version: Version
    metadata: list[Metadata] = field(default_factory=_empty_metadata)

    def to_json(self) -> str:
        return json.dumps(_response_dict(self.version, self.metadata))


@dataclass(frozen=True, slots=True)
class OutResponse:
    version: Version
    metadata: list[Metadata] = field(default_factory=_empty_metadata)

    def to_json(self) -> str:
        return json.dumps(_response_dict(self.version, self.metadata))


def _response_dict(version: Version, metadata: list[Metadata]) -> StrDict:
    data: StrDict = {"version": version.to_dict()}
    if metadata:
        data["metadata"] = [m.to_dict() for m in metadata]
    return data


def check_response_json(versions: list[Version]) -> str:
    return json.dumps([v.to_dict() for v in versions])


def _load_object(raw: str) -> Result[StrDict, ResourceError]:
    try:
        data_obj: object = json.loads(raw)
    except json.JSONDecodeError as e:
        return Err(ResourceError(kind="invalid_input", message=f"invalid request JSON: {e}"))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(
            ResourceError(kind="invalid_input", message="invalid request JSON: expected an object")
        )
    return Ok(data)


def parse_request_json(
    raw: str,
    kind: Literal["check", "in", "out"],
) -> Result[CheckRequest | InRequest | OutRequest, ResourceError]:
    """Parse the stdin payload of one of the three commands."""
    loaded = _load_object(raw)
    if isinstance(loaded, Err):
        return loaded

    data = loaded.value
    source = Source.from_dict(get_table(data, "source") or {})
    version = Version.from_dict(get_table(data, "version"))
    params = get_table(data, "params")

    match kind:
        case "check":
            return Ok(CheckRequest(source=source, version=version))
        case "in":
            return Ok(InRequest(source=source, version=version, params=InParams.from_dict(params)))
        case "out":
            return Ok(OutRequest(source=source, params=OutParams.from_dict(params)))
