"""Fail-fast validation of requests, run before any network call."""

from __future__ import annotations

from pivnet_resource.concourse.models import (
    SORT_BY_VALUES,
    CheckRequest,
    InRequest,
    OutRequest,
    Source,
)
from pivnet_resource.core.errors import ResourceError
from pivnet_resource.core.result import Err, Ok, Result

__all__ = ["validate_check", "validate_in", "validate_out"]


def _missing(field_name: str) -> Err[ResourceError]:
    return Err(ResourceError(kind="missing_field", message=f"{field_name} must be provided"))


def _validate_source(source: Source) -> Result[None, ResourceError]:
    if source.api_token is None:
        return _missing("api_token")
    if source.product_slug is None:
        return _missing("product_slug")
    if source.sort_by not in SORT_BY_VALUES:
        return Err(
            ResourceError(
                kind="invalid_input",
                message=f"sort_by must be one of: {', '.join(SORT_BY_VALUES)}",
                hint=f"got: '{source.sort_by}'",
            )
        )
    return Ok(None)


def validate_check(request: CheckRequest) -> Result[None, ResourceError]:
    return _validate_source(request.source)


def validate_in(request: InRequest) -> Result[None, ResourceError]:
    result = _validate_source(request.source)
    if isinstance(result, Err):
        return result
    if request.version.product_version is None:
        return _missing("version.product_version")
    return Ok(None)


def validate_out(request: OutRequest) -> Result[None, ResourceError]:
    """Validate a put request.

    The upload settings are all-or-nothing: a file glob needs the blob store
    credentials, bucket and prefix, and a prefix without a glob is rejected.
    """
    result = _validate_source(request.source)
    if isinstance(result, Err):
        return result

    source = request.source
    params = request.params

    if params.version_file is None:
        return _missing("version_file")

    if params.file_glob is None:
        if params.s3_filepath_prefix is not None:
            return _missing("file_glob")
        return Ok(None)

    if params.s3_filepath_prefix is None:
        return _missing("s3_filepath_prefix")
    if source.access_key_id is None:
        return _missing("access_key_id")
    if source.secret_access_key is None:
        return _missing("secret_access_key")
    if source.bucket is None:
        return _missing("bucket")
    return Ok(None)
