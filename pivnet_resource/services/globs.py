"""Selection of product files by the get step's ``globs``."""

from __future__ import annotations

from fnmatch import fnmatchcase

from pivnet_resource.core.errors import ResourceError
from pivnet_resource.core.result import Err, Ok, Result
from pivnet_resource.pivnet.models import ProductFile

__all__ = ["select_product_files"]


def select_product_files(
    files: list[ProductFile],
    globs: list[str] | None,
) -> Result[list[ProductFile], ResourceError]:
    """Return the files whose name matches at least one glob.

    ``globs=None`` selects every file and ``[]`` selects none. Each glob
    must match something, otherwise a typo would silently download nothing.
    Result order follows ``files``.
    """
    if globs is None:
        return Ok(list(files))

    for pattern in globs:
        if not any(fnmatchcase(f.file_name, pattern) for f in files):
            return Err(
                ResourceError(
                    kind="no_match",
                    message=f"no product files match glob: '{pattern}'",
                    hint=_available_hint(files),
                )
            )

    return Ok([f for f in files if any(fnmatchcase(f.file_name, p) for p in globs)])


def _available_hint(files: list[ProductFile]) -> str | None:
    if not files:
        return None
    return "available: " + ", ".join(f.file_name for f in files)
