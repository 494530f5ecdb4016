"""Exit codes and the error value shared by check, in and out.

Concourse only distinguishes zero from non-zero, but distinct codes make the
failure class obvious when the resource is run by hand.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Literal

__all__ = ["ErrorCode", "ResourceError", "ResourceErrorKind"]


class ErrorCode(IntEnum):
    """Exit codes for the check/in/out commands.

    - 0: Success
    - 1: User error (missing or invalid configuration, bad request JSON)
    - 4: Network error (release service or blob store call failed)
    - 5: I/O error (version file, metadata file, destination directory)
    """

    OK = 0
    USER_ERROR = 1
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK


ResourceErrorKind = Literal[
    "invalid_input",
    "missing_field",
    "release_exists",
    "not_found",
    "unauthorized",
    "rate_limited",
    "remote_failed",
    "storage_failed",
    "no_match",
    "multiple_matches",
    "checksum_mismatch",
    "io_failed",
]

_EXIT_CODES: dict[str, ErrorCode] = {
    "invalid_input": ErrorCode.USER_ERROR,
    "missing_field": ErrorCode.USER_ERROR,
    "release_exists": ErrorCode.USER_ERROR,
    "not_found": ErrorCode.NETWORK_ERROR,
    "unauthorized": ErrorCode.NETWORK_ERROR,
    "rate_limited": ErrorCode.NETWORK_ERROR,
    "remote_failed": ErrorCode.NETWORK_ERROR,
    "storage_failed": ErrorCode.NETWORK_ERROR,
    "no_match": ErrorCode.IO_ERROR,
    "multiple_matches": ErrorCode.IO_ERROR,
    "checksum_mismatch": ErrorCode.IO_ERROR,
    "io_failed": ErrorCode.IO_ERROR,
}


@dataclass(frozen=True, slots=True)
class ResourceError:
    """A failure of check, in or out, ready to be shown to the pipeline user."""

    kind: ResourceErrorKind
    message: str
    hint: str | None = None

    @property
    def exit_code(self) -> ErrorCode:
        return _EXIT_CODES.get(self.kind, ErrorCode.USER_ERROR)

    def __str__(self) -> str:
        return self.message
