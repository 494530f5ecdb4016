"""Local filesystem helpers."""

from .archives import UnpackError, UnpackResult, is_archive, unpack
from .files import atomic_write_text, file_digest

__all__ = [
    "UnpackError",
    "UnpackResult",
    "is_archive",
    "unpack",
    "atomic_write_text",
    "file_digest",
]
