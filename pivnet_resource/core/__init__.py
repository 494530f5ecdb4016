"""Core types shared by every layer."""

from .errors import ErrorCode, ResourceError
from .result import Err, Ok, Result

__all__ = [
    "ErrorCode",
    "ResourceError",
    "Err",
    "Ok",
    "Result",
]
