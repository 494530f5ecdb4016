"""Concourse request/response contract."""

from .models import (
    CheckRequest,
    InParams,
    InRequest,
    InResponse,
    Metadata,
    OutParams,
    OutRequest,
    OutResponse,
    Source,
    Version,
    check_response_json,
    parse_request_json,
)
from .validation import validate_check, validate_in, validate_out

__all__ = [
    "CheckRequest",
    "InParams",
    "InRequest",
    "InResponse",
    "Metadata",
    "OutParams",
    "OutRequest",
    "OutResponse",
    "Source",
    "Version",
    "check_response_json",
    "parse_request_json",
    "validate_check",
    "validate_in",
    "validate_out",
]
