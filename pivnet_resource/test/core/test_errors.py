"""Tests for pivnet_resource.core.errors module."""

import pytest

from pivnet_resource.core.errors import ErrorCode, ResourceError


class TestErrorCode:
    def test_values(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.NETWORK_ERROR == 4
        assert ErrorCode.IO_ERROR == 5

    def test_str(self) -> None:
        assert str(ErrorCode.NETWORK_ERROR) == "network error"

    def test_is_success(self) -> None:
        assert ErrorCode.OK.is_success is True
        assert ErrorCode.USER_ERROR.is_success is False
        assert ErrorCode.IO_ERROR.is_error is True


class TestResourceError:
    @pytest.mark.parametrize(
        ("kind", "code"),
        [
            ("missing_field", ErrorCode.USER_ERROR),
            ("invalid_input", ErrorCode.USER_ERROR),
            ("release_exists", ErrorCode.USER_ERROR),
            ("not_found", ErrorCode.NETWORK_ERROR),
            ("unauthorized", ErrorCode.NETWORK_ERROR),
            ("storage_failed", ErrorCode.NETWORK_ERROR),
            ("no_match", ErrorCode.IO_ERROR),
            ("multiple_matches", ErrorCode.IO_ERROR),
            ("checksum_mismatch", ErrorCode.IO_ERROR),
        ],
    )
    def test_exit_code_by_kind(self, kind: str, code: ErrorCode) -> None:
        error = ResourceError(kind=kind, message="m")  # type: ignore[arg-type]
        assert error.exit_code == code

    def test_str_is_message(self) -> None:
        error = ResourceError(kind="missing_field", message="api_token must be provided")
        assert str(error) == "api_token must be provided"

    def test_hint_defaults_to_none(self) -> None:
        assert ResourceError(kind="io_failed", message="x").hint is None

    def test_is_frozen(self) -> None:
        error = ResourceError(kind="io_failed", message="x")
        with pytest.raises(AttributeError):
            error.message = "y"  # type: ignore[misc]
