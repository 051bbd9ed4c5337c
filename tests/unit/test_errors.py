"""Tests for hcb_common.errors and hcb_common.response."""

import pytest

from src.hcb_common.enums import FetchErrorKind
from src.hcb_common.errors import (
    AppError,
    FetchError,
    InvalidEntityIdError,
    NoFetcherError,
    PersistenceError,
    ResourceNotCachedError,
)
from src.hcb_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestFetchError:
    @pytest.mark.parametrize(
        ("kind", "code", "status"),
        [
            (FetchErrorKind.CANCELLED, 1001, 499),
            (FetchErrorKind.NETWORK_UNREACHABLE, 1002, 503),
            (FetchErrorKind.SERVER_ERROR, 1003, 502),
            (FetchErrorKind.OTHER, 1004, 500),
        ],
    )
    def test_codes_per_kind(self, kind: FetchErrorKind, code: int, status: int) -> None:
        err = FetchError(kind, "user")
        assert err.code == code
        assert err.http_status == status
        assert err.key == "user"

    def test_message_includes_detail(self) -> None:
        err = FetchError(FetchErrorKind.OTHER, "user", "HTTP 404", status_code=404)
        assert err.message == "Fetch other for user: HTTP 404"
        assert err.status_code == 404

    def test_benign_kinds(self) -> None:
        assert FetchError(FetchErrorKind.CANCELLED, "k").is_benign is True
        assert FetchError(FetchErrorKind.NETWORK_UNREACHABLE, "k").is_benign is True
        assert FetchError(FetchErrorKind.SERVER_ERROR, "k").is_benign is False
        assert FetchError(FetchErrorKind.OTHER, "k").is_benign is False

    def test_wrap_keeps_fetch_errors(self) -> None:
        original = FetchError(FetchErrorKind.SERVER_ERROR, "user")
        assert FetchError.wrap("user", original) is original

    def test_wrap_classifies_unknown_errors_as_other(self) -> None:
        err = FetchError.wrap("user", KeyError("id"))
        assert err.kind is FetchErrorKind.OTHER
        assert "KeyError" in err.message


class TestSpecificErrors:
    def test_persistence(self) -> None:
        err = PersistenceError("disk full")
        assert err.code == 2001
        assert "disk full" in err.message

    def test_no_fetcher(self) -> None:
        assert NoFetcherError("user").code == 3001

    def test_not_cached(self) -> None:
        err = ResourceNotCachedError("user")
        assert err.code == 3002
        assert err.http_status == 404

    def test_invalid_entity(self) -> None:
        err = InvalidEntityIdError("")
        assert err.code == 4001
        assert err.http_status == 422


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"key": "value"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"key": "value"}
        assert resp.offline is False
        assert resp.request_id.startswith("req_")

    def test_success_offline(self) -> None:
        assert success_response([], offline=True).offline is True

    def test_error(self) -> None:
        resp = error_response(3002, "Resource not cached: user")
        assert resp.code == 3002
        assert resp.data is None

    def test_serialization(self) -> None:
        dumped = ApiResponse(code=0, message="ok", data=None).model_dump()
        assert set(dumped) == {"code", "message", "data", "offline", "timestamp", "request_id"}
