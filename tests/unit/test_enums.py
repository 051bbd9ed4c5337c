"""Tests for hcb_common.enums — values are part of the REST payloads."""

from src.hcb_common.enums import FetchErrorKind, HomeStatus, PinStoreBackend, TriggerReason


class TestAllEnumsAreStr:
    """All enums inherit from (str, Enum) for JSON serialization."""

    def test_fetch_error_kind_is_str(self) -> None:
        assert isinstance(FetchErrorKind.SERVER_ERROR, str)
        assert FetchErrorKind.SERVER_ERROR == "server_error"

    def test_home_status_is_str(self) -> None:
        assert isinstance(HomeStatus.READY, str)
        assert HomeStatus.READY == "ready"


class TestMembers:
    def test_fetch_error_kinds_are_closed(self) -> None:
        assert {kind.value for kind in FetchErrorKind} == {
            "cancelled",
            "network_unreachable",
            "server_error",
            "other",
        }

    def test_home_statuses(self) -> None:
        assert [status.value for status in HomeStatus] == ["loading", "offline", "empty", "ready"]

    def test_trigger_reasons(self) -> None:
        assert {reason.value for reason in TriggerReason} == {
            "focus",
            "refresh",
            "prefetch",
            "reconnect",
        }

    def test_pin_store_backend_from_setting(self) -> None:
        assert PinStoreBackend("redis") is PinStoreBackend.REDIS
        assert PinStoreBackend("file") is PinStoreBackend.FILE
