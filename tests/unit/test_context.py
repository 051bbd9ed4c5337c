"""Unit tests for SyncContext construction and teardown."""

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

from config.settings import Settings
from src.context import SyncContext
from src.hcb_common.enums import FetchErrorKind
from src.hcb_common.errors import FetchError
from src.hcb_network.infrastructure.connectivity import ConnectivityFeed
from src.hcb_pins.infrastructure.persistence import JsonFilePinnedPersistence
from tests.support import ControlledFetcher, ManualClock, settle


async def _create(fetcher: Any, **kwargs: Any) -> SyncContext:
    return await SyncContext.create(
        fetcher=fetcher,
        clock=kwargs.pop("clock", ManualClock()),
        config=kwargs.pop(
            "config", Settings(FETCH_COOLDOWN_MS=10_000, DEDUPING_INTERVAL_MS=2_000)
        ),
        **kwargs,
    )


class TestCreate:
    async def test_restores_pins(self, persistence: AsyncMock) -> None:
        persistence.load.return_value = ["org_2", "org_1"]
        ctx = await _create(AsyncMock(), persistence=persistence)

        assert ctx.pins.pinned_ids == ("org_2", "org_1")
        await ctx.close()

    async def test_unreadable_pin_file_does_not_abort_startup(self, tmp_path: Path) -> None:
        path = tmp_path / "pins.json"
        path.write_bytes(b"\x80\x81")

        ctx = await _create(AsyncMock(), persistence=JsonFilePinnedPersistence(path))

        assert ctx.pins.pinned_ids == ()
        assert ctx.pins.persistence_degraded is True
        await ctx.close()

    async def test_monitor_follows_connectivity_source(self) -> None:
        feed = ConnectivityFeed()
        feed.publish(False)
        ctx = await _create(AsyncMock(), connectivity=feed)

        assert ctx.monitor.is_online is False
        feed.publish(True)
        assert ctx.monitor.is_online is True
        await ctx.close()

    async def test_without_source_monitor_is_optimistic(self) -> None:
        ctx = await _create(AsyncMock())
        assert ctx.monitor.is_online is True
        assert ctx.monitor.is_known is False
        await ctx.close()

    async def test_cooldown_comes_from_settings(self) -> None:
        clock = ManualClock()
        ctx = await _create(AsyncMock(), clock=clock)

        assert ctx.scheduler.should_fetch("organizations") is True
        clock.advance(9.9)
        assert ctx.scheduler.should_fetch("organizations") is False
        clock.advance(0.1)
        assert ctx.scheduler.should_fetch("organizations") is True
        await ctx.close()

    async def test_cache_uses_default_fetcher(self) -> None:
        fetcher = AsyncMock(return_value={"id": "usr_1"})
        ctx = await _create(fetcher)

        entry = await ctx.cache.request("user")

        assert entry.value == {"id": "usr_1"}
        fetcher.assert_awaited_once_with("user")
        await ctx.close()

    async def test_unreachable_fetch_flips_unknown_monitor(self) -> None:
        fetcher = AsyncMock(side_effect=FetchError(FetchErrorKind.NETWORK_UNREACHABLE, "user"))
        ctx = await _create(fetcher)

        await ctx.cache.request("user")

        assert ctx.monitor.is_online is False
        await ctx.close()


class TestClose:
    async def test_close_cancels_in_flight_fetches(self) -> None:
        fetcher = ControlledFetcher()
        ctx = await _create(fetcher)
        ctx.cache.preload("user/organizations")
        await settle()
        assert ctx.cache.is_in_flight("user/organizations") is True

        await ctx.close()

        entry = ctx.cache.get("user/organizations")
        assert ctx.cache.is_in_flight("user/organizations") is False
        assert entry.is_loading is False
        assert entry.last_error is None
