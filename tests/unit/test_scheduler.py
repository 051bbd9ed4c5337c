"""Unit tests for FetchScheduler cooldown gating."""

from src.hcb_cache.domain.scheduler import FetchScheduler
from src.hcb_common.enums import TriggerReason
from src.hcb_network.domain.monitor import NetworkMonitor
from src.hcb_network.infrastructure.connectivity import ConnectivityFeed
from tests.support import ManualClock


def _make_scheduler(
    clock: ManualClock,
    monitor: NetworkMonitor,
    stream_cooldowns: dict[str, float] | None = None,
) -> FetchScheduler:
    return FetchScheduler(clock, monitor, cooldown=10.0, stream_cooldowns=stream_cooldowns)


class TestShouldFetch:
    def test_first_attempt_allowed_and_recorded(
        self, clock: ManualClock, monitor: NetworkMonitor
    ) -> None:
        scheduler = _make_scheduler(clock, monitor)
        assert scheduler.should_fetch("organizations") is True
        assert scheduler.last_attempt_at("organizations") == clock.now

    def test_second_attempt_inside_cooldown_refused_without_update(
        self, clock: ManualClock, monitor: NetworkMonitor
    ) -> None:
        scheduler = _make_scheduler(clock, monitor)
        scheduler.should_fetch("organizations", TriggerReason.REFRESH)
        first_attempt = scheduler.last_attempt_at("organizations")

        clock.advance(0.005)
        assert scheduler.should_fetch("organizations", TriggerReason.FOCUS) is False
        assert scheduler.last_attempt_at("organizations") == first_attempt

        clock.advance(9.9)
        assert scheduler.should_fetch("organizations") is False
        assert scheduler.last_attempt_at("organizations") == first_attempt

    def test_allowed_again_once_cooldown_elapsed(
        self, clock: ManualClock, monitor: NetworkMonitor
    ) -> None:
        scheduler = _make_scheduler(clock, monitor)
        scheduler.should_fetch("organizations")
        clock.advance(10.0)
        assert scheduler.should_fetch("organizations") is True
        assert scheduler.last_attempt_at("organizations") == clock.now

    def test_streams_cool_down_independently(
        self, clock: ManualClock, monitor: NetworkMonitor
    ) -> None:
        scheduler = _make_scheduler(clock, monitor)
        assert scheduler.should_fetch("organizations") is True
        assert scheduler.should_fetch("invitations") is True
        assert scheduler.should_fetch("organizations") is False
        assert scheduler.should_fetch("invitations") is False

    def test_per_stream_cooldown_override(
        self, clock: ManualClock, monitor: NetworkMonitor
    ) -> None:
        scheduler = _make_scheduler(clock, monitor, stream_cooldowns={"prefetch": 60.0})
        scheduler.should_fetch("prefetch")
        scheduler.should_fetch("organizations")
        clock.advance(30)
        assert scheduler.should_fetch("organizations") is True
        assert scheduler.should_fetch("prefetch") is False

    def test_offline_refuses_without_side_effect(
        self, clock: ManualClock, monitor: NetworkMonitor, feed: ConnectivityFeed
    ) -> None:
        scheduler = _make_scheduler(clock, monitor)
        feed.publish(False)

        for stream in ("organizations", "invitations", "prefetch"):
            assert scheduler.should_fetch(stream) is False
            assert scheduler.last_attempt_at(stream) is None

        feed.publish(True)
        assert scheduler.should_fetch("organizations") is True

    def test_reset_forgets_last_attempt(
        self, clock: ManualClock, monitor: NetworkMonitor
    ) -> None:
        scheduler = _make_scheduler(clock, monitor)
        scheduler.should_fetch("organizations")
        scheduler.reset("organizations")
        assert scheduler.last_attempt_at("organizations") is None
        assert scheduler.should_fetch("organizations") is True
