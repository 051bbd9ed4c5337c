"""FetchScheduler — per-stream cooldown gate for fetch triggers.

Focus events, pull-to-refresh and periodic prefetch can fire within
milliseconds of each other. should_fetch() is a synchronous check-and-set
with no await inside, so on the single event-loop thread two callers can
never both pass the same cooldown window.
"""

import logging

from src.hcb_cache.domain.models import FetchState
from src.hcb_common.clock import Clock
from src.hcb_common.enums import TriggerReason
from src.hcb_network.domain.monitor import NetworkMonitor

logger = logging.getLogger(__name__)


class FetchScheduler:
    def __init__(
        self,
        clock: Clock,
        monitor: NetworkMonitor,
        cooldown: float,
        stream_cooldowns: dict[str, float] | None = None,
    ) -> None:
        self._clock = clock
        self._monitor = monitor
        self._default_cooldown = cooldown
        self._stream_cooldowns = dict(stream_cooldowns or {})
        self._states: dict[str, FetchState] = {}

    def should_fetch(self, stream_id: str, reason: TriggerReason | None = None) -> bool:
        trigger = reason.value if reason else "direct"
        if not self._monitor.is_online:
            logger.debug("Skip %s fetch (%s): offline", stream_id, trigger)
            return False

        state = self._state(stream_id)
        now = self._clock()
        if state.last_attempt_at is not None and now - state.last_attempt_at < state.cooldown:
            logger.debug(
                "Skip %s fetch (%s): cooldown %.1fs remaining",
                stream_id,
                trigger,
                state.cooldown - (now - state.last_attempt_at),
            )
            return False

        state.last_attempt_at = now
        return True

    def last_attempt_at(self, stream_id: str) -> float | None:
        state = self._states.get(stream_id)
        return state.last_attempt_at if state else None

    def reset(self, stream_id: str) -> None:
        self._states.pop(stream_id, None)

    def _state(self, stream_id: str) -> FetchState:
        state = self._states.get(stream_id)
        if state is None:
            cooldown = self._stream_cooldowns.get(stream_id, self._default_cooldown)
            state = FetchState(last_attempt_at=None, cooldown=cooldown)
            self._states[stream_id] = state
        return state
