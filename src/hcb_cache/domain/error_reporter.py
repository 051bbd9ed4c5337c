"""ErrorReporter — per-stream debounced error logging.

A flapping connection can produce an error every second. The reporter
logs the first non-benign error of a stream, then drops further reports
for that stream until the debounce window has elapsed. Dropped reports
are counted and mentioned in the next logged line. The error itself is
still recorded on the cache entry; only the log side effect is debounced.

Benign kinds (CANCELLED, NETWORK_UNREACHABLE) are never logged.
"""

import logging

from src.hcb_cache.domain.models import ErrorDebounceState
from src.hcb_common.clock import Clock
from src.hcb_common.errors import FetchError

logger = logging.getLogger(__name__)


class ErrorReporter:
    def __init__(
        self,
        clock: Clock,
        debounce: float,
        log: logging.Logger | None = None,
    ) -> None:
        self._clock = clock
        self._debounce = debounce
        self._log = log or logger
        self._states: dict[str, ErrorDebounceState] = {}

    def report(self, stream_id: str, error: BaseException, message: str | None = None) -> bool:
        """Return True when the error was logged."""
        if isinstance(error, FetchError) and error.is_benign:
            return False

        state = self._states.get(stream_id)
        if state is None:
            state = ErrorDebounceState(last_logged_at=None, debounce=self._debounce)
            self._states[stream_id] = state

        now = self._clock()
        if state.last_logged_at is not None and now - state.last_logged_at < state.debounce:
            state.suppressed += 1
            return False

        suppressed, state.suppressed = state.suppressed, 0
        state.last_logged_at = now
        self._log.error(
            "%s (%s)%s",
            message or f"Error fetching {stream_id}",
            error,
            f" [{suppressed} similar suppressed]" if suppressed else "",
            exc_info=error,
        )
        return True

    def suppressed_count(self, stream_id: str) -> int:
        state = self._states.get(stream_id)
        return state.suppressed if state else 0
