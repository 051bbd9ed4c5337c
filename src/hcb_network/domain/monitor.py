"""NetworkMonitor — current online/offline view fed by a connectivity source.

State starts unknown and is treated as online until either the source
reports a transition or a fetch fails with NETWORK_UNREACHABLE. Source
transitions always win over fetch-derived guesses.
"""

import logging
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]


class ConnectivitySource(Protocol):
    def subscribe(self, callback: Callable[[bool], None]) -> Unsubscribe: ...


class NetworkMonitor:
    def __init__(self, source: ConnectivitySource | None = None) -> None:
        self._source = source
        self._state: bool | None = None
        self._listeners: list[Callable[[bool], None]] = []
        self._source_unsubscribe: Unsubscribe | None = None

    @property
    def is_online(self) -> bool:
        return self._state is not False

    @property
    def is_known(self) -> bool:
        return self._state is not None

    def start(self) -> None:
        if self._source is not None and self._source_unsubscribe is None:
            self._source_unsubscribe = self._source.subscribe(self._on_transition)

    def close(self) -> None:
        if self._source_unsubscribe is not None:
            self._source_unsubscribe()
            self._source_unsubscribe = None
        self._listeners.clear()

    def subscribe(self, listener: Callable[[bool], None]) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def note_unreachable(self) -> None:
        """A fetch hit NETWORK_UNREACHABLE. Only decides while state is unknown."""
        if self._state is None:
            logger.info("First fetch failed unreachable; assuming offline")
            self._set(False)

    def _on_transition(self, online: bool) -> None:
        self._set(bool(online))

    def _set(self, online: bool) -> None:
        previous = self.is_online
        self._state = online
        if previous == online:
            return
        logger.info("Connectivity changed: %s", "online" if online else "offline")
        for listener in list(self._listeners):
            try:
                listener(online)
            except Exception:
                logger.exception("Connectivity listener failed")
