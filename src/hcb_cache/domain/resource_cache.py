"""ResourceCache — keyed stale-while-revalidate store.

Every key owns a private slot holding the current CacheEntry snapshot,
the fetcher last used for it, at most one tracked in-flight task and its
subscribers. Callers only ever see frozen CacheEntry snapshots; all state
changes go through the methods below and are followed by a synchronous
notification of the key's subscribers.

Write ordering uses generations drawn from one counter:
  - every fetch takes a generation when it starts,
  - mutate() takes a generation when it writes,
  - invalidate() takes a generation when it marks the key stale.
A result is committed only if its generation is newer than the last
committed one, so a slow response that started before a newer write is
discarded. A fetch that started before the latest invalidation is
superseded: the next request starts a fresh fetch instead of joining it.
"""

import asyncio
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from src.hcb_cache.domain.error_reporter import ErrorReporter
from src.hcb_cache.domain.models import CacheEntry, Fetcher
from src.hcb_common.clock import Clock
from src.hcb_common.enums import FetchErrorKind
from src.hcb_common.errors import FetchError, NoFetcherError
from src.hcb_network.domain.monitor import NetworkMonitor

logger = logging.getLogger(__name__)

Subscriber = Callable[[CacheEntry], None]


@dataclass
class _Slot:
    entry: CacheEntry
    fetcher: Fetcher | None = None
    stream: str | None = None
    task: asyncio.Task | None = None
    task_generation: int = 0
    committed_generation: int = 0
    attempted_generation: int = 0
    stale_generation: int = 0
    subscribers: list[Subscriber] = field(default_factory=list)

    @property
    def superseded(self) -> bool:
        return self.task is not None and self.task_generation < self.stale_generation


class ResourceCache:
    def __init__(
        self,
        fetcher: Fetcher | None = None,
        *,
        clock: Clock,
        monitor: NetworkMonitor | None = None,
        reporter: ErrorReporter | None = None,
        dedupe_interval: float = 0.0,
    ) -> None:
        self._default_fetcher = fetcher
        self._clock = clock
        self._monitor = monitor
        self._reporter = reporter
        self._dedupe_interval = dedupe_interval
        self._slots: dict[str, _Slot] = {}
        self._generations = itertools.count(1)
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, key: str) -> CacheEntry:
        slot = self._slots.get(key)
        return slot.entry if slot is not None else CacheEntry(key=key)

    def keys(self) -> list[str]:
        return list(self._slots)

    def is_in_flight(self, key: str) -> bool:
        slot = self._slots.get(key)
        return slot is not None and slot.task is not None

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def request(
        self,
        key: str,
        fetcher: Fetcher | None = None,
        *,
        stream: str | None = None,
        force: bool = False,
    ) -> "asyncio.Future[CacheEntry]":
        """Start (or join) a fetch for ``key``.

        The returned future resolves to the entry after the shared fetch
        settles and never raises fetch errors; they are recorded on the
        entry instead. It is shielded, so cancelling one waiter does not
        cancel the fetch other subscribers are waiting on. When no fetch
        is needed (offline, deduped, closed) it is already resolved with
        the current entry.
        """
        task = self._start(key, fetcher, stream, force)
        if task is None:
            done: asyncio.Future[CacheEntry] = asyncio.get_running_loop().create_future()
            done.set_result(self.get(key))
            return done
        return asyncio.shield(task)

    def preload(
        self,
        key: str,
        fetcher: Fetcher | None = None,
        *,
        stream: str | None = None,
    ) -> None:
        """Fire-and-forget warming with the same dedup rules as request()."""
        self._start(key, fetcher, stream, force=False)

    def _start(
        self,
        key: str,
        fetcher: Fetcher | None,
        stream: str | None,
        force: bool,
    ) -> asyncio.Task | None:
        slot = self._slot(key)
        fetcher = fetcher or slot.fetcher or self._default_fetcher
        if fetcher is None:
            raise NoFetcherError(key)
        slot.fetcher = fetcher
        if stream is not None:
            slot.stream = stream

        if self._closed:
            return None
        if slot.task is not None and not slot.superseded:
            return slot.task
        if self._monitor is not None and not self._monitor.is_online:
            logger.debug("Offline, serving cached %s", key)
            return None

        entry = slot.entry
        if (
            not force
            and not entry.is_stale
            and entry.last_fetched_at is not None
            and self._clock() - entry.last_fetched_at < self._dedupe_interval
        ):
            return None

        generation = next(self._generations)
        started_at = self._clock()
        task = asyncio.get_running_loop().create_task(
            self._run(key, slot, fetcher, generation, started_at),
            name=f"fetch:{key}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        slot.task = task
        slot.task_generation = generation
        self._update(slot, is_loading=True)
        return task

    async def _run(
        self,
        key: str,
        slot: _Slot,
        fetcher: Fetcher,
        generation: int,
        started_at: float,
    ) -> CacheEntry:
        try:
            value = await fetcher(key)
        except asyncio.CancelledError:
            self._update(slot, **self._release(slot, generation))
            raise
        except Exception as exc:
            self._fail(key, slot, generation, FetchError.wrap(key, exc))
        else:
            self._commit(slot, generation, value, started_at)
        return slot.entry

    def _commit(self, slot: _Slot, generation: int, value: Any, started_at: float) -> None:
        changes = self._release(slot, generation)
        slot.attempted_generation = max(slot.attempted_generation, generation)
        if generation <= slot.committed_generation:
            logger.debug(
                "Discarding stale response for %s (generation %d <= %d)",
                slot.entry.key,
                generation,
                slot.committed_generation,
            )
        else:
            slot.committed_generation = generation
            changes.update(value=value, last_fetched_at=started_at, last_error=None)
        self._update(slot, **changes)

    def _fail(self, key: str, slot: _Slot, generation: int, error: FetchError) -> None:
        if error.kind is FetchErrorKind.NETWORK_UNREACHABLE and self._monitor is not None:
            self._monitor.note_unreachable()

        changes = self._release(slot, generation)
        if error.kind is not FetchErrorKind.CANCELLED:
            slot.attempted_generation = max(slot.attempted_generation, generation)
            if generation > slot.committed_generation:
                changes["last_error"] = error
        self._update(slot, **changes)

        if self._reporter is not None:
            self._reporter.report(slot.stream or key, error)

    def _release(self, slot: _Slot, generation: int) -> dict[str, Any]:
        if slot.task_generation != generation:
            return {}
        slot.task = None
        return {"is_loading": False}

    # ------------------------------------------------------------------
    # Writes and invalidation
    # ------------------------------------------------------------------

    def mutate(self, key: str, value: Any) -> CacheEntry:
        """Local write; wins over any fetch that started before it."""
        slot = self._slot(key)
        generation = next(self._generations)
        slot.committed_generation = generation
        slot.attempted_generation = generation
        self._update(slot, value=value, last_fetched_at=self._clock(), last_error=None)
        return slot.entry

    def invalidate(self, predicate: Callable[[str], bool]) -> list[str]:
        """Mark matching entries stale. Values are kept; nothing is fetched here."""
        matched = [key for key in self._slots if predicate(key)]
        for key in matched:
            slot = self._slots[key]
            slot.stale_generation = next(self._generations)
            self._update(slot)
        if matched:
            logger.debug("Invalidated %d cache entries", len(matched))
        return matched

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, key: str, callback: Subscriber) -> Callable[[], None]:
        slot = self._slot(key)
        slot.subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in slot.subscribers:
                slot.subscribers.remove(callback)

        return unsubscribe

    def subscriber_count(self, key: str) -> int:
        slot = self._slots.get(key)
        return len(slot.subscribers) if slot is not None else 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        for slot in self._slots.values():
            slot.subscribers.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _slot(self, key: str) -> _Slot:
        slot = self._slots.get(key)
        if slot is None:
            slot = _Slot(entry=CacheEntry(key=key))
            self._slots[key] = slot
        return slot

    def _update(self, slot: _Slot, **changes: Any) -> None:
        changes["is_stale"] = slot.stale_generation > slot.committed_generation
        changes["needs_revalidation"] = (
            slot.attempted_generation == 0
            or slot.stale_generation > slot.attempted_generation
        )
        slot.entry = replace(slot.entry, **changes)
        for callback in list(slot.subscribers):
            try:
                callback(slot.entry)
            except Exception:
                logger.exception("Subscriber for %s failed", slot.entry.key)
