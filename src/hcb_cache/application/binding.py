"""ResourceBinding — the per-consumer view of one cache key.

A binding is what a screen holds while it displays a resource:

    orgs = ResourceBinding(cache, "user/organizations", stream="organizations", fallback=[])
    orgs.open()             # subscribe + revalidate on mount
    orgs.read().data        # snapshot; revalidates stale entries
    orgs.refresh()          # forced revalidation (pull-to-refresh)
    orgs.close()            # detach; an in-flight fetch still lands in the cache

A binding with ``key=None`` is inert: it never fetches and always shows
the fallback, which is how a screen expresses "don't fetch yet".
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from src.hcb_cache.domain.models import CacheEntry, Fetcher
from src.hcb_cache.domain.resource_cache import ResourceCache
from src.hcb_common.errors import FetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceView:
    data: Any
    is_loading: bool
    error: FetchError | None
    is_stale: bool
    has_data: bool


class ResourceBinding:
    def __init__(
        self,
        cache: ResourceCache,
        key: str | None,
        *,
        fetcher: Fetcher | None = None,
        stream: str | None = None,
        fallback: Any = None,
        on_change: Callable[[CacheEntry], None] | None = None,
    ) -> None:
        self._cache = cache
        self.key = key
        self._fetcher = fetcher
        self._stream = stream
        self._fallback = fallback
        self._on_change = on_change
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def is_open(self) -> bool:
        return self._unsubscribe is not None

    def open(self) -> None:
        if self.key is None or self._unsubscribe is not None:
            return
        self._unsubscribe = self._cache.subscribe(self.key, self._deliver)
        self.revalidate()

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def read(self) -> ResourceView:
        if self.key is None:
            return ResourceView(self._fallback, False, None, False, False)
        entry = self._cache.get(self.key)
        if self.is_open and entry.needs_revalidation and not entry.is_loading:
            self.revalidate()
            entry = self._cache.get(self.key)
        return self._view(entry)

    @property
    def data(self) -> Any:
        return self.read().data

    @property
    def is_loading(self) -> bool:
        return self.read().is_loading

    @property
    def error(self) -> FetchError | None:
        return self.read().error

    def refresh(self) -> "asyncio.Future[CacheEntry] | None":
        """Forced revalidation: bypasses the dedupe interval."""
        return self.revalidate(force=True)

    def revalidate(self, force: bool = False) -> "asyncio.Future[CacheEntry] | None":
        if self.key is None:
            return None
        return self._cache.request(
            self.key, self._fetcher, stream=self._stream, force=force
        )

    def _view(self, entry: CacheEntry) -> ResourceView:
        data = entry.value if entry.has_value else self._fallback
        return ResourceView(
            data=data,
            is_loading=entry.is_loading,
            error=entry.last_error,
            is_stale=entry.is_stale,
            has_data=entry.has_value,
        )

    def _deliver(self, entry: CacheEntry) -> None:
        if self._on_change is not None:
            self._on_change(entry)
