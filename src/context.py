"""SyncContext — the process-wide sync core, constructed explicitly.

Created once at startup (FastAPI lifespan, or directly by a host shell)
and closed at shutdown. Every consumer receives the context, or one of
its components, by reference; nothing reaches for module-level globals.

    ctx = await SyncContext.create(fetcher=HttpxFetcher(...), connectivity=feed)
    ...
    await ctx.close()
"""

import logging
from dataclasses import dataclass

from config.settings import Settings, settings as default_settings
from src.hcb_cache.domain.error_reporter import ErrorReporter
from src.hcb_cache.domain.invalidation import InvalidationRouter
from src.hcb_cache.domain.models import Fetcher
from src.hcb_cache.domain.resource_cache import ResourceCache
from src.hcb_cache.domain.scheduler import FetchScheduler
from src.hcb_common.clock import Clock, MonotonicClock, ms_to_seconds
from src.hcb_network.domain.monitor import ConnectivitySource, NetworkMonitor
from src.hcb_pins.domain.repository import PinnedPersistenceProtocol
from src.hcb_pins.domain.store import PinnedOrderStore

logger = logging.getLogger(__name__)


@dataclass
class SyncContext:
    clock: Clock
    monitor: NetworkMonitor
    reporter: ErrorReporter
    scheduler: FetchScheduler
    cache: ResourceCache
    invalidation: InvalidationRouter
    pins: PinnedOrderStore

    @classmethod
    async def create(
        cls,
        *,
        fetcher: Fetcher,
        connectivity: ConnectivitySource | None = None,
        persistence: PinnedPersistenceProtocol | None = None,
        clock: Clock | None = None,
        config: Settings | None = None,
    ) -> "SyncContext":
        config = config or default_settings
        clock = clock or MonotonicClock()

        monitor = NetworkMonitor(connectivity)
        monitor.start()
        reporter = ErrorReporter(clock, ms_to_seconds(config.ERROR_DEBOUNCE_MS))
        scheduler = FetchScheduler(clock, monitor, ms_to_seconds(config.FETCH_COOLDOWN_MS))
        cache = ResourceCache(
            fetcher,
            clock=clock,
            monitor=monitor,
            reporter=reporter,
            dedupe_interval=ms_to_seconds(config.DEDUPING_INTERVAL_MS),
        )
        pins = PinnedOrderStore(persistence)
        await pins.load()

        logger.info("Sync context ready (online=%s)", monitor.is_online)
        return cls(
            clock=clock,
            monitor=monitor,
            reporter=reporter,
            scheduler=scheduler,
            cache=cache,
            invalidation=InvalidationRouter(cache),
            pins=pins,
        )

    async def close(self) -> None:
        self.monitor.close()
        await self.cache.close()
        logger.info("Sync context closed")
