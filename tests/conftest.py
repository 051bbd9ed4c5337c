"""Shared test fixtures."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from src.context import SyncContext
from src.hcb_cache.domain.error_reporter import ErrorReporter
from src.hcb_cache.domain.resource_cache import ResourceCache
from src.hcb_home.application.service import HomeService
from src.hcb_network.domain.monitor import NetworkMonitor
from src.hcb_network.infrastructure.connectivity import ConnectivityFeed
from src.main import app
from tests.support import ManualClock, StaticFetcher


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def feed() -> ConnectivityFeed:
    return ConnectivityFeed()


@pytest.fixture
def monitor(feed: ConnectivityFeed) -> NetworkMonitor:
    monitor = NetworkMonitor(feed)
    monitor.start()
    return monitor


@pytest.fixture
def reporter(clock: ManualClock) -> ErrorReporter:
    return ErrorReporter(clock, debounce=5.0)


@pytest.fixture
async def cache(
    clock: ManualClock, monitor: NetworkMonitor, reporter: ErrorReporter
) -> AsyncGenerator[ResourceCache, None]:
    cache = ResourceCache(clock=clock, monitor=monitor, reporter=reporter, dedupe_interval=2.0)
    yield cache
    await cache.close()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(FETCH_COOLDOWN_MS=10_000, ERROR_DEBOUNCE_MS=5_000, DEDUPING_INTERVAL_MS=2_000)


@pytest.fixture
def fetcher() -> StaticFetcher:
    return StaticFetcher()


@pytest.fixture
def persistence() -> AsyncMock:
    mock = AsyncMock()
    mock.load.return_value = []
    return mock


@pytest.fixture
async def context(
    fetcher: StaticFetcher,
    feed: ConnectivityFeed,
    persistence: AsyncMock,
    clock: ManualClock,
    test_settings: Settings,
) -> AsyncGenerator[SyncContext, None]:
    ctx = await SyncContext.create(
        fetcher=fetcher,
        connectivity=feed,
        persistence=persistence,
        clock=clock,
        config=test_settings,
    )
    yield ctx
    await ctx.close()


@pytest.fixture
async def client(
    context: SyncContext, feed: ConnectivityFeed
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app with a test sync context installed."""
    home = HomeService(context)
    home.mount()
    app.state.context = context
    app.state.connectivity = feed
    app.state.home = home
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    home.unmount()
