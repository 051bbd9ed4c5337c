"""Test doubles shared by the unit tests."""

import asyncio
from typing import Any

from src.hcb_common.enums import FetchErrorKind
from src.hcb_common.errors import FetchError


class ManualClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ControlledFetcher:
    """Fetcher whose calls stay pending until the test resolves them."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self._pending: list[asyncio.Future[Any]] = []

    async def __call__(self, key: str) -> Any:
        self.calls.append(key)
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending.append(future)
        return await future

    def resolve(self, index: int, value: Any) -> None:
        self._pending[index].set_result(value)

    def fail(self, index: int, error: BaseException) -> None:
        self._pending[index].set_exception(error)


class StaticFetcher:
    """Fetcher answering from a dict; keys mapped to a FetchErrorKind fail."""

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[str] = []

    async def __call__(self, key: str) -> Any:
        self.calls.append(key)
        if key not in self.responses:
            raise FetchError(FetchErrorKind.OTHER, key, "HTTP 404", status_code=404)
        response = self.responses[key]
        if isinstance(response, FetchErrorKind):
            raise FetchError(response, key)
        return response


async def settle(rounds: int = 10) -> None:
    """Let scheduled fetch tasks run to completion."""
    for _ in range(rounds):
        await asyncio.sleep(0)
