"""Domain models for hcb_cache — pure dataclasses."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from src.hcb_common.errors import FetchError

Fetcher = Callable[[str], Awaitable[Any]]


@dataclass(frozen=True)
class CacheEntry:
    """Read-only snapshot of one cached resource.

    ``value`` survives failed fetches; it is only replaced by a newer
    committed write. ``last_fetched_at`` is the clock reading taken when
    the committed fetch started. ``needs_revalidation`` is set until a fetch
    has settled (success or failure) since the key was created or last
    invalidated, so a failed fetch is not retried on every read.
    """

    key: str
    value: Any = None
    is_loading: bool = False
    last_fetched_at: float | None = None
    last_error: FetchError | None = None
    is_stale: bool = False
    needs_revalidation: bool = True

    @property
    def has_value(self) -> bool:
        return self.last_fetched_at is not None


@dataclass
class FetchState:
    last_attempt_at: float | None
    cooldown: float


@dataclass
class ErrorDebounceState:
    last_logged_at: float | None
    debounce: float
    suppressed: int = 0
