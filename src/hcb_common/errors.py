"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Fetch (remote resource access)
  2xxx: Persistence (local pin store)
  3xxx: Cache
  4xxx: Pins
  9xxx: System

Fetch failures carry a closed FetchErrorKind decided at the fetch
boundary. Downstream code branches on ``kind`` only, never on messages.
"""

from src.hcb_common.enums import FetchErrorKind


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Fetch ---

_FETCH_CODES: dict[FetchErrorKind, tuple[int, int]] = {
    FetchErrorKind.CANCELLED: (1001, 499),
    FetchErrorKind.NETWORK_UNREACHABLE: (1002, 503),
    FetchErrorKind.SERVER_ERROR: (1003, 502),
    FetchErrorKind.OTHER: (1004, 500),
}


class FetchError(AppError):
    """Failure raised by the fetch capability for a single cache key."""

    def __init__(
        self,
        kind: FetchErrorKind,
        key: str,
        detail: str = "",
        status_code: int | None = None,
    ) -> None:
        code, http_status = _FETCH_CODES[kind]
        message = f"Fetch {kind.value} for {key}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(code, message, http_status)
        self.kind = kind
        self.key = key
        self.status_code = status_code

    @property
    def is_benign(self) -> bool:
        """Cancellation and transient network loss are expected on mobile links."""
        return self.kind in (FetchErrorKind.CANCELLED, FetchErrorKind.NETWORK_UNREACHABLE)

    @classmethod
    def wrap(cls, key: str, exc: BaseException) -> "FetchError":
        """Classify an error a fetcher raised outside its contract as OTHER."""
        if isinstance(exc, FetchError):
            return exc
        return cls(FetchErrorKind.OTHER, key, f"{type(exc).__name__}: {exc}")


# --- 2xxx: Persistence ---

class PersistenceError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2001, f"Pin persistence failed: {detail}", 500)


# --- 3xxx: Cache ---

class NoFetcherError(AppError):
    def __init__(self, key: str) -> None:
        super().__init__(3001, f"No fetcher registered for {key}", 500)


class ResourceNotCachedError(AppError):
    def __init__(self, key: str) -> None:
        super().__init__(3002, f"Resource not cached: {key}", 404)


# --- 4xxx: Pins ---

class InvalidEntityIdError(AppError):
    def __init__(self, entity_id: str) -> None:
        super().__init__(4001, f"Invalid entity id: {entity_id!r}", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
