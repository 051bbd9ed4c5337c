"""Global enums shared across the sync core and the REST surface."""

from enum import Enum


class FetchErrorKind(str, Enum):
    """Closed failure taxonomy of the fetch capability."""
    CANCELLED = "cancelled"
    NETWORK_UNREACHABLE = "network_unreachable"
    SERVER_ERROR = "server_error"
    OTHER = "other"


class TriggerReason(str, Enum):
    """What asked the scheduler for a fetch slot."""
    FOCUS = "focus"
    REFRESH = "refresh"
    PREFETCH = "prefetch"
    RECONNECT = "reconnect"


class HomeStatus(str, Enum):
    LOADING = "loading"
    OFFLINE = "offline"
    EMPTY = "empty"
    READY = "ready"


class PinStoreBackend(str, Enum):
    FILE = "file"
    REDIS = "redis"
