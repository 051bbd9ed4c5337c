"""Persistence Protocol for the pinned set — dependency inversion for testability.

Unit tests inject an AsyncMock conforming to this Protocol. Implementations
raise PersistenceError on any backend failure; the store decides how to
degrade.
"""

from collections.abc import Sequence
from typing import Protocol


class PinnedPersistenceProtocol(Protocol):
    async def load(self) -> list[str]: ...

    async def save(self, entity_ids: Sequence[str]) -> None: ...
