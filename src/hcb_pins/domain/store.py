"""PinnedOrderStore — user-local pin overlay on server-ordered entities.

The in-memory pinned set is authoritative for the session. Every toggle
updates it first, then persists the current set. Saves are serialised
behind a lock and always write the state at the time they run, so after
a burst of rapid toggles the last write reflects the last toggle.
Persistence failures degrade to session-only pins with a warning.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import TypeVar

from src.hcb_common.errors import InvalidEntityIdError, PersistenceError
from src.hcb_pins.domain.projection import PinnableEntity, project_pinned
from src.hcb_pins.domain.repository import PinnedPersistenceProtocol

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=PinnableEntity)


class PinnedOrderStore:
    def __init__(self, persistence: PinnedPersistenceProtocol | None = None) -> None:
        self._persistence = persistence
        # dict keeps insertion order = pin order
        self._pinned: dict[str, None] = {}
        self._save_lock = asyncio.Lock()
        self.persistence_degraded = False

    @property
    def pinned_ids(self) -> tuple[str, ...]:
        return tuple(self._pinned)

    def is_pinned(self, entity_id: str) -> bool:
        return entity_id in self._pinned

    async def load(self) -> None:
        if self._persistence is None:
            return
        try:
            stored = await self._persistence.load()
        except PersistenceError as exc:
            logger.warning("Could not load pinned set, starting empty: %s", exc.message)
            self.persistence_degraded = True
            return
        self._pinned = dict.fromkeys(str(entity_id) for entity_id in stored)
        logger.info("Loaded %d pinned entities", len(self._pinned))

    async def toggle(self, entity_id: str) -> bool:
        """Pin if absent, unpin if present. Returns the new pinned state."""
        if not entity_id:
            raise InvalidEntityIdError(entity_id)

        if entity_id in self._pinned:
            del self._pinned[entity_id]
            pinned = False
        else:
            self._pinned[entity_id] = None
            pinned = True

        await self._persist()
        return pinned

    def project(self, entities: Sequence[E]) -> list[E]:
        return project_pinned(self.pinned_ids, entities)

    async def _persist(self) -> None:
        if self._persistence is None:
            return
        async with self._save_lock:
            try:
                await self._persistence.save(self.pinned_ids)
            except PersistenceError as exc:
                if not self.persistence_degraded:
                    logger.warning("Pins are session-only from now on: %s", exc.message)
                self.persistence_degraded = True
            else:
                self.persistence_degraded = False
