"""Merge of server-ordered entities with the local pin order.

project_pinned() is a pure function of (pinned ids, entities): it runs on
every render, so identical inputs must give identical output. Pinned
entities come first, ordered by pin time (earliest pin first); the rest
keep server order. Pins never add or remove entities, and the derived
``pinned`` flag is recomputed for every entity.
"""

from collections.abc import Sequence
from dataclasses import replace
from typing import Protocol, TypeVar


class PinnableEntity(Protocol):
    id: str
    pinned: bool


E = TypeVar("E", bound=PinnableEntity)


def project_pinned(pinned_ids: Sequence[str], entities: Sequence[E]) -> list[E]:
    rank = {entity_id: index for index, entity_id in enumerate(pinned_ids)}

    pinned: list[tuple[int, int, E]] = []
    unpinned: list[E] = []
    for position, entity in enumerate(entities):
        pin_rank = rank.get(entity.id)
        if pin_rank is None:
            unpinned.append(_with_pinned(entity, False))
        else:
            pinned.append((pin_rank, position, _with_pinned(entity, True)))

    pinned.sort(key=lambda item: (item[0], item[1]))
    return [entity for _, _, entity in pinned] + unpinned


def _with_pinned(entity: E, pinned: bool) -> E:
    if entity.pinned == pinned:
        return entity
    return replace(entity, pinned=pinned)  # type: ignore[type-var]
