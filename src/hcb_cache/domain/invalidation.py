"""InvalidationRouter — key-prefix invalidation after mutating flows."""

import logging

from src.hcb_cache.domain.resource_cache import ResourceCache

logger = logging.getLogger(__name__)


class InvalidationRouter:
    def __init__(self, cache: ResourceCache) -> None:
        self._cache = cache

    def invalidate_by_prefix(self, prefix: str) -> list[str]:
        """Mark every key starting with ``prefix`` for revalidation on next read.

        Never blocks and never clears the values currently displayed.
        """
        matched = self._cache.invalidate(lambda key: key.startswith(prefix))
        logger.debug("Prefix %r invalidated %d keys", prefix, len(matched))
        return matched

    def invalidate_keys(self, *keys: str) -> list[str]:
        wanted = frozenset(keys)
        return self._cache.invalidate(lambda key: key in wanted)
