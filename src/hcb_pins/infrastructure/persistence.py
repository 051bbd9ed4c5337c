"""Pinned-set persistence backends.

JsonFilePinnedPersistence — local JSON file, written via temp file +
os.replace so a crash never leaves a half-written list behind. File I/O
runs in a worker thread to keep the event loop free.

RedisPinnedPersistence — JSON list under one Redis key, for shells that
keep client state in a local Redis.

Both raise PersistenceError for every backend failure, including
undecodable data and a malformed connection URL.
"""

import asyncio
import json
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.hcb_common.errors import PersistenceError


def _decode(raw: str | bytes | None) -> list[str]:
    if raw is None:
        return []
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        # UnicodeDecodeError is a ValueError too
        raise PersistenceError(f"corrupt pin data: {exc}") from exc
    if not isinstance(payload, list):
        raise PersistenceError("pin data is not a list")
    return [str(entity_id) for entity_id in payload]


class JsonFilePinnedPersistence:
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    async def load(self) -> list[str]:
        return await asyncio.to_thread(self._load_sync)

    async def save(self, entity_ids: Sequence[str]) -> None:
        await asyncio.to_thread(self._save_sync, list(entity_ids))

    def _load_sync(self) -> list[str]:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise PersistenceError(f"{self._path}: {exc}") from exc
        return _decode(raw)

    def _save_sync(self, entity_ids: list[str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
        except OSError as exc:
            raise PersistenceError(f"{self._path}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(entity_ids, fh)
            os.replace(tmp, self._path)
        except OSError as exc:
            raise PersistenceError(f"{self._path}: {exc}") from exc
        finally:
            if os.path.exists(tmp):
                os.unlink(tmp)


class RedisPinnedPersistence:
    def __init__(self, url: str, key: str) -> None:
        self._url = url
        self._key = key
        self._redis: aioredis.Redis | None = None

    def _client(self) -> aioredis.Redis:
        if self._redis is None:
            try:
                self._redis = aioredis.from_url(self._url, decode_responses=True)
            except ValueError as exc:
                raise PersistenceError(f"invalid redis url: {exc}") from exc
        return self._redis

    async def load(self) -> list[str]:
        client = self._client()
        try:
            raw = await client.get(self._key)
        except RedisError as exc:
            raise PersistenceError(f"redis get {self._key}: {exc}") from exc
        return _decode(raw)

    async def save(self, entity_ids: Sequence[str]) -> None:
        client = self._client()
        try:
            await client.set(self._key, json.dumps(list(entity_ids)))
        except RedisError as exc:
            raise PersistenceError(f"redis set {self._key}: {exc}") from exc

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
