"""Fast lookup tier: short-lived payload copies keyed by E.164 number."""

import json
import logging
import time
from typing import Callable, Optional

from ..background import BackgroundRunner
from ..domain.models import CacheEntry, LookupPayload, NormalizedNumber, Source
from .backends import KeyValueBackend

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class RealtimeLookupCache:
    """TTL cache in front of the durable store.

    Entries are checked against the TTL on every read and removed lazily when
    found stale, unless a newer write replaced them first. Nothing sweeps the
    backend in the background. All backend failures are logged and treated as
    a miss (reads) or dropped (writes).
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        *,
        path_prefix: str,
        ttl_seconds: int,
        runner: Optional[BackgroundRunner] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.backend = backend
        self.path_prefix = path_prefix.rstrip("/")
        self.ttl_ms = ttl_seconds * 1000
        self.runner = runner or BackgroundRunner()
        self._clock = clock

    def key_for(self, normalized: NormalizedNumber) -> str:
        return f"{self.path_prefix}/{normalized.storage_key}"

    async def read(self, normalized: NormalizedNumber) -> Optional[LookupPayload]:
        key = self.key_for(normalized)
        try:
            raw = await self.backend.get(key)
        except Exception as exc:
            logger.warning("Failed to read realtime cache %s: %s", key, exc)
            return None
        if not raw:
            return None

        try:
            entry = CacheEntry.from_dict(json.loads(raw))
        except Exception as exc:
            logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
            return None
        if entry is None:
            return None

        if entry.is_expired(self._clock(), self.ttl_ms):
            logger.debug("Cache entry %s expired", key)
            self.runner.spawn(self._purge(key, raw), description=f"purge {key}")
            return None

        return entry.payload.with_source(Source.CACHE)

    async def write(self, normalized: NormalizedNumber, payload: LookupPayload) -> None:
        key = self.key_for(normalized)
        entry = CacheEntry(payload=payload, cached_at=self._clock())
        try:
            await self.backend.set(key, json.dumps(entry.to_dict()))
        except Exception as exc:
            logger.warning("Failed to write realtime cache %s: %s", key, exc)

    async def _purge(self, key: str, stale: str) -> None:
        # a refill may have replaced the entry since it was read
        try:
            if not await self.backend.delete_if_unchanged(key, stale):
                logger.debug("Cache entry %s was refreshed; keeping it", key)
        except Exception as exc:
            logger.warning("Failed to purge expired cache %s: %s", key, exc)

    async def ping(self) -> bool:
        try:
            return await self.backend.ping()
        except Exception as exc:
            logger.warning("Realtime cache unavailable: %s", exc)
            return False
