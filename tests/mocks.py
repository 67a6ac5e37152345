"""
Fakes shared by the lookup pipeline tests.
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

from phone_lookup.background import BackgroundRunner
from phone_lookup.domain.models import LookupPayload
from phone_lookup.exceptions import ProviderError
from phone_lookup.infrastructure.backends import MemoryBackend
from phone_lookup.infrastructure.lookup_store import LookupStore
from phone_lookup.infrastructure.realtime_cache import RealtimeLookupCache
from phone_lookup.infrastructure.veriphone import map_response
from phone_lookup.resolver import LookupResolver

ACME_RESPONSE = {
    "status": "success",
    "phone": "+14155552671",
    "phone_valid": True,
    "phone_type": "mobile",
    "region": "California",
    "country": "United States",
    "country_code": "US",
    "country_name": "United States",
    "international_number": "+1 415-555-2671",
    "local_number": "(415) 555-2671",
    "carrier": "Acme Mobile",
}


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class SpyProvider:
    """Provider double that records every call."""

    source_name = "veriphone"

    def __init__(self, response: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None, delay: float = 0.0) -> None:
        self.response = response if response is not None else dict(ACME_RESPONSE)
        self.error = error
        self.delay = delay
        self.calls: List[str] = []

    async def fetch_enrichment(self, e164: str) -> LookupPayload:
        self.calls.append(e164)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return map_response(self.response)

    def close(self) -> None:
        pass


class UnconfiguredProvider(SpyProvider):
    """Behaves like a provider without an API key."""

    def __init__(self) -> None:
        super().__init__(error=ProviderError.unavailable())


class FailingBackend(MemoryBackend):
    """Backend whose selected operations raise."""

    def __init__(self, *, fail_get: bool = False, fail_set: bool = False, fail_delete: bool = False) -> None:
        super().__init__()
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.fail_delete = fail_delete

    async def get(self, key: str) -> Optional[str]:
        if self.fail_get:
            raise ConnectionError("cache unreachable")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_set:
            raise ConnectionError("cache unreachable")
        await super().set(key, value)

    async def delete(self, key: str) -> None:
        if self.fail_delete:
            raise ConnectionError("cache unreachable")
        await super().delete(key)

    async def delete_if_unchanged(self, key: str, expected: str) -> bool:
        if self.fail_delete:
            raise ConnectionError("cache unreachable")
        return await super().delete_if_unchanged(key, expected)

    async def ping(self) -> bool:
        return not self.fail_get


class SlowDeleteBackend(MemoryBackend):
    """Backend whose conditional delete reaches the store after a delay."""

    def __init__(self, delay: float = 0.05) -> None:
        super().__init__()
        self.delay = delay

    async def delete_if_unchanged(self, key: str, expected: str) -> bool:
        await asyncio.sleep(self.delay)
        return await super().delete_if_unchanged(key, expected)


class FakeResponse:
    """Just enough of ``requests.Response`` for the Veriphone client."""

    def __init__(self, status_code: int = 200, payload: Any = None, reason: str = "OK") -> None:
        self.status_code = status_code
        self._payload = payload
        self.reason = reason

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Records ``get`` calls and returns a canned response."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None) -> None:
        self.response = response or FakeResponse(payload=dict(ACME_RESPONSE))
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response

    def close(self) -> None:
        pass


def build_test_resolver(
    tmp_path: Path,
    provider: Optional[SpyProvider] = None,
    *,
    backend: Optional[MemoryBackend] = None,
    clock: Optional[FakeClock] = None,
    ttl_seconds: int = 3600,
) -> LookupResolver:
    """Resolver over an in-memory cache and a SQLite store in ``tmp_path``."""
    runner = BackgroundRunner()
    cache = RealtimeLookupCache(
        backend if backend is not None else MemoryBackend(),
        path_prefix="cache/lookups",
        ttl_seconds=ttl_seconds,
        runner=runner,
        clock=clock or FakeClock(),
    )
    store = LookupStore(f"sqlite:///{tmp_path / 'lookups.sqlite'}")
    return LookupResolver(
        cache,
        store,
        provider if provider is not None else SpyProvider(),
        default_region="US",
        runner=runner,
    )
