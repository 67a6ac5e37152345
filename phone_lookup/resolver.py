"""Lookup pipeline: normalize, realtime cache, durable store, provider."""

import asyncio
import logging
from typing import Optional, Protocol

from .background import BackgroundRunner
from .domain.models import (
    CountryInfo,
    LookupPayload,
    NormalizedInfo,
    NormalizedNumber,
    NumberInfo,
    StoredRecord,
    merge_sources,
)
from .exceptions import ProviderError
from .metrics import PROVIDER_DURATION, PROVIDER_ERRORS, TIER_HITS
from .normalize import normalize_phone_number

logger = logging.getLogger(__name__)


class CacheTier(Protocol):
    async def read(self, normalized: NormalizedNumber) -> Optional[LookupPayload]:
        ...

    async def write(self, normalized: NormalizedNumber, payload: LookupPayload) -> None:
        ...


class StoreTier(Protocol):
    async def read(self, normalized: NormalizedNumber) -> Optional[StoredRecord]:
        ...

    async def write(self, normalized: NormalizedNumber, payload: LookupPayload) -> None:
        ...


class EnrichmentProvider(Protocol):
    async def fetch_enrichment(self, e164: str) -> LookupPayload:
        ...


def _present(value: Optional[str], fallback: Optional[str]) -> Optional[str]:
    return value if value is not None else fallback


def enrich_payload(payload: LookupPayload, normalized: NormalizedNumber) -> LookupPayload:
    """Backfill number and country fields and attach the current normalization.

    Values already present on ``payload`` win; gaps are filled from
    ``normalized``. The ``normalized`` block always reflects this request.
    """
    number = payload.number
    return payload.model_copy(
        deep=True,
        update={
            "number": NumberInfo(
                international_format=_present(number.international_format, normalized.e164),
                national_format=_present(number.national_format, normalized.national),
                country_code=_present(number.country_code, normalized.country_code),
            ),
            "country": CountryInfo(name=_present(payload.country.name, normalized.country_name)),
            "normalized": NormalizedInfo.from_number(normalized),
            "sources": merge_sources(payload.sources or [payload.source]),
        },
    )


class LookupResolver:
    """Resolve phone numbers through the cache tiers and the provider.

    Tier priority is realtime cache, then durable store, then provider. A
    store hit refills the realtime cache in the background; a provider fetch
    is written to both tiers concurrently before returning. Storage failures
    never reach the caller; only ``ValidationError`` and ``ProviderError`` do.
    """

    def __init__(
        self,
        cache: CacheTier,
        store: StoreTier,
        provider: EnrichmentProvider,
        *,
        default_region: str,
        runner: Optional[BackgroundRunner] = None,
    ) -> None:
        self.cache = cache
        self.store = store
        self.provider = provider
        self.default_region = default_region
        self.runner = runner or BackgroundRunner()

    async def lookup(self, value: str) -> LookupPayload:
        normalized = normalize_phone_number(value, self.default_region)
        e164 = normalized.e164

        cached = await self.cache.read(normalized)
        if cached is not None:
            logger.debug("Cache hit for %s", e164, extra={"e164": e164, "tier": "cache"})
            TIER_HITS.labels(tier="cache").inc()
            return enrich_payload(cached, normalized)

        stored = await self.store.read(normalized)
        if stored is not None:
            logger.debug("Store hit for %s", e164, extra={"e164": e164, "tier": "database"})
            TIER_HITS.labels(tier="database").inc()
            payload = enrich_payload(stored.payload, normalized)
            self.runner.spawn(
                self.cache.write(normalized, payload), description=f"refill cache {e164}"
            )
            return payload

        result = await self._fetch(normalized)
        TIER_HITS.labels(tier="provider").inc()
        enriched = enrich_payload(result, normalized)

        outcomes = await asyncio.gather(
            self.cache.write(normalized, enriched),
            self.store.write(normalized, enriched),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                logger.warning("Write-back failed for %s: %s", e164, outcome)
        return enriched

    async def _fetch(self, normalized: NormalizedNumber) -> LookupPayload:
        try:
            with PROVIDER_DURATION.time():
                return await self.provider.fetch_enrichment(normalized.e164)
        except ProviderError as exc:
            PROVIDER_ERRORS.labels(kind=exc.kind.value).inc()
            raise
        except Exception as exc:
            logger.exception("Unexpected provider failure for %s", normalized.e164)
            PROVIDER_ERRORS.labels(kind="upstream").inc()
            raise ProviderError.upstream() from exc

    async def drain(self) -> None:
        """Wait for background cache refills and purges to finish."""
        await self.runner.drain()
        cache_runner = getattr(self.cache, "runner", None)
        if cache_runner is not None and cache_runner is not self.runner:
            await cache_runner.drain()
