from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Source(str, Enum):
    """Provenance tags recorded in ``LookupPayload.sources``."""

    VERIPHONE = "veriphone"
    CACHE = "cache"
    DATABASE = "database"


def merge_sources(existing: Iterable[str], *tags: str) -> List[str]:
    """Union provenance tags, keeping first-seen order and dropping duplicates."""
    merged: List[str] = []
    for tag in [*existing, *tags]:
        value = tag.value if isinstance(tag, Source) else str(tag)
        if value not in merged:
            merged.append(value)
    return merged


@dataclass(frozen=True)
class NormalizedNumber:
    """Canonical form of a phone number; ``e164`` is its identity."""

    e164: str
    national: str
    country_code: str
    region_code: Optional[str] = None
    country_name: Optional[str] = None

    @property
    def storage_key(self) -> str:
        """Key shared by both storage tiers (no leading ``+``)."""
        return self.e164.lstrip("+")

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NormalizedNumber":
        return cls(
            e164=data["e164"],
            national=data.get("national", ""),
            country_code=data.get("country_code", ""),
            region_code=data.get("region_code"),
            country_name=data.get("country_name"),
        )


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore")


class NumberInfo(_Section):
    international_format: Optional[str] = None
    national_format: Optional[str] = None
    country_code: Optional[str] = None


class CarrierInfo(_Section):
    name: Optional[str] = None
    type: Optional[str] = None


class CountryInfo(_Section):
    name: Optional[str] = None


class LocationInfo(_Section):
    city: Optional[str] = None
    state: Optional[str] = None


class ReputationInfo(_Section):
    spam_score: Union[int, float, str, None] = None
    last_seen: Optional[str] = None


class NormalizedInfo(_Section):
    e164: str
    national: Optional[str] = None
    country_code: Optional[str] = None
    region_code: Optional[str] = None
    country_name: Optional[str] = None

    @classmethod
    def from_number(cls, number: NormalizedNumber) -> "NormalizedInfo":
        return cls(**asdict(number))


class LookupPayload(_Section):
    """Enrichment record returned to callers and stored in both tiers.

    Unknown values stay ``None`` and are left out of the serialized form, so a
    stored payload never contains placeholders for data the provider did not send.
    """

    source: str
    number: NumberInfo = Field(default_factory=NumberInfo)
    carrier: CarrierInfo = Field(default_factory=CarrierInfo)
    country: CountryInfo = Field(default_factory=CountryInfo)
    location: LocationInfo = Field(default_factory=LocationInfo)
    reputation: ReputationInfo = Field(default_factory=ReputationInfo)
    sources: List[str] = Field(default_factory=list)
    normalized: Optional[NormalizedInfo] = None

    def with_source(self, tag: Union[Source, str]) -> "LookupPayload":
        """Return a copy with ``tag`` added to ``sources``."""
        return self.model_copy(
            deep=True, update={"sources": merge_sources(self.sources, tag)}
        )

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_storage(cls, data: Dict[str, Any]) -> "LookupPayload":
        return cls.model_validate(data)

    def enrichment(self) -> Dict[str, Any]:
        """Enrichment fields only, without provenance."""
        return self.model_dump(mode="json", exclude={"sources"})


@dataclass
class CacheEntry:
    """Fast-tier record; ``cached_at`` is epoch milliseconds."""

    payload: LookupPayload
    cached_at: int

    def is_expired(self, now_ms: int, ttl_ms: int) -> bool:
        return now_ms - self.cached_at > ttl_ms

    def to_dict(self) -> Dict[str, Any]:
        return {"payload": self.payload.to_storage(), "cachedAt": self.cached_at}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["CacheEntry"]:
        payload = data.get("payload")
        if not payload:
            return None
        return cls(
            payload=LookupPayload.from_storage(payload),
            cached_at=int(data.get("cachedAt") or 0),
        )


@dataclass
class StoredRecord:
    """Durable-tier record for one phone number."""

    payload: LookupPayload
    normalized: NormalizedNumber
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_at_iso: Optional[str] = None
    updated_at_iso: Optional[str] = None
