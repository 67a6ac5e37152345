from phone_lookup.domain.models import (
    CacheEntry,
    LookupPayload,
    NormalizedNumber,
    Source,
    merge_sources,
)
from phone_lookup.infrastructure.lookup_store import merge_payload
from phone_lookup.resolver import enrich_payload

NUMBER = NormalizedNumber(
    e164="+14155552671",
    national="(415) 555-2671",
    country_code="+1",
    region_code="US",
    country_name="United States",
)


def test_merge_sources_is_a_set_union():
    assert merge_sources(["veriphone"], "cache") == ["veriphone", "cache"]
    assert merge_sources(["veriphone", "cache"], "cache") == ["veriphone", "cache"]
    assert merge_sources([], Source.DATABASE) == ["database"]


def test_with_source_does_not_mutate_original():
    payload = LookupPayload(source="veriphone", sources=["veriphone"])
    tagged = payload.with_source(Source.CACHE)
    assert tagged.sources == ["veriphone", "cache"]
    assert payload.sources == ["veriphone"]


def test_storage_form_omits_unknown_values():
    payload = LookupPayload(source="veriphone", sources=["veriphone"])
    payload.carrier.name = "Acme Mobile"
    data = payload.to_storage()
    assert data["carrier"] == {"name": "Acme Mobile"}
    assert data["location"] == {}
    assert "normalized" not in data


def test_enrich_backfills_missing_fields():
    payload = LookupPayload(source="veriphone", sources=["veriphone"])
    enriched = enrich_payload(payload, NUMBER)
    assert enriched.number.international_format == "+14155552671"
    assert enriched.number.national_format == "(415) 555-2671"
    assert enriched.number.country_code == "+1"
    assert enriched.country.name == "United States"
    assert enriched.normalized.e164 == "+14155552671"
    assert enriched.normalized.region_code == "US"


def test_enrich_keeps_provider_values():
    payload = LookupPayload.from_storage(
        {
            "source": "veriphone",
            "number": {"international_format": "+1 415-555-2671", "country_code": "US"},
            "country": {"name": "USA"},
            "sources": ["veriphone"],
        }
    )
    enriched = enrich_payload(payload, NUMBER)
    assert enriched.number.international_format == "+1 415-555-2671"
    assert enriched.number.country_code == "US"
    assert enriched.country.name == "USA"


def test_enrich_refreshes_stale_normalized_block():
    stale = NormalizedNumber(e164="+14155552671", national="415-555-2671", country_code="+1")
    payload = enrich_payload(LookupPayload(source="veriphone", sources=["veriphone"]), stale)
    fresh = enrich_payload(payload, NUMBER)
    assert fresh.normalized.national == "(415) 555-2671"
    assert fresh.normalized.country_name == "United States"


def test_enrich_never_returns_empty_sources():
    enriched = enrich_payload(LookupPayload(source="veriphone"), NUMBER)
    assert enriched.sources == ["veriphone"]


def test_cache_entry_expiry_boundary():
    entry = CacheEntry(payload=LookupPayload(source="veriphone"), cached_at=1000)
    assert not entry.is_expired(now_ms=1000 + 5000, ttl_ms=5000)
    assert entry.is_expired(now_ms=1000 + 5001, ttl_ms=5000)


def test_cache_entry_without_payload_is_ignored():
    assert CacheEntry.from_dict({"cachedAt": 1}) is None


def test_merge_payload_keeps_known_values():
    stored = {
        "source": "veriphone",
        "carrier": {"name": "Acme Mobile", "type": "mobile"},
        "reputation": {"spam_score": 3},
        "sources": ["veriphone"],
    }
    incoming = {
        "source": "veriphone",
        "carrier": {"name": "Acme Wireless"},
        "sources": ["veriphone", "cache"],
    }
    merged = merge_payload(stored, incoming)
    assert merged["carrier"] == {"name": "Acme Wireless", "type": "mobile"}
    assert merged["reputation"] == {"spam_score": 3}
    assert merged["sources"] == ["veriphone", "cache"]
