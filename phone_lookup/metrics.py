from prometheus_client import Counter, Histogram

REQUESTS_TOTAL = Counter(
    "phone_lookup_requests_total", "Total number of HTTP requests", ["endpoint"]
)
TIER_HITS = Counter(
    "phone_lookup_tier_hits_total",
    "Lookups answered per tier (cache, database or provider)",
    ["tier"],
)
PROVIDER_ERRORS = Counter(
    "phone_lookup_provider_errors_total", "Failed provider fetches", ["kind"]
)
PROVIDER_DURATION = Histogram(
    "phone_lookup_provider_duration_seconds", "Time spent waiting for the provider"
)
