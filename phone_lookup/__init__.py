from .domain.models import LookupPayload, NormalizedNumber, Source, StoredRecord
from .exceptions import (
    PhoneLookupError,
    PostNotFoundError,
    ProviderError,
    ProviderErrorKind,
    ValidationError,
)
from .logging_config import configure_logging
from .normalize import normalize_phone_number
from .resolver import LookupResolver, enrich_payload

__all__ = [
    "LookupPayload",
    "NormalizedNumber",
    "Source",
    "StoredRecord",
    "PhoneLookupError",
    "PostNotFoundError",
    "ProviderError",
    "ProviderErrorKind",
    "ValidationError",
    "configure_logging",
    "normalize_phone_number",
    "LookupResolver",
    "enrich_payload",
]
