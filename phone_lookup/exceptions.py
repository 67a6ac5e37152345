from enum import Enum


class PhoneLookupError(Exception):
    """Base exception for all lookup errors."""


class ValidationError(PhoneLookupError):
    """Raised when user input cannot be turned into a phone number."""

    MESSAGES = {
        "empty": "Phone number is required",
        "invalid": "Invalid phone number",
    }

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(self.MESSAGES.get(reason, reason))


class ProviderErrorKind(str, Enum):
    """Failure categories of the enrichment provider."""

    UNAVAILABLE = "unavailable"
    UPSTREAM = "upstream"


class ProviderError(PhoneLookupError):
    """Raised when the enrichment provider cannot produce a result."""

    def __init__(self, kind: ProviderErrorKind, status: int, detail: str) -> None:
        self.kind = kind
        self.status = status
        self.detail = detail
        super().__init__(detail)

    @classmethod
    def unavailable(cls) -> "ProviderError":
        return cls(ProviderErrorKind.UNAVAILABLE, 503, "Lookup provider unavailable")

    @classmethod
    def upstream(cls, status: int = 502, detail: str = "Lookup provider error") -> "ProviderError":
        return cls(ProviderErrorKind.UPSTREAM, status, detail)


class PostNotFoundError(PhoneLookupError):
    """Raised when a blog post does not exist."""
