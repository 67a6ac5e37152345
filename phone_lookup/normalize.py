"""Turn raw user input into a canonical :class:`NormalizedNumber`."""

import phonenumbers
from phonenumbers import geocoder

from .domain.models import NormalizedNumber
from .exceptions import ValidationError

DISPLAY_LOCALE = "en"


def normalize_phone_number(value: str, default_region: str) -> NormalizedNumber:
    """Parse ``value`` and return its canonical representation.

    ``default_region`` is the ISO region assumed for numbers written without a
    country calling code, e.g. ``"(415) 555-2671"`` with ``"US"``.

    Raises:
        ValidationError: ``reason="empty"`` for blank input, ``reason="invalid"``
            when the text is not a valid phone number.
    """
    trimmed = (value or "").strip()
    if not trimmed:
        raise ValidationError("empty")

    try:
        parsed = phonenumbers.parse(trimmed, default_region)
    except phonenumbers.NumberParseException as exc:
        raise ValidationError("invalid") from exc
    if not phonenumbers.is_valid_number(parsed):
        raise ValidationError("invalid")

    region_code = phonenumbers.region_code_for_number(parsed)
    if region_code in (None, "ZZ", "001"):
        region_code = None
    country_name = None
    if region_code:
        country_name = geocoder.country_name_for_number(parsed, DISPLAY_LOCALE) or None

    return NormalizedNumber(
        e164=phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164),
        national=phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.NATIONAL),
        country_code=f"+{parsed.country_code}",
        region_code=region_code,
        country_name=country_name,
    )
