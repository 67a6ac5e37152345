import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from ..config import Settings
from ..domain.models import (
    CarrierInfo,
    CountryInfo,
    LocationInfo,
    LookupPayload,
    NumberInfo,
    ReputationInfo,
    Source,
)
from ..exceptions import ProviderError

logger = logging.getLogger(__name__)


class VeriphoneClient:
    """Enrichment provider backed by the Veriphone verify API."""

    source_name = Source.VERIPHONE.value

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        self.api_key = settings.veriphone_api_key
        self.base_url = settings.veriphone_base_url
        self.timeout = settings.veriphone_timeout_seconds
        self._session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def fetch_enrichment(self, e164: str) -> LookupPayload:
        """Fetch provider data for ``e164`` and map it to a payload.

        Raises ``ProviderError`` when no API key is configured (before any
        request is made) or when the provider answers with a non-2xx status.
        Transport errors from ``requests`` are left to the caller.
        """
        if not self.configured:
            raise ProviderError.unavailable()
        return await asyncio.to_thread(self._fetch, e164)

    def _fetch(self, e164: str) -> LookupPayload:
        logger.info("Querying Veriphone", extra={"e164": e164, "tier": self.source_name})
        resp = self._session.get(
            self.base_url,
            params={"phone": e164, "key": self.api_key},
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        data = _json_or_none(resp)

        if not resp.ok:
            detail = None
            if data:
                detail = data.get("status_message") or data.get("message")
            detail = detail or resp.reason or "Lookup failed"
            logger.warning(
                "Veriphone returned %s for %s: %s",
                resp.status_code,
                e164,
                detail,
                extra={"e164": e164, "status": resp.status_code},
            )
            raise ProviderError.upstream(resp.status_code, str(detail))

        return map_response(data or {})

    def close(self) -> None:
        self._session.close()


def _json_or_none(resp: requests.Response) -> Optional[Dict[str, Any]]:
    try:
        data = resp.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def map_response(data: Dict[str, Any]) -> LookupPayload:
    """Map Veriphone field names onto the internal payload shape."""
    region = data.get("region")
    return LookupPayload(
        source=Source.VERIPHONE.value,
        number=NumberInfo(
            international_format=data.get("international_number"),
            national_format=data.get("local_number"),
            country_code=_as_text(data.get("country_code")),
        ),
        carrier=CarrierInfo(name=data.get("carrier"), type=data.get("phone_type")),
        country=CountryInfo(name=data.get("country_name")),
        # Veriphone reports a single region string; it fills both fields.
        location=LocationInfo(city=region, state=region),
        reputation=ReputationInfo(
            spam_score=data.get("spam_score"),
            last_seen=data.get("last_seen"),
        ),
        sources=[Source.VERIPHONE.value],
    )


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)
