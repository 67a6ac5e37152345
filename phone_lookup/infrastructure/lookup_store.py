"""Durable lookup tier: every number ever resolved, kept indefinitely."""

import asyncio
import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import (
    Column,
    DateTime,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from tenacity import retry, retry_if_exception_type, stop_after_attempt

from ..domain.models import (
    LookupPayload,
    NormalizedNumber,
    Source,
    StoredRecord,
    merge_sources,
)

logger = logging.getLogger(__name__)

LOOKUPS_TABLE = "lookup_results"


def merge_payload(existing: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge ``incoming`` into ``existing``.

    Nested sections are merged key by key so a value the new payload does not
    carry is kept from the stored one. ``sources`` lists are unioned.
    """
    merged = dict(existing)
    for key, value in incoming.items():
        current = merged.get(key)
        if key == "sources":
            merged[key] = merge_sources(current or [], *(value or []))
        elif isinstance(value, dict) and isinstance(current, dict):
            merged[key] = merge_payload(current, value)
        else:
            merged[key] = value
    return merged


def create_store_engine(url: str) -> Engine:
    connect_args: Dict[str, Any] = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args)


class LookupStore:
    """Lookup records persisted through SQLAlchemy (SQLite or PostgreSQL)."""

    def __init__(self, engine: Engine | str) -> None:
        self._engine = create_store_engine(engine) if isinstance(engine, str) else engine
        self._lock = threading.Lock()
        metadata = MetaData()
        self._table = Table(
            LOOKUPS_TABLE,
            metadata,
            Column("lookup_key", String, primary_key=True),
            Column("payload", Text, nullable=False),
            Column("normalized", Text),
            Column("created_at", DateTime, server_default=func.now()),
            Column("created_at_iso", String),
            Column("updated_at", DateTime, server_default=func.now()),
            Column("updated_at_iso", String),
        )
        metadata.create_all(self._engine)

    async def read(self, normalized: NormalizedNumber) -> Optional[StoredRecord]:
        try:
            row = await asyncio.to_thread(self._get_row, normalized.storage_key)
        except Exception as exc:
            logger.warning("Failed to read lookup store for %s: %s", normalized.e164, exc)
            return None
        if row is None or not row.payload:
            return None

        try:
            payload_data = json.loads(row.payload)
            if not payload_data:
                return None
            payload = LookupPayload.from_storage(payload_data).with_source(Source.DATABASE)
            stored_number = (
                NormalizedNumber.from_dict(json.loads(row.normalized))
                if row.normalized
                else normalized
            )
        except Exception as exc:
            logger.warning("Unreadable lookup record for %s: %s", normalized.e164, exc)
            return None

        return StoredRecord(
            payload=payload,
            normalized=stored_number,
            created_at=row.created_at,
            updated_at=row.updated_at,
            created_at_iso=row.created_at_iso,
            updated_at_iso=row.updated_at_iso,
        )

    async def write(self, normalized: NormalizedNumber, payload: LookupPayload) -> None:
        try:
            await asyncio.to_thread(self._upsert, normalized, payload)
        except Exception as exc:
            logger.warning("Failed to persist lookup for %s: %s", normalized.e164, exc)

    def _get_row(self, key: str) -> Optional[Any]:
        with self._engine.begin() as conn:
            return conn.execute(
                select(self._table).where(self._table.c.lookup_key == key)
            ).first()

    @retry(
        stop=stop_after_attempt(2),
        retry=retry_if_exception_type(IntegrityError),
        reraise=True,
    )
    def _upsert(self, normalized: NormalizedNumber, payload: LookupPayload) -> None:
        # a concurrent insert from another process surfaces as IntegrityError;
        # the retry finds the row and takes the update path
        key = normalized.storage_key
        incoming = payload.to_storage()
        number_json = json.dumps(normalized.to_dict())
        now_iso = datetime.now(timezone.utc).isoformat()
        with self._lock, self._engine.begin() as conn:
            existing = conn.execute(
                select(self._table.c.payload).where(self._table.c.lookup_key == key)
            ).first()
            if existing is None:
                conn.execute(
                    insert(self._table).values(
                        lookup_key=key,
                        payload=json.dumps(incoming),
                        normalized=number_json,
                        created_at_iso=now_iso,
                        updated_at_iso=now_iso,
                    )
                )
                logger.debug("Created lookup record %s", key)
                return

            stored = json.loads(existing.payload) if existing.payload else {}
            conn.execute(
                update(self._table)
                .where(self._table.c.lookup_key == key)
                .values(
                    payload=json.dumps(merge_payload(stored, incoming)),
                    normalized=number_json,
                    updated_at=func.now(),
                    updated_at_iso=now_iso,
                )
            )
            logger.debug("Updated lookup record %s", key)

    def dispose(self) -> None:
        self._engine.dispose()
