import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .domain.models import LookupPayload

RESULT_FIELDS = ["number", "e164", "carrier", "country", "sources", "error"]


@dataclass
class LookupRow:
    """One line of CLI output: a resolved payload or the error it raised."""

    number: str
    payload: Optional[LookupPayload] = None
    error: str = ""

    def as_csv_row(self) -> dict:
        payload = self.payload
        return {
            "number": self.number,
            "e164": payload.normalized.e164 if payload and payload.normalized else "",
            "carrier": (payload.carrier.name or "") if payload else "",
            "country": (payload.country.name or "") if payload else "",
            "sources": ";".join(payload.sources) if payload else "",
            "error": self.error,
        }


def read_phone_list(path: Path) -> list[str]:
    """Read phone numbers from a text file, one per line."""
    return [line.strip() for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


def write_results(path: Path, rows: Iterable[LookupRow]) -> None:
    """Write lookup results to CSV."""
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=RESULT_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row.as_csv_row())
