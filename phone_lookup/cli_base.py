import argparse
import asyncio
import logging
from pathlib import Path
from typing import List

from .bootstrap import initialize
from .config import settings
from .dependencies import build_resolver, close_resolver
from .exceptions import PhoneLookupError
from .resolver import LookupResolver
from .utils import LookupRow, read_phone_list, write_results

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Look up phone numbers in bulk")
    parser.add_argument("numbers", nargs="*", help="Phone numbers to look up")
    parser.add_argument(
        "-i",
        "--input",
        type=Path,
        help="Input file with one phone number per line",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV path",
    )
    return parser.parse_args(argv)


async def lookup_all(resolver: LookupResolver, numbers: List[str]) -> List[LookupRow]:
    """Resolve numbers one after another, recording failures per number."""
    rows: List[LookupRow] = []
    for number in numbers:
        try:
            rows.append(LookupRow(number=number, payload=await resolver.lookup(number)))
        except PhoneLookupError as exc:
            logger.warning("Lookup failed for %s: %s", number, exc)
            rows.append(LookupRow(number=number, error=str(exc)))
    return rows


async def _run(numbers: List[str]) -> List[LookupRow]:
    resolver = build_resolver(settings)
    try:
        return await lookup_all(resolver, numbers)
    finally:
        await close_resolver(resolver)


def run_lookup(argv: list[str] | None = None) -> int:
    initialize(settings)
    args = parse_args(argv)

    numbers = list(args.numbers)
    if args.input is not None:
        if not args.input.exists():
            logger.error("Input file not found: %s", args.input)
            return 1
        numbers.extend(read_phone_list(args.input))
    if not numbers:
        logger.error("No phone numbers given")
        return 1

    logger.info("Looking up %d numbers", len(numbers))
    rows = asyncio.run(_run(numbers))
    write_results(args.output, rows)
    logger.info("Results saved to %s", args.output)
    return 0
