"""Turn a fetched discounts page into validated discount records."""
import logging
from typing import Callable, Iterable, Optional, Sequence

from selectolax.parser import HTMLParser

from filmwaiver.config import config
from filmwaiver.parse.extractors.card_extractor import extract_cards
from filmwaiver.parse.extractors.known_festivals import backfill_known_festivals
from filmwaiver.parse.extractors.pattern_extractor import extract_by_proximity
from filmwaiver.parse.models import DiscountRecord

logger = logging.getLogger(__name__)

Strategy = Callable[[str, str], list[DiscountRecord]]

# Tried in order; the first strategy that yields a valid record wins
DEFAULT_STRATEGIES: tuple[Strategy, ...] = (extract_cards, extract_by_proximity)


def validate_records(records: Iterable[DiscountRecord]) -> list[DiscountRecord]:
    """Drop records without a usable festival name or code."""
    return [record for record in records if record.is_valid()]


def dedupe_by_code(records: Iterable[DiscountRecord]) -> list[DiscountRecord]:
    """Keep the first record seen for each code."""
    seen = set()
    unique = []
    for record in records:
        if record.code in seen:
            continue
        seen.add(record.code)
        unique.append(record)
    return unique


def _run_strategy(strategy: Strategy, html_content: str, base_url: str) -> list[DiscountRecord]:
    try:
        return dedupe_by_code(validate_records(strategy(html_content, base_url)))
    except Exception as e:
        logger.warning(f"Extraction strategy {strategy.__name__} failed: {e}")
        return []


def parse_discounts(
    html_content: Optional[str],
    base_url: Optional[str] = None,
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    min_records: Optional[int] = None,
) -> list[DiscountRecord]:
    """
    Extract discount records from a discounts page.
    Never raises: empty or unusable documents give an empty list.
    """
    if not html_content or not html_content.strip():
        return []
    base_url = base_url or config.SOURCE_BASE_URL
    min_records = config.MIN_RECORDS if min_records is None else min_records

    records: list[DiscountRecord] = []
    for strategy in strategies:
        records = _run_strategy(strategy, html_content, base_url)
        if records:
            logger.info(f"Strategy {strategy.__name__} extracted {len(records)} records")
            break

    if len(records) < min_records:
        logger.info(f"Only {len(records)} records found (minimum {min_records}), probing known festivals")
        records = records + _run_strategy(backfill_known_festivals, html_content, base_url)

    unique = dedupe_by_code(records)
    logger.info(f"Extracted {len(unique)} unique discounts")
    return unique


def extract_debug_snippet(html_content: str, max_bytes: int = 3000) -> str | None:
    """Small visible-text excerpt of a page, for debugging."""
    if not html_content:
        return None

    parser = HTMLParser(html_content)
    body = parser.body
    if not body:
        return None

    snippet = body.text(separator=" ", strip=True)
    if len(snippet.encode("utf-8")) > max_bytes:
        snippet = snippet[:max_bytes] + "..."

    return snippet
