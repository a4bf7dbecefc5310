"""Backfill for sparse pages: probe well-known festival names in the raw text."""
import logging
import re

from filmwaiver.parse.models import DEFAULT_OFFER, DiscountRecord
from filmwaiver.parse.patterns import OFFER_RE, iter_code_tokens, nearest_match, strip_tags

logger = logging.getLogger(__name__)

SOURCE_TAG = "filmfreeway_known"

WINDOW_CHARS = 200

KNOWN_FESTIVALS = [
    ("Sundance Film Festival", re.compile(r"\bsundance\b", re.IGNORECASE)),
    ("Tribeca Festival", re.compile(r"\btribeca\b", re.IGNORECASE)),
    ("SXSW Film & TV Festival", re.compile(r"\bsxsw\b", re.IGNORECASE)),
    ("Slamdance Film Festival", re.compile(r"\bslamdance\b", re.IGNORECASE)),
    ("Cannes Film Festival", re.compile(r"\bcannes\b", re.IGNORECASE)),
    ("Toronto International Film Festival", re.compile(r"\btoronto\s+international\b|\bTIFF\b")),
    ("Berlin International Film Festival", re.compile(r"\bberlinale\b|\bberlin\s+international\b", re.IGNORECASE)),
    ("Venice Film Festival", re.compile(r"\bvenice\s+(?:international\s+)?film\b", re.IGNORECASE)),
    ("Telluride Film Festival", re.compile(r"\btelluride\b", re.IGNORECASE)),
    ("Austin Film Festival", re.compile(r"\baustin\s+film\b", re.IGNORECASE)),
    ("Raindance Film Festival", re.compile(r"\braindance\b", re.IGNORECASE)),
    ("Palm Springs International ShortFest", re.compile(r"\bpalm\s+springs\b", re.IGNORECASE)),
]


def backfill_known_festivals(html_content: str, base_url: str) -> list[DiscountRecord]:
    """One record per known festival mentioned near a code-like token."""
    text = strip_tags(html_content)
    if not text:
        return []

    codes = list(iter_code_tokens(text))
    if not codes:
        return []

    records = []
    for festival_name, pattern in KNOWN_FESTIVALS:
        name_match = pattern.search(text)
        if name_match is None:
            continue
        code_match = nearest_match(codes, name_match.span(), WINDOW_CHARS)
        if code_match is None:
            continue

        start = max(0, name_match.start() - WINDOW_CHARS)
        window = text[start:name_match.end() + WINDOW_CHARS]
        offer_match = OFFER_RE.search(window)
        records.append(
            DiscountRecord(
                festival_name=festival_name,
                code=code_match.group(1),
                offer=offer_match.group(0) if offer_match else DEFAULT_OFFER,
                source=SOURCE_TAG,
            )
        )
    if records:
        logger.info(f"Known-festival backfill matched {len(records)} festivals")
    return records
