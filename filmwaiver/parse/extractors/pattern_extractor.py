"""Regex-only extractor pairing codes with nearby festival names.

The document is flattened to text without a structural parse. Every
code-like token is paired with the closest festival-name phrase inside a
fixed window around it, and with the closest offer phrase, so records come
from textual proximity rather than containment.
"""
import logging

from filmwaiver.parse.models import DEFAULT_OFFER, DiscountRecord
from filmwaiver.parse.patterns import (
    FESTIVAL_NAME_RE,
    OFFER_RE,
    clean_festival_name,
    iter_code_tokens,
    nearest_match,
    strip_tags,
)

logger = logging.getLogger(__name__)

SOURCE_TAG = "filmfreeway_pattern"

WINDOW_CHARS = 300
MAX_NAME_DISTANCE = 150


def _window(text: str, start: int, end: int) -> tuple[str, int]:
    """Slice WINDOW_CHARS either side of [start, end); returns (window, offset)."""
    offset = max(0, start - WINDOW_CHARS)
    return text[offset:end + WINDOW_CHARS], offset


def pair_code(text: str, code_start: int, code_end: int) -> tuple[str, str] | None:
    """Find (festival_name, offer) for the code at [code_start, code_end)."""
    window, offset = _window(text, code_start, code_end)
    target = (code_start - offset, code_end - offset)

    name_match = nearest_match(FESTIVAL_NAME_RE.finditer(window), target, MAX_NAME_DISTANCE)
    if name_match is None:
        return None
    offer_match = nearest_match(OFFER_RE.finditer(window), target, WINDOW_CHARS)
    offer = offer_match.group(0) if offer_match else DEFAULT_OFFER
    return clean_festival_name(name_match.group(0)), offer


def extract_by_proximity(html_content: str, base_url: str) -> list[DiscountRecord]:
    """Scan the whole document for codes and pair each with the nearest festival name."""
    text = strip_tags(html_content)
    if not text:
        return []

    records = []
    for match in iter_code_tokens(text):
        paired = pair_code(text, match.start(1), match.end(1))
        if paired is None:
            continue
        name, offer = paired
        records.append(
            DiscountRecord(
                festival_name=name,
                code=match.group(1),
                offer=offer,
                source=SOURCE_TAG,
            )
        )
    logger.debug(f"Proximity pairing produced {len(records)} candidates")
    return records
