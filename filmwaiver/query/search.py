"""Free-text search, URL lookup and pagination over a record set."""
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence
from urllib.parse import urlparse

from filmwaiver.config import config
from filmwaiver.parse.models import DiscountRecord

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

# Path prefixes that come before the festival segment on FilmFreeway
_SKIPPED_SEGMENTS = {"festivals"}


@dataclass
class Page:
    items: list[DiscountRecord]
    total: int
    page: Optional[int]
    has_more: bool


def search_discounts(records: Iterable[DiscountRecord], query: str = "") -> list[DiscountRecord]:
    """Records whose name, offer or code contain query (case-insensitive)."""
    needle = (query or "").lower()
    if not needle:
        return list(records)
    return [record for record in records if needle in record.search_text()]


def paginate(records: Sequence[DiscountRecord], page: Optional[int] = None, size: Optional[int] = None) -> Page:
    """Slice one zero-based page; page=None returns everything."""
    records = list(records)
    total = len(records)
    if page is None:
        return Page(records, total, None, False)

    size = size or config.PAGE_SIZE
    start = page * size
    end = start + size
    return Page(records[start:end], total, page, end < total)


def normalize(text: str) -> str:
    """Lower-case and drop everything but letters and digits."""
    return _NON_ALNUM_RE.sub("", (text or "").lower())


def festival_slug(url: str) -> str:
    """Festival identifier taken from a festival page URL.

    https://filmfreeway.com/SundanceFilmFestival -> "sundancefilmfestival"
    """
    if not url:
        return ""
    parsed = urlparse(url if "://" in url else f"https://{url}")
    segments = [segment for segment in parsed.path.split("/") if segment]
    while segments and segments[0].lower() in _SKIPPED_SEGMENTS:
        segments = segments[1:]
    return normalize(segments[0]) if segments else ""


def matches_slug(record: DiscountRecord, slug: str) -> bool:
    if not slug:
        return False
    record_slug = festival_slug(record.url)
    if record_slug and (record_slug in slug or slug in record_slug):
        return True
    return slug in normalize(record.festival_name)


def lookup_by_urls(records: Iterable[DiscountRecord], urls: Iterable[str]) -> list[DiscountRecord]:
    """Records relevant to any of the given festival URLs, in record order."""
    slugs = {slug for slug in (festival_slug(url) for url in urls) if slug}
    if not slugs:
        return []
    return [record for record in records if any(matches_slug(record, slug) for slug in slugs)]
