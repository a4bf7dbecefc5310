"""Shared regexes and text helpers for the discount extractors."""
import html as html_lib
import re
from typing import Iterable, Iterator, Optional
from urllib.parse import urljoin

# Short upper-case alphanumeric tokens that look like discount codes
CODE_TOKEN_RE = re.compile(r"\b([A-Z0-9]{4,12})\b")

# Upper-case words that show up in headings and are never codes
COMMON_WORDS = frozenset({"THE", "AND", "FOR", "WITH", "FROM", "FILM", "FEST"})

OFFER_RE = re.compile(
    r"(\d+%\s*off|\$\d+\s*off|free\s*submission|waived\s*fees?|no\s*fee)",
    re.IGNORECASE,
)

FESTIVAL_KEYWORD_RE = re.compile(r"festival|film|cinema|movie|competition", re.IGNORECASE)

# One to five capitalised words ending in a festival-ish noun, on a single line
FESTIVAL_NAME_RE = re.compile(
    r"\b(?:[A-Z][A-Za-z'’.&-]*[ \t]+(?:(?:of|the|and|de|du|&)[ \t]+)?){1,5}"
    r"(?:Film[ \t]+Festival|Festival|Fest|ShortFest|Film[ \t]+Awards|Awards|Competition|Showcase)\b"
)

_FILMFREEWAY_SUFFIX_RE = re.compile(r"\s*[-|]\s*FilmFreeway.*$", re.IGNORECASE)
_SCRIPT_STYLE_RE = re.compile(r"<(script|style|noscript)\b.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_BLOCK_TAG_RE = re.compile(r"</?(?:div|p|li|ul|ol|h[1-6]|tr|td|section|article|header|footer|br)\b[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_INLINE_SPACE_RE = re.compile(r"[ \t\r\f\v]+")
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")


def is_plausible_code(token: str) -> bool:
    """Reject pure digits, pure letters and common heading words."""
    if not 4 <= len(token) <= 12:
        return False
    if token.isdigit() or token.isalpha():
        return False
    return token not in COMMON_WORDS


def iter_code_tokens(text: str) -> Iterator[re.Match]:
    """Yield regex matches for every plausible code in text."""
    for match in CODE_TOKEN_RE.finditer(text or ""):
        if is_plausible_code(match.group(1)):
            yield match


def first_code_token(text: str) -> str | None:
    match = next(iter_code_tokens(text), None)
    return match.group(1) if match else None


def find_offer(text: str) -> str | None:
    match = OFFER_RE.search(text or "")
    return match.group(0) if match else None


def clean_festival_name(name: str) -> str:
    """Drop FilmFreeway title suffixes and collapse whitespace."""
    name = _FILMFREEWAY_SUFFIX_RE.sub("", name or "")
    return " ".join(name.split())


def absolutize_url(href: str | None, base_url: str) -> str:
    """Join root-relative links onto the source domain."""
    if not href:
        return ""
    href = href.strip()
    if href.startswith("/"):
        return urljoin(base_url.rstrip("/") + "/", href)
    return href


def strip_tags(html_content: str) -> str:
    """Turn an HTML document into plain text without a structural parse.

    Block-level tags become line breaks so that phrases from neighbouring
    elements do not run together.
    """
    if not html_content:
        return ""
    text = _SCRIPT_STYLE_RE.sub(" ", html_content)
    text = _BLOCK_TAG_RE.sub("\n", text)
    text = _TAG_RE.sub(" ", text)
    text = html_lib.unescape(text)
    text = _INLINE_SPACE_RE.sub(" ", text)
    return _BLANK_LINES_RE.sub("\n", text).strip()


def span_distance(span: tuple[int, int], target: tuple[int, int]) -> int:
    """Characters between two spans, 0 when they overlap."""
    start, end = span
    target_start, target_end = target
    if end <= target_start:
        return target_start - end
    if start >= target_end:
        return start - target_end
    return 0


def nearest_match(
    matches: Iterable[re.Match],
    target: tuple[int, int],
    max_distance: int,
) -> Optional[re.Match]:
    """Closest match to target within max_distance; earlier match wins ties."""
    best = None
    best_distance = max_distance + 1
    for match in matches:
        distance = span_distance(match.span(), target)
        if distance < best_distance:
            best, best_distance = match, distance
    return best
