"""Structural extractor: discount cards found through CSS selectors."""
import logging
from typing import Callable, Optional, Sequence

from selectolax.parser import HTMLParser, Node

from filmwaiver.parse.models import DEFAULT_OFFER, DiscountRecord
from filmwaiver.parse.patterns import (
    CODE_TOKEN_RE,
    FESTIVAL_KEYWORD_RE,
    absolutize_url,
    clean_festival_name,
    find_offer,
    first_code_token,
)

logger = logging.getLogger(__name__)

SOURCE_TAG = "filmfreeway_realtime"

# Card-like containers, most specific first
CARD_SELECTORS = [
    ".festival-card",
    ".discount-card",
    ".card",
    ".festival-item",
    ".discount-item",
    "[data-festival-id]",
    ".list-group-item",
    ".row .col-md-4",
    ".row .col-lg-4",
    ".row .col-sm-6",
    ".grid-item",
]
GENERIC_CONTAINERS = "div, section, article, li"
MAX_GENERIC_TEXT = 1000

NAME_SELECTORS = ["h1", "h2", "h3", "h4", "h5", "h6", ".title", ".name", ".festival-name", ".festival-title"]
CODE_SELECTORS = [".code", ".discount-code", ".coupon-code", ".promo-code", ".badge", ".tag"]
OFFER_SELECTORS = [".offer", ".discount", ".deal", ".description", ".savings", ".percent", "p"]


def _text(node: Optional[Node]) -> str:
    if node is None:
        return ""
    return " ".join(node.text(separator=" ").split())


def _first_selector_text(node: Node, selectors: Sequence[str]) -> str | None:
    for selector in selectors:
        text = _text(node.css_first(selector))
        if text:
            return text
    return None


def find_card_nodes(parser: HTMLParser) -> list[Node]:
    """Containers of the first selector that matches, else generic code-bearing blocks."""
    for selector in CARD_SELECTORS:
        nodes = parser.css(selector)
        if nodes:
            logger.debug(f"Found {len(nodes)} elements with selector: {selector}")
            return nodes

    logger.debug("No card selector matched, scanning generic containers for code patterns")
    nodes = []
    for node in parser.css(GENERIC_CONTAINERS):
        text = node.text(separator=" ")
        if text and len(text) < MAX_GENERIC_TEXT and CODE_TOKEN_RE.search(text):
            nodes.append(node)
    return nodes


# --- festival name ---------------------------------------------------------

def name_from_selectors(node: Node) -> str | None:
    text = _first_selector_text(node, NAME_SELECTORS)
    return clean_festival_name(text) if text else None


def name_from_text_lines(node: Node) -> str | None:
    """First line that reads like a festival name."""
    lines = [line.strip() for line in node.text(separator="").split("\n")]
    for line in lines:
        if 10 < len(line) < 150 and FESTIVAL_KEYWORD_RE.search(line):
            return clean_festival_name(line)
    return None


# --- code ------------------------------------------------------------------

def code_from_selectors(node: Node) -> str | None:
    return _first_selector_text(node, CODE_SELECTORS)


def code_from_text(node: Node) -> str | None:
    return first_code_token(node.text(separator=" "))


# --- offer -----------------------------------------------------------------

def offer_from_selectors(node: Node, name: str, code: str) -> str | None:
    offer = None
    for selector in OFFER_SELECTORS:
        text = _text(node.css_first(selector))
        if text and text != name and text != code:
            offer = text
            if len(offer) > 5:
                break
    return offer


def offer_from_text(node: Node, name: str, code: str) -> str | None:
    return find_offer(node.text(separator=" "))


NAME_STRATEGIES: list[Callable[[Node], str | None]] = [name_from_selectors, name_from_text_lines]
CODE_STRATEGIES: list[Callable[[Node], str | None]] = [code_from_selectors, code_from_text]
OFFER_STRATEGIES: list[Callable[[Node, str, str], str | None]] = [offer_from_selectors, offer_from_text]


def _first_answer(strategies, *args) -> str | None:
    for strategy in strategies:
        value = strategy(*args)
        if value:
            return value
    return None


def extract_url(node: Node, base_url: str) -> str:
    link = node.css_first("a[href]")
    if link is None:
        return ""
    return absolutize_url(link.attributes.get("href"), base_url)


def extract_card(node: Node, base_url: str) -> Optional[DiscountRecord]:
    """Build a record from one container, or None when name or code is missing."""
    name = _first_answer(NAME_STRATEGIES, node)
    code = _first_answer(CODE_STRATEGIES, node)
    if not name or not code:
        return None

    offer = _first_answer(OFFER_STRATEGIES, node, name, code) or DEFAULT_OFFER
    return DiscountRecord(
        festival_name=name,
        code=code.strip(),
        offer=offer,
        url=extract_url(node, base_url),
        source=SOURCE_TAG,
    )


def extract_cards(html_content: str, base_url: str) -> list[DiscountRecord]:
    """Run the card strategy over a whole document."""
    if not html_content:
        return []
    parser = HTMLParser(html_content)
    nodes = find_card_nodes(parser)
    logger.debug(f"Processing {len(nodes)} potential discount elements")

    records = []
    for index, node in enumerate(nodes):
        try:
            record = extract_card(node, base_url)
        except Exception as e:
            logger.warning(f"Error processing element {index}: {e}")
            continue
        if record is not None:
            records.append(record)
    return records
