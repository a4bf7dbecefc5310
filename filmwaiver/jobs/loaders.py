"""Record-set loaders used to fill the discount cache."""
import logging
from typing import Optional, Sequence

from filmwaiver.config import config
from filmwaiver.fetch.client import FetchClient
from filmwaiver.parse.html_parser import parse_discounts
from filmwaiver.parse.models import DiscountRecord, ExtractionError
from filmwaiver.store.fixtures import STATIC_DISCOUNTS

logger = logging.getLogger(__name__)


class StaticLoader:
    """Serves the fixture list; never fails."""

    source_tag = "fixture"

    def __init__(self, records: Sequence[DiscountRecord] = STATIC_DISCOUNTS):
        self.records = tuple(records)

    async def __call__(self) -> list[DiscountRecord]:
        return list(self.records)


class ScrapeLoader:
    """Fetches the discounts page and extracts records from it."""

    source_tag = "live_scrape"

    def __init__(
        self,
        url: Optional[str] = None,
        base_url: Optional[str] = None,
        client_factory=FetchClient,
    ):
        self.url = url or config.SOURCE_URL
        self.base_url = base_url or config.SOURCE_BASE_URL
        self.client_factory = client_factory

    async def fetch_html(self) -> str:
        async with self.client_factory() as client:
            return await client.fetch_text(self.url)

    async def __call__(self) -> list[DiscountRecord]:
        logger.info(f"Fetching discounts from {self.url}")
        html_content = await self.fetch_html()
        records = parse_discounts(html_content, self.base_url)
        if not records:
            # An empty page counts as a failed refresh so the cache keeps its last good set
            raise ExtractionError(f"No discount records found at {self.url}")
        return records


def build_loader(data_source: Optional[str] = None):
    """Loader for the configured DATA_SOURCE."""
    data_source = (data_source or config.DATA_SOURCE).lower()
    if data_source == "static":
        return StaticLoader()
    if data_source == "scrape":
        return ScrapeLoader()
    raise ValueError(f"Unknown data source: {data_source}")
