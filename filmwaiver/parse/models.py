"""Data models for discount records."""
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, computed_field

DEFAULT_OFFER = "Discount available"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DiscountRecord(BaseModel):
    """One festival submission discount (festival name, code and offer)."""

    model_config = ConfigDict(frozen=True)

    festival_name: str = Field(..., description="Human-readable festival name, may be a guess")
    code: str = Field(..., description="Discount code")
    offer: str = Field(default=DEFAULT_OFFER, description="Discount terms")
    url: str = Field(default="", description="Absolute festival link, empty if unknown")
    source: str = Field(default="filmfreeway_realtime", description="Provenance tag")
    scraped_at: datetime = Field(default_factory=utcnow)

    @computed_field
    @property
    def festival_url(self) -> str:
        """Same as url, kept for clients of the fixture-backed API."""
        return self.url

    @computed_field
    @property
    def retrieved_at(self) -> datetime:
        return self.scraped_at

    def is_valid(self) -> bool:
        """A record needs a name longer than 2 chars and a code of at least 3."""
        return len(self.festival_name.strip()) > 2 and len(self.code.strip()) >= 3

    def search_text(self) -> str:
        return f"{self.festival_name} {self.offer} {self.code}".lower()


class ExtractionError(RuntimeError):
    """Raised when a fetched page yields no discount records."""
