"""Configuration management from environment variables."""
import os
from dotenv import load_dotenv

# Load .env file
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration."""

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))

    # Data source: "scrape" (live FilmFreeway page) or "static" (fixtures)
    DATA_SOURCE: str = os.getenv("DATA_SOURCE", "scrape").lower()
    SOURCE_URL: str = os.getenv("SOURCE_URL", "https://filmfreeway.com/festivals/discounts")
    SOURCE_BASE_URL: str = os.getenv("SOURCE_BASE_URL", "https://filmfreeway.com")

    # Fetch
    TIMEOUT: float = float(os.getenv("TIMEOUT", "15"))
    MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "2"))

    # Cache
    CACHE_TTL_SECONDS: float = float(os.getenv("CACHE_TTL_SECONDS", "300"))
    SINGLE_FLIGHT: bool = _env_bool("SINGLE_FLIGHT")

    # Query / extraction
    PAGE_SIZE: int = int(os.getenv("PAGE_SIZE", "10"))
    MIN_RECORDS: int = int(os.getenv("MIN_RECORDS", "5"))

    # Development aids
    DEBUG_ENDPOINTS: bool = _env_bool("DEBUG_ENDPOINTS")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration."""
        errors = []
        if cls.DATA_SOURCE not in ("scrape", "static"):
            errors.append(f"DATA_SOURCE must be 'scrape' or 'static', got {cls.DATA_SOURCE!r}")
        if not 0 < cls.PORT < 65536:
            errors.append(f"PORT out of range: {cls.PORT}")
        if cls.PAGE_SIZE <= 0:
            errors.append("PAGE_SIZE must be positive")
        if cls.CACHE_TTL_SECONDS < 0:
            errors.append("CACHE_TTL_SECONDS must not be negative")
        if cls.TIMEOUT <= 0:
            errors.append("TIMEOUT must be positive")
        if cls.MAX_RETRIES < 0:
            errors.append("MAX_RETRIES must not be negative")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


config = Config()
