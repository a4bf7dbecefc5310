"""FastAPI main application."""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from filmwaiver.config import config
from filmwaiver.jobs.loaders import ScrapeLoader, build_loader
from filmwaiver.parse.html_parser import extract_debug_snippet
from filmwaiver.query.search import lookup_by_urls, paginate, search_discounts
from filmwaiver.store.cache import CacheRead, DiscountCache

logger = logging.getLogger(__name__)


class LookupRequest(BaseModel):
    """Request body for URL lookup."""
    urls: list[str] = Field(..., min_length=1, description="Festival page URLs")
    page: int = Field(default=0, ge=0)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def error_envelope(status_code: int, error: str) -> JSONResponse:
    """Empty-safe error body: callers treat it as zero results."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "discounts": [], "timestamp": _timestamp()},
    )


def get_cache(request: Request) -> DiscountCache:
    return request.app.state.cache


def _serialize(records) -> list[dict[str, Any]]:
    return [record.model_dump(mode="json") for record in records]


def _page_body(read: CacheRead, records, page: Optional[int]) -> dict[str, Any]:
    result = paginate(records, page)
    body = {
        "success": True,
        "discounts": _serialize(result.items),
        "source": read.source,
        "timestamp": _timestamp(),
        "total": result.total,
        "page": result.page,
        "hasMore": result.has_more,
    }
    if read.error:
        body["error"] = read.error
    return body


async def _read_or_fail(cache: DiscountCache) -> CacheRead:
    read = await cache.get()
    if read.failed:
        raise HTTPException(status_code=500, detail=read.error)
    return read


def create_app(cache: Optional[DiscountCache] = None) -> FastAPI:
    """Build the API around an explicitly owned cache."""
    app = FastAPI(title="Film Waiver API", version="0.1.0")
    app.state.cache = cache or DiscountCache(build_loader())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return error_envelope(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'] if part != 'body')}: {err['msg']}"
            for err in exc.errors()
        )
        return error_envelope(400, f"Invalid request: {problems}")

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        return error_envelope(500, str(exc) or exc.__class__.__name__)

    @app.get("/health")
    @app.get("/api/health")
    async def health(cache: DiscountCache = Depends(get_cache)):
        """Liveness plus cache age and size."""
        age = cache.age_seconds()
        return {
            "status": "ok",
            "timestamp": _timestamp(),
            "data_source": cache.source_tag,
            "cache_age_seconds": round(age, 1) if age is not None else None,
            "record_count": cache.size(),
            "metrics": cache.metrics.get_summary(),
        }

    @app.get("/waivers")
    @app.get("/api/discounts/realtime")
    async def list_discounts(
        page: Optional[int] = Query(default=None, ge=0),
        cache: DiscountCache = Depends(get_cache),
    ):
        """Full current record set, optionally paginated."""
        read = await _read_or_fail(cache)
        logger.info(f"Serving {len(read.records)} discounts from {read.source}")
        return _page_body(read, read.records, page)

    @app.get("/search")
    @app.get("/api/discounts/search")
    async def search(
        q: str = "",
        page: Optional[int] = Query(default=None, ge=0),
        cache: DiscountCache = Depends(get_cache),
    ):
        """Records whose name, offer or code contain q."""
        read = await _read_or_fail(cache)
        matches = search_discounts(read.records, q)
        logger.info(f"Search {q!r}: {len(matches)} of {len(read.records)}")
        body = _page_body(read, matches, page)
        body["query"] = q
        body["total_available"] = len(read.records)
        return body

    @app.post("/api/v1/lookup")
    async def lookup(body: LookupRequest, cache: DiscountCache = Depends(get_cache)):
        """Records relevant to a list of festival page URLs."""
        read = await _read_or_fail(cache)
        matches = lookup_by_urls(read.records, body.urls)
        logger.info(f"Lookup of {len(body.urls)} urls matched {len(matches)} records")
        return _page_body(read, matches, body.page)

    if config.DEBUG_ENDPOINTS:
        @app.get("/debug/html")
        async def debug_html():
            """Excerpt of the live discounts page (development only)."""
            loader = ScrapeLoader()
            html_content = await loader.fetch_html()
            return {
                "success": True,
                "url": loader.url,
                "content_length": len(html_content),
                "snippet": extract_debug_snippet(html_content),
            }

    return app


app = create_app()
