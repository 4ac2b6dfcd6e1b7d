"""Extraction service — turns a listing URL into listing fields, server side.

This service:
1. Fetches the page (direct, then rendering proxy) via PageFetcher
2. Extracts fields with the language model when an AI key is available
3. Falls back to template extraction over the fetched HTML otherwise
4. Reports which methods were actually used

Only the fetch stage can fail the request: FetchError propagates to the route.
PageFetcher uses synchronous `requests`, so it runs under asyncio.to_thread().
"""
import asyncio
import time
from typing import Optional

from houselyzer.config import settings
from houselyzer.core.exceptions import ExtractionError
from houselyzer.core.logging import get_logger, set_correlation_id
from houselyzer.schemas.extraction_schema import (
    ExtractionMethod,
    ListingFields,
    ScrapeMetadata,
    ScrapeRequest,
    ScrapeResponse,
)
from houselyzer.services.ai_extraction_service import extract_listing_with_ai
from houselyzer.services.fetch_service import PageFetcher
from houselyzer.services.template_service import build_template_fields, require_absolute_url

logger = get_logger(__name__)


async def scrape_property(
    payload: ScrapeRequest,
    fetcher: Optional[PageFetcher] = None,
) -> ScrapeResponse:
    """Run the fetch → AI → template cascade for one URL."""
    set_correlation_id()
    url = require_absolute_url(payload.url)
    started = time.monotonic()
    logger.info("Starting scrape", extra={"url": url})

    owns_fetcher = fetcher is None
    fetcher = fetcher or PageFetcher.from_settings()
    try:
        page = await asyncio.to_thread(fetcher.fetch, url)
    finally:
        if owns_fetcher:
            fetcher.close()

    ai_api_key = payload.ai_api_key or settings.google_genai_api_key
    fields: Optional[ListingFields] = None
    extraction_method = ExtractionMethod.TEMPLATE

    if ai_api_key and page.html:
        try:
            fields = await extract_listing_with_ai(page.html, url, ai_api_key)
            extraction_method = ExtractionMethod.AI
        except ExtractionError as e:
            logger.warning("AI extraction failed, using template: %s", e.message, extra={"url": url})

    if fields is None:
        fields = build_template_fields(url, page.html)

    logger.info(
        "Scrape finished with %s extraction", extraction_method.value,
        extra={
            "url": url,
            "scraping_method": page.method.value,
            "extraction_method": extraction_method.value,
            "content_length": len(page.html),
            "duration": round(time.monotonic() - started, 3),
        },
    )

    return ScrapeResponse(
        success=True,
        data=fields,
        metadata=ScrapeMetadata(
            scraping_method=page.method,
            extraction_method=extraction_method,
            content_length=len(page.html),
        ),
    )
