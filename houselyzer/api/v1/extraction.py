"""Extraction service router — the endpoint the property importer calls.
/api/v1/extraction

Responses use the service's own camelCase body, not the ApiResponse envelope:
{success, data, metadata: {scrapingMethod, extractionMethod, contentLength}, error}
"""
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from houselyzer.core.exceptions import FetchError, ValidationError
from houselyzer.core.logging import get_logger
from houselyzer.schemas.extraction_schema import ScrapeRequest, ScrapeResponse
from houselyzer.services.extraction_service import scrape_property

logger = get_logger(__name__)

router = APIRouter()


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ScrapeResponse(success=False, error=message).model_dump(by_alias=True, exclude_none=True),
    )


@router.post("/scrape-property", response_model=ScrapeResponse, response_model_exclude_none=True)
async def scrape(payload: ScrapeRequest):
    """Fetch a listing page and extract its fields (AI when possible, template otherwise)."""
    try:
        return await scrape_property(payload)
    except ValidationError as e:
        return _failure(400, e.message)
    except FetchError as e:
        logger.error("Scrape failed: %s", e.message, extra={"url": payload.url})
        return _failure(502, e.message)
