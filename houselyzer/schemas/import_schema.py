"""Schemas for the property importer and its API endpoint."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from houselyzer.schemas.extraction_schema import ExtractionMethod, ScrapingMethod
from houselyzer.schemas.listing_schema import Listing


class ImportStep(str, Enum):
    FETCHING = "fetching"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"


class ImportProgress(BaseModel):
    step: ImportStep
    message: str
    progress: int = Field(..., ge=0, le=100)


class ImportMetadata(BaseModel):
    scraping_method: Optional[ScrapingMethod] = None  # None: nothing was fetched
    extraction_method: ExtractionMethod
    content_length: int = 0


class ImportResult(BaseModel):
    success: bool
    listing: Optional[Listing] = None
    error: Optional[str] = None
    metadata: Optional[ImportMetadata] = None


class ImportRequest(BaseModel):
    url: str = Field(..., description="Listing page to import")


class ImportResponse(BaseModel):
    result: ImportResult
    progress: List[ImportProgress]
