"""Wire schemas of the extraction service.

The service speaks camelCase JSON: ``{url, aiApiKey}`` in, and
``{success, data, metadata: {scrapingMethod, extractionMethod, contentLength}, error}`` out.
"""
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from houselyzer.schemas.listing_schema import Currency, PropertyType


class ScrapingMethod(str, Enum):
    DIRECT = "direct"
    PROXY = "proxy"


class ExtractionMethod(str, Enum):
    AI = "ai"
    TEMPLATE = "template"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScrapeRequest(CamelModel):
    url: str = Field(..., min_length=1)
    ai_api_key: Optional[str] = None


class ListingFields(CamelModel):
    """Listing attributes extracted from a page, before a Listing is built."""
    title: str
    price: float = Field(..., gt=0)
    currency: Currency
    bedrooms: float = Field(..., ge=0)
    bathrooms: float = Field(..., ge=0)
    sqft: float = Field(..., gt=0)
    address: str
    description: str = ""
    features: List[str] = []
    image_url: str = ""
    property_type: PropertyType = PropertyType.APARTMENT
    year_built: Optional[int] = None
    neighborhood: Optional[str] = None

    @field_validator("currency", mode="before")
    @classmethod
    def _upper_currency(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("property_type", mode="before")
    @classmethod
    def _known_property_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in {t.value for t in PropertyType}:
                return PropertyType.APARTMENT
        return v


class ScrapeMetadata(CamelModel):
    scraping_method: ScrapingMethod
    extraction_method: ExtractionMethod
    content_length: int = 0


class ScrapeResponse(CamelModel):
    success: bool
    data: Optional[ListingFields] = None
    metadata: Optional[ScrapeMetadata] = None
    error: Optional[str] = None


class FetchedPage(BaseModel):
    html: str
    method: ScrapingMethod
