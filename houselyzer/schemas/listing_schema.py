"""Pydantic schemas for listings, their comments, and listing API requests."""
import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def price_per_area(price: float, area: float) -> int:
    """Price divided by area, rounded half-up to the nearest integer."""
    ratio = Decimal(str(price)) / Decimal(str(area))
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class PropertyType(str, Enum):
    HOUSE = "house"
    CONDO = "condo"
    TOWNHOUSE = "townhouse"
    APARTMENT = "apartment"


class PriceIndicator(str, Enum):
    GOOD = "good"
    EXPENSIVE = "expensive"


class CommentType(str, Enum):
    NOTE = "note"
    REMINDER = "reminder"
    OBSERVATION = "observation"
    QUESTION = "question"


class CommentPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _stamp_construction(data: Any) -> Any:
    """Give created_at/updated_at the same instant when they are not supplied."""
    if isinstance(data, dict):
        if data.get("created_at") is None:
            data = {**data, "created_at": utcnow()}
        if data.get("updated_at") is None:
            data = {**data, "updated_at": data["created_at"]}
    return data


class ListingComment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    text: str = Field(..., min_length=1)
    type: CommentType = CommentType.NOTE
    priority: CommentPriority = CommentPriority.MEDIUM
    tags: List[str] = []
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _timestamps(cls, data: Any) -> Any:
        return _stamp_construction(data)


class ListingBase(BaseModel):
    """Fields a user (or the importer) may set on a listing."""
    title: str
    address: str
    price: float = Field(..., gt=0)
    currency: Currency = Currency.USD
    bedrooms: float = Field(..., ge=0)
    bathrooms: float = Field(..., ge=0)
    sqft: float = Field(..., gt=0)
    year_built: int = 2020
    property_type: PropertyType = PropertyType.APARTMENT
    image_url: str = ""
    description: str = ""
    neighborhood: str = ""
    listing_agent: str = ""
    days_on_market: int = Field(0, ge=0)
    features: List[str] = []

    additional_images: List[str] = []
    map_url: Optional[str] = None
    virtual_tour_url: Optional[str] = None
    lot_size: Optional[str] = None
    parking_spaces: Optional[int] = Field(None, ge=0)
    heating: Optional[str] = None
    cooling: Optional[str] = None
    flooring: Optional[str] = None
    appliances: List[str] = []
    utilities: Optional[str] = None
    hoa: Optional[str] = None
    taxes: Optional[str] = None


class Listing(ListingBase):
    """A tracked real-estate listing. Immutable; mutations build a new instance."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    is_favorite: bool = False
    price_indicator: Optional[PriceIndicator] = None
    comments: List[ListingComment] = []
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _timestamps(cls, data: Any) -> Any:
        return _stamp_construction(data)

    @computed_field
    @property
    def price_per_sqft(self) -> int:
        return price_per_area(self.price, self.sqft)


class ListingCreate(ListingBase):
    """Schema for creating a listing by hand."""
    is_favorite: bool = False
    price_indicator: Optional[PriceIndicator] = None


class ListingUpdate(BaseModel):
    """Schema for partial listing updates (all fields optional)."""
    title: Optional[str] = None
    address: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    currency: Optional[Currency] = None
    bedrooms: Optional[float] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    sqft: Optional[float] = Field(None, gt=0)
    year_built: Optional[int] = None
    property_type: Optional[PropertyType] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    neighborhood: Optional[str] = None
    listing_agent: Optional[str] = None
    days_on_market: Optional[int] = Field(None, ge=0)
    features: Optional[List[str]] = None
    additional_images: Optional[List[str]] = None
    map_url: Optional[str] = None
    virtual_tour_url: Optional[str] = None
    lot_size: Optional[str] = None
    parking_spaces: Optional[int] = Field(None, ge=0)
    heating: Optional[str] = None
    cooling: Optional[str] = None
    flooring: Optional[str] = None
    appliances: Optional[List[str]] = None
    utilities: Optional[str] = None
    hoa: Optional[str] = None
    taxes: Optional[str] = None
    price_indicator: Optional[PriceIndicator] = None

    @field_validator(
        "title", "address", "price", "currency", "bedrooms", "bathrooms", "sqft",
        "year_built", "property_type", "image_url", "description", "neighborhood",
        "listing_agent", "days_on_market", "features", "additional_images", "appliances",
        mode="before",
    )
    @classmethod
    def _not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1)
    type: CommentType = CommentType.NOTE
    priority: CommentPriority = CommentPriority.MEDIUM
    tags: List[str] = []


class ListingCollection(BaseModel):
    """Listing list response."""
    items: List[Listing]
    total: int
