"""User settings persisted alongside the listings."""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from houselyzer.schemas.listing_schema import Currency


class MeasurementUnit(str, Enum):
    SQFT = "sqft"
    SQM = "sqm"


class Language(str, Enum):
    ES = "es"
    EN = "en"


class UserSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    currency: Currency = Currency.USD
    default_loan_term: int = Field(30, gt=0)
    default_interest_rate: float = Field(6.5, ge=0)
    notifications: bool = True
    dark_mode: bool = False
    measurement_unit: MeasurementUnit = MeasurementUnit.SQFT
    language: Language = Language.ES
    market_data_location: str = "New York, NY"


class SettingsUpdate(BaseModel):
    currency: Optional[Currency] = None
    default_loan_term: Optional[int] = Field(None, gt=0)
    default_interest_rate: Optional[float] = Field(None, ge=0)
    notifications: Optional[bool] = None
    dark_mode: Optional[bool] = None
    measurement_unit: Optional[MeasurementUnit] = None
    language: Optional[Language] = None
    market_data_location: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("may be omitted but not null")
        return v
