"""Schemas for mortgage quotes."""
from typing import List, Optional

from pydantic import BaseModel, Field

from houselyzer.schemas.listing_schema import Currency


class MortgageRequest(BaseModel):
    home_price: float = Field(..., gt=0)
    down_payment_percent: float = Field(20, ge=0, le=100)
    interest_rate: float = Field(..., ge=0, le=100, description="Annual rate, in percent")
    loan_term_years: float = Field(30, gt=0, le=100)
    property_tax_annual: float = Field(0, ge=0)
    insurance_annual: float = Field(0, ge=0)


class MortgageQuote(BaseModel):
    down_payment: float
    loan_amount: float
    interest_rate: float
    loan_term: float
    monthly_rate: float
    number_of_payments: float
    monthly_principal_interest: float
    property_tax: float   # monthly
    insurance: float      # monthly
    pmi: float            # monthly
    monthly_payment: float
    total_interest: float
    total_payment: float


class MortgagePreset(BaseModel):
    id: str
    name: str
    rate: float
    description: str


class MortgageScenario(BaseModel):
    preset: MortgagePreset
    quote: MortgageQuote


class MortgageScenarios(BaseModel):
    currency: Currency
    home_price: float
    down_payment_percent: float
    loan_term_years: float
    property_tax_annual: float
    insurance_annual: float
    scenarios: List[MortgageScenario]
    recommended: Optional[str] = None
