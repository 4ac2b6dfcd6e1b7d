"""Mortgage API router — payment quotes and mortgage type comparison.
/api/v1/mortgage"""
from typing import Optional

from fastapi import APIRouter, Query, Request

from houselyzer.api.responses import ok
from houselyzer.schemas.base_schema import ApiResponse
from houselyzer.schemas.listing_schema import Currency
from houselyzer.schemas.mortgage_schema import MortgageQuote, MortgageRequest, MortgageScenarios
from houselyzer.services.mortgage_service import calculate_mortgage, compare_mortgage_types

router = APIRouter()


@router.post("/quote", response_model=ApiResponse[MortgageQuote])
async def quote(payload: MortgageRequest, request: Request):
    """Monthly payment breakdown for one set of loan parameters."""
    result = calculate_mortgage(
        payload.home_price,
        payload.down_payment_percent,
        payload.interest_rate,
        payload.loan_term_years,
        payload.property_tax_annual,
        payload.insurance_annual,
    )
    return ok(result, "Mortgage calculated successfully", request)


@router.get("/scenarios", response_model=ApiResponse[MortgageScenarios])
async def scenarios(
    request: Request,
    currency: Currency = Query(Currency.USD),
    home_price: Optional[float] = Query(None, gt=0),
    down_payment_percent: Optional[float] = Query(None, ge=0, le=100),
    loan_term_years: Optional[float] = Query(None, gt=0, le=100),
    property_tax_annual: Optional[float] = Query(None, ge=0),
    insurance_annual: Optional[float] = Query(None, ge=0),
):
    """Quote every mortgage type offered for a currency."""
    result = compare_mortgage_types(
        currency,
        home_price=home_price,
        down_payment_percent=down_payment_percent,
        loan_term_years=loan_term_years,
        property_tax_annual=property_tax_annual,
        insurance_annual=insurance_annual,
    )
    return ok(result, "Mortgage scenarios calculated successfully", request)
