"""Mortgage engine — monthly payment breakdown for a fixed-rate loan.

calculate_mortgage() is a pure function: no validation, no state. Inputs are
validated by the caller (MortgageRequest), in particular loan_term_years > 0.
"""
import math
from typing import Dict, List, Optional

from houselyzer.schemas.listing_schema import Currency
from houselyzer.schemas.mortgage_schema import (
    MortgagePreset,
    MortgageQuote,
    MortgageScenario,
    MortgageScenarios,
)

PMI_ANNUAL_RATE = 0.005
PMI_LOAN_TO_VALUE_LIMIT = 0.8


def calculate_mortgage(
    home_price: float,
    down_payment_percent: float,
    interest_rate: float,
    loan_term_years: float,
    property_tax_annual: float = 0,
    insurance_annual: float = 0,
) -> MortgageQuote:
    """Compute the monthly payment breakdown of a loan.

    PMI applies while the loan exceeds 80% of the home price. When the
    compounding factor overflows a float, the payment takes its limit, interest
    only (loan * monthly rate).
    """
    down_payment = home_price * down_payment_percent / 100
    loan_amount = home_price - down_payment
    monthly_rate = interest_rate / 100 / 12
    number_of_payments = loan_term_years * 12

    if monthly_rate > 0:
        try:
            growth = (1 + monthly_rate) ** number_of_payments
        except OverflowError:
            growth = math.inf
        if math.isinf(growth):
            monthly_pi = loan_amount * monthly_rate
        elif growth == 1:
            monthly_pi = loan_amount / number_of_payments
        else:
            monthly_pi = loan_amount * monthly_rate * growth / (growth - 1)
    else:
        monthly_pi = loan_amount / number_of_payments

    total_payment = monthly_pi * number_of_payments
    total_interest = total_payment - loan_amount

    monthly_tax = property_tax_annual / 12
    monthly_insurance = insurance_annual / 12
    if loan_amount > home_price * PMI_LOAN_TO_VALUE_LIMIT:
        pmi = loan_amount * PMI_ANNUAL_RATE / 12
    else:
        pmi = 0.0

    return MortgageQuote(
        down_payment=down_payment,
        loan_amount=loan_amount,
        interest_rate=interest_rate,
        loan_term=loan_term_years,
        monthly_rate=monthly_rate,
        number_of_payments=number_of_payments,
        monthly_principal_interest=monthly_pi,
        property_tax=monthly_tax,
        insurance=monthly_insurance,
        pmi=pmi,
        monthly_payment=monthly_pi + monthly_tax + monthly_insurance + pmi,
        total_interest=total_interest,
        total_payment=total_payment,
    )


MORTGAGE_PRESETS: Dict[Currency, List[MortgagePreset]] = {
    Currency.EUR: [
        MortgagePreset(id="fixed", name="Fixed", rate=2.50,
                       description="2.50% fixed for the whole term"),
        MortgagePreset(id="variable", name="Variable", rate=4.12,
                       description="Euribor + 0.49% (currently 4.12%)"),
        MortgagePreset(id="mixed", name="Mixed", rate=1.75,
                       description="1.75% fixed during the first years, then variable"),
    ],
    Currency.USD: [
        MortgagePreset(id="fixed", name="Fixed", rate=6.50,
                       description="6.50% fixed for the whole term"),
        MortgagePreset(id="variable", name="Variable", rate=6.25,
                       description="Adjustable rate, currently 6.25%"),
        MortgagePreset(id="mixed", name="Mixed", rate=5.75,
                       description="5.75% fixed during the first years, then variable"),
    ],
}

_CALCULATOR_DEFAULTS = {
    Currency.EUR: {"home_price": 400000.0, "property_tax_annual": 4000.0, "insurance_annual": 800.0},
    Currency.USD: {"home_price": 500000.0, "property_tax_annual": 6000.0, "insurance_annual": 1200.0},
}


def presets_for(currency: Currency) -> List[MortgagePreset]:
    """Mortgage types offered for a currency. Currencies without presets use USD's."""
    return MORTGAGE_PRESETS.get(currency, MORTGAGE_PRESETS[Currency.USD])


def calculator_defaults(currency: Currency) -> Dict[str, float]:
    """Starting values of the calculator for a currency."""
    defaults = _CALCULATOR_DEFAULTS.get(currency, _CALCULATOR_DEFAULTS[Currency.USD])
    return {
        **defaults,
        "down_payment_percent": 20.0,
        "loan_term_years": 30,
    }


def compare_mortgage_types(
    currency: Currency,
    home_price: Optional[float] = None,
    down_payment_percent: Optional[float] = None,
    loan_term_years: Optional[float] = None,
    property_tax_annual: Optional[float] = None,
    insurance_annual: Optional[float] = None,
) -> MortgageScenarios:
    """Quote every mortgage type of a currency; unset inputs take the calculator defaults."""
    defaults = calculator_defaults(currency)
    price = home_price if home_price is not None else defaults["home_price"]
    down = down_payment_percent if down_payment_percent is not None else defaults["down_payment_percent"]
    term = loan_term_years if loan_term_years is not None else defaults["loan_term_years"]
    tax = property_tax_annual if property_tax_annual is not None else defaults["property_tax_annual"]
    insurance = insurance_annual if insurance_annual is not None else defaults["insurance_annual"]

    scenarios = [
        MortgageScenario(
            preset=preset,
            quote=calculate_mortgage(price, down, preset.rate, term, tax, insurance),
        )
        for preset in presets_for(currency)
    ]
    cheapest = min(scenarios, key=lambda s: s.quote.monthly_payment) if scenarios else None

    return MortgageScenarios(
        currency=currency,
        home_price=price,
        down_payment_percent=down,
        loan_term_years=term,
        property_tax_annual=tax,
        insurance_annual=insurance,
        scenarios=scenarios,
        recommended=cheapest.preset.id if cheapest else None,
    )
