"""Tests for Mortgage API endpoints."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_quote(client: AsyncClient):
    response = await client.post(
        "/api/v1/mortgage/quote",
        json={
            "home_price": 500000,
            "down_payment_percent": 20,
            "interest_rate": 6.5,
            "loan_term_years": 30,
            "property_tax_annual": 6000,
            "insurance_annual": 1200,
        },
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["loan_amount"] == 400000
    assert data["monthly_payment"] == pytest.approx(3128.27, abs=0.01)
    assert data["pmi"] == 0


@pytest.mark.asyncio
async def test_quote_rejects_zero_term(client: AsyncClient):
    response = await client.post(
        "/api/v1/mortgage/quote",
        json={"home_price": 500000, "interest_rate": 6.5, "loan_term_years": 0},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_scenarios_for_eur(client: AsyncClient):
    response = await client.get("/api/v1/mortgage/scenarios", params={"currency": "EUR"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["home_price"] == 400000
    assert [s["preset"]["id"] for s in data["scenarios"]] == ["fixed", "variable", "mixed"]
    assert data["recommended"] == "mixed"


@pytest.mark.asyncio
async def test_scenarios_with_overrides(client: AsyncClient):
    response = await client.get(
        "/api/v1/mortgage/scenarios",
        params={"currency": "USD", "home_price": 300000, "down_payment_percent": 10},
    )
    data = response.json()["data"]
    assert data["home_price"] == 300000
    assert all(s["quote"]["pmi"] > 0 for s in data["scenarios"])


@pytest.mark.asyncio
async def test_quote_rejects_out_of_range_rate(client: AsyncClient):
    response = await client.post(
        "/api/v1/mortgage/quote",
        json={"home_price": 500000, "interest_rate": 1000000, "loan_term_years": 30},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_quote_fractional_term(client: AsyncClient):
    response = await client.post(
        "/api/v1/mortgage/quote",
        json={"home_price": 500000, "interest_rate": 6.5, "loan_term_years": 2.5},
    )
    assert response.status_code == 200
    assert response.json()["data"]["number_of_payments"] == pytest.approx(30)
