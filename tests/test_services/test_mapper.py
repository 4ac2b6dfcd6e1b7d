"""Tests for mapper service — price parsing, area parsing, normalization."""
import pytest

from houselyzer.services.mapper_service import (
    normalize_extracted_payload,
    parse_area,
    parse_int,
    parse_number,
    parse_price,
)


class TestParsePrice:
    def test_standard_euro(self):
        amount, currency = parse_price("250 000 €")
        assert amount == 250000
        assert currency == "EUR"

    def test_european_format(self):
        amount, currency = parse_price("1.250.000 €")
        assert amount == 1250000
        assert currency == "EUR"

    def test_with_decimals(self):
        amount, _ = parse_price("250.000,50 €")
        assert amount == pytest.approx(250000.50)

    def test_usd(self):
        amount, currency = parse_price("$500,000")
        assert amount == 500000
        assert currency == "USD"

    def test_gbp(self):
        assert parse_price("£325,000") == (325000, "GBP")

    def test_number_passes_through(self):
        assert parse_price(420000) == (420000.0, None)

    def test_none_input(self):
        assert parse_price(None) == (None, None)

    def test_no_number(self):
        assert parse_price("Price on request") == (None, None)


class TestParseArea:
    def test_square_feet(self):
        assert parse_area("1,200 sq ft") == 1200.0

    def test_square_meters_are_converted(self):
        assert parse_area("95 m²") == pytest.approx(1022.6)

    def test_none_input(self):
        assert parse_area(None) is None

    def test_no_number(self):
        assert parse_area("not available") is None


class TestParseNumbers:
    def test_fractional_bathrooms(self):
        assert parse_number("2.5 baths") == 2.5

    def test_int_from_text(self):
        assert parse_int("Built in 1998") == 1998

    def test_none(self):
        assert parse_int(None) is None
        assert parse_number(None) is None


class TestNormalizeExtractedPayload:
    def test_full_normalization(self):
        raw = {
            "title": "Townhouse with patio",
            "price": "€ 380.000",
            "bedrooms": "3 bedrooms",
            "bathrooms": "2",
            "area": "110 m²",
            "image_url": "https://example.com/img.jpg",
            "property_type": "townhouse",
            "year_built": "Built 2005",
            "features": "Patio, Garage, ",
            "neighborhood": "",
            "description": None,
        }

        data = normalize_extracted_payload(raw)
        assert data["title"] == "Townhouse with patio"
        assert data["price"] == 380000
        assert data["currency"] == "EUR"
        assert data["bedrooms"] == 3
        assert data["bathrooms"] == 2
        assert data["sqft"] == pytest.approx(1184.0)
        assert data["imageUrl"] == "https://example.com/img.jpg"
        assert data["propertyType"] == "townhouse"
        assert data["yearBuilt"] == 2005
        assert data["features"] == ["Patio", "Garage"]
        assert "neighborhood" not in data
        assert "description" not in data

    def test_explicit_currency_wins(self):
        data = normalize_extracted_payload({"price": "$1,000", "currency": "EUR"})
        assert data["currency"] == "EUR"

    def test_unparsable_values_are_dropped(self):
        data = normalize_extracted_payload({"price": "on request", "sqft": "n/a"})
        assert "price" not in data
        assert "sqft" not in data


class TestNonFiniteValues:
    def test_parsers_drop_nan_and_infinity(self):
        assert parse_price(float("nan")) == (None, None)
        assert parse_area(float("inf")) is None
        assert parse_number(float("-inf")) is None
        assert parse_int(float("nan")) is None

    def test_normalization_drops_them(self):
        data = normalize_extracted_payload({"title": "x", "yearBuilt": float("nan"), "price": float("inf")})
        assert data == {"title": "x"}
