"""Tests for template extraction — URL validation, currency inference, titles."""
import pytest

from houselyzer.core.exceptions import ValidationError
from houselyzer.schemas.listing_schema import Currency, PropertyType
from houselyzer.services.template_service import (
    DEFAULT_NEIGHBORHOOD,
    IMPORTED_FEATURE,
    VERIFICATION_REQUIRED,
    build_template_fields,
    extract_page_title,
    is_european_domain,
    require_absolute_url,
)


class TestRequireAbsoluteUrl:
    def test_valid(self):
        assert require_absolute_url("https://example.com/a") == "https://example.com/a"

    @pytest.mark.parametrize("url", ["not a url", "example.com/listing", "", "https://"])
    def test_invalid(self, url):
        with pytest.raises(ValidationError):
            require_absolute_url(url)


class TestEuropeanDomain:
    @pytest.mark.parametrize("domain", ["example.es", "www.idealista.com", "casa.pt", "immo.de"])
    def test_european(self, domain):
        assert is_european_domain(domain)

    @pytest.mark.parametrize("domain", ["zillow.com", "realtor.com", "estate.example.com", "fundamentals.com"])
    def test_not_european(self, domain):
        assert not is_european_domain(domain)


class TestBuildTemplateFields:
    def test_european_url_gets_eur(self):
        fields = build_template_fields("https://example.es/listing/1")
        assert fields.currency == Currency.EUR
        assert fields.price == 450000
        assert fields.title == "Property imported from example.es"

    def test_other_url_gets_usd(self):
        fields = build_template_fields("https://www.zillow.com/homedetails/1")
        assert fields.currency == Currency.USD
        assert fields.price == 500000
        assert fields.address == "https://www.zillow.com/homedetails/1"

    def test_placeholder_values(self):
        fields = build_template_fields("https://example.com/x")
        assert fields.bedrooms == 3
        assert fields.bathrooms == 2
        assert fields.sqft == 1200
        assert fields.property_type == PropertyType.APARTMENT
        assert fields.year_built == 2020
        assert fields.neighborhood == DEFAULT_NEIGHBORHOOD
        assert fields.features == [IMPORTED_FEATURE, VERIFICATION_REQUIRED]

    def test_title_from_page(self):
        html = "<html><head><title>  Sunny loft  </title></head><body></body></html>"
        fields = build_template_fields("https://example.com/x", html)
        assert fields.title == "Sunny loft"

    def test_title_is_truncated(self):
        html = f"<html><head><title>{'A' * 150}</title></head></html>"
        fields = build_template_fields("https://example.com/x", html)
        assert len(fields.title) == 100

    def test_invalid_url(self):
        with pytest.raises(ValidationError):
            build_template_fields("nope")


class TestExtractPageTitle:
    def test_missing_title(self):
        assert extract_page_title("<html><body>hi</body></html>") is None

    def test_blank_title(self):
        assert extract_page_title("<title>   </title>") is None

    def test_no_html(self):
        assert extract_page_title(None) is None
