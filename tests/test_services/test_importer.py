"""Tests for the property importer — progress sequence, fallbacks, failures."""
import json

import httpx
import pytest

from houselyzer.schemas.extraction_schema import ExtractionMethod, ScrapingMethod
from houselyzer.schemas.import_schema import ImportStep
from houselyzer.schemas.listing_schema import Currency
from houselyzer.services.importer_service import IMPORTED_AGENT, SCRAPE_PATH, PropertyImporter
from houselyzer.services.template_service import VERIFICATION_REQUIRED

SERVICE_URL = "https://extractor.test"


def _scrape_body(**data_overrides) -> dict:
    data = {
        "title": "Loft in Madrid",
        "price": 320000,
        "currency": "EUR",
        "bedrooms": 2,
        "bathrooms": 1,
        "sqft": 850,
        "address": "Calle Mayor 1, Madrid",
        "description": "Renovated loft",
        "features": ["Terrace"],
        "imageUrl": "https://img.test/1.jpg",
        "propertyType": "apartment",
    }
    data.update(data_overrides)
    return {
        "success": True,
        "data": data,
        "metadata": {"scrapingMethod": "direct", "extractionMethod": "ai", "contentLength": 5120},
    }


def _importer(handler) -> PropertyImporter:
    return PropertyImporter(
        service_url=SERVICE_URL,
        service_key="service-key",
        ai_api_key="ai-key",
        transport=httpx.MockTransport(handler),
    )


def _steps(events):
    return [(e.step, e.progress) for e in events]


@pytest.mark.asyncio
async def test_successful_import_reports_progress_in_order():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["key"] = request.headers.get("X-API-Key")
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=_scrape_body())

    events = []
    result = await _importer(handler).import_property("https://www.idealista.com/inmueble/1/", events.append)

    assert result.success is True
    assert _steps(events) == [
        (ImportStep.FETCHING, 25),
        (ImportStep.PROCESSING, 75),
        (ImportStep.COMPLETE, 100),
    ]
    assert captured["path"] == SCRAPE_PATH
    assert captured["key"] == "service-key"
    assert captured["body"] == {"url": "https://www.idealista.com/inmueble/1/", "aiApiKey": "ai-key"}

    listing = result.listing
    assert listing.title == "Loft in Madrid"
    assert listing.currency == Currency.EUR
    assert listing.image_url == "https://img.test/1.jpg"
    assert listing.listing_agent == IMPORTED_AGENT
    assert listing.days_on_market == 0
    assert listing.is_favorite is False
    assert listing.created_at == listing.updated_at
    assert result.metadata.scraping_method == ScrapingMethod.DIRECT
    assert result.metadata.extraction_method == ExtractionMethod.AI
    assert result.metadata.content_length == 5120


@pytest.mark.asyncio
async def test_each_import_gets_a_fresh_id():
    importer = _importer(lambda request: httpx.Response(200, json=_scrape_body()))
    first = await importer.import_property("https://example.com/a")
    second = await importer.import_property("https://example.com/a")
    assert first.listing.id != second.listing.id


@pytest.mark.asyncio
async def test_server_error_message_from_body():
    importer = _importer(lambda request: httpx.Response(500, json={"success": False, "error": "boom"}))
    events = []
    result = await importer.import_property("https://example.com/listing", events.append)

    assert result.success is False
    assert result.error == "boom"
    assert result.listing is None
    assert _steps(events) == [(ImportStep.FETCHING, 25), (ImportStep.ERROR, 0)]
    assert events[-1].message == "boom"


@pytest.mark.asyncio
async def test_server_error_without_body():
    importer = _importer(lambda request: httpx.Response(503, text="unavailable"))
    result = await importer.import_property("https://example.com/listing")
    assert result.success is False
    assert result.error == "Server error: 503"


@pytest.mark.asyncio
async def test_unsuccessful_scrape_response():
    importer = _importer(lambda request: httpx.Response(200, json={"success": False, "error": "No content"}))
    events = []
    result = await importer.import_property("https://example.com/listing", events.append)

    assert result.success is False
    assert result.error == "No content"
    assert _steps(events)[-1] == (ImportStep.ERROR, 0)


@pytest.mark.asyncio
async def test_invalid_url_emits_nothing():
    def handler(request):
        raise AssertionError("no request expected")

    events = []
    result = await _importer(handler).import_property("not a url", events.append)

    assert result.success is False
    assert "Invalid URL" in result.error
    assert events == []


@pytest.mark.asyncio
async def test_unconfigured_importer_uses_template():
    events = []
    result = await PropertyImporter().import_property("https://example.es/piso/9", events.append)

    assert result.success is True
    assert result.listing.currency == Currency.EUR
    assert result.listing.price == 450000
    assert result.listing.sqft == 1200
    assert result.listing.price_per_sqft == round(450000 / 1200)
    assert VERIFICATION_REQUIRED in result.listing.features
    assert result.metadata.extraction_method == ExtractionMethod.TEMPLATE
    assert result.metadata.scraping_method is None
    assert [e.progress for e in events] == [25, 75, 100]


@pytest.mark.asyncio
async def test_unreachable_service_falls_back_to_template():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    events = []
    result = await _importer(handler).import_property("https://www.zillow.com/home/1", events.append)

    assert result.success is True
    assert result.listing.currency == Currency.USD
    assert result.metadata.extraction_method == ExtractionMethod.TEMPLATE
    assert _steps(events) == [
        (ImportStep.FETCHING, 25),
        (ImportStep.PROCESSING, 75),
        (ImportStep.COMPLETE, 100),
    ]


@pytest.mark.asyncio
async def test_raising_callback_does_not_break_import():
    def callback(event):
        raise RuntimeError("listener broke")

    importer = _importer(lambda request: httpx.Response(200, json=_scrape_body()))
    result = await importer.import_property("https://example.com/a", callback)
    assert result.success is True


def test_create_basic_listing():
    listing = PropertyImporter.create_basic_listing("https://example.fr/annonce")
    assert listing.currency == Currency.EUR
    assert listing.title == "Property imported from example.fr"
    assert listing.neighborhood == "To be determined"
    assert listing.year_built == 2020


@pytest.mark.asyncio
async def test_connect_timeout_falls_back_to_template():
    def handler(request):
        raise httpx.ConnectTimeout("connect timed out", request=request)

    result = await _importer(handler).import_property("https://www.zillow.com/home/1")
    assert result.success is True
    assert result.metadata.extraction_method == ExtractionMethod.TEMPLATE


@pytest.mark.asyncio
async def test_read_timeout_is_reported_as_failure():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    events = []
    result = await _importer(handler).import_property("https://www.zillow.com/home/1", events.append)

    assert result.success is False
    assert result.listing is None
    assert "Extraction service request failed" in result.error
    assert _steps(events) == [(ImportStep.FETCHING, 25), (ImportStep.ERROR, 0)]
