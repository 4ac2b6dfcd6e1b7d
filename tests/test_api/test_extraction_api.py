"""Tests for the extraction service endpoint."""
import pytest
from httpx import AsyncClient

from houselyzer.api.v1 import extraction
from houselyzer.core.exceptions import FetchError
from houselyzer.schemas.extraction_schema import (
    ExtractionMethod,
    ScrapeMetadata,
    ScrapeResponse,
    ScrapingMethod,
)
from houselyzer.services.template_service import build_template_fields


@pytest.mark.asyncio
async def test_scrape_property_camel_case_body(client: AsyncClient, monkeypatch):
    async def fake_scrape(payload):
        assert payload.ai_api_key == "user-key"
        return ScrapeResponse(
            success=True,
            data=build_template_fields(payload.url),
            metadata=ScrapeMetadata(
                scraping_method=ScrapingMethod.DIRECT,
                extraction_method=ExtractionMethod.TEMPLATE,
                content_length=1234,
            ),
        )

    monkeypatch.setattr(extraction, "scrape_property", fake_scrape)

    response = await client.post(
        "/api/v1/extraction/scrape-property",
        json={"url": "https://example.it/casa/1", "aiApiKey": "user-key"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["currency"] == "EUR"
    assert body["data"]["imageUrl"].startswith("https://")
    assert body["data"]["propertyType"] == "apartment"
    assert body["metadata"] == {
        "scrapingMethod": "direct",
        "extractionMethod": "template",
        "contentLength": 1234,
    }
    assert "error" not in body


@pytest.mark.asyncio
async def test_scrape_property_invalid_url(client: AsyncClient):
    response = await client.post("/api/v1/extraction/scrape-property", json={"url": "nope"})
    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_scrape_property_fetch_failure(client: AsyncClient, monkeypatch):
    async def failing_scrape(payload):
        raise FetchError("Both direct fetch and proxy fetch failed")

    monkeypatch.setattr(extraction, "scrape_property", failing_scrape)

    response = await client.post("/api/v1/extraction/scrape-property", json={"url": "https://example.com/a"})
    assert response.status_code == 502
    assert response.json() == {"success": False, "error": "Both direct fetch and proxy fetch failed"}
