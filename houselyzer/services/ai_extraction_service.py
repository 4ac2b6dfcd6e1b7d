"""AI extraction service — structured listing fields from raw listing HTML.

The page is stripped of scripts, styles and comments, truncated to respect the
model's token budget, and sent to Gemini with an instruction to answer with a
single JSON object. Fields the model leaves out are filled from the template
defaults. Every failure surfaces as ExtractionError so the caller can fall back
to template extraction.
"""
import asyncio
import json
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup, Comment
from pydantic import ValidationError as PydanticValidationError

from houselyzer.config import settings
from houselyzer.core.exceptions import ExtractionError
from houselyzer.core.logging import get_logger
from houselyzer.schemas.extraction_schema import ListingFields
from houselyzer.services.mapper_service import normalize_extracted_payload
from houselyzer.services.template_service import build_template_fields

logger = get_logger(__name__)

_SYSTEM_INSTRUCTION_EXTRACTION = """
You extract real-estate listing data from raw HTML.

Return ONLY a valid JSON object, no additional text, with this structure:
{
  "title": "Property title",
  "price": 450000,
  "currency": "EUR" or "USD",
  "bedrooms": 3,
  "bathrooms": 2,
  "sqft": 1200,
  "address": "Full address",
  "description": "Property description",
  "features": ["feature1", "feature2"],
  "imageUrl": "https://example.com/image.jpg",
  "propertyType": "apartment" | "house" | "condo" | "townhouse",
  "yearBuilt": 2020,
  "neighborhood": "Neighborhood name"
}

RULES:
- Use values found in the content; omit a key when the information is missing.
- Currency is EUR for European sites, USD otherwise.
- Property type must be one of: apartment, house, condo, townhouse.
- Features is an array of short strings.
- Area is in square feet; convert square meters.
""".strip()


def clean_html(html: str, max_chars: Optional[int] = None) -> str:
    """Drop scripts, styles and comments, then truncate to max_chars."""
    max_chars = max_chars or settings.ai_max_content_chars
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    return str(soup)[:max_chars]


def _extract_json(text: str) -> Dict[str, Any]:
    candidate = text.strip()
    if candidate.startswith("```"):
        candidate = candidate.strip("`")
        candidate = candidate.replace("json", "", 1).strip()
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        start = candidate.find("{")
        end = candidate.rfind("}")
        if start >= 0 and end > start:
            parsed = json.loads(candidate[start: end + 1])
        else:
            raise
    if not isinstance(parsed, dict):
        raise ValueError("Model output is not a JSON object")
    return parsed


def _build_prompt(content: str, url: str) -> str:
    return f"""
SOURCE URL: {url}

HTML CONTENT:
{content}
""".strip()


_client = None


def _create_client(api_key: str):
    try:
        from google import genai
        return genai.Client(api_key=api_key)
    except Exception as exc:
        raise ExtractionError("Could not create the Gemini client", detail=str(exc)) from exc


def _get_client(api_key: str):
    """Shared client for the server key; a throwaway client for keys sent by callers."""
    global _client
    if api_key != settings.google_genai_api_key:
        return _create_client(api_key)
    if _client is None:
        _client = _create_client(api_key)
    return _client


def _call_ai_for_listing(content: str, url: str, api_key: str) -> Dict[str, Any]:
    """Call Gemini synchronously (blocking). Always run it through the executor."""
    client = _get_client(api_key)

    try:
        response = client.models.generate_content(
            model=settings.google_genai_model,
            config={
                "system_instruction": _SYSTEM_INSTRUCTION_EXTRACTION,
                "temperature": settings.google_genai_temperature,
                "response_mime_type": "application/json",
            },
            contents=_build_prompt(content, url),
        )
    except Exception as exc:
        logger.exception("AI listing extraction failed")
        raise ExtractionError("AI extraction request failed", detail=str(exc)) from exc

    if not response.text:
        raise ExtractionError("No content returned by the model")
    try:
        return _extract_json(str(response.text))
    except ValueError as exc:
        raise ExtractionError("Failed to parse model output as JSON", detail=str(exc)) from exc


async def _call_ai_for_listing_async(content: str, url: str, api_key: str) -> Dict[str, Any]:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _call_ai_for_listing, content, url, api_key)


def _to_listing_fields(raw: Dict[str, Any], url: str, html: str) -> ListingFields:
    defaults = build_template_fields(url, html).model_dump(by_alias=True)
    try:
        merged = {**defaults, **normalize_extracted_payload(raw)}
        return ListingFields.model_validate(merged)
    except (PydanticValidationError, ValueError, OverflowError, TypeError) as exc:
        raise ExtractionError("Model output does not describe a valid listing", detail=str(exc)) from exc


async def extract_listing_with_ai(html: str, url: str, api_key: str) -> ListingFields:
    """Extract listing fields from page HTML with the language model."""
    content = clean_html(html)
    if not content.strip():
        raise ExtractionError("Nothing left to extract after cleaning the page")

    raw = await _call_ai_for_listing_async(content, url, api_key)
    return _to_listing_fields(raw, url, html)
