"""Property importer — turns a user-supplied URL into a Listing.

Pipeline, as seen by the caller:
  validate URL → fetching (25%) → extraction service call → processing (75%)
  → complete (100%) with the Listing, or error (0%) with a message.

The extraction service runs the fetch/AI/template cascade. When the service is
not configured, or cannot be reached, the importer builds a template listing
from the URL alone, so a listing is produced whenever the URL is valid and no
fetch was actually attempted and failed.

import_property() never raises: every failure becomes ImportResult(success=False).
"""
import time
from typing import Callable, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from houselyzer.config import settings
from houselyzer.core.exceptions import AppException, ServerError
from houselyzer.core.logging import get_logger, set_correlation_id
from houselyzer.schemas.extraction_schema import ExtractionMethod, ListingFields, ScrapeResponse
from houselyzer.schemas.import_schema import (
    ImportMetadata,
    ImportProgress,
    ImportResult,
    ImportStep,
)
from houselyzer.schemas.listing_schema import Listing, utcnow
from houselyzer.services.template_service import (
    DEFAULT_NEIGHBORHOOD,
    DEFAULT_YEAR_BUILT,
    build_template_fields,
    require_absolute_url,
)

logger = get_logger(__name__)

SCRAPE_PATH = "/api/v1/extraction/scrape-property"
IMPORTED_AGENT = "Imported automatically"

ProgressCallback = Callable[[ImportProgress], None]


def listing_from_fields(fields: ListingFields) -> Listing:
    """Build a new Listing (fresh id and timestamps) from extracted fields."""
    now = utcnow()
    return Listing(
        title=fields.title,
        address=fields.address,
        price=fields.price,
        currency=fields.currency,
        bedrooms=fields.bedrooms,
        bathrooms=fields.bathrooms,
        sqft=fields.sqft,
        year_built=fields.year_built or DEFAULT_YEAR_BUILT,
        property_type=fields.property_type,
        image_url=fields.image_url,
        description=fields.description,
        features=list(fields.features),
        neighborhood=fields.neighborhood or DEFAULT_NEIGHBORHOOD,
        listing_agent=IMPORTED_AGENT,
        days_on_market=0,
        created_at=now,
        updated_at=now,
    )


def _emit(on_progress: Optional[ProgressCallback], step: ImportStep, message: str, progress: int) -> None:
    if on_progress is None:
        return
    try:
        on_progress(ImportProgress(step=step, message=message, progress=progress))
    except Exception:
        logger.exception("Progress callback raised; ignoring", extra={"import_step": step.value})


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"Server error: {response.status_code}"


class PropertyImporter:
    """Client of the extraction service. Holds static configuration only."""

    def __init__(
        self,
        service_url: Optional[str] = None,
        service_key: Optional[str] = None,
        ai_api_key: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.service_url = service_url.rstrip("/") if service_url else None
        self.service_key = service_key
        self.ai_api_key = ai_api_key
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "PropertyImporter":
        return cls(
            service_url=settings.extraction_service_url,
            service_key=settings.extraction_service_key or None,
            ai_api_key=settings.google_genai_api_key or None,
            timeout=float(settings.request_timeout * 2),
        )

    @property
    def configured(self) -> bool:
        return bool(self.service_url and self.service_key)

    @staticmethod
    def create_basic_listing(url: str) -> Listing:
        """Template listing built from the URL alone."""
        return listing_from_fields(build_template_fields(url))

    async def import_property(
        self,
        url: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImportResult:
        try:
            url = require_absolute_url(url)
        except AppException as e:
            return ImportResult(success=False, error=e.message)

        set_correlation_id()
        started = time.monotonic()

        try:
            if not self.configured:
                logger.info("Extraction service not configured; using template", extra={"url": url})
                return self._import_from_template(url, on_progress)

            _emit(on_progress, ImportStep.FETCHING, "Fetching page content...", 25)
            try:
                response = await self._post_scrape(url)
            except (httpx.ConnectError, httpx.ConnectTimeout) as e:
                logger.warning(
                    "Extraction service unreachable (%s); using template", e, extra={"url": url},
                )
                return self._import_from_template(url, on_progress, announce_fetch=False)
            except httpx.TransportError as e:
                raise ServerError(f"Extraction service request failed: {e}") from e

            if response.is_error:
                raise ServerError(_error_message(response), status_code=response.status_code)

            _emit(on_progress, ImportStep.PROCESSING, "Processing property data...", 75)

            try:
                result = ScrapeResponse.model_validate(response.json())
            except (ValueError, PydanticValidationError) as e:
                raise ServerError("Malformed response from the extraction service", detail=str(e)) from e

            if not result.success or result.data is None:
                raise ServerError(result.error or "Unknown error while processing the property")

            listing = listing_from_fields(result.data)
            metadata = None
            if result.metadata:
                metadata = ImportMetadata(
                    scraping_method=result.metadata.scraping_method,
                    extraction_method=result.metadata.extraction_method,
                    content_length=result.metadata.content_length,
                )

            _emit(on_progress, ImportStep.COMPLETE, "Property imported successfully", 100)
            logger.info(
                "Import complete",
                extra={
                    "url": url,
                    "listing_id": listing.id,
                    "scraping_method": metadata.scraping_method.value if metadata and metadata.scraping_method else None,
                    "extraction_method": metadata.extraction_method.value if metadata else None,
                    "duration": round(time.monotonic() - started, 3),
                },
            )
            return ImportResult(success=True, listing=listing, metadata=metadata)

        except AppException as e:
            logger.warning("Import failed: %s", e.message, extra={"url": url})
            _emit(on_progress, ImportStep.ERROR, e.message, 0)
            return ImportResult(success=False, error=e.message)
        except Exception as e:
            logger.exception("Unexpected import failure", extra={"url": url})
            _emit(on_progress, ImportStep.ERROR, str(e) or "Unknown error", 0)
            return ImportResult(success=False, error=str(e) or "Unknown error")

    async def _post_scrape(self, url: str) -> httpx.Response:
        body = {"url": url}
        if self.ai_api_key:
            body["aiApiKey"] = self.ai_api_key
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.post(
                f"{self.service_url}{SCRAPE_PATH}",
                json=body,
                headers={"X-API-Key": self.service_key or ""},
            )

    def _import_from_template(
        self,
        url: str,
        on_progress: Optional[ProgressCallback],
        announce_fetch: bool = True,
    ) -> ImportResult:
        if announce_fetch:
            _emit(on_progress, ImportStep.FETCHING, "Preparing import...", 25)
        _emit(on_progress, ImportStep.PROCESSING, "Generating property data...", 75)
        listing = self.create_basic_listing(url)
        logger.info(
            "Template import complete",
            extra={"url": url, "listing_id": listing.id, "extraction_method": ExtractionMethod.TEMPLATE.value},
        )
        _emit(on_progress, ImportStep.COMPLETE, "Property imported successfully", 100)
        return ImportResult(
            success=True,
            listing=listing,
            metadata=ImportMetadata(
                scraping_method=None,
                extraction_method=ExtractionMethod.TEMPLATE,
                content_length=0,
            ),
        )
