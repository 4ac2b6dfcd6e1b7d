"""Template extraction — deterministic listing fields from a URL and, optionally, its HTML.

Shared by the extraction service (after a fetch, when AI is unavailable) and
by the importer (when the service is unconfigured or unreachable), so both
sides produce the same placeholder listing for the same input.
"""
from typing import Optional, Tuple
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from houselyzer.core.exceptions import ValidationError
from houselyzer.schemas.extraction_schema import ListingFields
from houselyzer.schemas.listing_schema import Currency, PropertyType

TITLE_MAX_LENGTH = 100

EUROPEAN_PORTALS = ("idealista", "fotocasa", "immobiliare", "seloger", "immowelt")
EUROPEAN_TLDS = (
    "es", "fr", "de", "it", "pt", "nl", "be", "at", "ie", "lu", "fi", "gr",
    "dk", "se", "pl", "cz", "eu",
)

EUROPEAN_BASE_PRICE = 450000
DEFAULT_BASE_PRICE = 500000

DEFAULT_BEDROOMS = 3
DEFAULT_BATHROOMS = 2
DEFAULT_SQFT = 1200
DEFAULT_YEAR_BUILT = 2020
DEFAULT_NEIGHBORHOOD = "To be determined"
PLACEHOLDER_IMAGE_URL = "https://images.pexels.com/photos/1571460/pexels-photo-1571460.jpeg"

IMPORTED_FEATURE = "Imported from URL"
VERIFICATION_REQUIRED = "Requires verification"


def require_absolute_url(url: str) -> str:
    """Return the URL unchanged, or raise ValidationError if it has no scheme or host."""
    candidate = (url or "").strip()
    parsed = urlparse(candidate)
    if not parsed.scheme or not parsed.netloc:
        raise ValidationError(f"Invalid URL: '{url}'")
    return candidate


def url_domain(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def is_european_domain(domain: str) -> bool:
    """European portal keyword anywhere in the host, or a European country TLD."""
    domain = domain.lower().rstrip(".")
    if any(portal in domain for portal in EUROPEAN_PORTALS):
        return True
    tld = domain.rsplit(".", 1)[-1]
    return tld in EUROPEAN_TLDS


def infer_currency(domain: str) -> Tuple[Currency, int]:
    """Currency and placeholder base price inferred from a host name."""
    if is_european_domain(domain):
        return Currency.EUR, EUROPEAN_BASE_PRICE
    return Currency.USD, DEFAULT_BASE_PRICE


def extract_page_title(html: Optional[str]) -> Optional[str]:
    """Text of the page's <title> tag, or None if absent or blank."""
    if not html:
        return None
    soup = BeautifulSoup(html, "lxml")
    title_tag = soup.find("title")
    if not title_tag:
        return None
    title = title_tag.get_text(strip=True)
    return title or None


def build_template_fields(url: str, html: Optional[str] = None) -> ListingFields:
    """Placeholder listing fields for a URL, titled from the page when HTML is available."""
    url = require_absolute_url(url)
    domain = url_domain(url)
    currency, base_price = infer_currency(domain)

    title = extract_page_title(html) or f"Property imported from {domain}"

    return ListingFields(
        title=title[:TITLE_MAX_LENGTH],
        price=base_price,
        currency=currency,
        bedrooms=DEFAULT_BEDROOMS,
        bathrooms=DEFAULT_BATHROOMS,
        sqft=DEFAULT_SQFT,
        address=url,
        description=(
            f"Property imported from {url}. The data was generated automatically "
            "and may need review."
        ),
        features=[IMPORTED_FEATURE, VERIFICATION_REQUIRED],
        image_url=PLACEHOLDER_IMAGE_URL,
        property_type=PropertyType.APARTMENT,
        year_built=DEFAULT_YEAR_BUILT,
        neighborhood=DEFAULT_NEIGHBORHOOD,
    )
