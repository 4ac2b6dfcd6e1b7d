"""Mapper service — normalizes loosely typed extracted values into ListingFields input.

Handles:
- Price parsing: "450.000 €" → (450000, "EUR"), "$500,000" → (500000, "USD")
- Area parsing: "1,200 sq ft" → 1200.0, "95 m²" → 1022.6 (converted to sqft)
- Integer parsing: "3 beds" → 3
- Camel/snake key reconciliation: "image_url" → "imageUrl"
"""
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple

from houselyzer.core.logging import get_logger

logger = get_logger(__name__)

SQFT_PER_SQM = 10.7639

_CURRENCY_MAP = {
    "€": "EUR",
    "eur": "EUR",
    "euro": "EUR",
    "euros": "EUR",
    "£": "GBP",
    "gbp": "GBP",
    "$": "USD",
    "usd": "USD",
}


_NUMBER_PATTERN = re.compile(r"\d[\d\s.,]*")


def _parse_decimal(num_str: str) -> Optional[Decimal]:
    """Parse '1.250.000', '1,250,000', '250.000,50' or '1200.5' into a Decimal."""
    num_str = num_str.strip().replace(" ", "")

    if "," in num_str and "." in num_str:
        if num_str.rfind(",") > num_str.rfind("."):
            num_str = num_str.replace(".", "").replace(",", ".")
        else:
            num_str = num_str.replace(",", "")
    elif "," in num_str:
        parts = num_str.split(",")
        if len(parts[-1]) == 2:
            num_str = num_str.replace(",", ".")
        else:
            num_str = num_str.replace(",", "")
    elif "." in num_str:
        parts = num_str.split(".")
        if len(parts) > 2 or all(len(p) == 3 for p in parts[1:]):
            num_str = num_str.replace(".", "")

    try:
        return Decimal(num_str)
    except InvalidOperation:
        return None


def parse_price(raw: Any) -> Tuple[Optional[float], Optional[str]]:
    """Parse a price like '450.000 €' into (450000.0, 'EUR'). Numbers pass through."""
    if raw is None or isinstance(raw, bool):
        return None, None
    if isinstance(raw, (int, float)):
        return (float(raw), None) if math.isfinite(raw) else (None, None)

    raw = str(raw)
    match = _NUMBER_PATTERN.search(raw)
    if not match:
        return None, None

    amount = _parse_decimal(match.group())
    if amount is None:
        logger.warning("Failed to parse price amount from: '%s'", raw)
        return None, None

    currency = None
    raw_lower = raw.lower()
    for symbol, code in _CURRENCY_MAP.items():
        if symbol in raw_lower:
            currency = code
            break

    return float(amount), currency


_SQM_PATTERN = re.compile(r"m[²2]|sqm|square met", re.IGNORECASE)


def parse_area(raw: Any) -> Optional[float]:
    """Parse an area into square feet; metric values ('95 m²') are converted."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw) if math.isfinite(raw) else None

    raw = str(raw)
    match = _NUMBER_PATTERN.search(raw)
    if not match:
        return None
    value = _parse_decimal(match.group())
    if value is None:
        return None
    area = float(value)
    if _SQM_PATTERN.search(raw):
        area = round(area * SQFT_PER_SQM, 1)
    return area


def parse_number(raw: Any) -> Optional[float]:
    """Parse a count like '2.5 baths' or '3' into a float."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw) if math.isfinite(raw) else None
    match = re.search(r"\d+(?:[.,]\d+)?", str(raw))
    if match:
        return float(match.group().replace(",", "."))
    return None


def parse_int(raw: Any) -> Optional[int]:
    """Parse an integer like 'Built in 1998' → 1998."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return int(raw) if math.isfinite(raw) else None
    match = re.search(r"\d+", str(raw))
    if match:
        return int(match.group())
    return None


_KEY_ALIASES = {
    "image_url": "imageUrl",
    "image": "imageUrl",
    "property_type": "propertyType",
    "type": "propertyType",
    "year_built": "yearBuilt",
    "square_feet": "sqft",
    "area": "sqft",
}


def normalize_extracted_payload(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Coerce a raw extraction payload (e.g. model output) to ListingFields-compatible values.

    Unparsable or empty values are dropped so defaults can fill them.
    """
    data: Dict[str, Any] = {}
    for key, value in raw.items():
        data[_KEY_ALIASES.get(key, key)] = value

    price, price_currency = parse_price(data.get("price"))
    data["price"] = price
    if price_currency and not data.get("currency"):
        data["currency"] = price_currency

    data["sqft"] = parse_area(data.get("sqft"))
    data["bedrooms"] = parse_number(data.get("bedrooms"))
    data["bathrooms"] = parse_number(data.get("bathrooms"))
    data["yearBuilt"] = parse_int(data.get("yearBuilt"))

    features = data.get("features")
    if isinstance(features, str):
        data["features"] = [f.strip() for f in features.split(",") if f.strip()]
    elif isinstance(features, list):
        data["features"] = [str(f).strip() for f in features if str(f).strip()]

    return {k: v for k, v in data.items() if v is not None and v != ""}
