"""Rule-based extraction of search filters from free text."""

import logging
import re
from typing import Any, Dict, Optional

from property_scout.validation import FilterParameters, PropertyType

logger = logging.getLogger(__name__)

_CITY = r"([a-z][a-z.'\-]*(?:\s+[a-z][a-z.'\-]*)*?)"
_STATE = r"([a-z]{2})\b"

# Evaluated in order; the first match wins.
LOCATION_PATTERNS = [
    re.compile(rf"\b(?:in|near|around)\s+{_CITY},\s*{_STATE}", re.IGNORECASE),
    re.compile(rf"\b(?:in|near|around)\s+{_CITY}\s+{_STATE}", re.IGNORECASE),
    # Without a preposition, only capitalized words (or a single word) form the city.
    re.compile(r"\b([A-Z][A-Za-z.'\-]*(?:\s+[A-Z][A-Za-z.'\-]*)*),\s*([A-Za-z]{2})\b"),
    re.compile(r"\b([a-z][a-z.'\-]*),\s*([a-z]{2})\b", re.IGNORECASE),
]

_LEADING_PREPOSITIONS = re.compile(r"^(?:(?:in|near|around)\s+)+", re.IGNORECASE)

_AMOUNT = r"\$?\s*(\d[\d,]*(?:\.\d+)?)\s*(k)?\b"

# Evaluated in order; a later match overwrites an earlier one.
MAX_PRICE_PATTERNS = [
    re.compile(rf"\b(?:under|below)\s+{_AMOUNT}", re.IGNORECASE),
    re.compile(rf"\b(?:max|maximum)\s+(?:of\s+|price\s+)?{_AMOUNT}", re.IGNORECASE),
    re.compile(rf"{_AMOUNT}\s*or\s+less\b", re.IGNORECASE),
]

MIN_PRICE_PATTERNS = [
    re.compile(rf"\b(?:above|over)\s+{_AMOUNT}", re.IGNORECASE),
    re.compile(rf"\b(?:min|minimum)\s+(?:of\s+|price\s+)?{_AMOUNT}", re.IGNORECASE),
    re.compile(rf"{_AMOUNT}\s*or\s+more\b(?!\s*(?:bed|br|bath))", re.IGNORECASE),
]

BEDROOM_PATTERN = re.compile(r"\b(\d+)\s*-?\s*(?:bedrooms?|beds?|br)\b", re.IGNORECASE)

PROPERTY_TYPE_PATTERNS = [
    (re.compile(r"\b(?:houses?|homes?|single[\s-]family)\b", re.IGNORECASE), PropertyType.SINGLE_FAMILY),
    (re.compile(r"\bcondos?\b", re.IGNORECASE), PropertyType.CONDO),
    (re.compile(r"\btownhouses?\b", re.IGNORECASE), PropertyType.TOWNHOUSE),
    (re.compile(r"\bapartments?\b", re.IGNORECASE), PropertyType.MULTI_FAMILY),
]

LUXURY_MIN_PRICE = 500000
STARTER_MAX_PRICE = 350000
FAMILY_MIN_BEDROOMS = 3

_LUXURY = re.compile(r"\bluxury\b", re.IGNORECASE)
_STARTER = re.compile(r"\b(?:starter|first[\s-]time\s+home|affordable)\b", re.IGNORECASE)
_FAMILY = re.compile(r"\bfamily\b", re.IGNORECASE)


def _parse_amount(match: re.Match) -> int:
    value = float(match.group(1).replace(",", ""))
    if match.group(2):
        value *= 1000
    return int(value)


def _last_price(text: str, patterns) -> Optional[int]:
    price = None
    for pattern in patterns:
        match = pattern.search(text)
        if not match:
            continue
        try:
            price = _parse_amount(match)
        except (OverflowError, ValueError) as e:
            logger.warning(f"Ignoring unusable amount {match.group(1)!r}: {e}")
    return price


def extract_location(text: str) -> Dict[str, str]:
    """Find a "City, ST" style location in the text."""
    for pattern in LOCATION_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        city = _LEADING_PREPOSITIONS.sub("", match.group(1)).strip()
        if not city:
            continue
        return {"city": city, "state": match.group(2).upper()}
    return {}


def extract_property_type(text: str) -> Optional[PropertyType]:
    for pattern, property_type in PROPERTY_TYPE_PATTERNS:
        if pattern.search(text):
            return property_type
    return None


def parse_query(text: str) -> FilterParameters:
    """Extract filter parameters from a free-text search phrase.

    Steps, in order: location, max/min price, bedrooms, property type and
    finally semantic defaults (luxury, starter, family) for fields that are
    still unset. Text that matches no rule yields empty filters.

    Args:
        text: Search phrase, e.g. "3 bedroom house under 400k in Austin, TX"

    Returns:
        FilterParameters with the extracted fields
    """
    params: Dict[str, Any] = {}
    text = text or ""

    params.update(extract_location(text))

    max_price = _last_price(text, MAX_PRICE_PATTERNS)
    if max_price is not None:
        params["max_price"] = max_price

    min_price = _last_price(text, MIN_PRICE_PATTERNS)
    if min_price is not None:
        params["min_price"] = min_price

    bedrooms = BEDROOM_PATTERN.search(text)
    if bedrooms:
        params["min_bedrooms"] = int(bedrooms.group(1))

    property_type = extract_property_type(text)
    if property_type is not None:
        params["property_type"] = property_type

    # Semantic defaults
    if _LUXURY.search(text) and "min_price" not in params:
        params["min_price"] = LUXURY_MIN_PRICE
    if _STARTER.search(text) and "max_price" not in params:
        params["max_price"] = STARTER_MAX_PRICE
    if _FAMILY.search(text) and "min_bedrooms" not in params:
        params["min_bedrooms"] = FAMILY_MIN_BEDROOMS

    logger.debug(f"Rule-based parse of {text!r}: {params}")
    return FilterParameters(**params)
