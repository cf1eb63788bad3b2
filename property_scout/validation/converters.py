"""Converters for transforming provider JSON into validated records.

This module turns the raw dictionaries returned by the listings provider
into validated Pydantic models (PropertyRecord).
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .models import PropertyRecord

logger = logging.getLogger(__name__)


def raw_to_record(raw: Dict[str, Any]) -> Optional[PropertyRecord]:
    """Convert one provider item to a PropertyRecord.

    If validation fails, the error is logged and None is returned.

    Args:
        raw: Listing dictionary from the provider (camelCase keys)

    Returns:
        Validated PropertyRecord, or None if validation fails

    Example:
        >>> record = raw_to_record({"formattedAddress": "1 Elm St", "price": 250000})
        >>> record.price
        250000.0
    """
    listing_id = raw.get("id", "<no id>") if isinstance(raw, dict) else "<not a dict>"
    try:
        return PropertyRecord.model_validate(raw)

    except ValidationError as e:
        logger.warning(
            f"Validation failed for listing {listing_id}: {e.error_count()} errors"
        )
        logger.debug(f"Validation errors: {e.errors()}")
        return None


def raw_to_record_batch(
    raw_listings: List[Dict[str, Any]],
) -> tuple[List[PropertyRecord], List[Dict[str, Any]]]:
    """Convert a batch of provider items to PropertyRecords.

    Returns both the validated records and the raw items that failed,
    so callers can inspect them.

    Args:
        raw_listings: List of listing dictionaries from the provider

    Returns:
        Tuple of (validated_records, failed_raw_items)
    """
    validated = []
    failed = []

    for raw in raw_listings:
        result = raw_to_record(raw)
        if result is not None:
            validated.append(result)
        else:
            failed.append(raw)

    if raw_listings:
        logger.info(
            f"Batch validation complete: {len(validated)} succeeded, "
            f"{len(failed)} failed ({len(failed)/len(raw_listings)*100:.1f}% failure rate)"
        )

    return validated, failed
