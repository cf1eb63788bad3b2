"""Data validation module using Pydantic models.

Main exports:
- PropertyRecord: Validated sale listing
- FilterParameters: Sparse search filters
- PropertyType: Supported property types
- raw_to_record / raw_to_record_batch: Convert provider JSON to records

Example usage:
    from property_scout.validation import FilterParameters, raw_to_record_batch

    filters = FilterParameters(city="Austin", state="TX", maxPrice=400000)
    records, failed = raw_to_record_batch(provider_items)
"""

from .models import FilterParameters, PropertyRecord, PropertyType
from .converters import raw_to_record, raw_to_record_batch

__all__ = [
    "FilterParameters",
    "PropertyRecord",
    "PropertyType",
    "raw_to_record",
    "raw_to_record_batch",
]
