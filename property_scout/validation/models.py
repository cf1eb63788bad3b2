"""Pydantic models for listing records and search filters.

This module defines the validated data models shared by the listings
provider, the query interpreter and the analyzers. Provider JSON uses
camelCase keys; the models accept either camelCase or snake_case input.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class PropertyType(str, Enum):
    """Property types understood by the scoring and search pipeline."""
    SINGLE_FAMILY = "Single Family"
    CONDO = "Condo"
    TOWNHOUSE = "Townhouse"
    MULTI_FAMILY = "Multi-Family"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Any) -> "PropertyType":
        """Match a provider string case-insensitively, defaulting to UNKNOWN."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value.lower() == normalized:
                    return member
        return cls.UNKNOWN


def _aliases(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class PropertyRecord(BaseModel):
    """Validated sale listing as returned by the listings provider.

    Records are read-only from the pipeline's perspective: analyzers wrap
    them instead of attaching derived fields.

    Example:
        record = PropertyRecord(
            formattedAddress="123 Main St, Austin, TX 78701",
            price=350000,
            bedrooms=3,
            propertyType="Single Family",
            squareFootage=1800,
            daysOnMarket=12,
        )
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    listing_id: Optional[str] = Field(None, validation_alias=_aliases("id", "listing_id"))
    address: str = Field(
        "",
        validation_alias=_aliases("formattedAddress", "address", "addressLine1"),
        description="Display address",
    )
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(None, validation_alias=_aliases("zipCode", "zip_code"))

    price: float = Field(0, ge=0, description="List price in dollars")
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    property_type: PropertyType = Field(
        PropertyType.UNKNOWN,
        validation_alias=_aliases("propertyType", "property_type"),
    )
    square_footage: Optional[float] = Field(
        None, ge=0, validation_alias=_aliases("squareFootage", "square_footage")
    )
    lot_size: Optional[float] = Field(None, ge=0, validation_alias=_aliases("lotSize", "lot_size"))
    year_built: Optional[int] = Field(None, validation_alias=_aliases("yearBuilt", "year_built"))
    days_on_market: Optional[int] = Field(
        None, ge=0, validation_alias=_aliases("daysOnMarket", "days_on_market")
    )
    listed_date: Optional[datetime] = Field(
        None, validation_alias=_aliases("listedDate", "listed_date")
    )

    @field_validator("address", mode="before")
    @classmethod
    def strip_address(cls, v: Optional[str]) -> str:
        """Remove surrounding whitespace; a missing address becomes empty."""
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v) -> float:
        """Parse price from various formats.

        Handles:
        - Numbers: 450000
        - Strings with currency: "$450,000"
        - Missing values: None -> 0
        """
        if v is None:
            return 0
        if isinstance(v, (int, float)):
            return v
        if isinstance(v, str):
            cleaned = re.sub(r"[$,\s]", "", v)
            try:
                return float(cleaned)
            except ValueError:
                raise ValueError(f"Cannot parse price: {v}")
        return v

    @field_validator("property_type", mode="before")
    @classmethod
    def parse_property_type(cls, v) -> PropertyType:
        return PropertyType.parse(v)

    @property
    def price_per_sqft(self) -> Optional[float]:
        """Price divided by living area, when both are positive."""
        if self.price > 0 and self.square_footage and self.square_footage > 0:
            return self.price / self.square_footage
        return None

    def snapshot(self) -> Dict[str, Any]:
        """JSON-safe copy used in the interaction log."""
        return self.model_dump(mode="json", exclude_none=True)


class FilterParameters(BaseModel):
    """Sparse search filters produced by the query interpreter.

    Every field is optional; a missing field means "unconstrained".
    Serialized with camelCase keys to match the listings provider.

    Example:
        filters = FilterParameters(city="Austin", state="TX", maxPrice=400000)
        filters.to_params()  # {"city": "Austin", "state": "TX", "maxPrice": 400000}
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    city: Optional[str] = None
    state: Optional[str] = None
    min_price: Optional[int] = Field(None, ge=0, alias="minPrice")
    max_price: Optional[int] = Field(None, ge=0, alias="maxPrice")
    min_bedrooms: Optional[int] = Field(None, ge=0, alias="minBedrooms")
    max_bedrooms: Optional[int] = Field(None, ge=0, alias="maxBedrooms")
    property_type: Optional[PropertyType] = Field(None, alias="propertyType")

    @field_validator("city", mode="before")
    @classmethod
    def normalize_city(cls, v: Optional[str]) -> Optional[str]:
        """Normalize city name to title case: "san antonio" -> "San Antonio"."""
        if v is None or not isinstance(v, str):
            return v
        v = " ".join(v.split())
        return v.title() if v else None

    @field_validator("state", mode="before")
    @classmethod
    def validate_state(cls, v: Optional[str]) -> Optional[str]:
        """Validate a two-letter state code, normalized to upper case."""
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError(f"Invalid state code: {v!r}")

        v = v.strip().upper()
        if not v:
            return None
        if not re.fullmatch(r"[A-Z]{2}", v):
            raise ValueError(f"Invalid state code: {v}. Expected two letters (TX)")
        return v

    @field_validator("property_type", mode="before")
    @classmethod
    def validate_property_type(cls, v) -> Optional[PropertyType]:
        if v is None or v == "":
            return None
        parsed = PropertyType.parse(v)
        if parsed is PropertyType.UNKNOWN:
            raise ValueError(f"Unsupported property type: {v}")
        return parsed

    @property
    def is_empty(self) -> bool:
        return not self.to_params()

    def to_params(self) -> Dict[str, Any]:
        """Present fields only, keyed by their camelCase names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
