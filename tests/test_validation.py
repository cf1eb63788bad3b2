"""Tests for listing and filter models and the provider converters."""

import logging

import pytest
from pydantic import ValidationError

from property_scout.validation import (
    FilterParameters,
    PropertyRecord,
    PropertyType,
    raw_to_record,
    raw_to_record_batch,
)
from tests.conftest import make_property, make_raw_listing


class TestPropertyRecord:

    def test_from_provider_json(self):
        record = PropertyRecord.model_validate(make_raw_listing())

        assert record.listing_id == "rc-1"
        assert record.address == "123 Main St, Austin, TX 78701"
        assert record.zip_code == "78701"
        assert record.price == 350000
        assert record.property_type is PropertyType.SINGLE_FAMILY
        assert record.square_footage == 1800
        assert record.days_on_market == 12
        assert record.listed_date.year == 2024

    def test_address_line_fallback(self):
        raw = make_raw_listing()
        del raw["formattedAddress"]
        raw["addressLine1"] = "  9 Side Rd "

        assert PropertyRecord.model_validate(raw).address == "9 Side Rd"

    def test_price_parsing(self):
        assert make_property(price="$450,000").price == 450000
        assert make_property(price=None).price == 0

    def test_negative_values_rejected(self):
        with pytest.raises(ValidationError):
            make_property(price=-1)
        with pytest.raises(ValidationError):
            make_property(bedrooms=-2)
        with pytest.raises(ValidationError):
            make_property(days_on_market=-5)

    def test_unknown_property_type(self):
        assert make_property(property_type="Manufactured").property_type is PropertyType.UNKNOWN
        assert make_property(property_type=None).property_type is PropertyType.UNKNOWN
        assert make_property(property_type="condo").property_type is PropertyType.CONDO

    def test_price_per_sqft(self):
        assert make_property(price=360000, square_footage=1800).price_per_sqft == 200
        assert make_property(square_footage=None).price_per_sqft is None
        assert make_property(square_footage=0).price_per_sqft is None
        assert make_property(price=0).price_per_sqft is None

    def test_frozen(self):
        record = make_property()
        with pytest.raises(ValidationError):
            record.price = 1

    def test_snapshot_is_json_safe(self):
        snapshot = make_property(square_footage=None).snapshot()

        assert snapshot["property_type"] == "Single Family"
        assert "square_footage" not in snapshot


class TestFilterParameters:

    def test_camel_case_input_and_output(self):
        filters = FilterParameters.model_validate(
            {"city": "austin", "state": "tx", "minPrice": 100000, "propertyType": "Townhouse"}
        )

        assert filters.city == "Austin"
        assert filters.state == "TX"
        assert filters.to_params() == {
            "city": "Austin",
            "state": "TX",
            "minPrice": 100000,
            "propertyType": "Townhouse",
        }

    def test_snake_case_input(self):
        filters = FilterParameters(min_bedrooms=2, max_price=300000)

        assert filters.to_params() == {"minBedrooms": 2, "maxPrice": 300000}

    def test_city_whitespace_collapsed(self):
        assert FilterParameters(city="  new   york ").city == "New York"
        assert FilterParameters(city="   ").city is None

    def test_invalid_state(self):
        with pytest.raises(ValidationError):
            FilterParameters(state="Texas")
        assert FilterParameters(state="").state is None

    def test_unsupported_property_type(self):
        with pytest.raises(ValidationError):
            FilterParameters(property_type="Castle")

    def test_negative_price(self):
        with pytest.raises(ValidationError):
            FilterParameters(max_price=-10)

    def test_is_empty(self):
        assert FilterParameters().is_empty
        assert not FilterParameters(city="Austin").is_empty


class TestConverters:

    def test_raw_to_record(self):
        assert raw_to_record(make_raw_listing()).listing_id == "rc-1"

    def test_raw_to_record_invalid(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = raw_to_record(make_raw_listing(listing_id="bad", price="call for price"))

        assert result is None
        assert "Validation failed for listing bad" in caplog.text

    def test_batch_separates_failures(self):
        raw = [
            make_raw_listing(listing_id="ok-1"),
            make_raw_listing(listing_id="bad-1", bedrooms=-1),
            make_raw_listing(listing_id="ok-2", price=280000),
            "not a listing",
        ]

        validated, failed = raw_to_record_batch(raw)

        assert [r.listing_id for r in validated] == ["ok-1", "ok-2"]
        assert len(failed) == 2

    def test_batch_empty(self):
        assert raw_to_record_batch([]) == ([], [])
