"""Shared fixtures for the test suite."""

from typing import List, Optional

import pytest
from sqlalchemy import create_engine

from property_scout.config import Settings
from property_scout.db.models import Base
from property_scout.db.store import MemoryBlobStore
from property_scout.interpreter import QueryInterpreter
from property_scout.listings import ListingsProvider, ListingsProviderError
from property_scout.search import PropertySearch
from property_scout.validation import FilterParameters, PropertyRecord


@pytest.fixture
def db_engine():
    """Create an in-memory SQLite engine."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def config():
    """Settings with no remote language model and every feature enabled."""
    return Settings(
        openai_api_key=None,
        rentcast_api_key="test-rentcast-key",
        db_url="sqlite:///:memory:",
        log_file=None,
        usage_tracking=True,
        max_monthly_cost=25.0,
        feature_call_cost=0.01,
        auto_search=False,
    )


@pytest.fixture
def memory_store():
    return MemoryBlobStore()


def make_property(
    listing_id="prop-1",
    address="123 Main St, Austin, TX 78701",
    price=350000,
    bedrooms=3,
    property_type="Single Family",
    square_footage=1800,
    days_on_market=12,
    **kwargs,
) -> PropertyRecord:
    """Factory for creating test PropertyRecord instances."""
    defaults = dict(
        listing_id=listing_id,
        address=address,
        city="Austin",
        state="TX",
        zip_code="78701",
        price=price,
        bedrooms=bedrooms,
        bathrooms=2,
        property_type=property_type,
        square_footage=square_footage,
        days_on_market=days_on_market,
    )
    defaults.update(kwargs)
    return PropertyRecord(**defaults)


def make_raw_listing(
    listing_id="rc-1",
    address="123 Main St, Austin, TX 78701",
    price=350000,
    **kwargs,
) -> dict:
    """Factory for RentCast-style listing JSON (camelCase keys)."""
    raw = {
        "id": listing_id,
        "formattedAddress": address,
        "city": "Austin",
        "state": "TX",
        "zipCode": "78701",
        "price": price,
        "bedrooms": 3,
        "bathrooms": 2,
        "propertyType": "Single Family",
        "squareFootage": 1800,
        "daysOnMarket": 12,
        "listedDate": "2024-05-01T00:00:00.000Z",
    }
    raw.update(kwargs)
    return raw


class FakeListingsProvider(ListingsProvider):
    """Listings provider returning canned records and recording calls."""

    def __init__(self, records: Optional[List[PropertyRecord]] = None, error: Optional[Exception] = None):
        self.records = list(records or [])
        self.error = error
        self.calls: List[FilterParameters] = []

    def search(self, filters: FilterParameters, limit: Optional[int] = None) -> List[PropertyRecord]:
        self.calls.append(filters)
        if self.error is not None:
            raise self.error
        return list(self.records)


@pytest.fixture
def sample_properties():
    """A small Austin result set with varied prices, ages and sizes."""
    return [
        make_property(listing_id="a-1", address="1 Oak St", price=300000, square_footage=2000, days_on_market=3),
        make_property(listing_id="a-2", address="2 Elm St", price=420000, square_footage=2100, days_on_market=25),
        make_property(
            listing_id="a-3",
            address="3 Pine St",
            price=250000,
            bedrooms=2,
            property_type="Condo",
            square_footage=1100,
            days_on_market=95,
        ),
        make_property(listing_id="a-4", address="4 Ash St", price=510000, square_footage=None, days_on_market=None),
    ]


@pytest.fixture
def make_search(config, memory_store):
    """Factory building a PropertySearch around a fake listings provider."""

    def _make(records=None, error=None, analyzers=None, language_model=None):
        provider = FakeListingsProvider(records, error=error)
        return PropertySearch(
            config,
            listings=provider,
            interpreter=QueryInterpreter(language_model, config),
            store=memory_store,
            analyzers=analyzers,
        )

    return _make


@pytest.fixture
def failing_provider_error():
    return ListingsProviderError("HTTP error! status: 503")
