"""Tests for search orchestration."""

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from unittest.mock import MagicMock

import pytest

from property_scout.analysis import Capability, MarketAnalyzer, ScoringEngine
from property_scout.db.store import MemoryBlobStore
from property_scout.interpreter import LanguageModelClient, QueryInterpreter
from property_scout.search import PropertySearch, location_label, paginate
from property_scout.usage import UsageRepository
from property_scout.validation import FilterParameters
from tests.conftest import FakeListingsProvider, make_property


class StubLanguageModel(LanguageModelClient):

    def __init__(self, reply):
        self.reply = reply

    def complete(self, request):
        return self.reply


class SlowBlobStore(MemoryBlobStore):
    """Memory store with a read delay, to widen read-modify-write races."""

    def read(self, key):
        time.sleep(0.05)
        return super().read(key)


@pytest.fixture
def slow_search(config):
    return PropertySearch(
        config,
        listings=FakeListingsProvider(),
        interpreter=QueryInterpreter(None, config),
        store=SlowBlobStore(),
    )


class TestSearch:

    def test_full_pipeline(self, make_search, sample_properties):
        search = make_search(sample_properties)

        result = search.search("3 bedroom house under 400k in Austin, TX")

        assert result.filters.to_params() == {
            "city": "Austin",
            "state": "TX",
            "maxPrice": 400000,
            "minBedrooms": 3,
            "propertyType": "Single Family",
        }
        assert search.listings.calls == [result.filters]
        assert len(result.properties) == 4
        assert len(result.scored) == 4
        assert result.scored[0].score >= result.scored[-1].score
        assert result.market_report.location == "Austin, TX"
        assert result.market_report.total_listings == 4
        assert len(result.investments) == 4
        assert result.diagnostics == []

    def test_listings_failure_is_diagnostic(self, make_search, failing_provider_error):
        search = make_search(error=failing_provider_error)

        result = search.search("condo in Miami, FL")

        assert result.properties == []
        assert result.scored == []
        assert result.market_report.total_listings == 0
        assert result.market_report.market_score == 35
        assert result.investments == []
        assert result.diagnostics == ["Listings search failed: HTTP error! status: 503"]

    def test_unexpected_listings_error(self, make_search):
        search = make_search(error=KeyError("price"))

        result = search.search("condo in Miami, FL")

        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].startswith("Listings search failed")

    def test_analyzer_failure_isolated(self, make_search, sample_properties):
        broken = MagicMock()
        broken.run.side_effect = ZeroDivisionError("division by zero")
        search = make_search(
            sample_properties,
            analyzers={
                Capability.SMART_RECOMMENDATIONS: ScoringEngine(),
                Capability.MARKET_INTELLIGENCE: broken,
            },
        )

        result = search.search("house in Austin, TX")

        assert len(result.scored) == 4
        assert result.market_report is None
        assert result.investments == []
        assert result.diagnostics == ["market_intelligence failed: division by zero"]

    def test_empty_query_still_searches(self, make_search, sample_properties):
        search = make_search(sample_properties)

        result = search.search("show me something")

        assert result.filters.is_empty
        assert len(result.properties) == 4
        assert "No search filters could be extracted from the query" in result.diagnostics

    def test_disabled_features(self, config, make_search, sample_properties):
        config.smart_recommendations = False
        config.investment_analyzer = False
        search = make_search(sample_properties)

        result = search.search("house in Austin, TX")

        assert set(search.analyzers) == {Capability.MARKET_INTELLIGENCE}
        assert result.scored == []
        assert result.investments == []
        assert result.market_report is not None

    def test_usage_tracked_per_feature(self, make_search, sample_properties):
        search = make_search(sample_properties, language_model=StubLanguageModel('{"city": "Austin"}'))

        search.search("homes in austin")

        features = set()
        for day_usage in search.usage.monthly_usage(date.today()).values():
            features.update(day_usage)
        assert features == {
            "natural_language_search",
            "smart_recommendations",
            "market_intelligence",
            "investment_analyzer",
        }

    def test_language_model_usage_not_tracked_on_fallback(self, make_search, sample_properties):
        search = make_search(sample_properties, language_model=StubLanguageModel("no idea"))

        result = search.search("house in Austin, TX")

        assert result.filters.city == "Austin"
        features = set()
        for day_usage in search.usage.monthly_usage(date.today()).values():
            features.update(day_usage)
        assert "natural_language_search" not in features
        assert "market_intelligence" in features

    def test_profile_feeds_scoring(self, make_search):
        search = make_search([make_property(listing_id="x", price=400000, square_footage=None)])
        search.track_interaction(make_property(listing_id="seen", price=400000), "save")

        result = search.search("house in Austin, TX")

        assert result.scored[0].score == 100


class TestSearchFilters:

    def test_manual_filters(self, make_search, sample_properties):
        search = make_search(sample_properties)
        filters = FilterParameters(city="Austin", state="TX", min_price=300000)

        result = search.search_filters(filters)

        assert result.query == ""
        assert search.listings.calls == [filters]
        assert result.market_report.location == "Austin, TX"

    def test_market_report_cached(self, make_search, sample_properties):
        search = make_search(sample_properties)

        result = search.search_filters(FilterParameters(city="Austin", state="TX"))

        market = search.analyzers[Capability.MARKET_INTELLIGENCE]
        assert isinstance(market, MarketAnalyzer)
        assert market.get_cached("Austin, TX") is result.market_report


class TestTrackInteraction:

    def test_persists_profile(self, make_search):
        search = make_search()

        search.track_interaction(make_property(price=300000, bedrooms=2), "view")
        profile = search.track_interaction(make_property(price=500000, bedrooms=2), "save")

        assert profile.average_price == 400000
        assert search.profiles.load().preferred_bedrooms == 2
        assert len(search.profiles.load().interactions) == 2

    def test_works_without_recommendations(self, config, make_search):
        config.smart_recommendations = False
        search = make_search()

        profile = search.track_interaction(make_property(), "view")

        assert profile.preferred_types == {"Single Family": 1}

    def test_concurrent_interactions_all_persisted(self, slow_search):
        with ThreadPoolExecutor(max_workers=5) as pool:
            futures = [
                pool.submit(slow_search.track_interaction, make_property(listing_id=f"p-{i}"), "view")
                for i in range(5)
            ]
        for future in futures:
            future.result()

        assert len(slow_search.profiles.load().interactions) == 5

    def test_concurrent_usage_tracking(self, slow_search):
        day = date(2024, 5, 1)
        with ThreadPoolExecutor(max_workers=5) as pool:
            futures = [pool.submit(slow_search.usage.track, "market_intelligence", 0.01, day) for _ in range(5)]
        for future in futures:
            future.result()

        assert slow_search.usage.monthly_usage(day)["2024-05-01"]["market_intelligence"].calls == 5
        stored = UsageRepository(slow_search.usage.repository.store).load()
        assert stored.monthly_cost(2024, 5) == pytest.approx(0.05)


class TestSearchResult:

    def test_to_dict_paginates_scored(self, make_search, sample_properties):
        result = make_search(sample_properties).search("house in Austin, TX")

        data = result.to_dict(page=2, per_page=3)

        assert data["total"] == 4
        assert data["pages"] == 2
        assert len(data["listings"]) == 1
        assert "score" in data["listings"][0]
        assert data["filters"] == {"city": "Austin", "state": "TX", "propertyType": "Single Family"}
        assert data["market_report"]["total_listings"] == 4

    def test_to_dict_unscored(self, config, make_search, sample_properties):
        config.smart_recommendations = False
        result = make_search(sample_properties).search("house in Austin, TX")

        data = result.to_dict()

        assert data["pages"] == 1
        assert [item["listing_id"] for item in data["listings"]] == ["a-1", "a-2", "a-3", "a-4"]


class TestHelpers:

    def test_paginate(self):
        page = paginate(list(range(25)), page=3, per_page=10)

        assert page.items == [20, 21, 22, 23, 24]
        assert page.pages == 3
        assert page.total == 25

    def test_paginate_past_end(self):
        assert paginate([1, 2], page=5, per_page=10).items == []
        assert paginate([], page=1, per_page=10).pages == 1

    def test_paginate_rejects_zero_per_page(self):
        with pytest.raises(ValueError):
            paginate([1], per_page=0)

    def test_location_label(self):
        assert location_label(FilterParameters(city="Austin", state="TX")) == "Austin, TX"
        assert location_label(FilterParameters(state="TX")) == "TX"
        assert location_label(FilterParameters()) == ""


class TestConstruction:

    def test_builds_rules_only_interpreter_without_key(self, config, memory_store):
        search = PropertySearch(config, listings=MagicMock(), store=memory_store)

        assert search.interpreter.uses_language_model is False

    def test_natural_language_toggle(self, config, memory_store):
        config.openai_api_key = "sk-test-key-that-looks-real"
        config.natural_language_search = False

        search = PropertySearch(config, listings=MagicMock(), store=memory_store)

        assert search.interpreter.uses_language_model is False
