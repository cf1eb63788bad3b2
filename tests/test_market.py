"""Tests for market statistics and heuristics."""

import pytest

from property_scout.analysis import AnalysisContext, MarketAnalyzer
from tests.conftest import make_property


@pytest.fixture
def analyzer():
    return MarketAnalyzer()


class TestAnalyze:

    def test_empty_result_set(self, analyzer):
        report = analyzer.analyze([], "Nowhere, NV")

        assert report.total_listings == 0
        assert report.average_price == 0
        assert report.median_price == 0
        assert report.average_price_per_sqft == 0
        assert report.average_days_on_market == 0
        assert report.trend == "Balanced"
        assert report.competition_points == 0
        assert report.competition_level == "Low"
        assert report.market_score == 35
        assert report.market_rating == "Poor"
        assert report.opportunities == []
        assert report.days_on_market_distribution == {
            "0-7": 0, "8-30": 0, "31-60": 0, "61-90": 0, "91+": 0,
        }

    def test_price_statistics(self, analyzer, sample_properties):
        report = analyzer.analyze(sample_properties, "Austin, TX")

        assert report.total_listings == 4
        assert report.average_price == 370000
        assert report.median_price == 360000
        assert report.min_price == 250000
        assert report.max_price == 510000

    def test_price_per_sqft_is_mean_of_ratios(self, analyzer):
        props = [
            make_property(price=100, square_footage=100),
            make_property(price=200, square_footage=50),
        ]

        assert analyzer.analyze(props).average_price_per_sqft == 2.5

    def test_records_without_data_excluded(self, analyzer):
        props = [
            make_property(price=0, square_footage=None, days_on_market=None),
            make_property(price=300000, square_footage=1500, days_on_market=10),
        ]

        report = analyzer.analyze(props)

        assert report.total_listings == 2
        assert report.average_price == 300000
        assert report.average_price_per_sqft == 200
        assert report.average_days_on_market == 10
        assert report.recent_listing_percentage == 100

    def test_days_on_market(self, analyzer, sample_properties):
        report = analyzer.analyze(sample_properties)

        assert report.average_days_on_market == pytest.approx(41.0)
        assert report.recent_listing_percentage == pytest.approx(66.7)
        assert report.days_on_market_distribution == {
            "0-7": 1, "8-30": 1, "31-60": 0, "61-90": 0, "91+": 1,
        }
        assert report.trend == "Balanced"

    def test_hot_market(self, analyzer):
        props = [make_property(listing_id=str(i), days_on_market=5) for i in range(5)]

        report = analyzer.analyze(props)

        assert report.trend == "Hot"
        assert report.trend_description.startswith("Hot market")

    def test_thresholds_use_unrounded_average(self, analyzer):
        props = [make_property(listing_id=str(i), days_on_market=15) for i in range(24)]
        props.append(make_property(listing_id="fast", days_on_market=14))

        report = analyzer.analyze(props)

        # 14.96 days is shown as 15.0 but still counts as under 15
        assert report.average_days_on_market == 15.0
        assert report.trend == "Hot"
        assert report.competition_points == 6
        assert report.market_score == 95

    def test_distribution_boundaries(self, analyzer):
        props = [
            make_property(listing_id="a", days_on_market=90),
            make_property(listing_id="b", days_on_market=91),
        ]

        distribution = analyzer.analyze(props).days_on_market_distribution

        assert distribution["61-90"] == 1
        assert distribution["91+"] == 1

    def test_buyers_market(self, analyzer):
        props = [make_property(listing_id=str(i), days_on_market=80) for i in range(3)]

        assert analyzer.analyze(props).trend == "Buyer's"

    def test_cache_overwritten_per_location(self, analyzer, sample_properties):
        first = analyzer.analyze(sample_properties, "Austin, TX")
        assert analyzer.get_cached("austin,  tx") is first

        second = analyzer.analyze(sample_properties[:1], "Austin, TX")
        assert analyzer.get_cached("Austin, TX") is second
        assert analyzer.get_cached("Dallas, TX") is None

    def test_run_uses_context_location(self, analyzer, sample_properties):
        report = analyzer.run(sample_properties, AnalysisContext(location="Austin, TX"))

        assert report.location == "Austin, TX"
        assert analyzer.get_cached("Austin, TX") is report

    def test_to_dict(self, analyzer, sample_properties):
        data = analyzer.analyze(sample_properties, "Austin, TX").to_dict()

        assert data["location"] == "Austin, TX"
        assert isinstance(data["generated_at"], str)
        assert all(isinstance(o, dict) for o in data["opportunities"])


class TestCompetition:

    def test_points(self):
        # few listings (3) + fast (3) + narrow spread (2)
        assert MarketAnalyzer.competition_points(5, 10, [300000, 320000]) == 8
        # medium count (2) + moderate speed (1) + wider spread (1)
        assert MarketAnalyzer.competition_points(12, 45, [200000, 300000]) == 4
        # many listings, unknown speed, single price
        assert MarketAnalyzer.competition_points(60, 0, [300000]) == 0

    def test_levels(self):
        assert MarketAnalyzer.competition_level(8) == "Very High"
        assert MarketAnalyzer.competition_level(5) == "High"
        assert MarketAnalyzer.competition_level(3) == "Moderate"
        assert MarketAnalyzer.competition_level(2) == "Low"


class TestMarketScore:

    def test_healthy_market(self):
        assert MarketAnalyzer.market_score(10, 60, 400000) == 100

    def test_slow_thin_market(self):
        assert MarketAnalyzer.market_score(90, 3, 2000000) == 25

    def test_ratings(self):
        assert MarketAnalyzer.rating(80) == "Excellent"
        assert MarketAnalyzer.rating(60) == "Good"
        assert MarketAnalyzer.rating(40) == "Fair"
        assert MarketAnalyzer.rating(39) == "Poor"


class TestOpportunities:

    def test_stale_and_underpriced(self, analyzer, sample_properties):
        report = analyzer.analyze(sample_properties)
        by_type = {o.type: o for o in report.opportunities}

        assert by_type["stale_listings"].count == 1
        # 300000 and 250000 are below 85% of the 370000 average
        assert by_type["underpriced"].count == 2
        assert "fresh_inventory" not in by_type

    def test_fresh_inventory_needs_more_than_five(self, analyzer):
        five = [make_property(listing_id=str(i), days_on_market=2) for i in range(5)]
        six = five + [make_property(listing_id="6", days_on_market=1)]

        assert "fresh_inventory" not in {o.type for o in analyzer.analyze(five).opportunities}
        fresh = [o for o in analyzer.analyze(six).opportunities if o.type == "fresh_inventory"]
        assert fresh[0].count == 6
