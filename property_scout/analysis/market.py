"""Market statistics and heuristics over a search's result set."""

import logging
import statistics
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Dict, List, Optional

from property_scout.validation import PropertyRecord

from .base import AnalysisContext, Capability, ListingAnalyzer, clamp

logger = logging.getLogger(__name__)

RECENT_DAYS = 30
STALE_DAYS = 90
FRESH_DAYS = 7
FRESH_INVENTORY_MIN = 5
UNDERPRICED_RATIO = 0.85

DOM_BUCKETS = [
    ("0-7", 0, 7),
    ("8-30", 8, 30),
    ("31-60", 31, 60),
    ("61-90", 61, 90),
    ("91+", 91, None),
]

TREND_DESCRIPTIONS = {
    "Hot": "Hot market - properties selling quickly",
    "Seller's": "Seller's market - limited time to decide",
    "Balanced": "Balanced market - steady pace of sales",
    "Buyer's": "Buyer's market - listings sit, room to negotiate",
}


@dataclass
class Opportunity:
    """A group of listings worth a closer look."""
    type: str
    count: int
    description: str


@dataclass
class MarketReport:
    """Aggregate statistics and qualitative labels for one location."""
    location: str
    total_listings: int = 0
    average_price: float = 0.0
    median_price: float = 0.0
    min_price: float = 0.0
    max_price: float = 0.0
    average_price_per_sqft: float = 0.0
    average_days_on_market: float = 0.0
    recent_listing_percentage: float = 0.0
    days_on_market_distribution: Dict[str, int] = field(default_factory=dict)
    trend: str = "Balanced"
    trend_description: str = ""
    competition_points: int = 0
    competition_level: str = "Low"
    market_score: int = 0
    market_rating: str = "Poor"
    opportunities: List[Opportunity] = field(default_factory=list)
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["generated_at"] = self.generated_at.isoformat()
        return data


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class MarketAnalyzer(ListingAnalyzer):
    """Computes market statistics, trend, competitiveness and opportunities.

    Records lacking a field are left out of that field's statistics, so an
    empty or sparse result set produces zeros rather than errors. The last
    report for each location is cached and replaced on every recompute.
    """

    capability = Capability.MARKET_INTELLIGENCE

    def __init__(self):
        self._cache: Dict[str, MarketReport] = {}

    def run(self, properties: List[PropertyRecord], context: AnalysisContext) -> MarketReport:
        return self.analyze(properties, context.location)

    def get_cached(self, location: str) -> Optional[MarketReport]:
        return self._cache.get(self._cache_key(location))

    @staticmethod
    def _cache_key(location: str) -> str:
        return " ".join((location or "").lower().split())

    def analyze(self, properties: List[PropertyRecord], location: str = "") -> MarketReport:
        """Analyze a result set.

        Args:
            properties: Records returned by a search
            location: Label for the searched area (also the cache key)

        Returns:
            MarketReport; all aggregates are 0 for an empty list
        """
        prices = [p.price for p in properties if p.price > 0]
        known_days = [p.days_on_market for p in properties if p.days_on_market is not None]
        positive_days = [d for d in known_days if d > 0]
        price_per_sqft = [p.price_per_sqft for p in properties if p.price_per_sqft is not None]

        report = MarketReport(location=location, total_listings=len(properties))

        if prices:
            report.average_price = round(_mean(prices), 2)
            report.median_price = round(statistics.median(prices), 2)
            report.min_price = min(prices)
            report.max_price = max(prices)

        # Mean of per-listing ratios, not mean price over mean area
        report.average_price_per_sqft = round(_mean(price_per_sqft), 2)

        # Thresholds apply to the unrounded values
        avg_days = _mean(positive_days)
        recent_percentage = 0.0
        if known_days:
            recent = sum(1 for d in known_days if d < RECENT_DAYS)
            recent_percentage = recent / len(known_days) * 100
        avg_price = _mean(prices)

        report.average_days_on_market = round(avg_days, 1)
        report.recent_listing_percentage = round(recent_percentage, 1)
        report.days_on_market_distribution = self.days_on_market_distribution(known_days)

        report.trend = self.classify_trend(avg_days, recent_percentage)
        report.trend_description = TREND_DESCRIPTIONS[report.trend]

        report.competition_points = self.competition_points(len(properties), avg_days, prices)
        report.competition_level = self.competition_level(report.competition_points)

        report.market_score = self.market_score(avg_days, len(properties), avg_price)
        report.market_rating = self.rating(report.market_score)

        report.opportunities = self.find_opportunities(properties, avg_price)

        self._cache[self._cache_key(location)] = report
        logger.info(
            f"Market analysis for {location or 'search'}: {report.total_listings} listings, "
            f"{report.trend} trend, score {report.market_score}"
        )
        return report

    @staticmethod
    def days_on_market_distribution(known_days: List[int]) -> Dict[str, int]:
        distribution = {label: 0 for label, _, _ in DOM_BUCKETS}
        for days in known_days:
            for label, low, high in DOM_BUCKETS:
                if days >= low and (high is None or days <= high):
                    distribution[label] += 1
                    break
        return distribution

    @staticmethod
    def classify_trend(avg_days: float, recent_percentage: float) -> str:
        if avg_days < 15 and recent_percentage > 60:
            return "Hot"
        if avg_days < 30 and recent_percentage > 40:
            return "Seller's"
        if avg_days < 60:
            return "Balanced"
        return "Buyer's"

    @staticmethod
    def competition_points(count: int, avg_days: float, prices: List[float]) -> int:
        """0-8 points: scarce inventory, fast sales and a narrow price spread."""
        points = 0

        # Listing count (0-3): fewer listings, more competition
        if 0 < count < 10:
            points += 3
        elif 10 <= count < 25:
            points += 2
        elif 25 <= count < 50:
            points += 1

        # Market speed (0-3)
        if avg_days > 0:
            if avg_days < 15:
                points += 3
            elif avg_days < 30:
                points += 2
            elif avg_days < 60:
                points += 1

        # Price spread narrowness (0-2), relative to the highest price
        if len(prices) >= 2:
            spread = (max(prices) - min(prices)) / max(prices)
            if spread < 0.25:
                points += 2
            elif spread < 0.5:
                points += 1

        return points

    @staticmethod
    def competition_level(points: int) -> str:
        if points >= 7:
            return "Very High"
        if points >= 5:
            return "High"
        if points >= 3:
            return "Moderate"
        return "Low"

    @staticmethod
    def market_score(avg_days: float, count: int, avg_price: float) -> int:
        score = 50

        if avg_days > 0:
            if avg_days < 15:
                score += 25
            elif avg_days < 30:
                score += 15
            elif avg_days < 60:
                score += 5
            else:
                score -= 10

        if count >= 50:
            score += 15
        elif count >= 20:
            score += 10
        elif count < 5:
            score -= 15

        if 100000 <= avg_price <= 1000000:
            score += 10

        return int(clamp(score))

    @staticmethod
    def rating(score: int) -> str:
        if score >= 80:
            return "Excellent"
        if score >= 60:
            return "Good"
        if score >= 40:
            return "Fair"
        return "Poor"

    @staticmethod
    def find_opportunities(properties: List[PropertyRecord], avg_price: float) -> List[Opportunity]:
        opportunities = []

        stale = [p for p in properties if p.days_on_market is not None and p.days_on_market > STALE_DAYS]
        if stale:
            opportunities.append(Opportunity(
                type="stale_listings",
                count=len(stale),
                description=f"{len(stale)} listings on the market over {STALE_DAYS} days - sellers may negotiate",
            ))

        if avg_price > 0:
            threshold = avg_price * UNDERPRICED_RATIO
            underpriced = [p for p in properties if 0 < p.price < threshold]
            if underpriced:
                opportunities.append(Opportunity(
                    type="underpriced",
                    count=len(underpriced),
                    description=f"{len(underpriced)} listings priced 15%+ below the ${avg_price:,.0f} average",
                ))

        fresh = [p for p in properties if p.days_on_market is not None and p.days_on_market < FRESH_DAYS]
        if len(fresh) > FRESH_INVENTORY_MIN:
            opportunities.append(Opportunity(
                type="fresh_inventory",
                count=len(fresh),
                description=f"{len(fresh)} new listings in the last week",
            ))

        return opportunities
