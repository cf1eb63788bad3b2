"""Recommendation scoring against the learned user profile."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional, Tuple

from property_scout.profile import Interaction, UserProfile
from property_scout.validation import PropertyRecord

from .base import AnalysisContext, Capability, ListingAnalyzer, clamp

logger = logging.getLogger(__name__)

BASE_SCORE = 50
MAX_REASONS = 3

PRICE_TOLERANCE = 0.20
PRICE_WEIGHT = 25
TYPE_WEIGHT = 10
TYPE_CAP = 20
BEDROOM_EXACT = 15
BEDROOM_NEAR = 8
FRESH_DAYS = 7
FRESH_BONUS = 10
STALE_DAYS = 60
STALE_BONUS = 5

PROFILE_FACTORS = ("price_affinity", "type_affinity", "bedroom_affinity")


@dataclass
class ScoredProperty:
    """A record with its suitability score and explanation."""
    property: PropertyRecord
    score: int
    reasons: List[str] = field(default_factory=list)
    components: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = self.property.snapshot()
        data.update(score=self.score, reasons=self.reasons, components=self.components)
        return data


class ScoringEngine(ListingAnalyzer):
    """Scores listings 0-100 against the user's profile.

    Scoring starts at 50 and adds points for:
    - Price within 20% of the profile's average price
    - Property types the user interacted with before
    - Bedroom count at or next to the preferred count
    - Freshness (new listings; small bonus for long-listed ones)
    - Low price per square foot
    """

    capability = Capability.SMART_RECOMMENDATIONS

    def run(self, properties: List[PropertyRecord], context: AnalysisContext) -> List[ScoredProperty]:
        return self.score(properties, context.profile)

    def score(self, properties: List[PropertyRecord], profile: UserProfile) -> List[ScoredProperty]:
        """Score and rank properties, best first (ties keep input order)."""
        scored = []
        for prop in properties:
            score, components = self.calculate_score(prop, profile)
            reasons = self.generate_reasons(prop, score, components, profile)
            scored.append(ScoredProperty(prop, score, reasons, components))

        scored.sort(key=lambda s: s.score, reverse=True)
        logger.debug(f"Scored {len(scored)} properties")
        return scored

    def calculate_score(
        self,
        prop: PropertyRecord,
        profile: UserProfile,
    ) -> Tuple[int, Dict[str, float]]:
        """Return the clamped integer score and the points from each factor."""
        components: Dict[str, float] = {}

        # Price affinity
        if profile.average_price and prop.price > 0:
            deviation = abs(prop.price - profile.average_price) / profile.average_price
            if deviation <= PRICE_TOLERANCE:
                components["price_affinity"] = round(PRICE_WEIGHT * (1 - 2 * deviation), 2)

        # Property type affinity: raw interaction counts, saturating at TYPE_CAP
        weight = profile.preferred_types.get(prop.property_type.value, 0)
        if weight:
            components["type_affinity"] = min(TYPE_CAP, weight * TYPE_WEIGHT)

        # Bedroom affinity
        if profile.preferred_bedrooms is not None and prop.bedrooms is not None:
            diff = abs(prop.bedrooms - profile.preferred_bedrooms)
            if diff == 0:
                components["bedroom_affinity"] = BEDROOM_EXACT
            elif diff == 1:
                components["bedroom_affinity"] = BEDROOM_NEAR

        # Freshness
        if prop.days_on_market is not None:
            if prop.days_on_market < FRESH_DAYS:
                components["freshness"] = FRESH_BONUS
            elif prop.days_on_market > STALE_DAYS:
                components["freshness"] = STALE_BONUS

        # Price per square foot
        price_per_sqft = prop.price_per_sqft
        if price_per_sqft is not None:
            if price_per_sqft < 150:
                components["price_per_sqft"] = 15
            elif price_per_sqft < 200:
                components["price_per_sqft"] = 10

        total = BASE_SCORE + sum(components.values())
        return int(round(clamp(total))), components

    def generate_reasons(
        self,
        prop: PropertyRecord,
        score: int,
        components: Dict[str, float],
        profile: UserProfile,
    ) -> List[str]:
        """Human-readable reasons, most important first, at most three."""
        reasons = []

        if score >= 85:
            reasons.append("Perfect match for your preferences")
        elif score >= 70:
            reasons.append("Great match for your search")
        elif score >= 60:
            reasons.append("Good potential match")

        days = prop.days_on_market
        if days is not None and days < FRESH_DAYS:
            reasons.append("New listing - act fast!")
        elif days is not None and days > STALE_DAYS:
            reasons.append(f"Listed {days} days - room to negotiate")

        price_per_sqft = prop.price_per_sqft
        if price_per_sqft is not None and price_per_sqft < 200:
            label = "Excellent" if price_per_sqft < 150 else "Good"
            reasons.append(f"{label} value at ${price_per_sqft:.0f}/sqft")

        top = self._top_profile_factor(components)
        if top == "price_affinity":
            reasons.append(f"Priced close to homes you've viewed (${profile.average_price:,.0f})")
        elif top == "type_affinity":
            reasons.append(f"Matches your interest in {prop.property_type.value} homes")
        elif top == "bedroom_affinity":
            if components[top] == BEDROOM_EXACT:
                reasons.append(f"Has your preferred {prop.bedrooms} bedrooms")
            else:
                reasons.append(f"Close to your preferred {profile.preferred_bedrooms} bedrooms")

        return reasons[:MAX_REASONS]

    @staticmethod
    def _top_profile_factor(components: Dict[str, float]) -> Optional[str]:
        best, best_points = None, 0.0
        for name in PROFILE_FACTORS:
            points = components.get(name, 0)
            if points > best_points:
                best, best_points = name, points
        return best

    def track_interaction(
        self,
        profile: UserProfile,
        prop: PropertyRecord,
        action: str,
        timestamp: Optional[datetime] = None,
    ) -> UserProfile:
        """Log an interaction and recompute the derived preferences in place."""
        profile.interactions.append(
            Interaction(
                property=prop.snapshot(),
                action=action,
                timestamp=timestamp or datetime.now(UTC),
            )
        )
        self.update_profile(profile)
        logger.info(
            f"Tracked '{action}' on {prop.address or 'listing'} "
            f"({len(profile.interactions)} interactions)"
        )
        return profile

    @staticmethod
    def update_profile(profile: UserProfile) -> UserProfile:
        """Recompute average price, type counts and preferred bedrooms from the log."""
        snapshots = [i.property for i in profile.interactions]

        prices = [s["price"] for s in snapshots if s.get("price")]
        if prices:
            profile.average_price = sum(prices) / len(prices)

        # Raw counts; only TYPE_CAP bounds their effect on the score
        types = Counter(s.get("property_type", "Unknown") for s in snapshots)
        profile.preferred_types = dict(types)

        bedrooms = Counter(s["bedrooms"] for s in snapshots if s.get("bedrooms") is not None)
        if bedrooms:
            profile.preferred_bedrooms = bedrooms.most_common(1)[0][0]

        return profile
