"""Common interface for analyzers that run over a search's result set."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List

from property_scout.profile import UserProfile
from property_scout.validation import PropertyRecord


class Capability(str, Enum):
    """Capability tags, matching the feature toggles in Settings."""
    SMART_RECOMMENDATIONS = "smart_recommendations"
    MARKET_INTELLIGENCE = "market_intelligence"
    INVESTMENT_ANALYZER = "investment_analyzer"


@dataclass
class AnalysisContext:
    """Per-search inputs shared by all analyzers."""
    location: str = ""
    profile: UserProfile = field(default_factory=UserProfile)


class ListingAnalyzer(ABC):
    """An analyzer the search pipeline can run over a list of records."""

    capability: Capability

    @abstractmethod
    def run(self, properties: List[PropertyRecord], context: AnalysisContext) -> Any:
        """Analyze the result set of one search."""
        pass


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))
