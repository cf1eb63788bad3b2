"""Static capability -> analyzer registry built from feature toggles."""

import logging
from typing import Dict, Optional

from property_scout.config import Settings, settings as default_settings

from .base import Capability, ListingAnalyzer
from .investment import InvestmentAnalyzer
from .market import MarketAnalyzer
from .scoring import ScoringEngine

logger = logging.getLogger(__name__)

ANALYZER_CLASSES = {
    Capability.SMART_RECOMMENDATIONS: ScoringEngine,
    Capability.MARKET_INTELLIGENCE: MarketAnalyzer,
    Capability.INVESTMENT_ANALYZER: InvestmentAnalyzer,
}


def build_analyzers(config: Optional[Settings] = None) -> Dict[Capability, ListingAnalyzer]:
    """Instantiate one analyzer per capability enabled in the settings."""
    config = config or default_settings
    analyzers = {}
    for capability, analyzer_cls in ANALYZER_CLASSES.items():
        if getattr(config, capability.value):
            analyzers[capability] = analyzer_cls()

    logger.debug(f"Enabled analyzers: {[c.value for c in analyzers]}")
    return analyzers
