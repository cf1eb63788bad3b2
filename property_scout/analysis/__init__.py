"""Scoring and analysis engines run over search results."""

from property_scout.analysis.base import AnalysisContext, Capability, ListingAnalyzer
from property_scout.analysis.investment import Finding, InvestmentAnalyzer, InvestmentReport
from property_scout.analysis.market import MarketAnalyzer, MarketReport, Opportunity
from property_scout.analysis.registry import build_analyzers
from property_scout.analysis.scoring import ScoredProperty, ScoringEngine

__all__ = [
    "AnalysisContext",
    "Capability",
    "ListingAnalyzer",
    "build_analyzers",
    "ScoringEngine",
    "ScoredProperty",
    "MarketAnalyzer",
    "MarketReport",
    "Opportunity",
    "InvestmentAnalyzer",
    "InvestmentReport",
    "Finding",
]
