"""Search orchestration: interpret -> fetch -> analyze.

This module composes the query interpreter, the listings provider and the
enabled analyzers into a single best-effort search:
1. Interpret: turn free text into FilterParameters
2. Fetch: one request to the listings provider
3. Analyze: scoring, market and investment analyzers over the same records

A failing stage is logged and reported in ``SearchResult.diagnostics``;
the remaining stages still run.

Example usage:
    from property_scout.config import Settings
    from property_scout.search import PropertySearch

    search = PropertySearch(Settings())
    result = search.search("3 bedroom house under 400k in Austin, TX")
    for item in result.scored[:3]:
        print(item.score, item.property.address, item.reasons)
"""

import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from property_scout.analysis import (
    AnalysisContext,
    Capability,
    InvestmentReport,
    ListingAnalyzer,
    MarketReport,
    ScoredProperty,
    ScoringEngine,
    build_analyzers,
)
from property_scout.config import Settings
from property_scout.db.session import get_engine
from property_scout.db.store import BlobStore, SqlBlobStore
from property_scout.interpreter import (
    SOURCE_LANGUAGE_MODEL,
    LanguageModelClient,
    OpenAIClient,
    QueryInterpreter,
)
from property_scout.listings import ListingsProvider, RemoteUnavailable, RentCastClient
from property_scout.profile import ProfileRepository, UserProfile
from property_scout.usage import UsageRepository, UsageTracker
from property_scout.validation import FilterParameters, PropertyRecord

logger = logging.getLogger(__name__)

NATURAL_LANGUAGE_FEATURE = "natural_language_search"


@dataclass
class Page:
    """One page of a result list."""
    items: List[Any]
    page: int
    per_page: int
    total: int

    @property
    def pages(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))


def paginate(items: Sequence[Any], page: int = 1, per_page: int = 10) -> Page:
    """Slice a result list into 1-based pages."""
    if per_page < 1:
        raise ValueError("per_page must be at least 1")
    page = max(1, page)
    start = (page - 1) * per_page
    return Page(items=list(items[start:start + per_page]), page=page, per_page=per_page, total=len(items))


@dataclass
class SearchResult:
    """Best-effort outcome of one search."""
    query: str
    filters: FilterParameters
    properties: List[PropertyRecord] = field(default_factory=list)
    scored: List[ScoredProperty] = field(default_factory=list)
    market_report: Optional[MarketReport] = None
    investments: List[InvestmentReport] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    def to_dict(self, page: int = 1, per_page: Optional[int] = None) -> Dict[str, Any]:
        """Serialize, paginating the listing results when per_page is given."""
        if self.scored:
            listings = [s.to_dict() for s in self.scored]
        else:
            listings = [p.snapshot() for p in self.properties]

        per_page = per_page or max(1, len(listings))
        current = paginate(listings, page, per_page)

        return {
            "query": self.query,
            "filters": self.filters.to_params(),
            "total": current.total,
            "page": current.page,
            "per_page": current.per_page,
            "pages": current.pages,
            "listings": current.items,
            "market_report": self.market_report.to_dict() if self.market_report else None,
            "investments": [r.to_dict() for r in self.investments],
            "diagnostics": self.diagnostics,
        }


def location_label(filters: FilterParameters) -> str:
    """"Austin, TX", "Austin", "TX" or "" depending on what the filters carry."""
    return ", ".join(part for part in (filters.city, filters.state) if part)


class PropertySearch:
    """Entry point composing interpreter, listings provider and analyzers.

    Collaborators can be injected for testing; otherwise they are built
    from the given settings.
    """

    def __init__(
        self,
        config: Settings,
        listings: Optional[ListingsProvider] = None,
        interpreter: Optional[QueryInterpreter] = None,
        store: Optional[BlobStore] = None,
        analyzers: Optional[Dict[Capability, ListingAnalyzer]] = None,
    ):
        """Initialize search.

        Args:
            config: Application settings (API keys, feature toggles, limits)
            listings: Listings provider (RentCast if None)
            interpreter: Query interpreter (built from settings if None)
            store: Blob store for profile and usage (SQL store if None)
            analyzers: Capability -> analyzer map (built from toggles if None)
        """
        self.config = config
        self.listings = listings or RentCastClient(config)
        self.interpreter = interpreter or QueryInterpreter(self._build_language_model(), config)

        store = store or SqlBlobStore(get_engine(config.db_url))
        self.profiles = ProfileRepository(store)
        self._profile_lock = threading.Lock()
        self.usage = UsageTracker(UsageRepository(store), config)
        self.analyzers = analyzers if analyzers is not None else build_analyzers(config)

        logger.info(
            f"PropertySearch initialized (language_model={self.interpreter.uses_language_model}, "
            f"analyzers={[c.value for c in self.analyzers]})"
        )

    def _build_language_model(self) -> Optional[LanguageModelClient]:
        if not (self.config.natural_language_search and self.config.has_language_model):
            logger.info("Language model disabled or not configured, using rule-based interpreter")
            return None
        try:
            return OpenAIClient(self.config)
        except Exception as e:
            logger.warning(f"Could not initialize language model, using rules only: {e}")
            return None

    def search(self, text: str) -> SearchResult:
        """Run a free-text search through every enabled stage.

        Args:
            text: e.g. "3 bedroom house under 400k in Austin, TX"

        Returns:
            SearchResult; never raises for a failing stage
        """
        logger.info(f"Starting search: {text!r}")
        diagnostics: List[str] = []

        try:
            filters, source = self.interpreter.interpret_with_source(text)
            if source == SOURCE_LANGUAGE_MODEL:
                self._track(NATURAL_LANGUAGE_FEATURE)
        except Exception as e:
            logger.error(f"Query interpretation failed: {e}", exc_info=True)
            diagnostics.append(f"Query interpretation failed: {e}")
            filters = FilterParameters()

        if filters.is_empty:
            diagnostics.append("No search filters could be extracted from the query")

        return self.search_filters(filters, query=text, diagnostics=diagnostics)

    def search_filters(
        self,
        filters: FilterParameters,
        query: str = "",
        diagnostics: Optional[List[str]] = None,
    ) -> SearchResult:
        """Run a search with explicit filters (manual search mode)."""
        result = SearchResult(query=query, filters=filters, diagnostics=diagnostics or [])

        try:
            result.properties = self.listings.search(filters, self.config.listings_limit)
        except RemoteUnavailable as e:
            logger.warning(f"Listings provider unavailable: {e}")
            result.diagnostics.append(f"Listings search failed: {e}")
        except Exception as e:
            logger.error(f"Unexpected listings error: {e}", exc_info=True)
            result.diagnostics.append(f"Listings search failed: {e}")

        context = AnalysisContext(location=location_label(filters), profile=self._load_profile())

        for capability, analyzer in self.analyzers.items():
            try:
                output = analyzer.run(result.properties, context)
            except Exception as e:
                logger.error(f"{capability.value} failed: {e}", exc_info=True)
                result.diagnostics.append(f"{capability.value} failed: {e}")
                continue

            if capability is Capability.SMART_RECOMMENDATIONS:
                result.scored = output
            elif capability is Capability.MARKET_INTELLIGENCE:
                result.market_report = output
            elif capability is Capability.INVESTMENT_ANALYZER:
                result.investments = output
            self._track(capability.value)

        logger.info(
            f"Search complete: {len(result.properties)} listings, "
            f"{len(result.diagnostics)} diagnostics"
        )
        return result

    def track_interaction(self, record: PropertyRecord, action: str) -> UserProfile:
        """Log an interaction with a listing and persist the updated profile."""
        engine = self.analyzers.get(Capability.SMART_RECOMMENDATIONS)
        if not isinstance(engine, ScoringEngine):
            engine = ScoringEngine()

        with self._profile_lock:
            profile = self.profiles.load()
            engine.track_interaction(profile, record, action)
            self.profiles.save(profile)
        return profile

    def _load_profile(self) -> UserProfile:
        try:
            return self.profiles.load()
        except Exception as e:
            logger.error(f"Could not load user profile: {e}")
            return UserProfile()

    def _track(self, feature: str) -> None:
        try:
            self.usage.track(feature)
        except Exception as e:
            logger.error(f"Usage tracking failed for {feature}: {e}")
