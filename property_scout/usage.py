"""Usage tracking and monthly cost ceiling for paid features."""

import logging
import threading
from datetime import date
from typing import Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from property_scout.config import Settings, settings as default_settings
from property_scout.db.store import BlobStore

logger = logging.getLogger(__name__)

USAGE_KEY = "ai_usage_data"


class FeatureUsage(BaseModel):
    """Calls and cost for one feature on one day."""
    calls: int = 0
    cost: float = 0.0


class UsageLedger(BaseModel):
    """Per-day, per-feature counters keyed by ISO date ("2024-05-01")."""

    days: Dict[str, Dict[str, FeatureUsage]] = Field(default_factory=dict)

    def record(self, feature: str, cost: float, day: date) -> FeatureUsage:
        """Count one call of ``feature`` on ``day``."""
        usage = self.days.setdefault(day.isoformat(), {}).setdefault(feature, FeatureUsage())
        usage.calls += 1
        usage.cost += cost
        return usage

    def for_month(self, year: int, month: int) -> Dict[str, Dict[str, FeatureUsage]]:
        """Days of the given month only."""
        result = {}
        for day_key, features in self.days.items():
            try:
                day = date.fromisoformat(day_key)
            except ValueError:
                continue
            if day.year == year and day.month == month:
                result[day_key] = features
        return result

    def monthly_cost(self, year: int, month: int) -> float:
        return sum(
            usage.cost
            for features in self.for_month(year, month).values()
            for usage in features.values()
        )


class UsageRepository:
    """Loads and saves the UsageLedger through a BlobStore."""

    def __init__(self, store: BlobStore, key: str = USAGE_KEY):
        self.store = store
        self.key = key

    def load(self) -> UsageLedger:
        """Load the stored ledger; missing or corrupt data yields an empty one."""
        try:
            raw = self.store.read(self.key)
        except Exception as e:
            logger.error(f"Could not read usage ledger: {e}")
            return UsageLedger()

        if not raw:
            return UsageLedger()

        try:
            return UsageLedger.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Stored usage ledger is corrupt, starting fresh: {e.error_count()} errors")
            return UsageLedger()

    def save(self, ledger: UsageLedger) -> None:
        self.store.write(self.key, ledger.model_dump_json())


class UsageTracker:
    """Records feature calls and checks the monthly cost ceiling.

    Usage:
        tracker = UsageTracker(UsageRepository(store))
        tracker.track("smart_recommendations")
        tracker.monthly_cost()
    """

    def __init__(self, repository: UsageRepository, config: Optional[Settings] = None):
        self.repository = repository
        self.config = config or default_settings
        self.ledger = repository.load()
        self._lock = threading.Lock()

    def track(self, feature: str, cost: Optional[float] = None, day: Optional[date] = None) -> None:
        """Record one call of a feature and persist the ledger."""
        if not self.config.usage_tracking:
            return

        day = day or date.today()
        cost = self.config.feature_call_cost if cost is None else cost
        with self._lock:
            self.ledger.record(feature, cost, day)
            self.repository.save(self.ledger)
        self.check_cost_limit(day)

    def monthly_usage(self, day: Optional[date] = None) -> Dict[str, Dict[str, FeatureUsage]]:
        day = day or date.today()
        with self._lock:
            return self.ledger.for_month(day.year, day.month)

    def monthly_cost(self, day: Optional[date] = None) -> float:
        day = day or date.today()
        with self._lock:
            return self.ledger.monthly_cost(day.year, day.month)

    def check_cost_limit(self, day: Optional[date] = None) -> bool:
        """Return True (and alert, if enabled) when this month's cost exceeds the ceiling."""
        total = self.monthly_cost(day)
        exceeded = total > self.config.max_monthly_cost
        if exceeded and self.config.cost_alerts:
            logger.warning(
                f"Monthly AI cost limit exceeded: ${total:.2f} "
                f"(limit ${self.config.max_monthly_cost:.2f})"
            )
        return exceeded
