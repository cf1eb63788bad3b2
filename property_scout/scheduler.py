"""Auto-search: saved queries re-run on a cron schedule with APScheduler.

Each run executes every saved query through PropertySearch and compares the
returned listings with those seen in earlier runs. Listings not seen before
are reported as notifications in the log.

Example usage:
    from property_scout.scheduler import AutoSearchScheduler

    scheduler = AutoSearchScheduler()
    scheduler.start()  # Starts background scheduler

    # Or run the saved searches once
    scheduler.run_now()
"""

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Set

import yaml
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from property_scout.config import Settings, settings
from property_scout.db.store import BlobStore
from property_scout.search import PropertySearch
from property_scout.validation import PropertyRecord

logger = logging.getLogger(__name__)

SEEN_KEY = "auto_search_seen"


class AutoSearchConfig:
    """Auto-search configuration loaded from config.yaml."""

    def __init__(self, config_path: Path = Path("config.yaml"), config: Optional[Settings] = None):
        """Load auto-search configuration from YAML file.

        Args:
            config_path: Path to config.yaml file
            config: Settings used for anything the file leaves out
        """
        self.config_path = config_path
        self.settings = config or settings
        self._config = self._load_config()

    def _load_config(self) -> dict:
        if not self.config_path.exists():
            logger.warning(f"Config file {self.config_path} not found, using defaults")
            return {}

        with open(self.config_path) as f:
            return yaml.safe_load(f) or {}

    @property
    def _section(self) -> dict:
        return self._config.get("auto_search", {}) or {}

    @property
    def queries(self) -> List[str]:
        """Saved free-text searches."""
        return [q for q in self._section.get("queries", []) if q and str(q).strip()]

    @property
    def enabled(self) -> bool:
        return self._section.get("enabled", False) or self.settings.auto_search

    @property
    def cron_expression(self) -> str:
        return self._section.get("cron", self.settings.schedule_cron)

    @property
    def timezone(self) -> str:
        return self._section.get("timezone", self.settings.schedule_timezone)


@dataclass
class AutoSearchResult:
    """Outcome of one saved query in one run."""
    query: str
    total: int = 0
    new_listings: List[PropertyRecord] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.diagnostics


def listing_key(record: PropertyRecord) -> str:
    """Stable identity of a listing across runs."""
    if record.listing_id:
        return record.listing_id
    return f"{record.address}|{record.zip_code or ''}".lower()


class SeenListings:
    """Per-query sets of listing keys persisted through a BlobStore."""

    def __init__(self, store: BlobStore, key: str = SEEN_KEY):
        self.store = store
        self.key = key

    def load(self) -> Dict[str, Set[str]]:
        raw = self.store.read(self.key)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
            return {query: set(keys) for query, keys in data.items()}
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Discarding corrupt seen-listings data: {e}")
            return {}

    def save(self, seen: Dict[str, Set[str]]) -> None:
        self.store.write(self.key, json.dumps({q: sorted(keys) for q, keys in seen.items()}))


class AutoSearchScheduler:
    """Scheduler for periodic saved searches.

    Example:
        >>> scheduler = AutoSearchScheduler()
        >>> scheduler.start()  # Runs in background
        >>> # ... application continues running ...
        >>> scheduler.shutdown()
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        search: Optional[PropertySearch] = None,
        config: Optional[Settings] = None,
    ):
        """Initialize scheduler.

        Args:
            config_path: Path to config.yaml file (uses default if None)
            search: PropertySearch instance (built from settings if None)
            config: Settings (module-level settings if None)
        """
        settings_ = config or settings
        self.config = AutoSearchConfig(config_path or Path("config.yaml"), settings_)
        self.search = search or PropertySearch(settings_)
        self.seen = SeenListings(self.search.profiles.store)
        self.scheduler = BackgroundScheduler(timezone=self.config.timezone)
        self._job_id = "property_scout_auto_search"

    def run_auto_search(self) -> List[AutoSearchResult]:
        """Execute every saved query and report listings not seen before."""
        start_time = datetime.now()
        queries = self.config.queries
        logger.info(f"Starting auto-search at {start_time.isoformat()} ({len(queries)} saved queries)")

        seen = self.seen.load()
        results = []

        for query in queries:
            outcome = AutoSearchResult(query=query)
            try:
                result = self.search.search(query)
                outcome.total = len(result.properties)
                outcome.diagnostics = list(result.diagnostics)

                known = seen.setdefault(query, set())
                first_run = not known
                for record in result.properties:
                    key = listing_key(record)
                    if key not in known:
                        known.add(key)
                        if not first_run:
                            outcome.new_listings.append(record)

                for record in outcome.new_listings:
                    logger.info(
                        f"New listing for '{query}': {record.address} "
                        f"${record.price:,.0f} ({record.property_type.value})"
                    )
                logger.info(f"'{query}': {outcome.total} listings, {len(outcome.new_listings)} new")

            except Exception as e:
                logger.error(f"Error running saved search '{query}': {e}", exc_info=True)
                outcome.diagnostics.append(str(e))

            results.append(outcome)

        self.seen.save(seen)

        duration = (datetime.now() - start_time).total_seconds()
        total_new = sum(len(r.new_listings) for r in results)
        logger.info(f"Auto-search completed in {duration:.1f}s: {total_new} new listings")
        return results

    def add_job(self) -> None:
        """Add the auto-search job to the scheduler with a cron trigger."""
        cron_parts = self.config.cron_expression.split()
        if len(cron_parts) != 5:
            raise ValueError(
                f"Invalid cron expression: {self.config.cron_expression}. "
                "Expected format: 'minute hour day month day_of_week'"
            )

        minute, hour, day, month, day_of_week = cron_parts

        trigger = CronTrigger(
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=day_of_week,
            timezone=self.config.timezone,
        )

        self.scheduler.add_job(
            func=self.run_auto_search,
            trigger=trigger,
            id=self._job_id,
            name="Property Scout Auto-Search",
            replace_existing=True,
            max_instances=1,
        )

        logger.info(
            f"Scheduled auto-search with cron: {self.config.cron_expression} "
            f"(timezone: {self.config.timezone})"
        )

    def start(self) -> None:
        """Start the background scheduler if auto-search is enabled."""
        if not self.config.enabled:
            logger.warning("Auto-search is disabled in configuration")
            return

        self.add_job()
        self.scheduler.start()
        logger.info("Scheduler started successfully")

        next_run = self.get_next_run_time()
        if next_run:
            logger.info(f"Next auto-search: {next_run.isoformat()}")

    def shutdown(self, wait: bool = True) -> None:
        logger.info("Shutting down scheduler...")
        self.scheduler.shutdown(wait=wait)
        logger.info("Scheduler shutdown complete")

    def get_next_run_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job(self._job_id)
        return job.next_run_time if job else None

    def run_now(self) -> List[AutoSearchResult]:
        """Run the saved searches immediately (outside of schedule)."""
        logger.info("Running auto-search immediately (manual trigger)")
        return self.run_auto_search()


def setup_logging(config: Optional[Settings] = None):
    """Configure console and optional file logging."""
    config = config or settings
    log_level = getattr(logging, config.log_level.upper())
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(log_format))

    handlers = [console_handler]
    if config.log_file:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(log_format))
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)


def run_scheduler():
    """Run the scheduler in the foreground until interrupted."""
    setup_logging()

    logger.info("Starting Property Scout auto-search")
    logger.info(f"Configuration: {Path('config.yaml').absolute()}")

    scheduler = AutoSearchScheduler()

    if not scheduler.config.enabled:
        logger.error("Auto-search is disabled. Set 'auto_search.enabled: true' in config.yaml "
                     "or SCOUT_AUTO_SEARCH=true")
        return

    scheduler.start()

    try:
        logger.info("Scheduler is running. Press Ctrl+C to stop.")
        while True:
            time.sleep(1)
    except (KeyboardInterrupt, SystemExit):
        logger.info("Received shutdown signal")
        scheduler.shutdown()


if __name__ == "__main__":
    run_scheduler()
