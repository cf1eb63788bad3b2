from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings

PLACEHOLDER_KEYS = {
    "",
    "your_openai_api_key_here",
    "sk-YOUR_ACTUAL_OPENAI_KEY_HERE",
    "your_rentcast_api_key_here",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables with the SCOUT_ prefix.
    Example: SCOUT_RENTCAST_API_KEY=abc123
    """
    model_config = {"env_prefix": "SCOUT_"}

    # Listings provider
    rentcast_api_key: str = "your_rentcast_api_key_here"
    rentcast_base_url: str = "https://api.rentcast.io/v1"
    listings_limit: int = 100

    # Language model
    openai_api_key: Optional[str] = None
    ai_model: str = "gpt-3.5-turbo"  # Faster and cheaper
    ai_max_tokens: int = 150
    ai_temperature: float = 0.1
    response_timeout: float = 10.0  # seconds

    # Feature toggles
    natural_language_search: bool = True
    smart_recommendations: bool = True
    market_intelligence: bool = True
    investment_analyzer: bool = True
    auto_search: bool = False

    # Cost and usage tracking
    usage_tracking: bool = True
    max_monthly_cost: float = 25.00  # Dollar limit
    cost_alerts: bool = True
    feature_call_cost: float = 0.01

    # Storage for profile and usage ledger
    db_url: str = "sqlite:///data/property_scout.db"

    # Scheduling configuration
    schedule_cron: str = "0 8 * * *"  # Daily at 8 AM by default
    schedule_timezone: str = "America/Chicago"

    # Logging configuration
    log_level: str = "INFO"
    log_file: Optional[Path] = Path("logs/property_scout.log")

    # API server configuration
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def has_language_model(self) -> bool:
        """Whether a usable (non-placeholder) OpenAI key is configured."""
        key = (self.openai_api_key or "").strip()
        return key not in PLACEHOLDER_KEYS and len(key) > 10


settings = Settings()
