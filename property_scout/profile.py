"""User profile model and its repository.

The profile is single-user local state: it starts empty, grows with every
tracked interaction and is read before each scoring pass.
"""

import logging
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from property_scout.db.store import BlobStore

logger = logging.getLogger(__name__)

PROFILE_KEY = "user_profile"


class Interaction(BaseModel):
    """One logged interaction with a listing."""

    property: Dict[str, Any] = Field(..., description="Snapshot of the listing")
    action: str = Field(..., min_length=1, description="e.g. 'view', 'save', 'contact'")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class UserProfile(BaseModel):
    """Preferences learned from interactions."""

    average_price: Optional[float] = Field(None, description="Mean price of interacted listings")
    preferred_types: Dict[str, int] = Field(
        default_factory=dict, description="Property type -> interaction count"
    )
    preferred_bedrooms: Optional[int] = Field(None, description="Most common bedroom count")
    interactions: List[Interaction] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.interactions


class ProfileRepository:
    """Loads and saves the UserProfile through a BlobStore."""

    def __init__(self, store: BlobStore, key: str = PROFILE_KEY):
        self.store = store
        self.key = key

    def load(self) -> UserProfile:
        """Load the stored profile; missing or corrupt data yields an empty one."""
        try:
            raw = self.store.read(self.key)
        except Exception as e:
            logger.error(f"Could not read user profile: {e}")
            return UserProfile()

        if not raw:
            return UserProfile()

        try:
            return UserProfile.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Stored user profile is corrupt, starting fresh: {e.error_count()} errors")
            return UserProfile()

    def save(self, profile: UserProfile) -> None:
        self.store.write(self.key, profile.model_dump_json())
        logger.debug(f"Saved user profile ({len(profile.interactions)} interactions)")
