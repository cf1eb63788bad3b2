"""Shared FastAPI dependencies."""
from functools import lru_cache

from property_scout.config import settings
from property_scout.search import PropertySearch


@lru_cache(maxsize=1)
def get_search() -> PropertySearch:
    """Process-wide PropertySearch built from settings.

    Tests override this with ``app.dependency_overrides``.
    """
    return PropertySearch(settings)
