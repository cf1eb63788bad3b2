"""Base classes for listings providers."""

from abc import ABC, abstractmethod
from typing import List, Optional

from property_scout.validation import FilterParameters, PropertyRecord


class RemoteUnavailable(Exception):
    """Base exception for failures talking to a remote collaborator."""
    pass


class ListingsProviderError(RemoteUnavailable):
    """Raised when the listings provider call fails or returns garbage."""
    pass


class ListingsProvider(ABC):
    """Abstract base class for sale-listing sources.

    Implementations issue a single best-effort request per search; there is
    no retry and no pagination beyond the page-size cap.
    """

    @abstractmethod
    def search(
        self,
        filters: FilterParameters,
        limit: Optional[int] = None,
    ) -> List[PropertyRecord]:
        """Search active sale listings.

        Args:
            filters: Search parameters
            limit: Maximum number of listings to request

        Returns:
            List of validated records

        Raises:
            ListingsProviderError: If the request fails or the response is not a list
        """
        pass
