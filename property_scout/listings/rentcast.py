"""RentCast sale-listings client."""

import logging
from typing import Any, Dict, List, Optional

import requests

from property_scout.config import Settings, settings as default_settings
from property_scout.validation import FilterParameters, PropertyRecord, raw_to_record_batch

from .base import ListingsProvider, ListingsProviderError

logger = logging.getLogger(__name__)

# FilterParameters key -> RentCast query parameter
PARAM_MAP = {
    "city": "city",
    "state": "state",
    "minPrice": "minPrice",
    "maxPrice": "maxPrice",
    "minBedrooms": "bedrooms",
    "propertyType": "propertyType",
}


class RentCastClient(ListingsProvider):
    """Listings provider backed by the RentCast `/listings/sale` endpoint."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            config: Settings carrying the API key, base URL and page size
            session: Optional requests session (a module-level call is used if None)
        """
        self.config = config or default_settings
        self._session = session

    @property
    def url(self) -> str:
        return f"{self.config.rentcast_base_url.rstrip('/')}/listings/sale"

    def build_params(self, filters: FilterParameters, limit: Optional[int] = None) -> Dict[str, Any]:
        """Map filter parameters to RentCast query parameters."""
        params = {}
        for key, value in filters.to_params().items():
            if key in PARAM_MAP and value:
                params[PARAM_MAP[key]] = value

        params["status"] = "Active"
        params["limit"] = limit or self.config.listings_limit
        return params

    def search(
        self,
        filters: FilterParameters,
        limit: Optional[int] = None,
    ) -> List[PropertyRecord]:
        params = self.build_params(filters, limit)
        headers = {
            "X-Api-Key": self.config.rentcast_api_key,
            "accept": "application/json",
        }
        logger.info(f"Requesting listings: {params}")

        get = self._session.get if self._session is not None else requests.get
        try:
            response = get(
                self.url,
                params=params,
                headers=headers,
                timeout=self.config.response_timeout,
            )
        except requests.RequestException as e:
            raise ListingsProviderError(f"Listings request failed: {e}") from e

        if not response.ok:
            raise ListingsProviderError(f"HTTP error! status: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise ListingsProviderError(f"Listings response is not JSON: {e}") from e

        if not isinstance(data, list):
            raise ListingsProviderError(
                f"Unexpected API response structure: {type(data).__name__}"
            )

        records, failed = raw_to_record_batch(data)
        if failed:
            logger.warning(f"Dropped {len(failed)} listings that failed validation")

        logger.info(f"Listings provider returned {len(records)} records")
        return records
