"""Listings provider module.

Main exports:
- ListingsProvider: Interface for sale-listing sources
- RentCastClient: RentCast implementation
- ListingsProviderError, RemoteUnavailable: Exceptions

Example usage:
    from property_scout.listings import RentCastClient
    from property_scout.validation import FilterParameters

    client = RentCastClient()
    records = client.search(FilterParameters(city="Austin", state="TX"))
"""

from .base import ListingsProvider, ListingsProviderError, RemoteUnavailable
from .rentcast import RentCastClient

__all__ = [
    "ListingsProvider",
    "ListingsProviderError",
    "RemoteUnavailable",
    "RentCastClient",
]
