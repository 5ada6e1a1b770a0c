"""Listing Client - async HTTP clients for the catalog and asset services.

Quick Start
-----------
>>> from listing_client import AssetClient, CatalogClient
>>> async with CatalogClient() as catalog, AssetClient() as assets:
...     entry = await catalog.get("p-1")
...     records = await assets.list(entry.id)
"""

from listing_client.asset_client import AssetClient
from listing_client.base import ServiceClient
from listing_client.catalog_client import CatalogClient

__all__ = [
    "AssetClient",
    "CatalogClient",
    "ServiceClient",
]
