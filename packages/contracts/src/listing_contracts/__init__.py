"""Listing Contracts - Pure Pydantic schemas.

This package contains ONLY Pydantic schemas with no business logic.
Dependencies: pydantic only (no logging, no HTTP).
"""

from listing_contracts.models import (
    # Actors
    Actor,
    # Catalog entries
    CatalogEntry,
    EntryPayload,
    # Assets
    AssetList,
    AssetRecord,
    OwnerType,
    # Local files
    LocalFile,
    WireModel,
)

__version__ = "1.0.0"

__all__ = [
    "Actor",
    "CatalogEntry",
    "EntryPayload",
    "AssetList",
    "AssetRecord",
    "OwnerType",
    "LocalFile",
    "WireModel",
]
