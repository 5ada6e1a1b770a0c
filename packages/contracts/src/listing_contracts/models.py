"""Pydantic wire schemas for the catalog-entry and asset services.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

import mimetypes
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for camelCase wire models."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# Actors
# =============================================================================


class Actor(BaseModel):
    """Caller identity asserted on mutating requests.

    The services trust these headers; nothing here verifies them.
    """

    id: str = Field(description="User id")
    role: str = Field(default="SELLER", description="User role (SELLER, CLIENT, ...)")
    name: Optional[str] = Field(default=None, description="Display name")

    def headers(self) -> dict[str, str]:
        return {"X-USER-ID": self.id, "X-USER-ROLE": self.role}


# =============================================================================
# Catalog entries
# =============================================================================


class EntryPayload(WireModel):
    """Body of create and update requests."""

    name: str
    description: str
    price: float
    quantity: int
    category_id: str
    images: list[str] = Field(default_factory=list, description="Ordered image URLs")


class CatalogEntry(WireModel):
    """A catalog entry as returned by the catalog service.

    ``images`` holds the authoritative attachment order once a submission
    has completed.
    """

    id: str
    owner_id: str = Field(alias="userId")
    name: str
    description: str = ""
    price: float
    quantity: int
    category_id: str = ""
    images: list[str] = Field(default_factory=list)

    def payload(self, images: Optional[list[str]] = None) -> EntryPayload:
        """Build an update payload from this snapshot, optionally replacing images."""
        return EntryPayload(
            name=self.name,
            description=self.description,
            price=self.price,
            quantity=self.quantity,
            category_id=self.category_id,
            images=list(self.images if images is None else images),
        )


# =============================================================================
# Assets
# =============================================================================


class OwnerType(str, Enum):
    """Owner kind of an uploaded asset. Values are the wire names."""

    ENTRY = "PRODUCT"
    USER = "USER"


class AssetRecord(WireModel):
    """Stored media asset."""

    id: str
    url: str
    owner_id: Optional[str] = None
    owner_type: Optional[OwnerType] = None


class AssetList(WireModel):
    """Assets owned by one entry."""

    images: list[AssetRecord] = Field(default_factory=list)
    total: int = 0
    max: Optional[int] = None


# =============================================================================
# Local files
# =============================================================================


class LocalFile(BaseModel):
    """A file picked by the actor, held in memory until upload."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content_type: str = "application/octet-stream"
    content: bytes = Field(repr=False)

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "LocalFile":
        """Read a file from disk, guessing its MIME type from the extension."""
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content_type=content_type or "application/octet-stream",
            content=path.read_bytes(),
        )
