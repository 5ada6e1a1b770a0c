"""The locally-held edit state of a catalog entry."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional

from listing_contracts import CatalogEntry, EntryPayload

MIN_PRICE = 1.0
MIN_QUANTITY = 1


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class Draft:
    """Mutable record of the structured entry fields.

    Each field has a validity predicate; ``errors()`` reports the failing
    ones and the draft is submittable only when it is empty.

    Example:
        >>> draft = Draft(name="Mug", description="Blue", price=12.5, quantity=3, category_id="c1")
        >>> draft.is_submittable
        True
    """

    name: str = ""
    description: str = ""
    price: Optional[float] = None
    quantity: Optional[int] = None
    category_id: str = ""

    @classmethod
    def from_entry(cls, entry: CatalogEntry) -> "Draft":
        """Hydrate a draft from an entry snapshot (edit mode)."""
        return cls(
            name=entry.name,
            description=entry.description,
            price=entry.price,
            quantity=entry.quantity,
            category_id=entry.category_id,
        )

    def errors(self) -> dict[str, str]:
        """Per-field validation messages for every invalid field."""
        problems: dict[str, str] = {}
        if _blank(self.name):
            problems["name"] = "Name is required."
        if _blank(self.description):
            problems["description"] = "Description is required."
        if self.price is None:
            problems["price"] = "Price is required."
        elif not _is_number(self.price) or self.price < MIN_PRICE:
            problems["price"] = f"Price must be at least {MIN_PRICE:.2f}."
        if self.quantity is None:
            problems["quantity"] = "Quantity is required."
        elif not isinstance(self.quantity, int) or isinstance(self.quantity, bool):
            problems["quantity"] = "Quantity must be a whole number."
        elif self.quantity < MIN_QUANTITY:
            problems["quantity"] = f"Quantity must be at least {MIN_QUANTITY}."
        if _blank(self.category_id):
            problems["category_id"] = "Category is required."
        return problems

    @property
    def is_submittable(self) -> bool:
        return not self.errors()

    def to_payload(self, images: list[str]) -> EntryPayload:
        """Build the create/update body. Call only on a submittable draft."""
        return EntryPayload(
            name=self.name.strip(),
            description=self.description.strip(),
            price=float(self.price),
            quantity=int(self.quantity),
            category_id=self.category_id,
            images=list(images),
        )

    def reset(self) -> None:
        """Return every field to its empty value."""
        empty = Draft()
        for f in fields(self):
            setattr(self, f.name, getattr(empty, f.name))
