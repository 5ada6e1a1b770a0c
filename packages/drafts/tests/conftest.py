"""Pytest fixtures for draft tests.

The service fakes keep everything in memory and record every call so tests
can assert on what reached the services and in which order.
"""

from __future__ import annotations

import asyncio
import itertools

import pytest

from listing_common import NetworkError
from listing_contracts import Actor, AssetRecord, CatalogEntry, LocalFile, OwnerType

from listing_drafts import AttachmentLimits, Draft


class FakeCatalog:
    """In-memory catalog-entry service."""

    def __init__(self):
        self.entries: dict[str, CatalogEntry] = {}
        self.calls: list[tuple] = []
        self.create_error: Exception | None = None
        self.update_error: Exception | None = None
        self._ids = itertools.count(100)

    async def create(self, payload, actor):
        self.calls.append(("create", payload, actor))
        if self.create_error:
            raise self.create_error
        entry = CatalogEntry(id=f"p-{next(self._ids)}", owner_id=actor.id, **payload.model_dump())
        self.entries[entry.id] = entry
        return entry

    async def update(self, entry_id, payload, actor):
        self.calls.append(("update", entry_id, payload, actor))
        if self.update_error:
            raise self.update_error
        entry = CatalogEntry(id=entry_id, owner_id=actor.id, **payload.model_dump())
        self.entries[entry_id] = entry
        return entry

    async def get(self, entry_id):
        self.calls.append(("get", entry_id))
        return self.entries[entry_id]

    async def delete(self, entry_id, actor):
        self.calls.append(("delete", entry_id, actor))
        self.entries.pop(entry_id, None)

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]


class FakeAssets:
    """In-memory asset service.

    ``fail_on`` holds filenames whose upload fails; ``delays`` maps filenames
    to a sleep before the upload completes, to force completion order.
    """

    def __init__(self):
        self.records: list[AssetRecord] = []
        self.uploads: list[tuple[str, str]] = []
        self.deleted: list[str] = []
        self.fail_on: set[str] = set()
        self.delays: dict[str, float] = {}
        self.list_error: Exception | None = None
        self.delete_error: Exception | None = None
        self._ids = itertools.count(1)

    async def upload(self, owner_id, owner_type, file, actor):
        self.uploads.append((owner_id, file.filename))
        await asyncio.sleep(self.delays.get(file.filename, 0))
        if file.filename in self.fail_on:
            raise NetworkError("upload refused", status_code=500, endpoint="/media/images")
        record = AssetRecord(
            id=f"a-{next(self._ids)}",
            url=f"http://cdn.test/{owner_id}/{file.filename}",
            owner_id=owner_id,
            owner_type=owner_type,
        )
        self.records.append(record)
        return record

    async def list(self, owner_id):
        if self.list_error:
            raise self.list_error
        return [r for r in self.records if r.owner_id == owner_id]

    async def delete(self, asset_id, actor):
        if self.delete_error:
            raise self.delete_error
        self.deleted.append(asset_id)


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def assets():
    return FakeAssets()


@pytest.fixture
def actor():
    return Actor(id="u1", role="SELLER")


@pytest.fixture
def limits():
    return AttachmentLimits()


@pytest.fixture
def make_file():
    """Factory for in-memory image files."""

    def _make(name: str = "a.png", size: int = 16, content_type: str = "image/png") -> LocalFile:
        return LocalFile(filename=name, content_type=content_type, content=b"\x00" * size)

    return _make


@pytest.fixture
def valid_draft():
    return Draft(name="Mug", description="Blue mug", price=12.5, quantity=3, category_id="kitchen")


@pytest.fixture
def stored_entry():
    """Entry with two stored images, both with asset records."""
    return CatalogEntry(
        id="p-7",
        owner_id="u1",
        name="Lamp",
        description="Desk lamp",
        price=40.0,
        quantity=2,
        category_id="home",
        images=["http://cdn.test/p-7/a.png", "http://cdn.test/p-7/b.png"],
    )


@pytest.fixture
def stored_records():
    return [
        AssetRecord(id="a-70", url="http://cdn.test/p-7/a.png", owner_id="p-7", owner_type=OwnerType.ENTRY),
        AssetRecord(id="a-71", url="http://cdn.test/p-7/b.png", owner_id="p-7", owner_type=OwnerType.ENTRY),
    ]
