"""Edit reconciler: maps an entry's image URLs to asset records.

ENTER_EDIT -> FETCHING_ASSETS -> RESOLVED | FETCH_FAILED -> HYDRATED

A failed asset listing never blocks edit mode; the URLs are staged without
asset ids instead, so the actor can still edit and resubmit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence

from listing_common import ListingError, get_logger
from listing_contracts import AssetRecord, CatalogEntry

from listing_drafts.attachments import StagedAttachment

if TYPE_CHECKING:
    from listing_client import AssetClient

logger = get_logger(__name__)


class ReconcileState(str, Enum):
    ENTER_EDIT = "ENTER_EDIT"
    FETCHING_ASSETS = "FETCHING_ASSETS"
    RESOLVED = "RESOLVED"
    FETCH_FAILED = "FETCH_FAILED"
    HYDRATED = "HYDRATED"


@dataclass
class ReconcileOutcome:
    """Initial staging content for an edit session."""

    entry: CatalogEntry
    attachments: list[StagedAttachment]
    states: list[ReconcileState] = field(default_factory=list)
    error: Optional[ListingError] = None

    @property
    def resolved(self) -> bool:
        return ReconcileState.RESOLVED in self.states

    @property
    def unresolved_urls(self) -> list[str]:
        return [a.remote_url for a in self.attachments if not a.is_resolved]


def match_assets(
    urls: Sequence[str],
    records: Sequence[AssetRecord],
) -> list[StagedAttachment]:
    """Stage each URL as PERSISTED, keeping the order of ``urls``.

    The asset id comes from the first record with the same URL; a URL with
    no matching record is left unresolved.
    """
    first_by_url: dict[str, str] = {}
    for record in records:
        first_by_url.setdefault(record.url, record.id)
    return [StagedAttachment.persisted(url, first_by_url.get(url)) for url in urls]


class EditReconciler:
    """Builds the initial staging list when an entry enters edit mode."""

    def __init__(self, asset_client: "AssetClient"):
        self.asset_client = asset_client

    async def reconcile(self, entry: CatalogEntry) -> ReconcileOutcome:
        outcome = ReconcileOutcome(entry=entry, attachments=[], states=[ReconcileState.ENTER_EDIT])

        outcome.states.append(ReconcileState.FETCHING_ASSETS)
        try:
            records = await self.asset_client.list(entry.id)
        except ListingError as e:
            outcome.states.append(ReconcileState.FETCH_FAILED)
            outcome.error = e
            outcome.attachments = match_assets(entry.images, [])
            logger.warning("asset_list_failed", entry_id=entry.id, error=str(e))
        else:
            outcome.states.append(ReconcileState.RESOLVED)
            outcome.attachments = match_assets(entry.images, records)
            if outcome.unresolved_urls:
                logger.info(
                    "asset_urls_unresolved",
                    entry_id=entry.id,
                    count=len(outcome.unresolved_urls),
                )

        outcome.states.append(ReconcileState.HYDRATED)
        logger.info(
            "edit_hydrated",
            entry_id=entry.id,
            images=len(outcome.attachments),
            resolved=outcome.resolved,
        )
        return outcome
