"""Draft session: one Draft, its staging list, and its edit context.

A session lives from "open the editor" until it is discarded, either on
cancel or after a successful submission. Nothing is kept across sessions.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence

from listing_common import get_logger, get_settings
from listing_contracts import Actor, CatalogEntry, LocalFile

from listing_drafts.draft import Draft
from listing_drafts.notices import TransientNotice
from listing_drafts.reconcile import EditReconciler, ReconcileOutcome
from listing_drafts.staging import StagingList
from listing_drafts.validation import AttachmentLimits, GateResult, Rejected

if TYPE_CHECKING:
    from listing_client import AssetClient

logger = get_logger(__name__)


class DraftMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class DraftSession:
    """Owner of the mutable state a submission works from.

    Example:
        >>> session = DraftSession(actor=Actor(id="u1"))
        >>> session.draft.name = "Mug"
        >>> session.add_files([LocalFile.from_path("mug.png")])
    """

    def __init__(
        self,
        actor: Optional[Actor] = None,
        entry: Optional[CatalogEntry] = None,
        limits: Optional[AttachmentLimits] = None,
        asset_client: Optional["AssetClient"] = None,
        notice: Optional[TransientNotice] = None,
    ):
        self.limits = limits or AttachmentLimits.from_settings()
        self.entry = entry
        self.draft = Draft.from_entry(entry) if entry else Draft()
        self.staging = StagingList(self.limits, asset_client=asset_client, actor=actor)
        self.notice = notice or TransientNotice(get_settings().notice_clear_seconds)
        self.reconcile_outcome: Optional[ReconcileOutcome] = None
        self.submission_lock = asyncio.Lock()
        self._actor = actor

    @classmethod
    async def open_edit(
        cls,
        entry: CatalogEntry,
        reconciler: EditReconciler,
        actor: Optional[Actor] = None,
        limits: Optional[AttachmentLimits] = None,
    ) -> "DraftSession":
        """Hydrate a session from ``entry`` and seed staging via the reconciler."""
        session = cls(
            actor=actor,
            entry=entry,
            limits=limits,
            asset_client=reconciler.asset_client,
        )
        outcome = await reconciler.reconcile(entry)
        session.staging.replace(outcome.attachments)
        session.reconcile_outcome = outcome
        return session

    @property
    def actor(self) -> Optional[Actor]:
        return self._actor

    @actor.setter
    def actor(self, actor: Optional[Actor]) -> None:
        self._actor = actor
        self.staging.actor = actor

    @property
    def mode(self) -> DraftMode:
        return DraftMode.EDIT if self.entry is not None else DraftMode.CREATE

    @property
    def is_submitting(self) -> bool:
        return self.submission_lock.locked()

    def add_files(self, files: Sequence[LocalFile]) -> list[GateResult]:
        """Stage a selection of files; the last rejection becomes the notice."""
        results = self.staging.stage_many(files, self.entry)
        rejected = [r for r in results if isinstance(r, Rejected)]
        if rejected:
            self.notice.show(rejected[-1].message)
        return results

    def adopt(self, entry: CatalogEntry) -> None:
        """Switch to editing ``entry``, keeping the draft and staging as they are.

        Used after a create that left the entry half-linked, so a retry
        updates it rather than creating a second one.
        """
        self.entry = entry
        logger.info("session_adopted_entry", entry_id=entry.id)

    def discard(self) -> None:
        """Drop all local state (cancel or successful submission)."""
        self.draft.reset()
        self.staging.clear()
        self.notice.clear()
        self.entry = None
        self.reconcile_outcome = None
