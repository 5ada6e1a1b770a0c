"""Staging list: the ordered attachments of one draft.

Slots are held in an arena keyed by ordinal. Every mutation re-densifies the
ordinals so they stay contiguous, zero-based and strictly increasing.

Removing a PERSISTED attachment that has a resolved asset id also deletes
the asset remotely. That delete is detached: the local removal happens
immediately, is never rolled back, and a failed delete is only logged and
counted.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Iterator, Optional, Sequence

from listing_common import get_logger
from listing_contracts import Actor, CatalogEntry, LocalFile

from listing_drafts.attachments import StagedAttachment
from listing_drafts.metrics import ASSET_DELETES_TOTAL, STAGING_REJECTIONS_TOTAL
from listing_drafts.validation import (
    AttachmentLimits,
    GateResult,
    Ok,
    Rejected,
    validate,
    validate_batch,
)

if TYPE_CHECKING:
    from listing_client import AssetClient

logger = get_logger(__name__)


class StagingList:
    """Ordered collection of staged attachments.

    Example:
        >>> staging = StagingList()
        >>> result = staging.stage(LocalFile(filename="a.png", content_type="image/png", content=b"..."))
        >>> staging.move_down(0)
    """

    def __init__(
        self,
        limits: Optional[AttachmentLimits] = None,
        asset_client: Optional["AssetClient"] = None,
        actor: Optional[Actor] = None,
    ):
        self.limits = limits or AttachmentLimits.from_settings()
        self.asset_client = asset_client
        self.actor = actor
        self._slots: dict[int, StagedAttachment] = {}
        self._background: set[asyncio.Task] = set()

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[StagedAttachment]:
        return iter(self.items())

    def __getitem__(self, index: int) -> StagedAttachment:
        self._check_index(index)
        return self._slots[index]

    def items(self) -> list[StagedAttachment]:
        """Attachments in ordinal order."""
        return [self._slots[i] for i in range(len(self._slots))]

    def persisted(self) -> list[StagedAttachment]:
        return [a for a in self.items() if a.is_persisted]

    def new(self) -> list[StagedAttachment]:
        return [a for a in self.items() if a.is_new]

    async def snapshot(self) -> tuple[StagedAttachment, ...]:
        """Wait for pending preview decodes and return the attachments.

        A submission only works from a snapshot, so it never sees a
        half-decoded descriptor.
        """
        attachments = self.items()
        await asyncio.gather(*(a.wait_ready() for a in attachments))
        return tuple(attachments)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, attachment: StagedAttachment) -> StagedAttachment:
        """Append an attachment, bypassing the validation gate."""
        attachment.ordinal = len(self._slots)
        self._slots[attachment.ordinal] = attachment
        if attachment.is_new:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                attachment.decode_preview()
            else:
                attachment.start_decoding(loop)
        return attachment

    def stage(self, file: LocalFile, edit_context: Optional[CatalogEntry] = None) -> GateResult:
        """Validate ``file`` and append it when accepted."""
        result = validate(file, self.items(), edit_context, self.limits)
        self._apply(result)
        return result

    def stage_many(
        self,
        files: Sequence[LocalFile],
        edit_context: Optional[CatalogEntry] = None,
    ) -> list[GateResult]:
        """Validate a multi-file selection and append the accepted files."""
        results = validate_batch(files, self.items(), edit_context, self.limits)
        for result in results:
            self._apply(result)
        return results

    def replace(self, attachments: Sequence[StagedAttachment]) -> None:
        """Drop every slot and seed the list with ``attachments`` in order."""
        self._slots = {}
        for attachment in attachments:
            self.add(attachment)

    def remove(self, index: int) -> StagedAttachment:
        """Remove the attachment at ``index``.

        A resolved PERSISTED attachment is also deleted remotely in a
        detached task. Without a running event loop the delete is skipped,
        logged and counted; the local removal still applies.
        """
        self._check_index(index)
        ordered = self.items()
        removed = ordered.pop(index)
        self._renumber(ordered)

        if removed.is_persisted:
            if removed.is_resolved:
                self._spawn_delete(removed)
            else:
                logger.info("asset_delete_skipped_unresolved", url=removed.remote_url)
        logger.debug("attachment_removed", index=index, label=removed.label)
        return removed

    def move_up(self, index: int) -> None:
        """Swap ``index`` with its predecessor. No-op at the top."""
        self._check_index(index)
        if index == 0:
            return
        self._swap(index - 1, index)

    def move_down(self, index: int) -> None:
        """Swap ``index`` with its successor. No-op at the bottom."""
        self._check_index(index)
        if index == len(self._slots) - 1:
            return
        self._swap(index, index + 1)

    def clear(self) -> None:
        """Drop every slot, cancelling preview decodes still pending."""
        for attachment in self._slots.values():
            attachment.cancel_decoding()
        self._slots = {}

    # -------------------------------------------------------------------------
    # Detached deletes
    # -------------------------------------------------------------------------

    async def join_background(self) -> None:
        """Wait for detached deletes still in flight (shutdown only)."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def _spawn_delete(self, attachment: StagedAttachment) -> None:
        if self.asset_client is None or self.actor is None:
            logger.warning(
                "asset_delete_skipped_no_client",
                asset_id=attachment.remote_asset_id,
                has_actor=self.actor is not None,
            )
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            ASSET_DELETES_TOTAL.labels(status="skipped").inc()
            logger.warning("asset_delete_skipped_no_loop", asset_id=attachment.remote_asset_id)
            return
        task = loop.create_task(
            self._delete_detached(attachment.remote_asset_id, self.actor)
        )
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _delete_detached(self, asset_id: str, actor: Actor) -> None:
        try:
            await self.asset_client.delete(asset_id, actor)
        except Exception as e:
            ASSET_DELETES_TOTAL.labels(status="failed").inc()
            logger.error("asset_delete_failed", asset_id=asset_id, error=str(e))
        else:
            ASSET_DELETES_TOTAL.labels(status="ok").inc()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _apply(self, result: GateResult) -> None:
        if isinstance(result, Ok):
            self.add(StagedAttachment.new(result.file))
        elif isinstance(result, Rejected):
            STAGING_REJECTIONS_TOTAL.labels(reason=result.reason.value).inc()
            logger.info(
                "attachment_rejected",
                filename=result.file.filename,
                reason=result.reason.value,
            )

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._slots):
            raise IndexError(f"No staged attachment at index {index} (size {len(self._slots)})")

    def _swap(self, i: int, j: int) -> None:
        self._slots[i], self._slots[j] = self._slots[j], self._slots[i]
        self._slots[i].ordinal = i
        self._slots[j].ordinal = j

    def _renumber(self, ordered: list[StagedAttachment]) -> None:
        self._slots = {}
        for ordinal, attachment in enumerate(ordered):
            attachment.ordinal = ordinal
            self._slots[ordinal] = attachment
