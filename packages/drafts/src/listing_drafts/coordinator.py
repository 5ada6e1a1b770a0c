"""Submission coordinator.

Drives the requests that persist a draft across the catalog service and the
asset service.

Create mode::

    IDLE -> CREATE_ENTRY -> UPLOAD_ASSETS -> LINK_ENTRY -> DONE

Edit mode::

    IDLE -> DIRECT_UPDATE -> DONE                        (no new files)
    IDLE -> UPLOAD_ASSETS -> MERGE -> UPDATE_ENTRY -> DONE

Uploads run concurrently and are joined as a unit: one failed upload fails
the join. Uploads that did complete are not rolled back; their asset ids are
logged as orphaned. The final image order is every persisted image in
staging order followed by every new image in staging order.

Remote errors are caught at the step that issued them and end the run in a
terminal state. Nothing is retried. Once a run has started it always reaches
DONE, FAILED or PARTIAL_SUCCESS.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence

from listing_common import (
    DraftInvalid,
    ListingError,
    NotLoggedIn,
    PartialFailure,
    SubmissionInProgress,
    get_logger,
)
from listing_contracts import Actor, AssetRecord, CatalogEntry, OwnerType

from listing_drafts.attachments import StagedAttachment
from listing_drafts.metrics import (
    ASSET_UPLOADS_TOTAL,
    ORPHANED_ASSETS_TOTAL,
    SUBMISSION_DURATION,
    SUBMISSIONS_TOTAL,
)
from listing_drafts.session import DraftMode, DraftSession

if TYPE_CHECKING:
    from listing_client import AssetClient, CatalogClient

logger = get_logger(__name__)


class SubmissionState(str, Enum):
    IDLE = "IDLE"
    CREATE_ENTRY = "CREATE_ENTRY"
    UPLOAD_ASSETS = "UPLOAD_ASSETS"
    LINK_ENTRY = "LINK_ENTRY"
    DIRECT_UPDATE = "DIRECT_UPDATE"
    MERGE = "MERGE"
    UPDATE_ENTRY = "UPDATE_ENTRY"
    DONE = "DONE"
    FAILED = "FAILED"
    PARTIAL_SUCCESS = "PARTIAL_SUCCESS"
    REJECTED = "REJECTED"


TERMINAL_STATES = frozenset(
    {
        SubmissionState.DONE,
        SubmissionState.FAILED,
        SubmissionState.PARTIAL_SUCCESS,
        SubmissionState.REJECTED,
    }
)


class UploadJoinFailed(ListingError):
    """At least one upload of a join failed.

    Attributes:
        failures: Request index -> error, for every failed upload
        completed: Assets that were stored before the join failed
    """

    def __init__(self, failures: dict[int, BaseException], completed: list[AssetRecord]):
        self.failures = failures
        self.completed = completed
        first_index = min(failures)
        super().__init__(
            f"{len(failures)} of {len(failures) + len(completed)} uploads failed "
            f"(first at #{first_index}: {failures[first_index]})"
        )


@dataclass
class SubmissionResult:
    """Terminal outcome of one submit call."""

    mode: DraftMode
    state: SubmissionState = SubmissionState.IDLE
    entry: Optional[CatalogEntry] = None
    image_urls: list[str] = field(default_factory=list)
    uploaded: list[AssetRecord] = field(default_factory=list)
    orphaned_asset_ids: list[str] = field(default_factory=list)
    error: Optional[ListingError] = None
    history: list[SubmissionState] = field(default_factory=lambda: [SubmissionState.IDLE])

    @property
    def ok(self) -> bool:
        return self.state is SubmissionState.DONE

    @property
    def message(self) -> str:
        """Actor-facing summary. Partial success reads differently from failure."""
        if self.state is SubmissionState.DONE:
            verb = "created" if self.mode is DraftMode.CREATE else "updated"
            return f"Product {verb} successfully"
        if self.state is SubmissionState.PARTIAL_SUCCESS:
            return str(self.error)
        if self.state is SubmissionState.REJECTED:
            return str(self.error)
        return f"Could not save the product, nothing was changed: {self.error}"

    def advance(self, state: SubmissionState) -> None:
        self.state = state
        self.history.append(state)


def merge_image_order(attachments: Sequence[StagedAttachment]) -> list[str]:
    """Final image list: persisted images first, then new ones.

    Both groups keep their staging order. Every attachment must carry a
    remote URL (new ones get it when their upload completes).
    """
    persisted = [a for a in attachments if a.is_persisted]
    uploaded = [a for a in attachments if a.is_new]
    missing = [a.label for a in uploaded if not a.remote_url]
    if missing:
        raise ValueError(f"Attachments not uploaded yet: {missing}")
    return [a.remote_url for a in persisted] + [a.remote_url for a in uploaded]


class SubmissionCoordinator:
    """Runs submissions for draft sessions.

    Example:
        >>> coordinator = SubmissionCoordinator(catalog_client, asset_client)
        >>> result = await coordinator.submit(session)
        >>> print(result.state, result.message)
    """

    def __init__(self, catalog: "CatalogClient", assets: "AssetClient"):
        self.catalog = catalog
        self.assets = assets

    async def submit(self, session: DraftSession) -> SubmissionResult:
        """Persist ``session``'s draft and attachments.

        Preconditions are checked before any remote call; a failed
        precondition ends in REJECTED. On DONE the session is discarded; on
        FAILED or PARTIAL_SUCCESS it is left intact for a retry.
        """
        result = SubmissionResult(mode=session.mode)

        if session.submission_lock.locked():
            return self._reject(result, SubmissionInProgress())

        async with session.submission_lock:
            rejection = self._check_preconditions(session)
            if rejection is not None:
                return self._reject(result, rejection)

            started = time.perf_counter()
            attachments = await session.staging.snapshot()
            actor = session.actor
            logger.info(
                "submission_started",
                mode=result.mode.value,
                entry_id=session.entry.id if session.entry else None,
                attachments=len(attachments),
                new=sum(1 for a in attachments if a.is_new),
            )

            if session.mode is DraftMode.CREATE:
                await self._run_create(session, attachments, actor, result)
            else:
                await self._run_edit(session, attachments, actor, result)

            SUBMISSION_DURATION.labels(mode=result.mode.value).observe(
                time.perf_counter() - started
            )
            SUBMISSIONS_TOTAL.labels(mode=result.mode.value, state=result.state.value).inc()
            self._settle(session, result)
            return result

    # -------------------------------------------------------------------------
    # Preconditions
    # -------------------------------------------------------------------------

    def _check_preconditions(self, session: DraftSession) -> Optional[ListingError]:
        if session.actor is None:
            return NotLoggedIn()

        field_errors = session.draft.errors()
        if field_errors:
            return DraftInvalid("Please fix the highlighted fields.", field_errors)

        count = len(session.staging)
        if count == 0:
            return DraftInvalid("Please add at least one image.")
        limit = session.limits.max_attachments
        if count > limit:
            return DraftInvalid(f"You can upload a maximum of {limit} images per product.")
        return None

    def _reject(self, result: SubmissionResult, error: ListingError) -> SubmissionResult:
        result.error = error
        result.advance(SubmissionState.REJECTED)
        SUBMISSIONS_TOTAL.labels(mode=result.mode.value, state=result.state.value).inc()
        logger.info("submission_rejected", mode=result.mode.value, error=str(error))
        return result

    # -------------------------------------------------------------------------
    # Create mode
    # -------------------------------------------------------------------------

    async def _run_create(
        self,
        session: DraftSession,
        attachments: Sequence[StagedAttachment],
        actor: Actor,
        result: SubmissionResult,
    ) -> None:
        result.advance(SubmissionState.CREATE_ENTRY)
        try:
            entry = await self.catalog.create(session.draft.to_payload(images=[]), actor)
        except ListingError as e:
            result.error = e
            result.advance(SubmissionState.FAILED)
            logger.error("entry_create_failed", error=str(e))
            return
        result.entry = entry

        result.advance(SubmissionState.UPLOAD_ASSETS)
        new = [a for a in attachments if a.is_new]
        try:
            result.uploaded = await self._upload_all(entry.id, new, actor)
        except UploadJoinFailed as e:
            self._record_orphans(result, e.completed, entry.id)
            self._partial(result, entry, e)
            return

        image_urls = merge_image_order(attachments)
        result.advance(SubmissionState.LINK_ENTRY)
        try:
            result.entry = await self.catalog.update(
                entry.id, entry.payload(images=image_urls), actor
            )
        except ListingError as e:
            self._record_orphans(result, result.uploaded, entry.id)
            self._partial(result, entry, e)
            return

        result.image_urls = image_urls
        result.advance(SubmissionState.DONE)

    def _partial(self, result: SubmissionResult, entry: CatalogEntry, cause: ListingError) -> None:
        result.error = PartialFailure(entry.id, cause)
        result.advance(SubmissionState.PARTIAL_SUCCESS)
        logger.error("entry_link_incomplete", entry_id=entry.id, error=str(cause))

    # -------------------------------------------------------------------------
    # Edit mode
    # -------------------------------------------------------------------------

    async def _run_edit(
        self,
        session: DraftSession,
        attachments: Sequence[StagedAttachment],
        actor: Actor,
        result: SubmissionResult,
    ) -> None:
        entry = session.entry
        new = [a for a in attachments if a.is_new]

        if not new:
            result.advance(SubmissionState.DIRECT_UPDATE)
            image_urls = [a.remote_url for a in attachments]
        else:
            result.advance(SubmissionState.UPLOAD_ASSETS)
            try:
                result.uploaded = await self._upload_all(entry.id, new, actor)
            except UploadJoinFailed as e:
                self._record_orphans(result, e.completed, entry.id)
                result.error = e
                result.advance(SubmissionState.FAILED)
                logger.error("asset_upload_join_failed", entry_id=entry.id, error=str(e))
                return

            result.advance(SubmissionState.MERGE)
            image_urls = merge_image_order(attachments)
            result.advance(SubmissionState.UPDATE_ENTRY)

        try:
            result.entry = await self.catalog.update(
                entry.id, session.draft.to_payload(images=image_urls), actor
            )
        except ListingError as e:
            self._record_orphans(result, result.uploaded, entry.id)
            result.error = e
            result.advance(SubmissionState.FAILED)
            logger.error("entry_update_failed", entry_id=entry.id, error=str(e))
            return

        result.image_urls = image_urls
        result.advance(SubmissionState.DONE)

    # -------------------------------------------------------------------------
    # Upload join
    # -------------------------------------------------------------------------

    async def _upload_all(
        self,
        owner_id: str,
        new: Sequence[StagedAttachment],
        actor: Actor,
    ) -> list[AssetRecord]:
        """Upload every NEW attachment concurrently and join on all of them.

        Results are matched to attachments by request index. Raises
        ``UploadJoinFailed`` if any upload failed, whatever the error type.
        Cancellation and other non-``Exception`` errors propagate unchanged.
        """
        outcomes = await asyncio.gather(
            *(self.assets.upload(owner_id, OwnerType.ENTRY, a.local, actor) for a in new),
            return_exceptions=True,
        )

        failures: dict[int, BaseException] = {}
        completed: list[AssetRecord] = []
        for index, (attachment, outcome) in enumerate(zip(new, outcomes)):
            if isinstance(outcome, BaseException):
                failures[index] = outcome
                ASSET_UPLOADS_TOTAL.labels(status="failed").inc()
                logger.warning(
                    "asset_upload_failed",
                    owner_id=owner_id,
                    index=index,
                    filename=attachment.label,
                    error=str(outcome),
                )
                continue
            attachment.remote_url = outcome.url
            attachment.remote_asset_id = outcome.id
            completed.append(outcome)
            ASSET_UPLOADS_TOTAL.labels(status="ok").inc()

        if failures:
            for error in failures.values():
                if not isinstance(error, Exception):
                    raise error
            raise UploadJoinFailed(failures, completed)
        return completed

    def _record_orphans(
        self,
        result: SubmissionResult,
        records: Sequence[AssetRecord],
        entry_id: str,
    ) -> None:
        if not records:
            return
        result.orphaned_asset_ids = [r.id for r in records]
        ORPHANED_ASSETS_TOTAL.inc(len(records))
        logger.warning(
            "assets_orphaned",
            entry_id=entry_id,
            asset_ids=result.orphaned_asset_ids,
        )

    # -------------------------------------------------------------------------
    # Terminal handling
    # -------------------------------------------------------------------------

    def _settle(self, session: DraftSession, result: SubmissionResult) -> None:
        if result.state is SubmissionState.DONE:
            logger.info(
                "submission_done",
                mode=result.mode.value,
                entry_id=result.entry.id if result.entry else None,
                images=len(result.image_urls),
            )
            session.discard()
        elif result.state is SubmissionState.PARTIAL_SUCCESS and result.entry is not None:
            session.adopt(result.entry)
