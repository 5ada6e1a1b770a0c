"""Listing drafts - compose, validate and submit catalog listing drafts.

This package provides:
- Validation gate for candidate image files
- Staging list with ordering and detached remote deletes
- Edit reconciler mapping entry image URLs to asset records
- Submission coordinator for create and edit flows
"""

from listing_drafts.attachments import AttachmentOrigin, StagedAttachment, to_data_url
from listing_drafts.coordinator import (
    SubmissionCoordinator,
    SubmissionResult,
    SubmissionState,
    TERMINAL_STATES,
    UploadJoinFailed,
    merge_image_order,
)
from listing_drafts.draft import MIN_PRICE, MIN_QUANTITY, Draft
from listing_drafts.notices import TransientNotice
from listing_drafts.reconcile import (
    EditReconciler,
    ReconcileOutcome,
    ReconcileState,
    match_assets,
)
from listing_drafts.session import DraftMode, DraftSession
from listing_drafts.staging import StagingList
from listing_drafts.validation import (
    AttachmentLimits,
    GateResult,
    Ok,
    Rejected,
    RejectionReason,
    validate,
    validate_batch,
)

__all__ = [
    # Attachments
    "AttachmentOrigin",
    "StagedAttachment",
    "to_data_url",
    # Draft
    "Draft",
    "MIN_PRICE",
    "MIN_QUANTITY",
    # Validation gate
    "AttachmentLimits",
    "GateResult",
    "Ok",
    "Rejected",
    "RejectionReason",
    "validate",
    "validate_batch",
    # Staging
    "StagingList",
    "TransientNotice",
    # Edit reconciler
    "EditReconciler",
    "ReconcileOutcome",
    "ReconcileState",
    "match_assets",
    # Sessions and submission
    "DraftMode",
    "DraftSession",
    "SubmissionCoordinator",
    "SubmissionResult",
    "SubmissionState",
    "TERMINAL_STATES",
    "UploadJoinFailed",
    "merge_image_order",
]
