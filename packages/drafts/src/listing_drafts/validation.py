"""Validation gate for staging candidate files.

Pure functions: nothing here mutates the staging list. Checks run in a fixed
order and the first failure wins:

1. capacity
2. duplicate within the session, by (filename, size)
3. in edit mode, filename already present in one of the entry's image URLs
4. MIME type
5. byte size
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Union

from listing_common import AttachmentRejected, Settings, get_settings
from listing_contracts import CatalogEntry, LocalFile

from listing_drafts.attachments import StagedAttachment


class RejectionReason(str, Enum):
    """Why a candidate file was not staged."""

    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    DUPLICATE_IN_SESSION = "DUPLICATE_IN_SESSION"
    DUPLICATE_EXISTING_NAME = "DUPLICATE_EXISTING_NAME"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    TOO_LARGE = "TOO_LARGE"


@dataclass(frozen=True)
class AttachmentLimits:
    """Per-entry attachment limits."""

    max_attachments: int = 5
    max_image_bytes: int = 2 * 1024 * 1024
    allowed_types: frozenset[str] = frozenset({"image/jpeg", "image/png"})

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AttachmentLimits":
        settings = settings or get_settings()
        return cls(
            max_attachments=settings.max_attachments,
            max_image_bytes=settings.max_image_bytes,
            allowed_types=frozenset(settings.entry_image_types),
        )

    def message(self, reason: RejectionReason) -> str:
        """Actor-facing text for a rejection."""
        if reason is RejectionReason.CAPACITY_EXCEEDED:
            return f"You can only upload up to {self.max_attachments} images per product."
        if reason is RejectionReason.DUPLICATE_IN_SESSION:
            return "This image has already been selected."
        if reason is RejectionReason.DUPLICATE_EXISTING_NAME:
            return "An image with the same name already exists for this product."
        if reason is RejectionReason.UNSUPPORTED_TYPE:
            kinds = ", ".join(sorted(t.split("/")[-1].upper() for t in self.allowed_types))
            return f"Only {kinds} files are allowed."
        megabytes = self.max_image_bytes / (1024 * 1024)
        return f"Image size must be under {megabytes:g}MB."


@dataclass(frozen=True)
class Ok:
    """The candidate may be staged."""

    file: LocalFile


@dataclass(frozen=True)
class Rejected:
    """The candidate was refused. Staging is unchanged."""

    file: LocalFile
    reason: RejectionReason
    message: str

    def error(self) -> AttachmentRejected:
        return AttachmentRejected(self.reason.value, self.message)


GateResult = Union[Ok, Rejected]


def _existing_name_clash(filename: str, edit_context: Optional[CatalogEntry]) -> bool:
    if edit_context is None:
        return False
    needle = filename.lower()
    return any(needle in url.lower() for url in edit_context.images)


def _check(
    candidate: LocalFile,
    count: int,
    session_keys: set[tuple[str, int]],
    edit_context: Optional[CatalogEntry],
    limits: AttachmentLimits,
) -> GateResult:
    if count + 1 > limits.max_attachments:
        reason = RejectionReason.CAPACITY_EXCEEDED
    elif (candidate.filename, candidate.size) in session_keys:
        reason = RejectionReason.DUPLICATE_IN_SESSION
    elif _existing_name_clash(candidate.filename, edit_context):
        reason = RejectionReason.DUPLICATE_EXISTING_NAME
    elif candidate.content_type not in limits.allowed_types:
        reason = RejectionReason.UNSUPPORTED_TYPE
    elif candidate.size > limits.max_image_bytes:
        reason = RejectionReason.TOO_LARGE
    else:
        return Ok(candidate)
    return Rejected(candidate, reason, limits.message(reason))


def _session_keys(staging: Iterable[StagedAttachment]) -> set[tuple[str, int]]:
    return {key for key in (a.session_key() for a in staging) if key is not None}


def validate(
    candidate: LocalFile,
    staging: Sequence[StagedAttachment],
    edit_context: Optional[CatalogEntry] = None,
    limits: Optional[AttachmentLimits] = None,
) -> GateResult:
    """Decide whether ``candidate`` may join ``staging``.

    Args:
        candidate: File the actor picked
        staging: Attachments currently staged
        edit_context: Entry being edited, or None in create mode
        limits: Attachment limits (defaults from settings)

    Returns:
        ``Ok`` or ``Rejected`` carrying the first failing reason
    """
    limits = limits or AttachmentLimits.from_settings()
    return _check(candidate, len(staging), _session_keys(staging), edit_context, limits)


def validate_batch(
    candidates: Sequence[LocalFile],
    staging: Sequence[StagedAttachment],
    edit_context: Optional[CatalogEntry] = None,
    limits: Optional[AttachmentLimits] = None,
) -> list[GateResult]:
    """Validate a multi-file selection.

    If the whole selection would overflow capacity every candidate is
    rejected. Otherwise candidates are checked in order, each one seeing the
    candidates accepted before it as already staged.
    """
    limits = limits or AttachmentLimits.from_settings()
    if len(staging) + len(candidates) > limits.max_attachments:
        reason = RejectionReason.CAPACITY_EXCEEDED
        return [Rejected(c, reason, limits.message(reason)) for c in candidates]

    count = len(staging)
    keys = _session_keys(staging)
    results: list[GateResult] = []
    for candidate in candidates:
        result = _check(candidate, count, keys, edit_context, limits)
        if isinstance(result, Ok):
            count += 1
            keys.add((candidate.filename, candidate.size))
        results.append(result)
    return results
