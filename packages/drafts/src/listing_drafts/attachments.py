"""Staged attachment descriptors.

A descriptor is either NEW (a local file waiting to be uploaded) or
PERSISTED (an image URL already stored on the entry).
"""

from __future__ import annotations

import asyncio
import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from listing_contracts import LocalFile


class AttachmentOrigin(str, Enum):
    """Where a staged attachment comes from."""

    NEW = "NEW"
    PERSISTED = "PERSISTED"


def to_data_url(file: LocalFile) -> str:
    """Encode a file as a ``data:`` URL for previewing."""
    encoded = base64.b64encode(file.content).decode("ascii")
    return f"data:{file.content_type};base64,{encoded}"


@dataclass(eq=False)
class StagedAttachment:
    """One slot of the staging list.

    ``local`` is set iff the attachment is NEW. ``remote_url`` is set for
    PERSISTED attachments and, for NEW ones, once their upload completed.
    ``remote_asset_id`` is None for a persisted URL that could not be matched
    to an asset record.
    """

    origin: AttachmentOrigin
    ordinal: int = 0
    local: Optional[LocalFile] = None
    remote_url: Optional[str] = None
    remote_asset_id: Optional[str] = None
    preview: Optional[str] = field(default=None, repr=False)
    _decoding: Optional[asyncio.Future] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.origin is AttachmentOrigin.NEW and self.local is None:
            raise ValueError("NEW attachment requires local content")
        if self.origin is AttachmentOrigin.PERSISTED:
            if self.local is not None:
                raise ValueError("PERSISTED attachment cannot carry local content")
            if not self.remote_url:
                raise ValueError("PERSISTED attachment requires a remote URL")
            if self.preview is None:
                self.preview = self.remote_url

    @classmethod
    def new(cls, file: LocalFile) -> "StagedAttachment":
        return cls(origin=AttachmentOrigin.NEW, local=file)

    @classmethod
    def persisted(cls, url: str, asset_id: Optional[str] = None) -> "StagedAttachment":
        return cls(origin=AttachmentOrigin.PERSISTED, remote_url=url, remote_asset_id=asset_id)

    @property
    def is_new(self) -> bool:
        return self.origin is AttachmentOrigin.NEW

    @property
    def is_persisted(self) -> bool:
        return self.origin is AttachmentOrigin.PERSISTED

    @property
    def is_resolved(self) -> bool:
        return self.remote_asset_id is not None

    @property
    def is_ready(self) -> bool:
        """True once the preview has been decoded."""
        return self.preview is not None

    @property
    def label(self) -> str:
        if self.local is not None:
            return self.local.filename
        return self.remote_url or ""

    def session_key(self) -> Optional[tuple[str, int]]:
        """(filename, size) identity used for in-session duplicate detection."""
        if self.local is None:
            return None
        return self.local.filename, self.local.size

    def decode_preview(self) -> None:
        """Decode the preview synchronously."""
        if self.local is not None and self.preview is None:
            self.preview = to_data_url(self.local)

    def start_decoding(self, loop: asyncio.AbstractEventLoop) -> None:
        """Schedule preview decoding on the default executor."""
        if self.local is None or self.preview is not None or self._decoding is not None:
            return
        self._decoding = loop.run_in_executor(None, to_data_url, self.local)

    def cancel_decoding(self) -> None:
        """Cancel a preview decode that has not finished yet."""
        if self._decoding is not None:
            if not self._decoding.done():
                self._decoding.cancel()
            self._decoding = None

    async def wait_ready(self) -> None:
        """Wait for a pending preview decode to finish."""
        if self._decoding is not None:
            self.preview = await self._decoding
            self._decoding = None
        elif self.preview is None:
            self.decode_preview()
