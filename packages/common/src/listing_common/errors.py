"""Custom error types for the listing-drafts system.

All errors follow the "fail fast" principle with explicit messages.
"""

from __future__ import annotations

from typing import Optional


class ListingError(Exception):
    """Base exception for all listing-drafts errors."""

    pass


class DraftValidationError(ListingError):
    """Local, non-fatal validation failure.

    Raised (or reported) when a draft or a staging attempt is invalid.
    Nothing remote has been touched.
    """

    pass


class DraftInvalid(DraftValidationError):
    """Draft fields or attachment count do not allow submission."""

    def __init__(self, message: str, field_errors: Optional[dict[str, str]] = None):
        self.field_errors = dict(field_errors or {})
        super().__init__(message)


class AttachmentRejected(DraftValidationError):
    """A candidate file was refused by the validation gate or the asset client."""

    def __init__(self, reason: str, message: str):
        self.reason = reason
        super().__init__(message)


class NotLoggedIn(ListingError):
    """No authenticated actor is present."""

    def __init__(self, message: str = "User not logged in"):
        super().__init__(message)


class SubmissionInProgress(ListingError):
    """A submission for the same draft is already running."""

    def __init__(self, message: str = "A submission for this draft is already in progress"):
        super().__init__(message)


class NetworkError(ListingError):
    """A remote call failed (transport error or non-2xx response).

    Attributes:
        status_code: HTTP status, or None when no response was received
        message: Error detail from the service or transport
        endpoint: Request path that failed
    """

    def __init__(self, message: str, status_code: Optional[int] = None, endpoint: str = ""):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        if status_code is not None:
            text = f"HTTP {status_code} from {endpoint or '<unknown>'}: {message}"
        else:
            text = f"Request to {endpoint or '<unknown>'} failed: {message}"
        super().__init__(text)


class PartialFailure(ListingError):
    """The entry was written remotely but its image list could not be linked.

    Remote state has changed: the entry exists with an empty or incomplete
    image list. This is not the same as a total failure.
    """

    def __init__(self, entry_id: str, cause: Optional[BaseException] = None):
        self.entry_id = entry_id
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(
            f"Listing {entry_id} was saved, but its images could not be attached{detail}"
        )
