"""Listing Common - errors, logging and settings shared by all packages."""

from listing_common.config import Settings, get_settings
from listing_common.errors import (
    AttachmentRejected,
    DraftInvalid,
    DraftValidationError,
    ListingError,
    NetworkError,
    NotLoggedIn,
    PartialFailure,
    SubmissionInProgress,
)
from listing_common.logging_config import configure_logging, get_logger

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Logging
    "configure_logging",
    "get_logger",
    # Errors
    "ListingError",
    "DraftValidationError",
    "DraftInvalid",
    "AttachmentRejected",
    "NotLoggedIn",
    "SubmissionInProgress",
    "NetworkError",
    "PartialFailure",
]
