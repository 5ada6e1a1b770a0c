"""Prometheus metrics for draft staging and submission.

1. Submission Metrics
   - Submissions by mode and terminal state
   - Submission duration by mode

2. Asset Metrics
   - Uploads by status
   - Orphaned assets (uploaded but never linked)
   - Detached deletes by status

3. Staging Metrics
   - Rejected staging attempts by reason
"""

from prometheus_client import Counter, Histogram

# ==============================================================================
# Submission Metrics
# ==============================================================================

SUBMISSIONS_TOTAL = Counter(
    "listing_submissions_total",
    "Draft submissions by mode and terminal state",
    ["mode", "state"],
)

SUBMISSION_DURATION = Histogram(
    "listing_submission_duration_seconds",
    "Time from submit to terminal state",
    ["mode"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# ==============================================================================
# Asset Metrics
# ==============================================================================

ASSET_UPLOADS_TOTAL = Counter(
    "listing_asset_uploads_total",
    "Asset uploads issued during submissions",
    ["status"],
)

ORPHANED_ASSETS_TOTAL = Counter(
    "listing_orphaned_assets_total",
    "Assets uploaded but left unlinked after a failed submission",
)

ASSET_DELETES_TOTAL = Counter(
    "listing_asset_deletes_total",
    "Detached asset deletes issued when removing persisted images",
    ["status"],
)

# ==============================================================================
# Staging Metrics
# ==============================================================================

STAGING_REJECTIONS_TOTAL = Counter(
    "listing_staging_rejections_total",
    "Candidate files refused by the validation gate",
    ["reason"],
)
