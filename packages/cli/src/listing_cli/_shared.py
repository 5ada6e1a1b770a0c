"""Shared helpers for CLI commands.

Centralises actor resolution, image loading and result reporting so every
command maps a submission outcome to the same exit codes.
"""

from pathlib import Path
from typing import Optional, Sequence

import typer

from listing_common import DraftInvalid, get_settings
from listing_contracts import Actor, LocalFile
from listing_drafts import Rejected, SubmissionResult, SubmissionState

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PARTIAL = 2


def exit_code_for(state: SubmissionState) -> int:
    """Map a terminal submission state to a process exit code."""
    if state is SubmissionState.DONE:
        return EXIT_OK
    if state is SubmissionState.PARTIAL_SUCCESS:
        return EXIT_PARTIAL
    return EXIT_FAILED


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def resolve_actor(actor_id: Optional[str], role: Optional[str]) -> Optional[Actor]:
    """Actor from the command line, falling back to settings.

    Returns None when no actor id is known; the submission then ends in
    REJECTED without touching the services.
    """
    settings = get_settings()
    actor_id = actor_id or settings.actor_id
    if not actor_id:
        return None
    return Actor(id=actor_id, role=role or settings.actor_role)


def load_images(paths: Sequence[Path]) -> list[LocalFile]:
    """Read image files from disk.

    Exits with code 1 if a path is not a file.
    """
    files = []
    for path in paths:
        if not path.is_file():
            typer.echo(f"Error: image not found: {path}", err=True)
            raise typer.Exit(1)
        files.append(LocalFile.from_path(path))
    return files


def check_edit_indices(
    size: int,
    remove: Sequence[int],
    move_up: Optional[int],
    move_down: Optional[int],
) -> Optional[str]:
    """Check --remove and --move-* positions before anything is changed.

    Removals index the current image list; moves index the list left after
    the removals. Returns an error message, or None when every index is valid.
    """
    for index in sorted(set(remove)):
        if not 0 <= index < size:
            return f"No image at position {index} (listing has {size})"
    remaining = size - len(set(remove))
    for option, index in (("--move-up", move_up), ("--move-down", move_down)):
        if index is not None and not 0 <= index < remaining:
            return f"{option}: no image at position {index} (after removals: {remaining})"
    return None


def echo_rejections(results: Sequence) -> None:
    """Print every gate rejection of a staging attempt."""
    for result in results:
        if isinstance(result, Rejected):
            typer.echo(f"Skipped {result.file.filename}: {result.message}", err=True)


def report(result: SubmissionResult) -> None:
    """Print the outcome and exit with its code."""
    if result.state is SubmissionState.DONE:
        typer.echo(result.message)
        if result.entry is not None:
            typer.echo(f"  id:     {result.entry.id}")
            typer.echo(f"  images: {len(result.image_urls)}")
            for position, url in enumerate(result.image_urls, 1):
                typer.echo(f"    {position}. {url}")
        return

    if result.state is SubmissionState.PARTIAL_SUCCESS:
        typer.echo(f"Warning: {result.message}", err=True)
        typer.echo("Run 'listing-drafts edit' on this listing to attach the images.", err=True)
    else:
        typer.echo(f"Error: {result.message}", err=True)
        if isinstance(result.error, DraftInvalid):
            for field, message in result.error.field_errors.items():
                typer.echo(f"  {field}: {message}", err=True)

    if result.orphaned_asset_ids:
        typer.echo(
            f"  {len(result.orphaned_asset_ids)} uploaded image(s) left unlinked: "
            + ", ".join(result.orphaned_asset_ids),
            err=True,
        )
    raise typer.Exit(exit_code_for(result.state))
