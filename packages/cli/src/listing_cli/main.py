"""Listing drafts CLI - Main entry point.

Provides the ``listing-drafts`` command-line interface for composing and
submitting catalog listings with ordered images.

Usage:
    listing-drafts create --name Mug --description "Blue mug" --price 12.5 \
        --quantity 3 --category kitchen -i front.png
    listing-drafts edit p-42 --remove 0 -i side.png
    listing-drafts delete p-42
"""

from typing import Optional

import typer

from listing_common import configure_logging, get_settings
from listing_cli.commands import listings

# ---------------------------------------------------------------------------
# Root Typer app
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="listing-drafts",
    help="Compose catalog listings with ordered images and submit them.",
    add_completion=False,
)

app.command(name="create")(listings.create)
app.command(name="edit")(listings.edit)
app.command(name="delete")(listings.delete)


@app.callback()
def setup(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="console or json"),
):
    """Configure logging before any command runs."""
    settings = get_settings()
    configure_logging(
        level=(log_level or settings.log_level).upper(),
        fmt=(log_format or settings.log_format).lower(),
    )


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
