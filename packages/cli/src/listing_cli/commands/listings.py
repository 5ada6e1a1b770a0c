"""Listing commands for listing-drafts.

Commands:
    create   Create a listing with images
    edit     Change a listing's fields and images
    delete   Delete a listing
"""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer

from listing_client import AssetClient, CatalogClient
from listing_common import ListingError
from listing_drafts import (
    DraftSession,
    EditReconciler,
    ReconcileState,
    SubmissionCoordinator,
    SubmissionResult,
)

from listing_cli._shared import (
    check_edit_indices,
    echo_rejections,
    load_images,
    report,
    resolve_actor,
)

ActorIdOption = typer.Option(None, "--actor-id", help="Acting user id (default: LISTING_ACTOR_ID)")
RoleOption = typer.Option(None, "--role", help="Acting user role (default: LISTING_ACTOR_ROLE)")


def create(
    name: str = typer.Option(..., "--name", help="Listing name"),
    description: str = typer.Option(..., "--description", help="Listing description"),
    price: float = typer.Option(..., "--price", help="Unit price (at least 1.00)"),
    quantity: int = typer.Option(..., "--quantity", help="Stock quantity (at least 1)"),
    category: str = typer.Option(..., "--category", help="Category id"),
    image: List[Path] = typer.Option(
        [], "--image", "-i", help="Image file, in display order (repeatable)"
    ),
    actor_id: Optional[str] = ActorIdOption,
    role: Optional[str] = RoleOption,
):
    """Create a listing and attach its images.

    The listing is created first, the images are uploaded concurrently and
    the listing is then linked to them. Exit code 2 means the listing exists
    but its images could not be attached.

    Examples:

        listing-drafts create --name Mug --description "Blue mug" \\
            --price 12.5 --quantity 3 --category kitchen -i front.png -i back.jpg
    """
    files = load_images(image)

    async def _create() -> SubmissionResult:
        async with CatalogClient() as catalog, AssetClient() as assets:
            session = DraftSession(actor=resolve_actor(actor_id, role), asset_client=assets)
            draft = session.draft
            draft.name = name
            draft.description = description
            draft.price = price
            draft.quantity = quantity
            draft.category_id = category
            echo_rejections(session.add_files(files))

            return await SubmissionCoordinator(catalog, assets).submit(session)

    try:
        result = asyncio.run(_create())
    except ListingError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    report(result)


def edit(
    entry_id: str = typer.Argument(..., help="Listing id"),
    name: Optional[str] = typer.Option(None, "--name", help="New name"),
    description: Optional[str] = typer.Option(None, "--description", help="New description"),
    price: Optional[float] = typer.Option(None, "--price", help="New price"),
    quantity: Optional[int] = typer.Option(None, "--quantity", help="New quantity"),
    category: Optional[str] = typer.Option(None, "--category", help="New category id"),
    add_image: List[Path] = typer.Option(
        [], "--add-image", "-i", help="Image file to append (repeatable)"
    ),
    remove: List[int] = typer.Option(
        [], "--remove", "-r", help="Position of an image to remove, 0-based (repeatable)"
    ),
    move_up: Optional[int] = typer.Option(None, "--move-up", help="Move the image at INDEX up"),
    move_down: Optional[int] = typer.Option(
        None, "--move-down", help="Move the image at INDEX down"
    ),
    actor_id: Optional[str] = ActorIdOption,
    role: Optional[str] = RoleOption,
):
    """Edit a listing's fields and images.

    Removals refer to the positions shown by the current listing and are
    applied first (removing a stored image deletes it from the media
    service), then the move, then new images are appended. Every position
    is checked before anything changes.

    Examples:

        listing-drafts edit p-42 --price 9.99

        listing-drafts edit p-42 --remove 1 --move-up 2 -i side.png
    """
    files = load_images(add_image)

    async def _edit() -> SubmissionResult:
        async with CatalogClient() as catalog, AssetClient() as assets:
            entry = await catalog.get(entry_id)
            session = await DraftSession.open_edit(
                entry, EditReconciler(assets), actor=resolve_actor(actor_id, role)
            )
            outcome = session.reconcile_outcome
            if ReconcileState.FETCH_FAILED in outcome.states:
                typer.echo(
                    f"Warning: could not load image records ({outcome.error}); "
                    "removed images will not be deleted from storage.",
                    err=True,
                )

            draft = session.draft
            if name is not None:
                draft.name = name
            if description is not None:
                draft.description = description
            if price is not None:
                draft.price = price
            if quantity is not None:
                draft.quantity = quantity
            if category is not None:
                draft.category_id = category

            problem = check_edit_indices(len(session.staging), remove, move_up, move_down)
            if problem is not None:
                typer.echo(f"Error: {problem}", err=True)
                raise typer.Exit(1)

            for index in sorted(set(remove), reverse=True):
                session.staging.remove(index)
            if move_up is not None:
                session.staging.move_up(move_up)
            if move_down is not None:
                session.staging.move_down(move_down)
            echo_rejections(session.add_files(files))

            try:
                return await SubmissionCoordinator(catalog, assets).submit(session)
            finally:
                await session.staging.join_background()

    try:
        result = asyncio.run(_edit())
    except ListingError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    report(result)


def delete(
    entry_id: str = typer.Argument(..., help="Listing id"),
    actor_id: Optional[str] = ActorIdOption,
    role: Optional[str] = RoleOption,
):
    """Delete a listing.

    Examples:

        listing-drafts delete p-42
    """
    actor = resolve_actor(actor_id, role)
    if actor is None:
        typer.echo("Error: User not logged in", err=True)
        raise typer.Exit(1)

    async def _delete() -> None:
        async with CatalogClient() as catalog:
            await catalog.delete(entry_id, actor)

    try:
        asyncio.run(_delete())
    except ListingError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Deleted listing {entry_id}")
