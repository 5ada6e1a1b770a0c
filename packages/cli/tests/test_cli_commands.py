"""Tests for CLI commands.

Commands are exercised with ``asyncio.run`` patched to return a canned
submission result, so these tests cover argument handling and how each
outcome is reported.
"""

from unittest.mock import patch

import pytest

from listing_cli._shared import (
    EXIT_FAILED,
    EXIT_OK,
    EXIT_PARTIAL,
    check_edit_indices,
    exit_code_for,
    resolve_actor,
)
from listing_cli.main import app
from listing_common import DraftInvalid, NetworkError, NotLoggedIn, PartialFailure, get_settings
from listing_contracts import CatalogEntry
from listing_drafts import DraftMode, SubmissionResult, SubmissionState

pytestmark = pytest.mark.unit

RUN = "listing_cli.commands.listings.asyncio.run"

CREATE_ARGS = [
    "create",
    "--name",
    "Mug",
    "--description",
    "Blue mug",
    "--price",
    "12.5",
    "--quantity",
    "3",
    "--category",
    "kitchen",
]


def entry(images=None) -> CatalogEntry:
    return CatalogEntry(
        id="p-1",
        owner_id="u1",
        name="Mug",
        description="Blue mug",
        price=12.5,
        quantity=3,
        category_id="kitchen",
        images=images or [],
    )


def result_for(state, mode=DraftMode.CREATE, **kwargs) -> SubmissionResult:
    result = SubmissionResult(mode=mode, **kwargs)
    result.advance(state)
    return result


# ============================================================================
# Exit codes and actor resolution
# ============================================================================


class TestShared:
    """Tests for the shared helpers."""

    @pytest.mark.parametrize(
        "state,code",
        [
            (SubmissionState.DONE, EXIT_OK),
            (SubmissionState.PARTIAL_SUCCESS, EXIT_PARTIAL),
            (SubmissionState.FAILED, EXIT_FAILED),
            (SubmissionState.REJECTED, EXIT_FAILED),
        ],
    )
    def test_exit_codes(self, state, code):
        assert exit_code_for(state) == code

    def test_actor_from_settings(self):
        actor = resolve_actor(None, None)

        assert actor.id == "u1"
        assert actor.role == "SELLER"

    def test_actor_from_options(self):
        actor = resolve_actor("u2", "ADMIN")

        assert (actor.id, actor.role) == ("u2", "ADMIN")

    def test_no_actor(self, monkeypatch):
        monkeypatch.delenv("LISTING_ACTOR_ID")
        get_settings.cache_clear()

        assert resolve_actor(None, None) is None

    @pytest.mark.parametrize(
        "remove,move_up,move_down",
        [([], None, None), ([0, 1], None, None), ([0], 2, None), ([2], None, 0)],
    )
    def test_edit_indices_valid(self, remove, move_up, move_down):
        assert check_edit_indices(4, remove, move_up, move_down) is None

    @pytest.mark.parametrize(
        "remove,move_up,move_down,fragment",
        [
            ([4], None, None, "position 4"),
            ([-1], None, None, "position -1"),
            ([0], 9, None, "--move-up"),
            ([0, 1], None, 2, "--move-down"),
        ],
    )
    def test_edit_indices_invalid(self, remove, move_up, move_down, fragment):
        assert fragment in check_edit_indices(4, remove, move_up, move_down)


# ============================================================================
# create
# ============================================================================


class TestCreateCommand:
    """Tests for the create command."""

    def test_done(self, cli_runner, image_files):
        done = result_for(
            SubmissionState.DONE,
            entry=entry(["u/front.png", "u/back.png"]),
            image_urls=["u/front.png", "u/back.png"],
        )
        with patch(RUN, return_value=done):
            result = cli_runner.invoke(
                app, CREATE_ARGS + ["-i", str(image_files[0]), "-i", str(image_files[1])]
            )

        assert result.exit_code == 0
        assert "Product created successfully" in result.output
        assert "1. u/front.png" in result.output
        assert "2. u/back.png" in result.output

    def test_partial_success_exit_code(self, cli_runner, image_files):
        partial = result_for(
            SubmissionState.PARTIAL_SUCCESS,
            entry=entry(),
            error=PartialFailure("p-1", NetworkError("timeout", endpoint="/media/images")),
            orphaned_asset_ids=["a-1"],
        )
        with patch(RUN, return_value=partial):
            result = cli_runner.invoke(app, CREATE_ARGS + ["-i", str(image_files[0])])

        assert result.exit_code == 2
        assert "was saved" in result.output
        assert "a-1" in result.output

    def test_failed_exit_code(self, cli_runner, image_files):
        failed = result_for(
            SubmissionState.FAILED,
            error=NetworkError("bad request", status_code=400, endpoint="/products"),
        )
        with patch(RUN, return_value=failed):
            result = cli_runner.invoke(app, CREATE_ARGS + ["-i", str(image_files[0])])

        assert result.exit_code == 1
        assert "nothing was changed" in result.output

    def test_rejected_lists_field_errors(self, cli_runner, image_files):
        rejected = result_for(
            SubmissionState.REJECTED,
            error=DraftInvalid("Please fix the highlighted fields.", {"price": "Price must be at least 1.00."}),
        )
        with patch(RUN, return_value=rejected):
            result = cli_runner.invoke(app, CREATE_ARGS + ["-i", str(image_files[0])])

        assert result.exit_code == 1
        assert "price: Price must be at least 1.00." in result.output

    def test_not_logged_in(self, cli_runner, image_files):
        rejected = result_for(SubmissionState.REJECTED, error=NotLoggedIn())
        with patch(RUN, return_value=rejected):
            result = cli_runner.invoke(app, CREATE_ARGS + ["-i", str(image_files[0])])

        assert result.exit_code == 1
        assert "User not logged in" in result.output

    def test_missing_image_file(self, cli_runner, tmp_path):
        with patch(RUN) as mock_run:
            result = cli_runner.invoke(app, CREATE_ARGS + ["-i", str(tmp_path / "nope.png")])

        assert result.exit_code == 1
        assert "image not found" in result.output
        mock_run.assert_not_called()

    def test_service_error(self, cli_runner, image_files):
        with patch(RUN, side_effect=NetworkError("connection refused", endpoint="/products")):
            result = cli_runner.invoke(app, CREATE_ARGS + ["-i", str(image_files[0])])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_missing_required_option(self, cli_runner):
        result = cli_runner.invoke(app, ["create", "--name", "Mug"])

        assert result.exit_code != 0


# ============================================================================
# edit / delete
# ============================================================================


class TestEditCommand:
    """Tests for the edit command."""

    def test_done(self, cli_runner):
        done = result_for(
            SubmissionState.DONE,
            mode=DraftMode.EDIT,
            entry=entry(["u/a.png"]),
            image_urls=["u/a.png"],
        )
        with patch(RUN, return_value=done):
            result = cli_runner.invoke(app, ["edit", "p-1", "--price", "9.99"])

        assert result.exit_code == 0
        assert "Product updated successfully" in result.output

    def test_failed(self, cli_runner):
        failed = result_for(
            SubmissionState.FAILED,
            mode=DraftMode.EDIT,
            error=NetworkError("forbidden", status_code=403, endpoint="/products/p-1"),
        )
        with patch(RUN, return_value=failed):
            result = cli_runner.invoke(app, ["edit", "p-1", "--remove", "0"])

        assert result.exit_code == 1
        assert "HTTP 403" in result.output

    def test_unknown_entry(self, cli_runner):
        with patch(RUN, side_effect=NetworkError("Product not found", status_code=404, endpoint="/products/p-9")):
            result = cli_runner.invoke(app, ["edit", "p-9"])

        assert result.exit_code == 1
        assert "Product not found" in result.output


class TestDeleteCommand:
    """Tests for the delete command."""

    def test_delete(self, cli_runner):
        with patch(RUN, return_value=None):
            result = cli_runner.invoke(app, ["delete", "p-1"])

        assert result.exit_code == 0
        assert "Deleted listing p-1" in result.output

    def test_delete_requires_actor(self, cli_runner, monkeypatch):
        monkeypatch.delenv("LISTING_ACTOR_ID")
        get_settings.cache_clear()

        with patch(RUN) as mock_run:
            result = cli_runner.invoke(app, ["delete", "p-1"])

        assert result.exit_code == 1
        assert "not logged in" in result.output
        mock_run.assert_not_called()

    def test_delete_error(self, cli_runner):
        with patch(RUN, side_effect=NetworkError("forbidden", status_code=403, endpoint="/products/p-1")):
            result = cli_runner.invoke(app, ["delete", "p-1"])

        assert result.exit_code == 1


class TestLoggingOptions:
    def test_log_level_option(self, cli_runner):
        """Root options configure logging before the command runs."""
        with patch(RUN, return_value=None):
            result = cli_runner.invoke(app, ["--log-level", "debug", "delete", "p-1"])

        assert result.exit_code == 0
