"""Pytest fixtures for CLI tests."""

import pytest
from typer.testing import CliRunner

from listing_common import get_settings


@pytest.fixture
def cli_runner():
    """Typer test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def actor_env(monkeypatch):
    """Run every command with a known actor and fresh settings."""
    monkeypatch.setenv("LISTING_ACTOR_ID", "u1")
    monkeypatch.setenv("LISTING_ACTOR_ROLE", "SELLER")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def image_files(tmp_path):
    """Two small PNG files on disk."""
    paths = []
    for name in ("front.png", "back.png"):
        path = tmp_path / name
        path.write_bytes(b"\x89PNG\r\n\x1a\n" + name.encode())
        paths.append(path)
    return paths
