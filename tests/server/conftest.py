"""Shared fixtures for server tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from tasksync.server.database import Database
from tests.server.fixtures import FakeClock


@pytest.fixture
def db(tmp_path: Path) -> Generator[Database, None, None]:
    """Create a test database."""
    database = Database(tmp_path / "test.db")
    yield database
    database.close()


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at T0."""
    return FakeClock()
