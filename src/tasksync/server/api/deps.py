"""FastAPI dependencies for API routes."""

from __future__ import annotations

from fastapi import Request

from tasksync.server.coordinator import SyncCoordinator
from tasksync.server.database import Database


def get_db(request: Request) -> Database:
    """Get database from app state."""
    db: Database = request.app.state.db
    return db


def get_coordinator(request: Request) -> SyncCoordinator:
    """Get sync coordinator from app state."""
    coordinator: SyncCoordinator = request.app.state.coordinator
    return coordinator
