"""FastAPI application for the TaskSync server.

This module creates and configures the FastAPI application with:
- Push/pull sync API
- Health check

Usage:
    uvicorn tasksync.server.app:app_factory --factory --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from tasksync import __version__
from tasksync.core.config import ServerSettings
from tasksync.core.timestamps import now_ms
from tasksync.server.api.router import router as api_router
from tasksync.server.coordinator import SyncCoordinator
from tasksync.server.database import Database

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(log_path: Path | None, level: str = "INFO") -> None:
    """Configure logging to output to stdout and, optionally, a file.

    Safe to call more than once: handlers installed by a previous call are
    replaced.

    Args:
        log_path: Path to the log file, or None for stdout only.
        level: Logging level name for the tasksync logger.
    """
    formatter = logging.Formatter(LOG_FORMAT)

    # Root logger for tasksync
    root_logger = logging.getLogger("tasksync")
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    # Stdout handler
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)

    if log_path is None:
        return

    # File handler
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # Also capture uvicorn logs to file
    for uvicorn_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(uvicorn_name).addHandler(file_handler)


def create_app(db: Database, clock: Callable[[], int] = now_ms) -> FastAPI:
    """Create FastAPI application with a custom database.

    This is primarily used for testing with isolated databases.

    Args:
        db: Database instance.
        clock: Source of server timestamps (epoch ms).

    Returns:
        Configured FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler for startup/shutdown."""
        logger.info("=" * 60)
        logger.info("TaskSync Server Starting")
        logger.info("=" * 60)
        logger.info("  Database: %s", db.path)
        logger.info("  Tasks:    %d", db.count_tasks())
        logger.info("=" * 60)

        yield

        logger.info("TaskSync Server shutting down")

    application = FastAPI(
        title="TaskSync Server",
        description="Offline-first push/pull synchronization for tasks",
        version=__version__,
        lifespan=lifespan,
    )

    application.state.db = db
    application.state.coordinator = SyncCoordinator(db, clock=clock)

    application.include_router(api_router)

    return application


def app_factory() -> FastAPI:
    """Factory function for uvicorn --factory mode.

    Reads ServerSettings from the environment.
    """
    settings = ServerSettings.from_env()
    setup_logging(settings.log_path, settings.log_level)
    return create_app(db=Database(settings.db_path))
