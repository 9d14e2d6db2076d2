"""Core module - Change set model, timestamps, and configuration."""

from tasksync.core.changes import TASKS, UNSET, ChangeSet, TableChanges, TaskRecord
from tasksync.core.config import ServerSettings
from tasksync.core.timestamps import FULL_SYNC_WATERMARK, normalize_watermark, now_ms

__all__ = [
    # Changes
    "TASKS",
    "UNSET",
    "ChangeSet",
    "TableChanges",
    "TaskRecord",
    # Config
    "ServerSettings",
    # Timestamps
    "FULL_SYNC_WATERMARK",
    "normalize_watermark",
    "now_ms",
]
