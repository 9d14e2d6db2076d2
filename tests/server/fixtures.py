"""Common helpers for server tests."""

from __future__ import annotations

from tasksync.core.changes import TaskRecord

# Arbitrary but realistic epoch-ms start time
T0 = 1_700_000_000_000


class FakeClock:
    """Controllable epoch-ms clock."""

    def __init__(self, start: int = T0) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1_000) -> int:
        self.now += ms
        return self.now


def make_record(task_id: str = "task-1", **overrides) -> TaskRecord:
    """Build a TaskRecord with sensible defaults."""
    fields = {
        "id": task_id,
        "name": f"Task {task_id}",
        "icon": "star",
        "is_done": False,
        "client_created_at": 1_000,
        "client_updated_at": 1_000,
    }
    fields.update(overrides)
    return TaskRecord(**fields)
