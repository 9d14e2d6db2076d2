"""Push/pull API routes for offline-first clients.

Clients keep a local replica and reconcile it in two calls:
1. POST /api/sync/push with their local changes
2. POST /api/sync/pull with the timestamp of their previous pull
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from tasksync.server.api.deps import get_coordinator
from tasksync.server.coordinator import SyncCoordinator
from tasksync.server.errors import InvalidMigrationError, PullError, PushError
from tasksync.server.schemas import (
    PullRequest,
    PullResponse,
    PushRequest,
    changes_from_payload,
    changes_to_payload,
)

router = APIRouter(prefix="/api/sync", tags=["sync"])


@router.post("/push", status_code=status.HTTP_204_NO_CONTENT)
def push_changes(
    request: PushRequest,
    coordinator: SyncCoordinator = Depends(get_coordinator),
) -> Response:
    """Apply the client's local changes.

    The whole push is applied in one transaction. Retrying a push that
    already succeeded is safe: known ids sent as created are updated instead.
    """
    try:
        coordinator.push(changes_from_payload(request.changes), request.last_pulled_at)
    except PushError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/pull", response_model=PullResponse)
def pull_changes(
    request: PullRequest,
    coordinator: SyncCoordinator = Depends(get_coordinator),
) -> PullResponse:
    """Get changes since the client's last pull.

    The returned timestamp is the lastPulledAt to send on the next pull.
    Deleted ids are never reported.
    """
    try:
        result = coordinator.pull(
            request.last_pulled_at,
            request.schema_version,
            request.migration,
        )
    except InvalidMigrationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e
    except PullError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e

    return PullResponse(
        changes=changes_to_payload(result.changes),
        timestamp=result.timestamp,
    )
