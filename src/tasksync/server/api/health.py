"""Health check API route."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tasksync.server.api.deps import get_db
from tasksync.server.database import Database
from tasksync.server.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(db: Database = Depends(get_db)) -> HealthResponse:
    """Report that the server is up and its store is readable."""
    return HealthResponse(status="ok", tasks=db.count_tasks())
