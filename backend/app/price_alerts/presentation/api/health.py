"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel

router = APIRouter()


class CycleSummary(BaseModel):
    """Outcome of the most recent alert cycle."""

    started_at: datetime
    finished_at: Optional[datetime]
    rules_checked: int
    assets: int
    fired: int
    skipped: bool
    error: Optional[str]


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: datetime
    version: str
    scheduler_state: Optional[str] = None
    cycles_completed: int = 0
    subscribers: int = 0
    last_cycle: Optional[CycleSummary] = None


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Check application health status.

    Reports the alert scheduler's state, the number of completed cycles and
    connected subscribers, and the outcome of the last cycle.
    """
    scheduler = getattr(request.app.state, "scheduler", None)
    broadcaster = getattr(request.app.state, "broadcaster", None)

    response = HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version="0.1.0",
    )
    if broadcaster is not None:
        response.subscribers = broadcaster.subscriber_count
    if scheduler is not None:
        response.scheduler_state = scheduler.state.value
        response.cycles_completed = scheduler.cycles_completed
        result = scheduler.last_result
        if result is not None:
            response.last_cycle = CycleSummary(
                started_at=result.started_at,
                finished_at=result.finished_at,
                rules_checked=result.rules_checked,
                assets=len(result.asset_ids),
                fired=result.fired,
                skipped=result.skipped,
                error=result.error,
            )
    return response


@router.get("/ready")
async def readiness_check(request: Request) -> dict[str, str]:
    """Check if the alert scheduler is running.

    Raises:
        HTTPException: 503 while the scheduler has not been started.
    """
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None or not scheduler.is_running:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Alert scheduler is not running",
        )
    return {"status": "ready"}
