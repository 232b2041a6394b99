"""Health check endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from api.v1.dependencies import get_message_feed
from core.config import settings
from infrastructure.database.session import get_async_session
from infrastructure.realtime.message_feed import MessageFeed, PostgresMessageFeed

router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    database: str | None = None
    realtime: str | None = None


def _realtime_status(feed: MessageFeed) -> str:
    if not isinstance(feed, PostgresMessageFeed):
        return "disabled"
    return "listening" if feed.running else "stopped"


@router.get("/health", response_model=HealthResponse, summary="Basic health check")
async def health_check() -> HealthResponse:
    """
    Basic health check for load balancers.

    Returns service status without checking dependencies.
    """
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        timestamp=datetime.utcnow().isoformat(),
        environment=settings.app_env,
    )


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Detailed health check",
)
async def detailed_health_check(
    db: AsyncSession = Depends(get_async_session),
    feed: MessageFeed = Depends(get_message_feed),
) -> HealthResponse:
    """
    Database connectivity plus the state of the live message feed.

    A stopped feed degrades the status: chat still loads history, but open
    rooms stop receiving new messages.
    """
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"

    realtime = _realtime_status(feed)
    healthy = db_status == "healthy" and realtime != "stopped"

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=API_VERSION,
        timestamp=datetime.utcnow().isoformat(),
        environment=settings.app_env,
        database=db_status,
        realtime=realtime,
    )
