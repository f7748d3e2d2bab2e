"""Administrative API endpoints."""
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..core.db import get_session

router = APIRouter()


@router.get("/health", summary="Readiness probe")
async def admin_health(session: Session = Depends(get_session)) -> dict[str, str]:
    """Administrative health endpoint that also pings the database."""
    session.execute(text("SELECT 1"))
    return {"status": "ok", "database": "ok"}


@router.get("/metrics", summary="Prometheus metrics feed")
async def admin_metrics() -> Response:
    """Expose Prometheus-formatted metrics for scraping."""

    payload = generate_latest()
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
