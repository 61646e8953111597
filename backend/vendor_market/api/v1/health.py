import logging

import redis
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from vendor_market.core.config import settings
from vendor_market.db import engine

logger = logging.getLogger(__name__)

router = APIRouter()


def _broker_status() -> str:
    """Queued email falls back to inline sending, so a down broker is reported but not fatal."""
    if not settings.EMAIL_USE_CELERY:
        return "disabled"
    try:
        client = redis.Redis.from_url(settings.CELERY_BROKER_URL, socket_connect_timeout=2)
        client.ping()
        return "connected"
    except RedisError as e:
        logger.warning(f"Celery broker unreachable: {e}")
        return "disconnected"


@router.get("/", summary="Health check")
def read_health() -> dict[str, str]:
    """Return basic service health information."""
    return {"status": "ok"}


@router.get("/ready", summary="Readiness check")
def read_ready():
    """Check the database connection for readiness."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "database": "disconnected",
                "error": str(e) if not settings.is_production else "Database connection failed",
            },
        )
    return {"status": "ready", "database": "connected", "broker": _broker_status()}
