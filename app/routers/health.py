# app/routers/health.py
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException

from .. import db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/api/health/db")
def health_db():
    try:
        db.ping_db()
    except Exception as e:
        logger.error("Database health check failed: %r", e)
        raise HTTPException(status_code=503, detail="Database connection failed")
    return {
        "status": "OK",
        "database": "Connected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
