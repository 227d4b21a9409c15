"""Health check endpoint."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db, ping

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Service health check, including a database round-trip."""
    body = {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    try:
        ping(db)
    except SQLAlchemyError as e:
        logger.warning(f"Database ping failed: {e}")
        body.update(status="unhealthy", database="unreachable")
        return JSONResponse(status_code=503, content=body)
    return body
