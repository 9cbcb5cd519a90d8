"""Health check endpoints."""

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1.dependencies import SessionDep

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health", operation_id="healthCheck")
async def health_check(session: SessionDep) -> JSONResponse:
    """Health check endpoint; reports 503 when the database is unreachable."""
    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error("Health check failed", error=str(e))
        return JSONResponse(status_code=503, content={"status": "unhealthy", "database": "unreachable"})
    return JSONResponse(content={"status": "healthy", "database": "ok"})
