import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlmodel.ext.asyncio.session import AsyncSession

from src.depends import get_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health(session: AsyncSession = Depends(get_session)):
    """Liveness plus a round trip to the database"""
    try:
        await session.exec(text("SELECT 1"))
    except (OperationalError, InterfaceError) as exc:
        logger.error(f"Health check failed: {type(exc).__name__}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "database": "disconnected"},
        )

    return {"status": "ok", "database": "connected"}
