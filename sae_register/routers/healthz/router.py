import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sae_register.config.database import async_session_manager

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str
    database: str
    version: str = "0.1.0"


async def check_database() -> bool:
    try:
        async with async_session_manager(auto_commit=False) as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.warning("Database check failed", exc_info=True)
        return False
    return True


def get_database_check():
    return check_database


@router.get("/", response_model=HealthCheckResponse)
async def health_check(check=Depends(get_database_check)) -> HealthCheckResponse:
    """
    Health check endpoint. The API is up even when the database is not.
    """
    database_ok = await check()
    return HealthCheckResponse(
        status="healthy" if database_ok else "degraded",
        database="ok" if database_ok else "unreachable",
    )
