import logging

from fastapi import APIRouter, HTTPException, status, Request
from sqlalchemy import text

from dependencies import DbSession
from utils.limiter import limiter

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/health",
    tags=["health"]
)


@router.get("/live", status_code=status.HTTP_200_OK)
@limiter.exempt
async def health_live(request: Request):
    return {"status": "ok"}


@router.get("/ready", status_code=status.HTTP_200_OK)
@limiter.exempt
def health_ready(request: Request, db: DbSession):
    """
    Readiness: attempts cannot be loaded or saved without the database.
    """
    try:
        db.execute(text("SELECT 1")).scalar()
    except Exception as e:
        # Solo log interno, no exponer detalles al usuario
        logger.error(f"Readiness check failed, database unreachable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "fail", "db": "down"}
        )
    return {"status": "ok", "db": "up"}
