from fastapi import APIRouter, Depends, HTTPException

from backend.config import (
    ALLOW_CLIENT_TIMESTAMPS,
    DB_PATH,
    DURATION_INCLUDE_SECONDS,
    ENABLE_DEBUG_ENDPOINTS,
    REJECT_DUPLICATE_PUNCHES,
    TIMEZONE,
)
from backend.security import require_session

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/debug/dbpath")
def dbpath(_session: dict = Depends(require_session)):
    if not ENABLE_DEBUG_ENDPOINTS:
        raise HTTPException(status_code=404, detail="Not found.")
    return {"db_path": str(DB_PATH)}


@router.get("/config/clock")
def clock_config():
    return {
        "timezone": TIMEZONE,
        "allow_client_timestamps": ALLOW_CLIENT_TIMESTAMPS,
        "reject_duplicate_punches": REJECT_DUPLICATE_PUNCHES,
        "duration_include_seconds": DURATION_INCLUDE_SECONDS,
    }
