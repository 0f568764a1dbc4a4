from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory.config import Settings, get_settings
from inventory.database import get_db

router = APIRouter(tags=["Health"])


@router.get(
    "",
    summary="Service info",
    description="Static service name and version."
)
def service_info(settings: Settings = Depends(get_settings)):
    """Basic liveness endpoint."""
    return {"ok": True, "service": settings.SERVICE_NAME, "version": settings.VERSION}


@router.get(
    "/ping",
    summary="Readiness check",
    description="Check that the database answers. Responds 500 when it doesn't."
)
def ping(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Readiness check for the database.

    Returns:
    - ok: overall status
    - db: "up" or "down"
    """
    now = datetime.now(timezone.utc).isoformat()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "ok": False,
                "service": settings.SERVICE_NAME,
                "time": now,
                "db": "down",
                "error": str(e),
            },
        )

    return {"ok": True, "service": settings.SERVICE_NAME, "time": now, "db": "up"}
