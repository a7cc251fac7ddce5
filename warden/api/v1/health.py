"""Health check endpoint with database connectivity check."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from warden import __version__
from warden.core.config import settings
from warden.core.database import check_db_connected, get_db
from warden.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """Report service status, version and whether the database answers."""
    return HealthResponse(
        environment=settings.APP_ENV,
        version=__version__,
        database="connected" if check_db_connected(db) else "disconnected",
    )
