"""Health check endpoint with database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from accounts_api.core.config import Settings, get_settings
from accounts_api.core.database import check_db_connected, get_db
from accounts_api.schemas.common import ApiResponse
from accounts_api.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=ApiResponse[HealthResponse])
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ApiResponse[HealthResponse]:
    """
    Return service health, database connectivity and whether uploads can reach the media host.
    Used by load balancers and monitoring.
    """
    return ApiResponse[HealthResponse](
        data=HealthResponse(
            environment=settings.APP_ENV,
            database="connected" if check_db_connected(db) else "disconnected",
            media_configured=settings.media_configured(),
        ),
        message="Service healthy",
    )
