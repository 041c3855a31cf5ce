"""API v1 routes."""

from fastapi import APIRouter

from accounts_api.api.v1 import health, users
from accounts_api.core.config import settings

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(users.router, prefix=settings.USERS_PREFIX, tags=["users"])
