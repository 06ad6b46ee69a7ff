"""
Top-level API router mounted under ``API_V1_STR``.
"""

from fastapi import APIRouter

from dpms.config.settings import get_settings
from dpms.domains.prescriptions.api import router as prescriptions_router

api_router = APIRouter()
api_router.include_router(prescriptions_router)


@api_router.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Liveness check."""
    settings = get_settings()
    return {"status": "ok", "environment": settings.ENVIRONMENT, "version": settings.VERSION}
