from fastapi import APIRouter

from fit360.core.config import settings
from fit360.core.db import engine

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {
        "status": "ok",
        "environment": settings.ENVIRONMENT,
        "db": engine is not None,
        "oura_configured": bool(settings.OURA_PERSONAL_ACCESS_TOKEN),
    }
