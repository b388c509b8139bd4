from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import fit360.models  # noqa: F401  registers tables on Base.metadata
from fit360.core.config import settings
from fit360.core.db import Base, engine
from fit360.core.errors import register_error_handlers
from fit360.core.logging import setup_logging
from fit360.api.v1.health import router as health_router
from fit360.api.v1.auth import router as auth_router
from fit360.api.v1.oura_sync import router as oura_sync_router
from fit360.api.v1.password import router as password_router
from fit360.api.v1.metrics import router as metrics_router
from fit360.api.v1.dashboard import router as dashboard_router
from fit360.api.v1.macros import router as macros_router
from fit360.api.v1.photos import router as photos_router
from fit360.api.v1.profile import router as profile_router

setup_logging()

app = FastAPI(title="Fit360", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

register_error_handlers(app)

if engine:
    Base.metadata.create_all(bind=engine)

app.include_router(health_router, prefix="/v1")
app.include_router(auth_router, prefix="/v1")
app.include_router(oura_sync_router, prefix="/v1")
app.include_router(password_router, prefix="/v1")
app.include_router(metrics_router, prefix="/v1")
app.include_router(dashboard_router, prefix="/v1")
app.include_router(macros_router, prefix="/v1")
app.include_router(photos_router, prefix="/v1")
app.include_router(profile_router, prefix="/v1")
