from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api.config import cors_allow_origins, import_scheduler_poll_seconds
from backend.app.api.routes.companies import router as companies_router
from backend.app.api.routes.config import router as config_router
from backend.app.api.routes.dashboard import router as dashboard_router
from backend.app.api.routes.imports import router as imports_router
from backend.app.api.routes.working_capital import router as working_capital_router
from backend.app.services.import_scheduler import InMemoryJobRegistry, InProcessScheduler


logger = logging.getLogger(__name__)

LOCAL_DEV_ORIGINS = ("http://localhost:5173", "http://127.0.0.1:5173")


def _cors_origins() -> list[str]:
    origins = cors_allow_origins()
    if not origins:
        raise RuntimeError("CORS_ALLOW_ORIGINS must not be empty.")
    if not any(origin in origins for origin in LOCAL_DEV_ORIGINS):
        logger.warning("CORS allowlist does not include local dev origins: %s", origins)
    return origins


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = app.state.import_scheduler
    poll_seconds = import_scheduler_poll_seconds()
    if poll_seconds > 0:
        scheduler.start(poll_seconds)
    try:
        yield
    finally:
        if poll_seconds > 0:
            scheduler.stop()


app = FastAPI(title="Working Capital API", version="0.1.0", lifespan=lifespan)

app.state.import_scheduler = InProcessScheduler()
app.state.import_job_registry = InMemoryJobRegistry()

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(config_router)
app.include_router(companies_router)
app.include_router(working_capital_router)
app.include_router(dashboard_router)
app.include_router(imports_router)
