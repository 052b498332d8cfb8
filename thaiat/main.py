"""Thai At API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ThaiAtError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Local database and config store initialized on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Local SQLite store creates its tables on startup; server databases are
      migrated with Alembic instead
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from thaiat.api.error_handlers import register_error_handlers
from thaiat.api.routes import app_config, calendar, health, readings
from thaiat.config import get_settings
from thaiat.infrastructure.database import init_db
from thaiat.infrastructure.observability import setup_logging
from thaiat.services.config_store import close_config_store, init_config_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(settings.database_url)
    if settings.database_url.startswith("sqlite"):
        await manager.create_tables()
    init_config_store(
        manager,
        default_url=settings.config_store_url,
        timeout_seconds=settings.config_store_timeout_seconds,
    )
    logger.info("Thai At API started")
    yield
    await close_config_store()
    await manager.dispose()
    logger.info("Thai At API shutting down")


app = FastAPI(
    title="Thai At Than Kinh API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(calendar.router)
app.include_router(readings.router)
app.include_router(app_config.router)

register_error_handlers(app)

# Static files — serves the frontend build; mounted AFTER API routes so
# /api/v1/* takes precedence
if os.path.isdir("static"):
    app.mount("/", StaticFiles(directory="static", html=True), name="static")
