"""Noesis API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map NoesisError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - In-flight expansions cancelled on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event
    - Static files mounted AFTER API routes so /api/v1/* takes precedence
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from noesis.api.error_handlers import register_error_handlers
from noesis.api.routes import health, tree_sessions
from noesis.config import get_settings
from noesis.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    logger.info("Noesis API started")
    yield
    tree_sessions.close_all_sessions()
    logger.info("Noesis API shutting down")


app = FastAPI(
    title="Noesis Knowledge Tree API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(tree_sessions.router)

register_error_handlers(app)

# html=True enables SPA fallback (serves index.html for unknown routes)
if os.path.isdir("static"):
    app.mount("/", StaticFiles(directory="static", html=True), name="static")
