"""
FastAPI application factory and entry point.

This module creates and configures the FastAPI application:
  1. Lifespan manager — logging, table creation, the session manager
  2. CORS middleware — allows the frontend origin to make cross-origin requests
  3. Exception handlers — maps domain errors to HTTP responses
  4. Router registration — mounts all API endpoint groups

Running locally:
    uvicorn app.main:app --reload

One process hosts one session manager: the process is a single seat, the
way one browser tab holds one signed-in user.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app import models  # noqa: F401  (registers every table on Base.metadata)
from app.config import settings
from app.database import AsyncSessionLocal, Base, engine
from app.exceptions import register_exception_handlers
from app.logging_config import setup_logging
from app.routers import banks, clients, loan_applications, screens, session
from app.services.credential_store import SqlCredentialStore
from app.services.profile_store import ProfileStore
from app.services.session_manager import SessionManager
from app.services.verification_registry import default_registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
      Configures logging, creates missing tables, then starts the session
      manager. Bootstrap runs in the background; until it finishes (or the
      fallback timer fires) GET /session reports is_loading=true.

    Shutdown:
      Stops the session manager and disposes of the database engine.
    """
    # --- Startup ---
    setup_logging(settings.LOG_LEVEL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    manager = SessionManager(
        credential_store=SqlCredentialStore(AsyncSessionLocal),
        profile_store=ProfileStore(AsyncSessionLocal),
        registry=default_registry,
    )
    await manager.start()
    app.state.session_manager = manager
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield
    # --- Shutdown ---
    await manager.close()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Credit scoring for Zimbabwean banks and their clients",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(session.router, prefix="/session", tags=["Session"])
app.include_router(screens.router, prefix="/screens", tags=["Screens"])
app.include_router(banks.router, prefix="/banks", tags=["Banks"])
app.include_router(clients.router, prefix="/clients", tags=["Clients"])
app.include_router(loan_applications.router, prefix="/loan-applications", tags=["Loan Applications"])


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for deployment probes."""
    return {"status": "ok", "version": settings.APP_VERSION}
