"""
FastAPI application factory and entry point.

This module creates and configures the FastAPI application:
  1. Logging — configured once for the club_finance package
  2. Lifespan manager — creates the documents table, disposes the engine
  3. CORS middleware — allows frontend origins to make cross-origin requests
  4. Exception handlers — maps domain errors to HTTP responses
  5. Router registration — mounts the ledger and report endpoints

Running locally:
    uvicorn club_finance.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import make_url

import club_finance.models  # noqa: F401  (registers tables on Base.metadata)
from club_finance.config import settings
from club_finance.database import engine, Base
from club_finance.exceptions import register_exception_handlers
from club_finance.logging_config import configure_logging
from club_finance.routers import ledger, reports

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def _ensure_sqlite_directory(database_url: str) -> None:
    """SQLite will not create the parent directory of its database file."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
      Creates the documents table if it doesn't exist.

    Shutdown:
      Disposes of the database engine, closing all connections cleanly.
    """
    # --- Startup ---
    _ensure_sqlite_directory(settings.DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield
    # --- Shutdown ---
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Club finance ledgers: bank statement import, monthly ledgers and financial reports",
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

app.include_router(ledger.router, prefix="/ledger", tags=["Ledger"])
app.include_router(reports.router, prefix="/reports", tags=["Reports"])


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe for load balancers and container orchestrators."""
    return {"status": "ok", "version": settings.APP_VERSION}
