"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crm import __version__
from crm.api.v1 import router as v1_router
from crm.bootstrap import bootstrap
from crm.core.config import settings
from crm.core.database import Database
from crm.core.exception_handlers import setup_exception_handlers
from crm.core.logging import setup_logging

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Startup failures propagate so the server never accepts traffic on a broken database.
    database = Database.from_settings(settings)
    try:
        bootstrap(database, settings)
    except Exception:
        logger.critical("Database initialization failed; shutting down")
        database.close()
        raise
    app.state.database = database
    logger.info("Application ready (env=%s, prefix=%s)", settings.APP_ENV, settings.API_V1_PREFIX)
    yield
    database.close()


app = FastAPI(
    title="Simple CRM API",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
)

setup_exception_handlers(app)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Simple CRM API"}
