"""
ThoughtStream Backend Application

FastAPI application entrypoint with async lifespan management.
Creates the schema on startup and disposes the engine on shutdown.

Start locally:
    uvicorn thoughtstream.main:app --reload
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from thoughtstream import __version__
from thoughtstream.api.v1.notes import router as notes_router
from thoughtstream.core.config import settings
from thoughtstream.core.database import dispose_engine, init_db
from thoughtstream.core.logging import setup_logging

# Initialize logging before any log statements
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
        - Creates missing tables (required, blocks startup on failure)

    Shutdown:
        - Disposes the database engine
    """
    logger.info("Starting %s...", settings.PROJECT_NAME)
    logger.info("Log Level: %s", settings.LOG_LEVEL)

    try:
        await init_db()
    except SQLAlchemyError as e:
        logger.critical("Could not initialize the database: %s", e)
        raise RuntimeError("Database initialization failed") from e

    yield  # Application runs here

    logger.info("Shutting down %s...", settings.PROJECT_NAME)
    await dispose_engine()


app = FastAPI(title=settings.PROJECT_NAME, version=__version__, lifespan=lifespan)

app.include_router(notes_router, prefix="/api/v1/notes", tags=["Notes"])


@app.get("/health")
async def health_check():
    """Health check endpoint for process supervisors."""
    return {
        "status": "ok",
        "service": "thoughtstream",
        "environment": os.getenv("ENVIRONMENT", "local"),
    }
