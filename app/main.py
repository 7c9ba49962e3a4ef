"""FastAPI application entry point."""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import database
from app.exceptions import register_exception_handlers
from app.logging_config import configure_logging
from app.routers import investment_goals


logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup
    configure_logging(settings.log_level)
    await database.connect()
    if settings.db_create_schema:
        await database.create_schema()
    yield
    # Shutdown
    await database.disconnect()


app = FastAPI(
    title="Investment Goals API",
    description="RESTful API to create, list, update and delete investment goals.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(investment_goals.router)


@app.get("/")
async def root():
    """Root endpoint - liveness info."""
    return {
        "status": "healthy",
        "service": "investment-goals-api",
        "uptime": time.monotonic() - STARTED_AT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def run() -> None:
    """Start the server on the configured host and port."""
    logger.info("Starting server on %s:%s", settings.host, settings.port)
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    run()
