#!/usr/bin/env python3
"""ShiftEase - Event registration API"""

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from shiftease import __version__
from shiftease.config import config
from shiftease.errors import ShiftEaseError, StoreUnavailable
from shiftease.logging_config import get_logger, setup_logging
from shiftease.routers.events import router as events_router
from shiftease.routers.feedback import router as feedback_router
from shiftease.routers.health import health
from shiftease.routers.images import router as images_router
from shiftease.routers.registrations import router as registrations_router
from shiftease.routers.users import router as users_router

# Configure logging (INFO -> stdout, WARNING/ERROR -> stderr)
setup_logging()
logger = get_logger(__name__)


# Create FastAPI app
app = FastAPI(
    title="ShiftEase",
    description="Event scheduling and volunteer registration API - confirmed and standby lists with automatic promotion",
    version=__version__,
    license_info={
        "name": "MIT",
    },
)

# Trust proxy headers (TLS is terminated by the hosting platform)
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

cors_origins = config["cors_origins"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    # Bearer tokens only; credentials cannot be combined with a wildcard origin
    allow_credentials=cors_origins != ["*"],
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept"],
    expose_headers=["Content-Disposition"],
    max_age=3600,
)


@app.exception_handler(ShiftEaseError)
async def shiftease_error_handler(request: Request, exc: ShiftEaseError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.code},
    )


@app.exception_handler(OperationalError)
async def database_error_handler(request: Request, exc: OperationalError):
    logger.error(f"Database unavailable during {request.method} {request.url.path}: {exc}")
    error = StoreUnavailable()
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": error.message, "error": error.code},
    )


# Include routers
app.include_router(health)
app.include_router(events_router)
app.include_router(registrations_router)
app.include_router(users_router)
app.include_router(feedback_router)
app.include_router(images_router)


def run():
    port = config["port"]
    logger.info(f"Starting ShiftEase on 0.0.0.0:{port}")
    logger.info("Health check available at /health")

    try:
        uvicorn.run(
            app, host="0.0.0.0", port=port, log_level=config["log_level"].lower()
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        raise


if __name__ == "__main__":
    run()
