# src/devicekey_auth/main.py
"""Main entry point for the device-key authentication API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from devicekey_auth import __version__
from devicekey_auth.api.v1 import auth_router
from devicekey_auth.core.exceptions import DeviceKeyAuthError, ForbiddenError
from devicekey_auth.core.logging import configure_logging
from devicekey_auth.core.settings import settings

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Password login and device-key session renewal",
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")


@app.exception_handler(DeviceKeyAuthError)
async def handle_service_error(request: Request, error: DeviceKeyAuthError) -> JSONResponse:
    """Render service errors as `{httpCode, errorCode, errorMessage}`."""
    detail = error.reason if isinstance(error, ForbiddenError) else error.message
    logger.warning(
        "Error returned by %s %s: %s - %s - %s",
        request.method,
        request.url.path,
        type(error).__name__,
        error.error_code,
        detail,
    )
    return JSONResponse(status_code=error.status_code, content=error.to_api_error())


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, error: Exception) -> JSONResponse:
    logger.error(
        "Generic error returned by %s %s: %s",
        request.method,
        request.url.path,
        type(error).__name__,
        exc_info=error,
    )
    return JSONResponse(
        status_code=500,
        content={
            "httpCode": 500,
            "errorCode": "internal-error",
            "errorMessage": "Internal server error",
        },
    )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    logger.info("%s %s started", settings.app_name, __version__)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "redoc": "/redoc",
    }


def run() -> None:
    import uvicorn

    uvicorn.run("devicekey_auth.main:app", host="0.0.0.0", port=8000, reload=settings.debug)


if __name__ == "__main__":
    run()
