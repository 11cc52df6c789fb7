# src/postline/main.py
"""Main entry point for the Postline application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from postline.api.v1 import (
    auth_router,
    live_router,
    media_router,
    posts_router,
    users_router,
)
from postline.core.errors import PostlineError, ValidationFailed, status_for
from postline.core.settings import settings
from postline.services.broadcast import MutationBroadcaster
from postline.services.storage import build_object_storage
from postline.services.validation import Violation

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Postline API",
    description="Paginated post feed with image attachments and live updates",
    version=settings.app_version,
)

app.state.broadcaster = MutationBroadcaster(queue_size=settings.subscriber_queue_size)
app.state.storage = None

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(media_router, prefix="/api/v1")
app.include_router(live_router, prefix="/api/v1")


@app.exception_handler(PostlineError)
async def handle_postline_error(request: Request, exc: PostlineError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies in the same shape as field validation failures."""
    violations = [
        Violation(
            field=".".join(str(part) for part in error.get("loc", ())[1:]) or "body",
            message=str(error.get("msg", "Invalid value")),
        )
        for error in exc.errors()
    ]
    failure = ValidationFailed(violations)
    return JSONResponse(status_code=failure.status_code, content=failure.to_payload())


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status_for(exc),
        content={"message": "Internal server error", "kind": None, "data": None},
    )


@app.on_event("startup")
async def on_startup() -> None:
    if app.state.storage is None:
        app.state.storage = build_object_storage(settings)
    logger.info("Attachment storage backend: %s", type(app.state.storage).__name__)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("postline.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
