# src/quote_stage/main.py
"""Main entry point for the Quote Stage application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from quote_stage.api.v1 import feed_router, quotes_router, users_router, votes_router
from quote_stage.core.errors import (
    InternalError,
    QuoteStageError,
    RateLimitedError,
    ValidationError,
)
from quote_stage.core.logging import configure_logging
from quote_stage.core.settings import settings

logger = logging.getLogger(__name__)

configure_logging()

# Initialize FastAPI app
app = FastAPI(
    title="Quote Stage API",
    description="Submit, vote on and browse quotes",
    version=settings.app_version,
)

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
app.include_router(quotes_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(feed_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")


@app.exception_handler(QuoteStageError)
async def handle_domain_error(request: Request, exc: QuoteStageError) -> JSONResponse:
    """Translate domain errors into HTTP responses."""
    if isinstance(exc, InternalError):
        logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": InternalError.public_message},
        )

    content: dict[str, object] = {"detail": exc.message}
    headers: dict[str, str] | None = None
    if isinstance(exc, ValidationError):
        content["field"] = exc.field
    if isinstance(exc, RateLimitedError):
        content["retry_after"] = exc.retry_after
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures in full and answer generically."""
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": InternalError.public_message},
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Quote Stage API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("quote_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
