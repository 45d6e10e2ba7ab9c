"""Main FastAPI application for the swag request service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from swagdesk import db
from swagdesk.config import ALLOWED_ORIGINS, VERSION
from swagdesk.errors import ApiError, RateLimited
from swagdesk.rate_limit import limiter
from swagdesk.routers import admin, auth, health, swag
from swagdesk.services.cleanup import CleanupWorker

logger = logging.getLogger(__name__)

cleanup_worker = CleanupWorker()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await db.init_db()
    await cleanup_worker.start()
    try:
        yield
    finally:
        await cleanup_worker.stop()
        await db.close_db()


app = FastAPI(
    title="Swag Request API",
    description="Swag shipment requests with OTP-authenticated admin review",
    version=VERSION,
    lifespan=lifespan,
)

app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)


# ── Error responses ────────────────────────────────────────────────────────


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    content: dict = {"error": exc.message}
    headers: dict[str, str] = {}
    if isinstance(exc, RateLimited):
        content["retryAfter"] = exc.retry_after
        headers["Retry-After"] = str(exc.retry_after)
    return JSONResponse(content, status_code=exc.status_code, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected malformed body on %s: %s", request.url.path, exc.errors())
    return JSONResponse({"error": "Invalid request body"}, status_code=400)


@app.exception_handler(RateLimitExceeded)
async def throttled_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        {"error": f"Rate limit exceeded: {exc.detail}"}, status_code=429
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        {"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


# ── Routers ────────────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(swag.router)
app.include_router(auth.router)
app.include_router(admin.router)
