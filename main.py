"""PsychedBox - account and session API."""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app import database
from app.config import get_settings
from app.dependencies import SessionAuthMiddleware
from app.exceptions import AppError
from app.rate_limit import api_limit, limiter
from app.routers import admin_router, auth_router
from app.services.background import SessionSweeper
from app.services.passwords import dummy_hash

# Logging
logger = logging.getLogger("psychedbox")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    for warning in settings.validate():
        logger.warning(warning)
    # Failed logins for unknown emails check this hash; build it before the first one arrives.
    await run_in_threadpool(dummy_hash)
    sweeper = SessionSweeper(settings.SESSION_SWEEP_INTERVAL_SECONDS, lambda: database.SessionLocal())
    app.state.session_sweeper = sweeper
    sweeper.start()
    try:
        yield
    finally:
        sweeper.stop()


app = FastAPI(title="PsychedBox", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


# --- Request size limit middleware ---
class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    MAX_BODY_SIZE = 1024 * 1024  # 1MB, auth payloads are tiny

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.MAX_BODY_SIZE:
            return JSONResponse(status_code=413, content={"error": "Request body too large"})
        return await call_next(request)


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PREFIXES = ("/api/auth/", "/api/admin/")

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        # Log state-changing calls on accounts
        path = request.url.path
        method = request.method
        if method in ("POST", "PATCH", "DELETE") and path.startswith(self.AUDIT_PREFIXES):
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


# Added last runs first: identity is resolved before anything else sees the request.
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(AuditLogMiddleware)
app.add_middleware(SessionAuthMiddleware)

# API routers
app.include_router(auth_router)
app.include_router(admin_router)


# --- Error handlers: every error body is {"error": "<message>"} ---
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded."""
    return JSONResponse(status_code=429, content={"error": exc.detail})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# --- Health check ---
@app.get("/api/health")
@api_limit
def health_check(request: Request) -> JSONResponse:
    """Health check endpoint. Confirms the database answers."""
    db = database.SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check database query failed")
        return JSONResponse(status_code=503, content={"status": "error", "message": "Database unavailable"})
    finally:
        db.close()
    return JSONResponse(content={"status": "ok", "timestamp": datetime.utcnow().isoformat()})
