"""Main FastAPI application."""
import json
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from skillswap.settings import settings
from skillswap.api.swap import router as swap_router
from skillswap.api.users import router as users_router
from skillswap.domain.common.errors import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError as DomainValidationError,
)
from skillswap.infra.db import base as db_base
# Import all models to ensure they're registered with Base
from skillswap.infra.db.models import (  # noqa: F401
    UserModel,
    SwapRequestModel,
    SwapRequestInteractionModel,
    InteractionUpdateModel,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, str(settings.log_level).upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    if db_base.engine is not None:
        try:
            async with db_base.engine.begin() as conn:
                await conn.run_sync(db_base.Base.metadata.create_all)
        except Exception as e:
            # Database might not be ready yet; /ready reports it
            logger.warning("Could not connect to database during startup: %s", e)

    yield

    # Shutdown
    if db_base.engine is not None:
        await db_base.engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests and responses."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        logger.info("[REQUEST] %s %s", request.method, request.url.path)
        logger.debug("   Query params: %s", dict(request.query_params))

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            "[RESPONSE] %s %s - %s (%.3fs)",
            request.method, request.url.path, response.status_code, process_time,
        )
        return response


# Add logging middleware AFTER CORS (CORS must be first)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed logging."""
    logger.error("[VALIDATION ERROR] %s %s", request.method, request.url.path)
    errors = exc.errors()
    for i, error in enumerate(errors, 1):
        logger.error("   Error %d: %s", i, json.dumps(error, default=str))
    return JSONResponse(
        status_code=422,
        content={"detail": json.loads(json.dumps(errors, default=str))},
    )


# Domain error handlers: map domain exceptions to correct HTTP status
@app.exception_handler(NotFoundError)
async def domain_not_found_handler(request: Request, exc: NotFoundError):
    """Return 404 when a resource is not found."""
    return JSONResponse(
        status_code=404,
        content={"detail": str(exc)},
    )


@app.exception_handler(AuthorizationError)
async def domain_authorization_handler(request: Request, exc: AuthorizationError):
    """Return 403 when the user is not authorized."""
    return JSONResponse(
        status_code=403,
        content={"detail": exc.message},
    )


@app.exception_handler(DomainValidationError)
async def domain_validation_handler(request: Request, exc: DomainValidationError):
    """Return 422 for domain validation errors."""
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message},
    )


@app.exception_handler(InvalidTransitionError)
async def domain_invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    """Return 409 when the current state does not allow the change."""
    return JSONResponse(
        status_code=409,
        content={"detail": exc.message, "current": exc.current, "retryable": False},
    )


@app.exception_handler(ConflictError)
async def domain_conflict_handler(request: Request, exc: ConflictError):
    """Return 409 for lost compare-and-set races; the caller may reload and retry."""
    logger.warning("[CONFLICT] %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=409,
        content={"detail": exc.message, "retryable": True},
    )


# Health check (root and under /v1)
@app.get("/health")
@app.get(f"{settings.api_v1_prefix}/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": settings.app_version}


@app.get("/ready")
async def readiness():
    """Readiness endpoint: run all checks and return 200 if ready, 503 otherwise."""
    from skillswap.readiness import run_all_checks_async, is_ready
    checks = await run_all_checks_async()
    ready, summary = is_ready(checks)
    if ready:
        return {"ready": True, "checks": summary}
    return JSONResponse(
        status_code=503,
        content={"ready": False, "checks": summary},
    )


# API v1 routes
app.include_router(users_router, prefix=settings.api_v1_prefix)
app.include_router(swap_router, prefix=settings.api_v1_prefix)
