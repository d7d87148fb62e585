"""
Main FastAPI Application

Entry point for the multi-tenant issue tracker.
Configures middleware, routes, error handlers and lifespan events.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import time
from contextlib import asynccontextmanager

from issue_tracker import __version__
from issue_tracker.config import get_settings
from issue_tracker.database import engine, init_db
from issue_tracker.middleware.tenant import TenantMiddleware
from issue_tracker.middleware.rate_limit import RateLimitMiddleware
from issue_tracker.utils.logging import setup_logging, get_logger, log_security_event
from issue_tracker.core.exceptions import TenantIsolationError, PermissionDenied

from issue_tracker.api.endpoints import issues

settings = get_settings()

setup_logging(
    log_level=settings.LOG_LEVEL,
    json_format=(settings.ENVIRONMENT == "production")
)
logger = get_logger(__name__)


def _tenant_fields(request: Request) -> dict:
    ctx = getattr(request.state, "tenant_context", None)
    return {
        "path": request.url.path,
        "method": request.method,
        "organization_id": ctx.organization_id if ctx else None,
        "user_id": ctx.user_id if ctx else None,
        "role": ctx.role.value if ctx else None,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")

    # Tables are created automatically in development only
    if settings.ENVIRONMENT == "development":
        logger.warning("Initializing database tables (dev mode)")
        init_db()

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application")
    engine.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Multi-Tenant Issue Tracker",
    description="Organization-scoped issue tracking with role-based permissions and change history",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


# ============================================================================
# MIDDLEWARE CONFIGURATION
# ============================================================================

allowed_origins = [
    "http://localhost:3000",
    "http://localhost:8000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins if settings.ENVIRONMENT != "development" else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add X-Process-Time header to track request duration."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


# Middleware added last runs first: the rate limiter needs the
# organization resolved by TenantMiddleware, so it is added before it.
if settings.RATE_LIMIT_ENABLED:
    app.add_middleware(RateLimitMiddleware)

app.add_middleware(TenantMiddleware)


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================

@app.exception_handler(TenantIsolationError)
async def tenant_isolation_error_handler(request: Request, exc: TenantIsolationError):
    """Cross-organization access attempts are logged as security events."""
    log_security_event("tenant_isolation_violation", _tenant_fields(request), logger)

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "type": "tenant_isolation_error"}
    )


@app.exception_handler(PermissionDenied)
async def permission_denied_handler(request: Request, exc: PermissionDenied):
    log_security_event("privilege_escalation", _tenant_fields(request), logger)

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "type": "permission_denied"}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all exception handler.

    Persistence failures end up here. Full details go to the log,
    the client gets a generic body unless DEBUG is on.
    """
    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
        exc_info=True,
        extra=_tenant_fields(request)
    )

    if settings.DEBUG:
        return JSONResponse(
            status_code=500,
            content={
                "detail": str(exc),
                "type": type(exc).__name__
            }
        )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "type": "internal_error"
        }
    )


# ============================================================================
# ROUTES
# ============================================================================

@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint for load balancers."""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": __version__
    }


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Multi-Tenant Issue Tracker API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


app.include_router(issues.router)


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug: {settings.DEBUG}")

    uvicorn.run(
        "issue_tracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
