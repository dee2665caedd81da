"""
RentRoll API - Main Application
FastAPI application with CORS, error handling, middleware, and logging
"""
import asyncio
import logging
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from rentroll.api.routes import alerts_router, contracts_router, reports_router
from rentroll.core.config import is_production, is_testing, settings
from rentroll.core.exceptions import RentRollError
from rentroll.database import close_db_connection, init_db, test_connection
from rentroll.workers.scheduler import start_scheduler, stop_scheduler


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def run_migrations() -> None:
    """Run Alembic migrations to head (blocking; the env runs its own event loop)."""
    from alembic import command
    from alembic.config import Config

    command.upgrade(Config("alembic.ini"), "head")


# ==================== STARTUP & SHUTDOWN ====================


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("=" * 70)
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info("=" * 70)

    if settings.RUN_MIGRATIONS:
        logger.info("[STARTUP] Running database migrations...")
        await asyncio.to_thread(run_migrations)
    else:
        await init_db()

    if await test_connection():
        logger.info("[OK] Database connection successful!")
    else:
        logger.warning("[WARN] Database connection failed - continuing in degraded mode")

    if settings.SCHEDULER_ENABLED and not is_testing():
        start_scheduler()

    logger.info("[OK] Application startup complete!")
    yield

    logger.info("Shutting down application...")
    stop_scheduler()
    await close_db_connection()
    logger.info("Application shutdown complete")


# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.PROJECT_DESCRIPTION,
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)


# ==================== MIDDLEWARE ====================


# Compression: GZip responses
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD"],
    allow_headers=["*"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests"""
    if request.url.path in ["/health", "/"]:
        return await call_next(request)

    start_time = datetime.now(timezone.utc)
    logger.info(f">> {request.method} {request.url.path}")
    response = await call_next(request)
    duration = (datetime.now(timezone.utc) - start_time).total_seconds()
    logger.info(f"<< {request.method} {request.url.path} - {response.status_code} ({duration:.2f}s)")
    return response


# ==================== ROUTERS ====================


app.include_router(contracts_router, prefix=f"{settings.API_PREFIX}/contracts", tags=["Contracts"])
app.include_router(reports_router, prefix=f"{settings.API_PREFIX}/reports", tags=["Reports"])
app.include_router(alerts_router, prefix=f"{settings.API_PREFIX}/alerts", tags=["Alerts"])


# ==================== ERROR HANDLERS ====================


@app.exception_handler(RentRollError)
async def domain_exception_handler(request: Request, exc: RentRollError):
    """Map domain errors to their HTTP status"""
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{exc.kind} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed response"""
    logger.warning(f"Validation error on {request.url}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "detail": "Validation error",
            "errors": exc.errors(),
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")

    # Don't expose internal errors in production
    error_message = str(exc) if settings.DEBUG else "Internal server error"

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "detail": error_message,
            "timestamp": _timestamp(),
        }
    )


# ==================== HEALTH & STATUS ENDPOINTS ====================


@app.get("/", tags=["System"])
async def root():
    """Root endpoint - API information"""
    return {
        "success": True,
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "docs": f"{settings.API_PREFIX}/docs",
        "status": "operational",
        "environment": "production" if is_production() else "development",
    }


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint for monitoring"""
    connection_ok = await test_connection()
    return {
        "success": True,
        "status": "healthy" if connection_ok else "degraded",
        "database": "connected" if connection_ok else "disconnected",
        "scheduler": "enabled" if settings.SCHEDULER_ENABLED else "disabled",
        "timestamp": _timestamp(),
    }
