"""
Workplace Tracker Service - Main Application Entry Point.

This service tracks what happens in an organization day to day:
- Attendance check-in/check-out with derived status (present, late, half day, absent)
- Meeting scheduling with participant conflict detection
- Task assignment and notifications
- Department and user administration
- Kafka event publishing for audit and downstream consumers
"""

from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from app.api.routes.attendance import router as attendance_router
from app.api.routes.departments import router as departments_router
from app.api.routes.meetings import router as meetings_router
from app.api.routes.notifications import router as notifications_router
from app.api.routes.tasks import router as tasks_router
from app.api.routes.users import router as users_router
from app.core.cache import RedisClient
from app.core.config import settings
from app.core.database import check_connection, create_db_and_tables
from app.core.diagnostics import RingBufferDiagnostics
from app.core.exceptions import AppError, UnavailableError
from app.core.kafka import KafkaProducer
from app.core.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting Workplace Tracker Service...")

    logger.info("Creating database and tables...")
    create_db_and_tables()
    logger.info("Database and tables created successfully")

    logger.info("Initializing Redis client...")
    try:
        RedisClient.get_client()
        if RedisClient.ping():
            logger.info("Redis client connected successfully")
        else:
            logger.warning("Redis connection failed, caching will be disabled")
    except Exception as e:
        logger.warning(f"Failed to initialize Redis: {e}")

    logger.info("Initializing Kafka producer...")
    await KafkaProducer.start()
    logger.info("Kafka producer initialized")

    logger.info("Workplace Tracker Service startup complete")

    yield

    # Shutdown
    logger.info("Workplace Tracker Service shutting down...")

    logger.info("Stopping Kafka producer...")
    await KafkaProducer.stop()
    logger.info("Kafka producer stopped")

    logger.info("Closing Redis client...")
    RedisClient.close()
    logger.info("Redis client closed")

    logger.info("Workplace Tracker Service shutdown complete")


# Initialize FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Workplace Tracker Service - attendance, meetings, tasks and notifications with role-based access",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Recent unexpected errors, exposed through the attendance diagnostics endpoint
app.state.diagnostics = RingBufferDiagnostics(
    capacity=settings.DIAGNOSTICS_CAPACITY, include_stack=settings.DEBUG
)


# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


# Exception handlers
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(OperationalError)
async def database_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error(f"Database unavailable during {request.method} {request.url.path}: {exc}")
    request.app.state.diagnostics.record(
        exc, operation=f"{request.method} {request.url.path}"
    )
    error = UnavailableError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Record the error and reply with a 500 carrying its error id.

    Starlette runs this handler inside ServerErrorMiddleware, which sends the
    response and then re-raises the exception to the server. Test clients must
    be built with ``TestClient(app, raise_server_exceptions=False)`` to see the
    response instead of the exception.
    """
    error_id = str(uuid4())
    logger.error(
        f"Unhandled error {error_id} during {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    entry = request.app.state.diagnostics.record(
        exc, operation=f"{request.method} {request.url.path}", error_id=error_id
    )

    content = {"detail": "Server error", "error": "INTERNAL", "error_id": error_id}
    if settings.DEBUG:
        content["error_message"] = str(exc)
        content["stack"] = entry.get("stack")
    return JSONResponse(status_code=500, content=content)


# Include routers
app.include_router(attendance_router, prefix=settings.API_PREFIX)
app.include_router(meetings_router, prefix=settings.API_PREFIX)
app.include_router(notifications_router, prefix=settings.API_PREFIX)
app.include_router(tasks_router, prefix=settings.API_PREFIX)
app.include_router(departments_router, prefix=settings.API_PREFIX)
app.include_router(users_router, prefix=settings.API_PREFIX)


# Health check endpoint
@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint for container orchestration and monitoring.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/ready", tags=["health"])
async def readiness_check():
    """
    Readiness check endpoint for Kubernetes.
    Verifies that the service is ready to accept traffic.

    Only the database is required; Redis and Kafka are optional and reported
    as disabled when turned off in settings.
    """
    database_ready = check_connection()

    if settings.CACHE_ENABLED:
        redis_status = "ok" if RedisClient.ping() else "error"
    else:
        redis_status = "disabled"

    if settings.KAFKA_ENABLED:
        kafka_status = "ok" if KafkaProducer.is_started() else "error"
    else:
        kafka_status = "disabled"

    return {
        "status": "ready" if database_ready else "not_ready",
        "checks": {
            "database": "ok" if database_ready else "error",
            "redis": redis_status,
            "kafka_producer": kafka_status,
        },
    }


@app.get("/", tags=["root"])
async def root():
    """
    Root endpoint with service information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
    }
