"""
app/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Builds the user store and service, seeds sample data
- Registers API routes and exception handlers
- Manages application lifecycle (startup/shutdown)
- No business logic should be written here
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import time

from app.core.config import settings, validate_settings
from app.core.errors import add_exception_handlers
from app.core.logging import setup_logging, get_logger
from app.db.mongo import (
    connect_to_mongo,
    close_mongo_connection,
    check_database_health,
    get_users_collection,
    get_counters_collection,
)
from app.db.indexes import create_indexes
from app.db.user_store import UserStore, MongoUserStore, InMemoryUserStore
from app.services.user_service import UserService
from app.services.seed_service import seed_sample_users
from app.api import users

# Initialize logging first
setup_logging()
logger = get_logger(__name__)

APP_VERSION = "1.0.0"


async def build_user_store() -> UserStore:
    """
    Creates the configured store. The Mongo backend connects and
    ensures indexes before it is handed out.
    """
    if settings.STORE_BACKEND == "memory":
        logger.warning("Using in-memory user store, data is lost on restart")
        return InMemoryUserStore()

    logger.info("Connecting to MongoDB...")
    await connect_to_mongo()
    logger.info("Creating database indexes...")
    await create_indexes()
    return MongoUserStore(get_users_collection(), get_counters_collection())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("Starting user directory API...")

    try:
        logger.info("Validating configuration...")
        validate_settings()

        store = await build_user_store()
        app.state.user_service = UserService(store)

        if settings.SEED_SAMPLE_DATA:
            await seed_sample_users(app.state.user_service)

        logger.info(f"User directory API started (environment={settings.ENVIRONMENT}, store={settings.STORE_BACKEND})")

    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    yield  # Application runs here

    logger.info("Shutting down user directory API...")
    try:
        await close_mongo_connection()
    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}", exc_info=True)


app = FastAPI(
    title="User Directory XML API",
    description="User records over HTTP with XML request and response bodies",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,  # Disable docs in production
    redoc_url="/redoc" if settings.is_development else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    if process_time > 5.0:
        logger.warning(
            f"Slow request detected: {request.method} {request.url.path}",
            extra={"method": request.method, "path": request.url.path}
        )

    return response


add_exception_handlers(app)

app.include_router(users.router, prefix=settings.API_PREFIX)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - basic info."""
    return {
        "name": "User Directory XML API",
        "version": APP_VERSION,
        "status": "running",
        "environment": settings.ENVIRONMENT,
        "store": settings.STORE_BACKEND,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.
    Checks database connectivity when MongoDB backs the store.
    """
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "version": APP_VERSION,
        "checks": {}
    }

    if settings.STORE_BACKEND == "memory":
        health_status["checks"]["database"] = "not_used"
    else:
        db_healthy = await check_database_health()
        health_status["checks"]["database"] = "healthy" if db_healthy else "unhealthy"
        if not db_healthy:
            health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)


@app.get("/ready", tags=["Health"])
async def readiness_check():
    """
    Readiness probe - indicates if app is ready to receive traffic.
    """
    if getattr(app.state, "user_service", None) is None:
        return JSONResponse(status_code=503, content={"status": "not_ready", "reason": "service_not_initialized"})
    if settings.STORE_BACKEND == "mongo" and not await check_database_health():
        return JSONResponse(status_code=503, content={"status": "not_ready", "reason": "database_unavailable"})
    return {"status": "ready"}


@app.get("/live", tags=["Health"])
async def liveness_check():
    """
    Liveness probe - indicates if app is alive.
    """
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8080,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
