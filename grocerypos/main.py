"""
Main FastAPI application for the Grocery POS register.
"""
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from grocerypos import __version__
from grocerypos.api.v1.api import api_router
from grocerypos.backend.auth import AuthProvider
from grocerypos.backend.client import BackendClient
from grocerypos.backend.realtime import RealtimeClient
from grocerypos.backend.storage import ObjectStorage
from grocerypos.core.config import settings
from grocerypos.core.database import SessionLocal, check_db_connection, init_db
from grocerypos.core.exception_handlers import add_exception_handlers
from grocerypos.core.local_storage import LocalStorage
from grocerypos.core.logging import configure_logging
from grocerypos.core.notifications import Notifier
from grocerypos.core.redis_client import check_redis_connection, create_async_redis
from grocerypos.services.admin_service import AdminService
from grocerypos.services.pos_store import PosStore
from grocerypos.services.session_store import SessionStore

configure_logging()

logger = structlog.get_logger()

Path(settings.storage_dir).mkdir(parents=True, exist_ok=True)


def build_register(app: FastAPI) -> BackendClient:
    """Wire the backend adapters and the register's stores onto ``app.state``."""
    local_storage = LocalStorage(settings.local_state_path)
    auth = AuthProvider(session_factory=SessionLocal, local_storage=local_storage)
    storage = ObjectStorage(settings.storage_dir, settings.storage_public_base_url)

    async_redis = create_async_redis()
    realtime = RealtimeClient(async_redis) if async_redis is not None else None

    backend = BackendClient(session_factory=SessionLocal, auth=auth, storage=storage, realtime=realtime)
    notifier = Notifier(maxlen=settings.notification_buffer_size)
    session_store = SessionStore(backend, local_storage, notifier)

    app.state.backend = backend
    app.state.notifier = notifier
    app.state.session_store = session_store
    app.state.pos_store = PosStore(backend, notifier)
    app.state.admin_service = AdminService(backend, session_store)
    return backend


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Grocery POS register...")

    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    if not check_db_connection():
        logger.error("Database connection check failed")
        raise RuntimeError("Database connection failed")

    if not check_redis_connection():
        logger.error("Redis connection check failed")
        raise RuntimeError("Redis connection failed")

    backend = build_register(app)
    session_store: SessionStore = app.state.session_store
    await session_store.start()
    if session_store.is_authenticated:
        await app.state.pos_store.load()
        logger.info(f"Restored session for {session_store.profile.full_name}")

    logger.info("Grocery POS register started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Grocery POS register...")
    await session_store.stop()
    if backend.realtime is not None:
        await backend.realtime.close()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Single-register point of sale for a small grocery store",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)

add_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix=settings.api_v1_str)

# Public product images
app.mount("/storage", StaticFiles(directory=settings.storage_dir, check_dir=False), name="storage")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.store_name}",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    health_status = {
        "status": "healthy",
        "database": "connected" if check_db_connection() else "disconnected",
        "redis": "connected" if check_redis_connection() else "disconnected",
        "realtime": "enabled" if settings.realtime_enabled else "disabled",
    }

    if health_status["database"] == "disconnected" or health_status["redis"] == "disconnected":
        health_status["status"] = "unhealthy"
        return JSONResponse(status_code=503, content=health_status)

    return health_status


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "grocerypos.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
