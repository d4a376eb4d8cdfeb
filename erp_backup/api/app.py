"""FastAPI application for the backup engine."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import sys
import os

import redis.asyncio as redis

from erp_backup.backup import BackupManager
from erp_backup.config import BackupConfig, EngineConfig, StorageConfig
from .config import settings
from .routers import backup, health, jobs

# App-managed logging: attach our own handler to the package logger and don't
# propagate, so INFO logs show regardless of the server's logging config
engine_logger = logging.getLogger("erp-backup")
engine_logger.setLevel(logging.INFO)
engine_logger.propagate = False
engine_logger.handlers.clear()

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)
formatter = logging.Formatter(
    '%(asctime)s - [%(name)s] - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
console_handler.setFormatter(formatter)
engine_logger.addHandler(console_handler)

# Allow disabling app-managed logging via env var for production
if os.getenv("DISABLE_APP_LOGGING", "false").lower() == "true":
    engine_logger.handlers.clear()
    engine_logger.propagate = True

logger = logging.getLogger(__name__)


def build_engine_config() -> EngineConfig:
    """Engine configuration from API settings."""
    storage = StorageConfig(
        backend=settings.storage_backend,
        working_dir=settings.working_dir,
        namespace=settings.storage_namespace,
        max_batch_size=settings.max_batch_size,
        redis_url=settings.redis_url or StorageConfig.redis_url,
        redis_password=settings.redis_password,
    )
    backup_config = BackupConfig(
        backup_dir=settings.backup_dir,
        history_limit=settings.history_limit,
    )
    return EngineConfig(storage=storage, backup=backup_config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage store and job-tracking lifecycle."""
    logger.info("Initializing backup engine...")

    config = build_engine_config()
    try:
        store = config.create_store()
        app.state.backup_manager = BackupManager(store, config.backup.backup_dir)
        logger.info(f"Backup engine initialized on {config.storage.backend} store")
    except Exception as e:
        logger.error(f"Failed to initialize backup engine: {e}")
        raise

    # Initialize Redis client for job tracking if Redis URL is configured
    if settings.redis_url:
        try:
            app.state.redis_client = redis.from_url(
                settings.redis_url,
                password=settings.redis_password,
                encoding="utf-8",
                decode_responses=True
            )
            await app.state.redis_client.ping()
            logger.info("Redis client initialized for job tracking")
        except Exception as e:
            logger.warning(f"Failed to initialize Redis client: {e}")
            app.state.redis_client = None
    else:
        app.state.redis_client = None
        logger.info("Redis not configured - job tracking disabled")

    yield

    logger.info("Shutting down backup engine...")
    if getattr(app.state, "redis_client", None):
        await app.state.redis_client.close()
    close_store = getattr(app.state.backup_manager.store, "close", None)
    if close_store is not None:
        await close_store()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(jobs.router, prefix=settings.api_prefix)
    app.include_router(backup.router, prefix=settings.api_prefix)
    app.include_router(health.router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "docs": f"{settings.api_prefix}/docs"
        }

    return app


# Create default app instance
app = create_app()
