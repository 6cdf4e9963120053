"""Main FastAPI application for docpager."""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .db.connection import DatabaseManager
from .dependencies import open_document_store
from .errors import register_exception_handlers
from .errors.problem_details import ServiceUnavailableError
from .middleware.request_logging import RequestLoggingMiddleware
from .routes import documents_router
from .seed import seed_demo_data

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=get_settings().log_format
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

HEALTH_PATHS = ["/health", "/ready", "/live"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name} with '{settings.document_store}' document store")

    logging.getLogger().setLevel(getattr(logging, settings.log_level))

    if settings.document_store == "postgres":
        try:
            await app.state.db_manager.initialize()
            await app.state.db_manager.ping()
            logger.info("Database connectivity verified")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    if settings.seed_demo_data:
        store = await open_document_store(app.state, settings.default_collection)
        await seed_demo_data(store)

    yield

    logger.info(f"Shutting down {settings.app_name}")
    try:
        await app.state.db_manager.close()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Offset and cursor pagination over JSON document collections",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.db_manager = DatabaseManager(settings)
    app.state.memory_stores = {}

    app.add_middleware(RequestLoggingMiddleware, skip_paths=HEALTH_PATHS)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_exception_handlers(app)

    app.include_router(documents_router, prefix="/v1")

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request) -> Dict[str, Any]:
        """Health check endpoint with database connectivity test."""
        if settings.document_store == "memory":
            return {
                "status": "healthy",
                "service": settings.app_name,
                "version": API_VERSION,
                "database": "in-memory"
            }

        try:
            await request.app.state.db_manager.ping()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise ServiceUnavailableError(
                detail="Database connection failed",
                database_error=str(e)
            )

        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": API_VERSION,
            "database": "connected"
        }

    @app.get("/ready", tags=["Health"])
    async def ready_check(request: Request) -> Dict[str, Any]:
        """Readiness check endpoint."""
        if settings.document_store == "memory":
            return {
                "status": "ready",
                "service": settings.app_name,
                "collections": len(request.app.state.memory_stores)
            }

        try:
            pool = await request.app.state.db_manager.get_pool()
            async with pool.acquire() as conn:
                documents = await conn.fetchval("SELECT COUNT(*) FROM documents")
        except Exception as e:
            logger.error(f"Readiness check failed: {e}")
            raise ServiceUnavailableError(
                detail="Service not ready",
                database_error=str(e)
            )

        return {
            "status": "ready",
            "service": settings.app_name,
            "documents": documents
        }

    @app.get("/live", tags=["Health"])
    async def liveness_check() -> Dict[str, str]:
        """Liveness check endpoint."""
        return {
            "status": "alive",
            "service": settings.app_name
        }

    @app.get("/", tags=["Root"])
    async def root() -> Dict[str, str]:
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": API_VERSION,
            "docs": "/docs",
            "health": "/health"
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()

    uvicorn.run(
        "docpager.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
