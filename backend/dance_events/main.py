"""
Dance Events API - Main Application Entry Point

Event listings and ticketing for dancers, studios and agencies:
- Registration/login with bcrypt-hashed passwords and 7-day JWTs
- Event search with filters and pagination, creator-scoped CRUD
- Ticket purchase guarded by a (user, event) unique constraint
- Redis caching of event listings, structured logging, Prometheus metrics
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dance_events.api.exception_handlers import register_exception_handlers
from dance_events.api.middleware import RequestLoggingMiddleware
from dance_events.api.router import api_router
from dance_events.core.config import Settings, get_settings
from dance_events.core.logging import get_logger, setup_logging
from dance_events.core.metrics import metrics_endpoint
from dance_events.db.session import Database
from dance_events.services.cache_service import EventCache


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    settings: Settings = app.state.settings
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    # Initialize Redis connection
    redis_client = await app.state.cache.get_client()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache")

    yield

    # Cleanup
    await app.state.cache.close()
    await app.state.db.dispose()
    logger.info("application_shutdown")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Event listings and ticketing for the dance community",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.db = Database(settings)
    app.state.cache = EventCache(settings)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Custom middleware
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    # Routes
    app.include_router(api_router)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for Docker and load balancers."""
        cache_stats = await app.state.cache.stats()
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "cache": cache_stats,
        }

    @app.get("/metrics", tags=["Health"], include_in_schema=False)
    async def metrics():
        return metrics_endpoint()

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": settings.APP_VERSION,
            "docs": "/docs",
        }

    return app


app = create_app()
