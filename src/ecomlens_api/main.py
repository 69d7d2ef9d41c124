"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ecomlens_api import __version__
from ecomlens_api.config import get_settings
from ecomlens_api.errors.handlers import register_exception_handlers
from ecomlens_api.middleware.request_context import RequestContextMiddleware
from ecomlens_api.routes import (
    admin_router,
    auth_router,
    health_router,
    studio_router,
)
from ecomlens_api.storage.lua_scripts import lua_scripts
from ecomlens_api.storage.memory import get_storage
from ecomlens_api.storage.redis_client import (
    RedisBlobStore,
    close_redis,
    get_redis,
    init_redis,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Handles startup and shutdown events:
    - Startup: Connect Redis if enabled, load Lua scripts, seed the admin user
    - Shutdown: Close Redis connection
    """
    settings = get_settings()
    logger.info("Starting EcomLens API v%s in %s mode", __version__, settings.api_env.value)

    storage = get_storage()

    if settings.redis_enabled:
        try:
            await init_redis()
            redis = await get_redis()
            if redis:
                await lua_scripts.load(redis)
                logger.info("Loaded Lua scripts into Redis")
                storage.use(RedisBlobStore(redis))
        except Exception as e:
            logger.warning("Redis initialization failed: %s", e)

    logger.info("Using %s blob storage", storage.blobs.backend)
    await storage.users.seed_if_empty()

    yield

    # Shutdown
    logger.info("Shutting down EcomLens API")
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="EcomLens API",
        description=(
            "Turn one product photo into e-commerce ready shots with Gemini.\n\n"
            "## Features\n"
            "- Five style presets generated in one batch\n"
            "- Custom edits from a free-text instruction\n"
            "- Daily generation limits, reset each day\n"
            "- Admin controls for per-user limits\n\n"
            "## Authentication\n"
            "Sign up or log in via `/v1/auth` and send the returned token in the "
            "`X-Session-Token` header.\n\n"
            "**Seeded admin:** `admin@admin.com` (any password)"
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Content-Disposition"],
    )

    app.add_middleware(RequestContextMiddleware)  # type: ignore[arg-type]

    # Register exception handlers
    register_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(studio_router, prefix=settings.api_prefix)
    app.include_router(admin_router, prefix=settings.api_prefix)

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "ecomlens_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_env.value == "development",
    )
