"""FastAPI server for the Holiday Calendar.

Main entry point for the API server.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import calendar, health, proxy
from core import __version__
from core.config import Settings, get_settings
from core.observability.logging import configure_logging_from_settings, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    settings: Settings = app.state.settings
    configure_logging_from_settings(settings)
    logger.info(
        "Holiday Calendar API starting up...",
        extra_fields={
            "mock_data": settings.use_mock_data,
            "proxy_mode": bool(settings.webflow_api_endpoint),
        },
    )

    yield

    # Shutdown
    logger.info("Holiday Calendar API shutting down...")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    explicit_settings = settings is not None
    settings = settings or get_settings()

    app = FastAPI(
        title="Holiday Calendar API",
        description="Holiday calendar and leave planning backed by Webflow CMS collections",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    if explicit_settings:
        # Routes re-read the environment per request unless pinned here
        app.dependency_overrides[get_settings] = lambda: settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        max_age=86400,
    )

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(calendar.router, prefix="/calendar", tags=["Calendar"])
    app.include_router(proxy.router, prefix="/api", tags=["Proxy"])

    return app


# Default app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.server:app", host="0.0.0.0", port=8000, reload=True)
