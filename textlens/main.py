"""textlens - FastAPI Application Entrypoint.

Usage:
    uvicorn textlens.main:app --host 0.0.0.0 --port 8000

Or via the CLI:
    python -m textlens.main
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from textlens import __version__
from textlens.api import analyses, analyze, health, search
from textlens.core.config import get_settings
from textlens.core.errors import register_exception_handlers
from textlens.core.lifespan import lifespan
from textlens.core.metrics import create_metrics_router
from textlens.core.middleware import RequestIDMiddleware, RequestLoggingMiddleware


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="textlens",
        description="Text summarization, classification and topic search",
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    # Last added is outermost: request ID must wrap request logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # CORS middleware for development
    if settings.is_development:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Register API routers
    app.include_router(analyze.router)
    app.include_router(search.router)
    app.include_router(analyses.router)
    app.include_router(health.router)

    # Observability endpoint
    app.include_router(create_metrics_router())

    # Register centralized exception handlers
    register_exception_handlers(app)

    return app


# Create application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "textlens.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.app_log_level,
    )
