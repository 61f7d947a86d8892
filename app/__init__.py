"""
IT Asset 360 Application Factory
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import init_db
from app.core.errors import DomainError, domain_error_handler


def configure_logging():
    """Root logging for the service; left alone when the host already configured it"""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=settings.LOG_LEVEL,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    else:
        root.setLevel(settings.LOG_LEVEL)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    configure_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        description="IT asset lifecycle tracking with a diffable audit trail",
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json" if settings.DEBUG else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Precondition/integrity/storage errors reach the caller verbatim
    app.add_exception_handler(DomainError, domain_error_handler)

    # Import routers here to avoid circular imports
    from app.api import api_router

    app.include_router(api_router, prefix="/api/v1")

    # Startup event
    @app.on_event("startup")
    async def startup_event():
        """Create tables and seed the default catalog"""
        await init_db()

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": settings.APP_NAME}

    return app
