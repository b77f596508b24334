"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from ..service import ReconciliationService
from .routes import router

# Global service instance
_service: Optional[ReconciliationService] = None


def get_service() -> ReconciliationService:
    """Get the global service instance."""
    global _service
    if _service is None:
        _service = ReconciliationService()
    return _service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    # Startup
    service = get_service()
    await service.initialize()
    yield
    # Shutdown
    await service.shutdown()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="HeaderBridge",
        description="Header reconciliation for client, worker and task datasets",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API routes
    app.include_router(router, prefix="/api")

    return app
