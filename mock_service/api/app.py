"""FastAPI application factory.

This module provides the main application factory that assembles
all routes and middleware into a complete FastAPI application.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from .. import __version__
from ..engine import MockServiceError
from ..serving import MockService
from .routes import (
    register_health_routes,
    register_management_routes,
    register_mock_routes,
)
from .schemas import ApiResponse


# Global service instance, created on first use
_service: Optional[MockService] = None


def get_service() -> MockService:
    """Get the global service instance.
    
    Returns:
        MockService instance
    """
    global _service
    if _service is None:
        _service = MockService()
    return _service


def create_app(service: Optional[MockService] = None) -> FastAPI:
    """Create and configure the FastAPI application.
    
    This factory function creates a new FastAPI instance with:
    - CORS middleware configured
    - Error envelope for engine errors
    - All routes registered, the catch-all mock route last
    - Lifespan manager that discovers services on startup
    
    Args:
        service: Service to serve; the global one when omitted
    
    Returns:
        Configured FastAPI application instance
    """
    service = service or get_service()
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting mock service...")
        service.initialize()
        yield
        logger.info("Shutting down mock service...")
    
    app = FastAPI(
        title="NBA Mock Service",
        description="Mock recommendation backend serving JSON fixtures with dynamic transforms",
        version=__version__,
        lifespan=lifespan
    )
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=service.config.get("serving.api.cors_origins", ["*"]),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=3600,
    )
    
    @app.exception_handler(MockServiceError)
    async def mock_service_error_handler(request: Request, exc: MockServiceError):
        return JSONResponse(
            status_code=exc.status_code,
            content=ApiResponse.fail(exc.message).model_dump(),
        )
    
    register_health_routes(app, service)
    register_management_routes(app, service)
    register_mock_routes(app, service)
    
    logger.info("FastAPI application created with all routes registered")
    
    return app
