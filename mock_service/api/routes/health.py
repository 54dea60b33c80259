"""Health and metrics endpoints."""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST

from ... import __version__
from ..schemas import HealthResponse


def register_health_routes(app, service) -> None:
    """Register health check and metrics routes.
    
    Args:
        app: FastAPI application instance
        service: MockService instance
    """
    
    @app.get("/api/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "mock-service",
            "version": __version__,
            "initialized": service.initialized,
        }
    
    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(content=service.metrics.export(), media_type=CONTENT_TYPE_LATEST)
