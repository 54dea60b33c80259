"""API module for the mock service.

Routes are organized into submodules:

- routes/health.py: Health checks and metrics
- routes/management.py: Service management (list, create, upload, delete)
- routes/mock.py: Catch-all mock endpoint

Usage:
    from mock_service.api import create_app
    app = create_app()
"""

from .app import create_app, get_service
from .schemas import ApiResponse, HealthResponse, ServiceInfo

__all__ = [
    # App factory
    "create_app",
    "get_service",
    # Schemas
    "ApiResponse",
    "HealthResponse",
    "ServiceInfo",
]
