"""Management endpoints for mock services.

These endpoints create, list and delete service directories and upload
the JSON fixture served for a method. Handlers that touch the filesystem
are plain functions, so FastAPI runs them in its threadpool.
"""

import json

from fastapi import File, UploadFile
from fastapi.responses import JSONResponse
from loguru import logger

from ...engine import ValidationError
from ..schemas import ApiResponse, ServiceInfo


def register_management_routes(app, service) -> None:
    """Register service management routes.
    
    Args:
        app: FastAPI application instance
        service: MockService instance
    """
    registry = service.registry
    
    @app.get("/api/services")
    def list_services():
        """List all available services with their methods."""
        logger.info("Listing all services")
        services = [ServiceInfo(**info).model_dump() for info in registry.list_services()]
        return ApiResponse.ok(services).model_dump()
    
    @app.post("/api/services/{service_name}", status_code=201)
    def create_service(service_name: str):
        """Create a new, empty service directory."""
        logger.info(f"Creating service: {service_name}")
        registry.create_service(service_name)
        return ApiResponse.ok(f"Service '{service_name}' created successfully").model_dump()
    
    @app.put("/api/services/{service_name}/{method}", status_code=201)
    def upload_mock_file(service_name: str, method: str, file: UploadFile = File(...)):
        """Upload the JSON fixture served for a service and method.
        
        Returns:
            Confirmation message once the file is stored and registered
        """
        method = method.upper()
        logger.info(f"Uploading mock file for {method} {service_name}")
        
        if file.filename and not file.filename.endswith(".json"):
            raise ValidationError("Only JSON files are allowed")
        
        raw = file.file.read()
        try:
            content = json.loads(raw.decode("utf-8"))
        except UnicodeDecodeError:
            raise ValidationError("Invalid UTF-8 content") from None
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON: {e}") from None
        
        registry.save_mock_file(service_name, method, content)
        return ApiResponse.ok(f"Mock file uploaded for {method} {service_name}").model_dump()
    
    @app.delete("/api/services/{service_name}")
    def delete_service(service_name: str):
        """Delete a service and all its mock files."""
        logger.info(f"Deleting service: {service_name}")
        registry.delete_service(service_name)
        return JSONResponse(
            content=ApiResponse.ok(f"Service '{service_name}' deleted successfully").model_dump()
        )
