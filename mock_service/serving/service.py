"""Mock service wiring.

This module contains the MockService class that assembles the registry,
dispatcher and metrics from configuration. The API layer (mock_service/api/)
calls this service.
"""

from typing import Optional

from loguru import logger

from ..config import ConfigLoader, get_config
from ..engine import Dispatcher, SeededRandomSource, ServiceRegistry
from ..monitoring import DispatchMetrics


class MockService:
    """Main mock service.
    
    This service handles:
    - Service discovery from the services directory
    - Dispatching requests to static or transformed templates
    - Management operations on the services directory
    - Dispatch metrics
    """
    
    def __init__(
        self,
        config: Optional[ConfigLoader] = None,
        services_dir: Optional[str] = None,
        random_seed: Optional[int] = None,
    ):
        """Initialize mock service.
        
        Args:
            config: Configuration; the global one when omitted
            services_dir: Overrides ``services.directory``
            random_seed: Overrides ``engine.random_seed``
        """
        self.config = config or get_config()
        self.initialized = False
        
        self.services_dir = services_dir or self.config.get("services.directory", "services")
        self.random_seed = (
            random_seed if random_seed is not None else self.config.get("engine.random_seed")
        )
        
        self.registry = ServiceRegistry(self.services_dir)
        self.metrics = DispatchMetrics()
        self.dispatcher = Dispatcher(
            self.registry,
            random_factory=self._new_random_source,
            metrics=self.metrics,
        )
    
    def _new_random_source(self) -> SeededRandomSource:
        return SeededRandomSource(self.random_seed)
    
    def initialize(self):
        """Discover services from disk."""
        if self.initialized:
            return
        
        logger.info(f"Discovering services in {self.services_dir}...")
        try:
            count = self.registry.discover()
        except OSError as e:
            logger.error(f"Failed to discover services: {e}")
            raise
        
        self.initialized = True
        logger.info(f"Mock service initialized with {count} entries")


def run_server(host: Optional[str] = None, port: Optional[int] = None):
    """Run the FastAPI server with uvicorn."""
    import uvicorn
    
    config = get_config()
    workers = config.get("serving.api.workers", 1)
    host = host or config.get("serving.api.host", "127.0.0.1")
    port = port or config.get("serving.api.port", 8080)
    
    logger.info(f"Starting Mock Service on {host}:{port}")
    
    if workers > 1:
        uvicorn.run(
            "mock_service.api:create_app",
            factory=True,
            host=host,
            port=port,
            workers=workers,
            log_level="info"
        )
    else:
        from ..api import create_app
        app = create_app()
        uvicorn.run(app, host=host, port=port, log_level="info")
