"""Catch-all mock endpoint.

Any path not claimed by the management API is resolved against the
dynamic route patterns, then against static ``/<service>`` fixtures.
"""

from fastapi import Request
from fastapi.responses import JSONResponse


def register_mock_routes(app, service) -> None:
    """Register the catch-all mock route. Must be registered last.
    
    Args:
        app: FastAPI application instance
        service: MockService instance
    """
    
    @app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE"])
    async def handle_mock_request(path: str, request: Request):
        """Serve the mock document for the request path and method."""
        document = service.dispatcher.dispatch_path(
            path,
            request.method,
            query=dict(request.query_params),
            request_id=request.headers.get("x-request-id"),
        )
        return JSONResponse(content=document)
