"""Pydantic schemas for API responses."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    """Envelope for management responses and errors."""
    
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    
    @classmethod
    def ok(cls, data: Any) -> "ApiResponse":
        return cls(success=True, data=data)
    
    @classmethod
    def fail(cls, message: str) -> "ApiResponse":
        return cls(success=False, error=message)


class ServiceInfo(BaseModel):
    """A registered service and the methods it answers."""
    
    name: str
    methods: List[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Response model for health check."""
    
    status: str
    service: str
    version: str
    initialized: bool
