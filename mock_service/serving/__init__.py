"""Serving components for the mock service."""

from .service import MockService, run_server

__all__ = ["MockService", "run_server"]
