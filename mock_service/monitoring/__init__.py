"""Monitoring for the mock service."""

from .metrics import DispatchMetrics

__all__ = ["DispatchMetrics"]
