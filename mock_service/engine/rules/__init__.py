"""Business rule library for the registered transforms."""

from .client_history import CLIENT_HISTORY_RULES
from .route_plan import ROUTE_PLAN_RULES

__all__ = ["CLIENT_HISTORY_RULES", "ROUTE_PLAN_RULES"]
