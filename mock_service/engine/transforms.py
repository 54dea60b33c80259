"""Registry of named transforms.

Routes select a transform by key in their ``routes.json``; the key maps to
a fixed, ordered rule sequence.
"""

from typing import Dict, List, Optional

from .pipeline import Transform, compose
from .rules import CLIENT_HISTORY_RULES, ROUTE_PLAN_RULES


TRANSFORMS: Dict[str, Transform] = {
    "route_plan": compose(
        "route_plan",
        ROUTE_PLAN_RULES,
        required_params=("ruta_id", "fecha"),
        description="Route-type boost, weekday effects and end-of-month campaign",
    ),
    "client_history": compose(
        "client_history",
        CLIENT_HISTORY_RULES,
        required_params=("cliente_id", "fecha_desde", "fecha_hasta"),
        description="Synthetic purchase history with aggregates and trend scoring",
    ),
}


def get_transform(key: Optional[str]) -> Optional[Transform]:
    """Look up a transform; ``None`` selects plain passthrough.
    
    Raises:
        KeyError: If ``key`` names no registered transform
    """
    if key is None:
        return None
    if key not in TRANSFORMS:
        raise KeyError(f"Unknown transform '{key}'. Choose from {available_transforms()}")
    return TRANSFORMS[key]


def available_transforms() -> List[str]:
    return sorted(TRANSFORMS)
