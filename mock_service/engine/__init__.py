"""Template transformation engine.

Turns a registered base template plus request parameters into a response
document:

- context.py: parameter validation and the per-request context
- cloner.py: deep copies of base templates
- randomness.py: injectable randomness sources
- pipeline.py: rule composition
- rules/: the business rules behind each transform
- registry.py: base templates keyed by (service, method)
- dispatcher.py: request entry point
"""

from .cloner import clone_template, interpolate_parameters, validate_template
from .context import ParameterSpec, RequestContext, build_context, extract_parameters
from .dispatcher import Dispatcher
from .exceptions import (
    ConflictError,
    MockServiceError,
    NotFoundError,
    ParameterError,
    TemplateError,
    ValidationError,
)
from .pipeline import Rule, Transform, TransformState
from .randomness import RandomSource, ScriptedRandomSource, SeededRandomSource, create_random_source
from .registry import RouteConfig, ServiceRegistry, validate_service_name
from .transforms import TRANSFORMS, get_transform

__all__ = [
    # Entry point
    "Dispatcher",
    "ServiceRegistry",
    "RouteConfig",
    "validate_service_name",
    # Extraction & cloning
    "ParameterSpec",
    "RequestContext",
    "build_context",
    "extract_parameters",
    "clone_template",
    "interpolate_parameters",
    "validate_template",
    # Rules
    "Rule",
    "Transform",
    "TransformState",
    "TRANSFORMS",
    "get_transform",
    # Randomness
    "RandomSource",
    "SeededRandomSource",
    "ScriptedRandomSource",
    "create_random_source",
    # Errors
    "MockServiceError",
    "NotFoundError",
    "ParameterError",
    "TemplateError",
    "ConflictError",
    "ValidationError",
]
