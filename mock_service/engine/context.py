"""Parameter and request context extraction.

Raw route and query parameters arrive as strings. They are checked against
the parameter specs declared for a route and frozen into a read-only
mapping; typed values are parsed lazily by the rules through the helpers
below so that a bad value always surfaces as a ``ParameterError`` naming
the parameter.
"""

import re
import uuid
from datetime import date, datetime, timezone
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ParameterError


Parameters = Mapping[str, str]

_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z]*(\d+)$")


class ParameterSpec(BaseModel):
    """Declared shape of a single route parameter."""

    param_type: str = Field(default="string", description="string, date or number")
    pattern: Optional[str] = Field(default=None, description="Regex the raw value must match")
    required: bool = True
    default: Optional[str] = None
    description: Optional[str] = None


class RequestContext(BaseModel):
    """Immutable per-request metadata."""

    model_config = ConfigDict(frozen=True)

    timestamp: str
    request_id: str


def require_param(params: Parameters, name: str) -> str:
    """Return a non-empty raw parameter or raise ``ParameterError``."""
    value = params.get(name)
    if value is None or value == "":
        raise ParameterError(name, "is missing")
    return value


def parse_date(params: Parameters, name: str) -> date:
    """Parse a YYYY-MM-DD parameter.

    Raises:
        ParameterError: If the parameter is absent or not a valid date
    """
    value = require_param(params, name)
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ParameterError(name, "must be a valid date in YYYY-MM-DD format") from None


def parse_client_index(params: Parameters, name: str = "cliente_id") -> int:
    """Numeric index from the digits following a client id's letter prefix."""
    value = require_param(params, name)
    match = _CLIENT_ID_PATTERN.match(value)
    if match is None:
        raise ParameterError(name, f"value '{value}' must end in a numeric client index")
    return int(match.group(1))


def _check_value(name: str, value: str, spec: ParameterSpec) -> None:
    if spec.pattern is not None and not re.fullmatch(spec.pattern, value):
        raise ParameterError(
            name, f"value '{value}' doesn't match pattern '{spec.pattern}'"
        )
    
    if spec.param_type == "date":
        parse_date({name: value}, name)
    elif spec.param_type == "number":
        try:
            float(value)
        except ValueError:
            raise ParameterError(name, "must be a valid number") from None


def extract_parameters(
    raw_params: Mapping[str, str],
    specs: Optional[Mapping[str, ParameterSpec]] = None,
) -> Parameters:
    """Validate raw parameters against their specs and freeze them.
    
    Args:
        raw_params: Path and query parameters as strings
        specs: Declared parameter specs for the route, if any
        
    Returns:
        Read-only mapping of parameter name to string value
        
    Raises:
        ParameterError: If a required parameter is missing or malformed
    """
    params: Dict[str, str] = {
        str(key): str(value).strip() for key, value in raw_params.items()
    }
    
    for name, spec in (specs or {}).items():
        value = params.get(name)
        if value is None or value == "":
            if spec.default is not None:
                params[name] = spec.default
                continue
            if spec.required:
                raise ParameterError(name, "is required but missing")
            params.pop(name, None)
            continue
        _check_value(name, value, spec)
    
    return MappingProxyType(params)


def build_context(
    timestamp: Optional[str] = None,
    request_id: Optional[str] = None,
) -> RequestContext:
    """Build the request context, generating any value not supplied."""
    if timestamp is None:
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    if request_id is None:
        request_id = uuid.uuid4().hex[:9]
    return RequestContext(timestamp=timestamp, request_id=request_id)
