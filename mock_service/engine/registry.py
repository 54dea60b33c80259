"""Service registry backed by the services directory.

Base templates are kept in an arena keyed by (service, method). Each entry
owns a lock: readers clone under it and management updates swap the
template under it, so a clone never observes a half-written base.

On disk a service is a directory under the services root holding either

- ``routes.json`` + ``template.json``: a dynamic route with a URL pattern,
  parameter specs and an optional transform key, and/or
- ``<service>-<METHOD>.json`` files: static fixtures served verbatim.
"""

import json
import re
import shutil
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, Field

from ..constants import HTTP_METHODS, MAX_SERVICE_NAME_LENGTH, ROUTES_FILE, TEMPLATE_FILE
from .cloner import Document, clone_template, validate_template
from .context import ParameterSpec
from .exceptions import ConflictError, NotFoundError, TemplateError, ValidationError
from .pipeline import Transform
from .transforms import get_transform


_PARAM_PLACEHOLDER = re.compile(r"\{([^}]+)\}")


class RouteConfig(BaseModel):
    """Contents of a service's ``routes.json``."""

    pattern: str = Field(..., description="URL pattern, e.g. /plan-de-ruta/{ruta_id}/{fecha}")
    method: str = "GET"
    transform: Optional[str] = Field(default=None, description="Transform key; omit for passthrough")
    params: Dict[str, ParameterSpec] = Field(default_factory=dict)
    cache_ttl: Optional[int] = None
    description: Optional[str] = None


@dataclass
class ServiceEntry:
    """A registered base template and how requests against it are served."""

    service: str
    method: str
    template: Document
    route: Optional[RouteConfig] = None
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def transform_key(self) -> Optional[str]:
        return self.route.transform if self.route else None


def validate_service_name(name: str) -> bool:
    """Alphanumerics and underscores only, not leading or trailing ``_``."""
    return (
        bool(name)
        and len(name) <= MAX_SERVICE_NAME_LENGTH
        and all(c.isalnum() or c == "_" for c in name)
        and not name.startswith("_")
        and not name.endswith("_")
    )


def normalize_method(method: str) -> str:
    method = method.upper()
    if method not in HTTP_METHODS:
        raise ValidationError(
            f"Invalid HTTP method '{method}'. Must be one of {', '.join(HTTP_METHODS)}"
        )
    return method


def compile_route_pattern(pattern: str) -> "re.Pattern[str]":
    """Turn ``/a/{x}/{y}`` into an anchored regex with one segment per group.
    
    Raises:
        TemplateError: If a placeholder is not a valid group name or repeats
    """
    parts = _PARAM_PLACEHOLDER.split(pattern)
    regex = ""
    for i, part in enumerate(parts):
        if i % 2:
            regex += f"(?P<{part}>[^/]+)"
        else:
            regex += re.escape(part)
    try:
        return re.compile(f"^{regex}$")
    except re.error as e:
        raise TemplateError(f"Invalid route pattern '{pattern}': {e}") from e


class ServiceRegistry:
    """In-memory arena of base templates keyed by (service, method)."""

    def __init__(self, services_dir: Optional[str] = None):
        self.services_dir = Path(services_dir) if services_dir else None
        self._entries: Dict[Tuple[str, str], ServiceEntry] = {}
        self._routes: List[Tuple["re.Pattern[str]", str, str]] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Tuple[str, str]) -> bool:
        service, method = key
        return (service, method.upper()) in self._entries

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        service: str,
        method: str,
        template: Document,
        route: Optional[RouteConfig] = None,
    ) -> ServiceEntry:
        """Register (or replace) the base template for (service, method).

        Raises:
            TemplateError: If the template is not plain JSON or the route
                names an unknown transform
        """
        method = normalize_method(method)
        validate_template(template)
        route_regex = None
        if route is not None:
            try:
                get_transform(route.transform)
            except KeyError as e:
                raise TemplateError(f"Service '{service}': {e.args[0]}") from e
            route_regex = compile_route_pattern(route.pattern)

        with self._lock:
            existing = self._entries.get((service, method))
            if existing is not None:
                with existing.lock:
                    existing.template = template
                    existing.route = route if route is not None else existing.route
                entry = existing
            else:
                entry = ServiceEntry(service=service, method=method, template=template, route=route)
                self._entries[(service, method)] = entry

            if route is not None:
                self._routes = [r for r in self._routes if (r[1], r[2]) != (service, method)]
                self._routes.append((route_regex, service, method))
                logger.info(f"Registered dynamic route: {method} {route.pattern} -> {service}")

        return entry

    def unregister(self, service: str) -> int:
        """Drop every entry of a service; returns how many were removed."""
        with self._lock:
            keys = [key for key in self._entries if key[0] == service]
            for key in keys:
                del self._entries[key]
            self._routes = [r for r in self._routes if r[1] != service]
        return len(keys)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_entry(self, service: str, method: str) -> ServiceEntry:
        entry = self._entries.get((service, method.upper()))
        if entry is None:
            raise NotFoundError(
                f"No mock registered for service '{service}' and method '{method.upper()}'"
            )
        return entry

    def load_template(self, service: str, method: str) -> Document:
        """Clone the base template for (service, method)."""
        entry = self.get_entry(service, method)
        with entry.lock:
            return clone_template(entry.template)

    def resolve_transform(self, service: str, method: str) -> Optional[Transform]:
        return get_transform(self.get_entry(service, method).transform_key)

    def match_route(self, path: str, method: str) -> Optional[Tuple[str, Dict[str, str]]]:
        """Match a request path against the dynamic route patterns."""
        method = method.upper()
        for regex, service, route_method in list(self._routes):
            if route_method != method:
                continue
            match = regex.match(path)
            if match is not None:
                logger.debug(f"Matched {method} {path} -> {service}")
                return service, match.groupdict()
        return None

    def list_services(self) -> List[Dict[str, Any]]:
        """Sorted ``{name, methods}`` summaries of every registered service."""
        methods: Dict[str, List[str]] = {}
        for service, method in list(self._entries):
            methods.setdefault(service, []).append(method)

        if self.services_dir is not None and self.services_dir.exists():
            for path in self.services_dir.iterdir():
                if path.is_dir():
                    methods.setdefault(path.name, [])

        return [
            {"name": name, "methods": sorted(methods[name])}
            for name in sorted(methods)
        ]

    # ------------------------------------------------------------------
    # Disk discovery
    # ------------------------------------------------------------------

    def discover(self) -> int:
        """Load every service directory under ``services_dir``.

        Directories that fail to load are skipped with a warning.

        Returns:
            Number of (service, method) entries registered
        """
        if self.services_dir is None:
            raise ValueError("Registry has no services directory")

        if not self.services_dir.exists():
            self.services_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created services directory {self.services_dir}")
            return 0

        for service_path in sorted(self.services_dir.iterdir()):
            if not service_path.is_dir():
                continue
            try:
                self._load_service(service_path.name, service_path)
            except (OSError, ValueError, TemplateError, ValidationError) as e:
                logger.warning(f"Failed to load service {service_path.name}: {e}")

        logger.info(f"Service discovery completed. Loaded {len(self)} entries")
        return len(self)

    def _load_service(self, service: str, service_path: Path) -> None:
        logger.debug(f"Discovering service: {service} at {service_path}")
        loaded = 0

        routes_file = service_path / ROUTES_FILE
        template_file = service_path / TEMPLATE_FILE
        if routes_file.exists() and template_file.exists():
            route_data = _read_json(routes_file)
            if not isinstance(route_data, dict):
                raise TemplateError(f"{routes_file} must hold a JSON object")
            route = RouteConfig(**route_data)
            self.register(service, route.method, _read_json(template_file), route=route)
            loaded += 1

        for method in HTTP_METHODS:
            static_file = service_path / f"{service}-{method}.json"
            if static_file.exists() and (service, method) not in self._entries:
                self.register(service, method, _read_json(static_file))
                loaded += 1

        if loaded == 0:
            logger.warning(f"No mock files found in service directory: {service_path}")
        else:
            logger.info(f"Loaded service: {service} ({loaded} entries)")

    # ------------------------------------------------------------------
    # Management
    # ------------------------------------------------------------------

    def _service_path(self, service: str) -> Path:
        if not validate_service_name(service):
            raise ValidationError(
                f"Invalid service name '{service}'. Use letters, digits and inner underscores"
            )
        if self.services_dir is None:
            raise ValueError("Registry has no services directory")
        return self.services_dir / service

    def create_service(self, service: str) -> Path:
        service_path = self._service_path(service)
        if service_path.exists():
            raise ConflictError(f"Service '{service}' already exists")
        service_path.mkdir(parents=True)
        logger.info(f"Created service directory: {service_path}")
        return service_path

    def save_mock_file(self, service: str, method: str, content: Document) -> Path:
        """Persist a static fixture and (re)register it under the entry lock."""
        method = normalize_method(method)
        service_path = self._service_path(service)
        validate_template(content)

        service_path.mkdir(parents=True, exist_ok=True)
        existing = self._entries.get((service, method))
        if existing is not None and existing.route is not None:
            # Dynamic routes keep their base template in template.json
            file_path = service_path / TEMPLATE_FILE
        else:
            file_path = service_path / f"{service}-{method}.json"
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(content, f, indent=2, ensure_ascii=False)

        self.register(service, method, content)
        logger.info(f"Saved mock file: {file_path}")
        return file_path

    def delete_service(self, service: str) -> None:
        service_path = self._service_path(service)
        if not service_path.exists() and not any(k[0] == service for k in self._entries):
            raise NotFoundError(f"Service '{service}' not found")

        if service_path.exists():
            shutil.rmtree(service_path)
        removed = self.unregister(service)
        logger.info(f"Deleted service '{service}' ({removed} entries)")


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise TemplateError(f"Invalid JSON in file {path}: {e}") from e
