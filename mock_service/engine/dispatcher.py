"""Transform dispatcher.

Maps a (service, method) pair to its base template and optional transform
and produces the response document for one request.
"""

import time
from typing import Callable, Mapping, Optional

from loguru import logger

from ..constants import HTTP_METHODS
from ..monitoring import DispatchMetrics
from .cloner import Document, interpolate_parameters
from .context import ParameterSpec, build_context, extract_parameters
from .exceptions import MockServiceError, NotFoundError
from .randomness import RandomSource, create_random_source
from .registry import ServiceRegistry


_REQUIRED_STRING = ParameterSpec(param_type="string", required=True)

UNKNOWN_SERVICE = "unknown"
UNKNOWN_METHOD = "OTHER"


class Dispatcher:
    """Serves documents from a ``ServiceRegistry``.

    Every call starts from a fresh clone of the base template and a fresh
    randomness source, so concurrent calls share no mutable state beyond
    the registry itself.
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        random_factory: Optional[Callable[[], RandomSource]] = None,
        metrics: Optional[DispatchMetrics] = None,
    ):
        """Initialize the dispatcher.

        Args:
            registry: Registry holding the base templates
            random_factory: Builds the randomness source for each request;
                defaults to an OS-seeded source
            metrics: Optional metrics sink
        """
        self.registry = registry
        self.random_factory = random_factory or create_random_source
        self.metrics = metrics

    def dispatch(
        self,
        service_name: str,
        method: str,
        params: Optional[Mapping[str, str]] = None,
        timestamp: Optional[str] = None,
        request_id: Optional[str] = None,
        rng: Optional[RandomSource] = None,
    ) -> Document:
        """Produce the response document for one request.

        Args:
            service_name: Registered service name
            method: HTTP method
            params: Raw route and query parameters
            timestamp: Request timestamp (ISO-8601); generated when omitted
            request_id: Opaque request identifier; generated when omitted
            rng: Randomness source overriding the factory for this call

        Returns:
            The transformed clone, or a verbatim clone for passthrough routes

        Raises:
            NotFoundError: No template registered for the pair
            ParameterError: Required parameters missing or malformed
            TemplateError: Base template unsuitable for the transform
        """
        method = method.upper()
        start_time = time.perf_counter()
        outcome = "error"
        metric_service = service_name

        try:
            entry = self.registry.get_entry(service_name, method)
            transform = self.registry.resolve_transform(service_name, method)

            if transform is None:
                document = self.registry.load_template(service_name, method)
                outcome = "passthrough"
                logger.info(f"Serving static response for {method} {service_name}")
                return document

            specs = dict(entry.route.params) if entry.route else {}
            for name in transform.required_params:
                specs.setdefault(name, _REQUIRED_STRING)

            parameters = extract_parameters(params or {}, specs)
            context = build_context(timestamp, request_id)
            document = self.registry.load_template(service_name, method)
            interpolate_parameters(document, parameters)

            result = transform.run(
                document,
                parameters,
                context,
                rng if rng is not None else self.random_factory(),
            )
            outcome = "transformed"
            logger.info(
                f"[{context.request_id}] Serving '{transform.name}' response for "
                f"{method} {service_name}"
            )
            return result

        except MockServiceError as e:
            outcome = type(e).__name__
            if isinstance(e, NotFoundError):
                # Label set stays bounded to registered services
                metric_service = UNKNOWN_SERVICE
            logger.warning(f"Dispatch {method} {service_name} failed: {e}")
            raise

        finally:
            if self.metrics is not None:
                self.metrics.record(
                    metric_service,
                    method if method in HTTP_METHODS else UNKNOWN_METHOD,
                    outcome,
                    time.perf_counter() - start_time,
                )

    def dispatch_path(
        self,
        path: str,
        method: str,
        query: Optional[Mapping[str, str]] = None,
        timestamp: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> Document:
        """Resolve a request path to a service and dispatch it.

        Dynamic route patterns are tried first; a single-segment path then
        falls back to the static (service, method) lookup. Path parameters
        take precedence over query parameters of the same name.
        """
        path = "/" + path.strip("/")
        params = dict(query or {})

        matched = self.registry.match_route(path, method)
        if matched is not None:
            service_name, path_params = matched
            params.update(path_params)
            return self.dispatch(service_name, method, params, timestamp, request_id)

        segments = path.strip("/").split("/")
        if len(segments) == 1 and segments[0]:
            return self.dispatch(segments[0], method, params, timestamp, request_id)

        raise NotFoundError(f"No route configured for path: {method.upper()} {path}")
