"""Prometheus metrics for dispatched mock requests."""

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


class DispatchMetrics:
    """Counts dispatches by outcome and times them.
    
    Each instance owns its ``CollectorRegistry`` so several apps (or tests)
    can coexist in one process without duplicate-registration errors.
    """
    
    def __init__(self, namespace: str = "mock_service"):
        """Initialize metrics.
        
        Args:
            namespace: Prometheus namespace for metrics
        """
        self.namespace = namespace
        self.registry = CollectorRegistry()
        
        self.dispatch_counter = Counter(
            f"{self.namespace}_dispatches_total",
            "Total number of dispatched mock requests",
            ["service", "method", "outcome"],
            registry=self.registry
        )
        
        self.dispatch_latency = Histogram(
            f"{self.namespace}_dispatch_latency_seconds",
            "Time spent cloning and transforming a template",
            ["service", "method"],
            buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1),
            registry=self.registry
        )
    
    def record(self, service: str, method: str, outcome: str, seconds: float):
        """Record one dispatch.
        
        Args:
            service: Service name as requested
            method: HTTP method
            outcome: passthrough, transformed or the error class name
            seconds: Wall time of the dispatch
        """
        self.dispatch_counter.labels(service=service, method=method, outcome=outcome).inc()
        self.dispatch_latency.labels(service=service, method=method).observe(seconds)
    
    def count(self, service: str, method: str, outcome: str) -> float:
        """Current counter value for a label set (0 when never recorded)."""
        value = self.registry.get_sample_value(
            f"{self.namespace}_dispatches_total",
            {"service": service, "method": method, "outcome": outcome},
        )
        return value or 0.0
    
    def export(self) -> bytes:
        """Render metrics in the Prometheus text format."""
        return generate_latest(self.registry)
