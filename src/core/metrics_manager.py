import logging
import time
from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

from contracts.probe_result import ProbeResult

logger = logging.getLogger(__name__)


class MetricsManager:
    """
    Manager for collecting and reporting service metrics such as in-flight
    requests, request latency and probe outcomes.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize the MetricsManager and set up Prometheus metrics.

        Args:
            registry: Collector registry to register the metrics with. Defaults to
                the process-wide prometheus_client registry.
        """
        self.registry = registry if registry is not None else REGISTRY
        self.IN_FLIGHT = Gauge(
            "in_flight_requests",
            "Number of requests in flight",
            registry=self.registry,
        )
        self.REQ_LATENCY = Histogram(
            "request_latency_seconds",
            "Request latency in seconds",
            registry=self.registry,
        )
        self.PROBES = Counter(
            "probes_total",
            "Outbound probes by outcome",
            ["outcome"],
            registry=self.registry,
        )
        self.BLOCKED = Counter(
            "probes_blocked_total",
            "Outbound probes answered with a blocking status code",
            registry=self.registry,
        )
        self.PROBE_LATENCY = Histogram(
            "probe_response_time_seconds",
            "Response time of successful probes in seconds",
            registry=self.registry,
        )
        logger.info("MetricsManager initialized.")

    async def prometheus_middleware(self, request, call_next):
        """
        Middleware for tracking request metrics and updating Prometheus gauges/histograms.

        Args:
            request: The incoming request object.
            call_next: The next handler in the middleware chain.

        Returns:
            The response object from the next handler.
        """
        start = time.time()
        self.IN_FLIGHT.inc()
        try:
            return await call_next(request)
        finally:
            elapsed = time.time() - start
            self.IN_FLIGHT.dec()
            self.REQ_LATENCY.observe(elapsed)
            logger.debug(f"Request processed in {elapsed:.4f}s.")

    def record_probe(self, result: ProbeResult):
        """
        Record the outcome of a probe.

        A probe whose body could not be read is counted as "partial".
        """
        if not result.success:
            outcome = "failure"
        elif result.response_time is None:
            outcome = "partial"
        else:
            outcome = "success"
            self.PROBE_LATENCY.observe(result.response_time / 1000)
        self.PROBES.labels(outcome=outcome).inc()
        if result.blocked:
            self.BLOCKED.inc()
