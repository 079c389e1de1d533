"""Prometheus-compatible metrics for textlens.

Provides:
- In-process metrics registry
- Counters, histograms, and gauges with labels
- Recording helpers for HTTP, LLM, admission queue and storage
- Prometheus text format exposition

Failures in metrics NEVER affect request handling: every record_* helper
logs and swallows its own errors.

Usage:
    from textlens.core.metrics import record_llm_request, get_metrics_text

    record_llm_request(operation="summary", status="success", duration=1.2)
    text = get_metrics_text()
"""

import re
import threading
from collections import defaultdict
from typing import Any

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from textlens.core.logging import get_logger

logger = get_logger(__name__)

LabelKey = tuple[tuple[str, str], ...]

# Default histogram buckets (in seconds). LLM calls are slow, hence the tail.
DEFAULT_BUCKETS = [0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]


# =============================================================================
# Metric Types
# =============================================================================


class LabeledMetric:
    """Base class for labeled metrics."""

    kind = "untyped"

    def __init__(self, name: str, description: str, label_names: list[str]) -> None:
        self.name = name
        self.description = description
        self.label_names = label_names
        self._lock = threading.RLock()

    def _key(self, labels: dict[str, str]) -> LabelKey:
        if set(labels) != set(self.label_names):
            raise ValueError(
                f"Labels {set(labels)} do not match expected {set(self.label_names)}"
            )
        return tuple(sorted(labels.items()))

    @staticmethod
    def _format_labels(labels: dict[str, str]) -> str:
        if not labels:
            return ""
        parts = [f'{k}="{v}"' for k, v in sorted(labels.items())]
        return "{" + ",".join(parts) + "}"

    def _header(self) -> list[str]:
        return [
            f"# HELP {self.name} {self.description}",
            f"# TYPE {self.name} {self.kind}",
        ]

    def labels(self, **kwargs: str) -> "BoundMetric":
        """Bind label values, prometheus_client style."""
        return BoundMetric(self, kwargs)

    def to_prometheus(self) -> list[str]:
        raise NotImplementedError


class Counter(LabeledMetric):
    """Monotonically increasing counter."""

    kind = "counter"

    def __init__(self, name: str, description: str, label_names: list[str]) -> None:
        super().__init__(name, description, label_names)
        self._values: dict[LabelKey, float] = defaultdict(float)

    def inc(self, value: float = 1.0, labels: dict[str, str] | None = None) -> None:
        key = self._key(labels or {})
        with self._lock:
            self._values[key] += value

    def value(self, **labels: str) -> float:
        """Current value for a label combination (0 if never touched)."""
        with self._lock:
            return self._values.get(self._key(labels), 0.0)

    def to_prometheus(self) -> list[str]:
        lines = self._header()
        with self._lock:
            for key, value in self._values.items():
                lines.append(f"{self.name}{self._format_labels(dict(key))} {value}")
        return lines


class Gauge(Counter):
    """Gauge: a counter whose value may also be set directly."""

    kind = "gauge"

    def set(self, value: float, labels: dict[str, str] | None = None) -> None:
        key = self._key(labels or {})
        with self._lock:
            self._values[key] = value


class Histogram(LabeledMetric):
    """Histogram with cumulative buckets, sum and count."""

    kind = "histogram"

    def __init__(
        self,
        name: str,
        description: str,
        label_names: list[str],
        buckets: list[float] | None = None,
    ) -> None:
        super().__init__(name, description, label_names)
        self.buckets = sorted(buckets or DEFAULT_BUCKETS)
        self._data: dict[LabelKey, dict[str, Any]] = {}

    def observe(self, value: float, labels: dict[str, str] | None = None) -> None:
        key = self._key(labels or {})
        with self._lock:
            data = self._data.setdefault(
                key,
                {"buckets": [0] * len(self.buckets), "sum": 0.0, "count": 0},
            )
            data["sum"] += value
            data["count"] += 1
            for index, bound in enumerate(self.buckets):
                if value <= bound:
                    data["buckets"][index] += 1

    def count(self, **labels: str) -> int:
        """Number of observations for a label combination."""
        with self._lock:
            data = self._data.get(self._key(labels))
            return data["count"] if data else 0

    def to_prometheus(self) -> list[str]:
        lines = self._header()
        with self._lock:
            for key, data in self._data.items():
                labels = dict(key)
                for bound, hits in zip(self.buckets, data["buckets"]):
                    bucket_labels = self._format_labels({**labels, "le": str(bound)})
                    lines.append(f"{self.name}_bucket{bucket_labels} {hits}")
                inf_labels = self._format_labels({**labels, "le": "+Inf"})
                lines.append(f"{self.name}_bucket{inf_labels} {data['count']}")
                base = self._format_labels(labels)
                lines.append(f"{self.name}_sum{base} {data['sum']}")
                lines.append(f"{self.name}_count{base} {data['count']}")
        return lines


class BoundMetric:
    """A metric with pre-bound label values."""

    def __init__(self, parent: LabeledMetric, labels: dict[str, str]) -> None:
        self._parent = parent
        self._labels = labels

    def inc(self, value: float = 1.0) -> None:
        self._parent.inc(value, self._labels)  # type: ignore[attr-defined]

    def set(self, value: float) -> None:
        self._parent.set(value, self._labels)  # type: ignore[attr-defined]

    def observe(self, value: float) -> None:
        self._parent.observe(value, self._labels)  # type: ignore[attr-defined]


# =============================================================================
# Registry
# =============================================================================


class MetricsRegistry:
    """Registry of named metrics; registering a name twice returns the original."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._metrics: dict[str, LabeledMetric] = {}

    def _register(self, metric: LabeledMetric) -> Any:
        with self._lock:
            return self._metrics.setdefault(metric.name, metric)

    def register_counter(
        self, name: str, description: str, labels: list[str] | None = None
    ) -> Counter:
        return self._register(Counter(name, description, labels or []))

    def register_gauge(
        self, name: str, description: str, labels: list[str] | None = None
    ) -> Gauge:
        return self._register(Gauge(name, description, labels or []))

    def register_histogram(
        self,
        name: str,
        description: str,
        labels: list[str] | None = None,
        buckets: list[float] | None = None,
    ) -> Histogram:
        return self._register(Histogram(name, description, labels or [], buckets))

    def collect(self) -> list[str]:
        """Collect all metrics in Prometheus text format."""
        lines: list[str] = []
        with self._lock:
            for metric in self._metrics.values():
                lines.extend(metric.to_prometheus())
        return lines


metrics_registry = MetricsRegistry()


# =============================================================================
# Pre-registered Metrics
# =============================================================================

# --- API Layer ---
http_requests_total = metrics_registry.register_counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

http_request_latency_seconds = metrics_registry.register_histogram(
    "http_request_latency_seconds",
    "HTTP request latency in seconds",
    ["method", "path"],
)

# --- LLM Provider ---
llm_requests_total = metrics_registry.register_counter(
    "llm_requests_total",
    "Total LLM provider calls",
    ["operation", "status"],
)

llm_request_latency_seconds = metrics_registry.register_histogram(
    "llm_request_latency_seconds",
    "LLM provider call latency in seconds",
    ["operation"],
)

# --- Admission Queue ---
admission_in_flight = metrics_registry.register_gauge(
    "admission_in_flight",
    "Work units currently executing",
    ["queue"],
)

admission_queued = metrics_registry.register_gauge(
    "admission_queued",
    "Work units waiting for a free slot",
    ["queue"],
)

admission_admitted_total = metrics_registry.register_counter(
    "admission_admitted_total",
    "Work units admitted (immediately or after waiting)",
    ["queue"],
)

admission_rejected_total = metrics_registry.register_counter(
    "admission_rejected_total",
    "Work units rejected because the queue was at capacity",
    ["queue"],
)

# --- Storage ---
analyses_stored_total = metrics_registry.register_counter(
    "analyses_stored_total",
    "Analyses persisted",
    ["sentiment"],
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_http_request(method: str, path: str, status: int, duration: float) -> None:
    """Record an HTTP request for metrics."""
    try:
        normalized_path = _normalize_path(path)
        http_requests_total.labels(
            method=method, path=normalized_path, status=str(status)
        ).inc()
        http_request_latency_seconds.labels(
            method=method, path=normalized_path
        ).observe(duration)
    except Exception as e:
        logger.warning("Failed to record HTTP metrics", error=str(e))


def record_llm_request(operation: str, status: str, duration: float) -> None:
    """Record an LLM provider call.

    Args:
        operation: "summary" or "metadata"
        status: "success", "timeout", "unavailable" or "invalid_response"
        duration: Call duration in seconds
    """
    try:
        llm_requests_total.labels(operation=operation, status=status).inc()
        llm_request_latency_seconds.labels(operation=operation).observe(duration)
    except Exception as e:
        logger.warning("Failed to record LLM metrics", error=str(e))


def record_admission_state(queue: str, in_flight: int, queued: int) -> None:
    """Publish the current admission queue occupancy."""
    try:
        admission_in_flight.labels(queue=queue).set(in_flight)
        admission_queued.labels(queue=queue).set(queued)
    except Exception as e:
        logger.warning("Failed to record admission metrics", error=str(e))


def record_admission_outcome(queue: str, admitted: bool) -> None:
    """Count one admission decision."""
    try:
        counter = admission_admitted_total if admitted else admission_rejected_total
        counter.labels(queue=queue).inc()
    except Exception as e:
        logger.warning("Failed to record admission metrics", error=str(e))


def record_analysis_stored(sentiment: str) -> None:
    """Count one persisted analysis."""
    try:
        analyses_stored_total.labels(sentiment=sentiment).inc()
    except Exception as e:
        logger.warning("Failed to record storage metrics", error=str(e))


def _normalize_path(path: str) -> str:
    """Replace UUIDs and numeric IDs with placeholders to bound cardinality."""
    path = re.sub(
        r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
        "{id}",
        path,
        flags=re.IGNORECASE,
    )
    return re.sub(r"/\d+(/|$)", "/{id}\\1", path)


def get_metrics_text() -> str:
    """Get all metrics in Prometheus text exposition format."""
    try:
        return "\n".join(metrics_registry.collect()) + "\n"
    except Exception as e:
        logger.error("Failed to collect metrics", error=str(e))
        return "# Error collecting metrics\n"


# =============================================================================
# Metrics Endpoint Router
# =============================================================================


def create_metrics_router() -> APIRouter:
    """Create FastAPI router exposing GET /metrics."""
    router = APIRouter(tags=["Observability"])

    @router.get(
        "/metrics",
        response_class=PlainTextResponse,
        summary="Prometheus metrics",
    )
    async def get_metrics() -> PlainTextResponse:
        return PlainTextResponse(
            content=get_metrics_text(),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    return router
