"""Prometheus metrics for the log-mel feature service.

Metrics:
    melspec_extractions_total        Counter by status (success/invalid/error) and source (samples/file)
    melspec_extraction_seconds       Histogram of end-to-end extraction latency by source
    melspec_signal_seconds           Histogram of input signal duration in seconds

Usage::

    from infrastructure.metrics import LatencyTimer, record_extraction

    with LatencyTimer() as t:
        features = processor.compute(y)
    record_extraction(status="success", source="samples", latency_seconds=t.elapsed)
"""

from __future__ import annotations

import logging
import time

logger = logging.getLogger(__name__)

# Lazy import — prometheus_client is optional. If not installed, all calls
# are no-ops and the /metrics endpoint returns an empty body.
_registry_available = False
try:
    from prometheus_client import (
        CONTENT_TYPE_LATEST,
        CollectorRegistry,
        Counter,
        Histogram,
        generate_latest,
    )

    _REGISTRY = CollectorRegistry()

    extractions_total = Counter(
        "melspec_extractions_total",
        "Feature extractions by status and input source",
        ["status", "source"],
        registry=_REGISTRY,
    )

    extraction_seconds = Histogram(
        "melspec_extraction_seconds",
        "End-to-end feature extraction latency in seconds",
        ["source"],
        buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
        registry=_REGISTRY,
    )

    signal_seconds = Histogram(
        "melspec_signal_seconds",
        "Duration of input signals in seconds",
        buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
        registry=_REGISTRY,
    )

    _registry_available = True
    logger.info("Prometheus metrics registry initialized")

except ImportError:
    logger.info("prometheus_client not installed — metrics disabled")
    _REGISTRY = None  # type: ignore[assignment]


# ---------------------------------------------------------------------------
# Public helpers — all are no-ops when prometheus_client is not installed
# ---------------------------------------------------------------------------


def record_extraction(
    *,
    status: str,
    source: str,
    latency_seconds: float,
) -> None:
    """Record a finished feature extraction.

    Args:
        status: One of "success", "invalid", "error".
        source: "samples" for in-memory input, "file" for decoded files.
        latency_seconds: Wall-clock time in seconds.
    """
    if not _registry_available:
        return
    extractions_total.labels(status=status, source=source).inc()
    extraction_seconds.labels(source=source).observe(latency_seconds)


def record_signal_duration(duration_seconds: float) -> None:
    """Observe the duration of an input signal."""
    if _registry_available:
        signal_seconds.observe(duration_seconds)


def get_metrics_response() -> tuple[bytes, str]:
    """Generate Prometheus text exposition format.

    Returns:
        Tuple of (body_bytes, content_type_string).
        Returns empty bytes if prometheus_client is not available.
    """
    if not _registry_available:
        return b"", "text/plain"
    return generate_latest(_REGISTRY), CONTENT_TYPE_LATEST


class LatencyTimer:
    """Context manager for measuring latency.

    Usage::

        with LatencyTimer() as t:
            features = processor.compute(y)
        record_extraction(status="success", source="samples", latency_seconds=t.elapsed)
    """

    def __init__(self) -> None:
        """Initialize timer."""
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> LatencyTimer:
        """Start timing."""
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: object) -> None:
        """Stop timing and record elapsed."""
        self.elapsed = time.perf_counter() - self._start
