from __future__ import annotations

from poolbench.metrics.aggregator import latency_summary, summarize_latencies
from poolbench.metrics.models import (
    BenchmarkMetrics,
    ClientStatus,
    ErrorType,
    LatencySummary,
    MetricsStateError,
    RequestOutcome,
)

__all__ = [
    "BenchmarkMetrics",
    "ClientStatus",
    "ErrorType",
    "LatencySummary",
    "MetricsStateError",
    "RequestOutcome",
    "latency_summary",
    "summarize_latencies",
]
