from __future__ import annotations

from typing import Iterable

import numpy as np

from poolbench.metrics.models import BenchmarkMetrics, LatencySummary


def summarize_latencies(samples: Iterable[float]) -> LatencySummary:
    latencies = [s for s in samples if s >= 0]
    if not latencies:
        return LatencySummary(p50_ms=0.0, p95_ms=0.0, p99_ms=0.0, max_ms=0.0)
    p50, p95, p99 = np.percentile(latencies, [50, 95, 99])
    return LatencySummary(
        p50_ms=round(float(p50), 2),
        p95_ms=round(float(p95), 2),
        p99_ms=round(float(p99), 2),
        max_ms=round(float(max(latencies)), 2),
    )


def latency_summary(metrics: BenchmarkMetrics) -> LatencySummary:
    return summarize_latencies(metrics.latencies_ms)
