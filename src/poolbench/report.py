from __future__ import annotations

from typing import Iterable

import pandas as pd

from poolbench.loadgen.runner import ScenarioResult
from poolbench.metrics import BenchmarkMetrics, ClientStatus, latency_summary


def format_report(metrics: BenchmarkMetrics) -> str:
    latency = latency_summary(metrics)
    lines = [
        f"=== {metrics.name} ===",
        f"Total operations: {metrics.operations}",
        f"Duration: {metrics.duration_ms:.0f}ms",
        f"Operations/sec: {metrics.throughput}",
        f"Avg response time: {metrics.avg_latency_ms:.2f}ms",
        f"Errors: {metrics.errors}",
        f"Connections created: {metrics.connections_created}",
        f"Connections reused: {metrics.connections_reused}",
        f"Keep-alive effectiveness: {metrics.reuse_ratio:.2f}%",
        f"Latency p50/p95/p99: {latency.p50_ms:.2f}/{latency.p95_ms:.2f}/{latency.p99_ms:.2f}ms",
    ]
    return "\n".join(lines)


def format_status(status: ClientStatus) -> str:
    lines = [
        "Client status:",
        f"  Total connections created: {status.connections_created}",
        f"  Total requests served: {status.requests_served}",
        f"  Socket errors: {status.socket_errors}",
        f"  Socket timeouts: {status.socket_timeouts}",
    ]
    return "\n".join(lines)


def format_result(result: ScenarioResult) -> str:
    text = format_report(result.metrics)
    if result.status is not None:
        text = f"{text}\n\n{format_status(result.status)}"
    return text


def results_frame(results: Iterable[ScenarioResult]) -> pd.DataFrame:
    rows = []
    for result in results:
        m = result.metrics
        latency = latency_summary(m)
        rows.append(
            {
                "scenario": m.name,
                "pool": result.scenario.pool.kind.value,
                "kind": result.scenario.kind.value,
                "total": result.scenario.total,
                "operations": m.operations,
                "errors": m.errors,
                "duration_ms": round(m.duration_ms, 2),
                "throughput": m.throughput,
                "avg_latency_ms": m.avg_latency_ms,
                "connections_created": m.connections_created,
                "connections_reused": m.connections_reused,
                "reuse_ratio": m.reuse_ratio,
                "p50_ms": latency.p50_ms,
                "p95_ms": latency.p95_ms,
                "p99_ms": latency.p99_ms,
                "peak_in_flight": result.window.peak_in_flight,
            }
        )
    return pd.DataFrame(rows)
