from __future__ import annotations

from poolbench.analysis import compare_pools
from poolbench.config import PoolConfig, PoolKind, ScenarioConfig, ScenarioKind
from poolbench.loadgen.runner import ScenarioResult
from poolbench.loadgen.window import WindowState
from poolbench.metrics import BenchmarkMetrics, ClientStatus
from poolbench.report import format_report, format_result, format_status, results_frame


def _result(name: str, kind: PoolKind, duration_sec: float, reused: int, total: int = 100) -> ScenarioResult:
    metrics = BenchmarkMetrics(name, started_at=0.0, ended_at=duration_sec)
    for i in range(total):
        metrics.record_success(reused=i < reused, latency_ms=1.0)
    scenario = ScenarioConfig(name, PoolConfig(kind, 10, 10), ScenarioKind.STEADY_STATE, total=total)
    window = WindowState(width=50, target=total, issued=total, completed=total, peak_in_flight=50)
    return ScenarioResult(scenario=scenario, metrics=metrics, window=window)


def test_report_lists_every_field() -> None:
    metrics = BenchmarkMetrics("Candidate Pool - Steady State", started_at=0.0, ended_at=0.5)
    for i in range(200):
        metrics.record_success(reused=i >= 10)
    metrics.record_error()
    text = format_report(metrics)
    assert text.splitlines()[0] == "=== Candidate Pool - Steady State ==="
    assert "Total operations: 200" in text
    assert "Duration: 500ms" in text
    assert "Operations/sec: 400" in text
    assert "Avg response time: 2.50ms" in text
    assert "Errors: 1" in text
    assert "Connections created: 10" in text
    assert "Connections reused: 190" in text
    assert "Keep-alive effectiveness: 95.00%" in text


def test_report_for_empty_run() -> None:
    metrics = BenchmarkMetrics("empty")
    metrics.start()
    metrics.end()
    text = format_report(metrics)
    assert "Operations/sec: 0" in text
    assert "Keep-alive effectiveness: 0.00%" in text


def test_status_block_follows_report() -> None:
    result = _result("status run", PoolKind.CANDIDATE, 1.0, reused=90)
    result = ScenarioResult(
        scenario=result.scenario,
        metrics=result.metrics,
        window=result.window,
        status=ClientStatus(connections_created=10, requests_served=100, socket_errors=1, socket_timeouts=2),
    )
    text = format_result(result)
    assert text.index("=== status run ===") < text.index("Client status:")
    assert "  Total connections created: 10" in format_status(result.status)
    assert "  Socket timeouts: 2" in text


def test_results_frame_and_pool_comparison() -> None:
    results = [
        _result("cand", PoolKind.CANDIDATE, duration_sec=0.5, reused=95),
        _result("base", PoolKind.BASELINE, duration_sec=1.0, reused=90),
    ]
    frame = results_frame(results)
    assert list(frame["scenario"]) == ["cand", "base"]
    assert list(frame["throughput"]) == [200, 100]
    assert list(frame["peak_in_flight"]) == [50, 50]

    comparisons = compare_pools(frame)
    assert len(comparisons) == 1
    comparison = comparisons[0]
    assert comparison.kind == "steady_state"
    assert comparison.total == 100
    assert comparison.throughput_delta_pct == 100.0
    assert comparison.reuse_delta_pts == 5.0
    assert comparison.latency_delta_pct == -50.0
    assert "beat" in comparison.message


def test_comparison_needs_both_pools() -> None:
    frame = results_frame([_result("cand", PoolKind.CANDIDATE, 1.0, reused=50)])
    assert compare_pools(frame) == []
    assert compare_pools(results_frame([])) == []
