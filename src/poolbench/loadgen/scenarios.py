from __future__ import annotations

import logging

from poolbench.config import ScenarioConfig, ScenarioKind, TargetConfig
from poolbench.loadgen.client import PoolClient
from poolbench.loadgen.window import ConcurrencyWindow, IssueFn, WindowState
from poolbench.metrics import BenchmarkMetrics, RequestOutcome

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 50


async def steady_state(
    client: PoolClient,
    metrics: BenchmarkMetrics,
    target: TargetConfig,
    total: int,
    width: int = DEFAULT_WIDTH,
) -> WindowState:
    return await _drive(client, metrics, target, total, width)


async def latency_probe(
    client: PoolClient,
    metrics: BenchmarkMetrics,
    target: TargetConfig,
    total: int,
) -> WindowState:
    return await _drive(client, metrics, target, total, 1)


async def burst(
    client: PoolClient,
    metrics: BenchmarkMetrics,
    target: TargetConfig,
    burst_size: int,
) -> WindowState:
    return await _drive(client, metrics, target, burst_size, None)


async def run_scenario(
    client: PoolClient,
    metrics: BenchmarkMetrics,
    target: TargetConfig,
    scenario: ScenarioConfig,
) -> WindowState:
    if scenario.kind is ScenarioKind.STEADY_STATE:
        return await steady_state(client, metrics, target, scenario.total, scenario.width)
    if scenario.kind is ScenarioKind.LATENCY_PROBE:
        return await latency_probe(client, metrics, target, scenario.total)
    if scenario.kind is ScenarioKind.BURST:
        return await burst(client, metrics, target, scenario.total)
    msg = f"Unsupported scenario kind: {scenario.kind}"
    raise ValueError(msg)


def _issuer(client: PoolClient, target: TargetConfig) -> IssueFn:
    async def issue() -> RequestOutcome:
        return await client.issue(target.method, target.host, target.port, target.path)

    return issue


async def _drive(
    client: PoolClient,
    metrics: BenchmarkMetrics,
    target: TargetConfig,
    total: int,
    width: int | None,
) -> WindowState:
    window = ConcurrencyWindow(_issuer(client, target), metrics, total=total, width=width)
    logger.info(
        "%s: driving %d operations (width=%s)",
        metrics.name,
        total,
        "unbounded" if width is None else width,
    )
    metrics.start()
    state = await window.run()
    metrics.end()
    return state
