from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable

from poolbench.config import BenchmarkPlan, ScenarioConfig, TargetConfig
from poolbench.loadgen.client import SupportsStatus, build_client
from poolbench.loadgen.scenarios import run_scenario
from poolbench.loadgen.target import TestTarget
from poolbench.loadgen.window import WindowState
from poolbench.metrics import BenchmarkMetrics, ClientStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScenarioResult:
    scenario: ScenarioConfig
    metrics: BenchmarkMetrics
    window: WindowState
    status: ClientStatus | None = None


Reporter = Callable[[ScenarioResult], None]


async def run_benchmarks(
    plan: BenchmarkPlan,
    reporter: Reporter | None = None,
) -> list[ScenarioResult]:
    """Run every scenario of ``plan`` in order against one shared target.

    A target that fails to bind raises ``TargetBindError`` before any
    scenario runs.
    """
    plan.validate()
    server = TestTarget(plan.target)
    server.start()
    results: list[ScenarioResult] = []
    try:
        target = dataclasses.replace(plan.target, port=server.port)
        for scenario in plan:
            result = await run_one(scenario, target)
            results.append(result)
            if reporter is not None:
                reporter(result)
    finally:
        server.stop()
    return results


async def run_one(scenario: ScenarioConfig, target: TargetConfig) -> ScenarioResult:
    client = build_client(scenario.pool)
    metrics = BenchmarkMetrics(scenario.name)
    try:
        window = await run_scenario(client, metrics, target, scenario)
        status = None
        if scenario.report_status:
            if not isinstance(client, SupportsStatus):
                msg = f"Client for {scenario.name!r} does not report status"
                raise ValueError(msg)
            status = client.status()
    finally:
        await client.release()
    logger.info(
        "%s: %d ok, %d errors in %.0fms",
        scenario.name,
        metrics.operations,
        metrics.errors,
        metrics.duration_ms,
    )
    return ScenarioResult(scenario=scenario, metrics=metrics, window=window, status=status)
