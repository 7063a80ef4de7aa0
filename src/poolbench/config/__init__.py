from __future__ import annotations

from poolbench.config.models import (
    BenchmarkPlan,
    PoolConfig,
    PoolKind,
    ScenarioConfig,
    ScenarioKind,
    TargetConfig,
    default_benchmark_plan,
    load_plan,
    plan_from_mapping,
)

__all__ = [
    "BenchmarkPlan",
    "PoolConfig",
    "PoolKind",
    "ScenarioConfig",
    "ScenarioKind",
    "TargetConfig",
    "default_benchmark_plan",
    "load_plan",
    "plan_from_mapping",
]
