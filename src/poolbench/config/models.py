from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping


class PoolKind(str, Enum):
    CANDIDATE = "candidate"
    BASELINE = "baseline"


class ScenarioKind(str, Enum):
    STEADY_STATE = "steady_state"
    LATENCY_PROBE = "latency_probe"
    BURST = "burst"


@dataclass(frozen=True, slots=True)
class TargetConfig:
    host: str = "127.0.0.1"
    port: int = 8888
    path: str = "/"
    method: str = "GET"
    body: bytes = b"OK"
    content_type: str = "text/plain"
    failure_every: int = 0  # every N-th request answers 503; 0 disables

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}{self.path}"

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "path": self.path,
            "method": self.method,
            "content_type": self.content_type,
            "failure_every": self.failure_every,
        }


@dataclass(frozen=True, slots=True)
class PoolConfig:
    kind: PoolKind
    max_connections: int
    max_keepalive_connections: int
    timeout_sec: float = 30.0
    free_connection_timeout_sec: float | None = 15.0

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "kind": self.kind.value,
            "max_connections": self.max_connections,
            "max_keepalive_connections": self.max_keepalive_connections,
            "timeout_sec": self.timeout_sec,
            "free_connection_timeout_sec": self.free_connection_timeout_sec,
        }


@dataclass(frozen=True, slots=True)
class ScenarioConfig:
    name: str
    pool: PoolConfig
    kind: ScenarioKind
    total: int
    width: int = 50
    report_status: bool = False

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "total": self.total,
            "width": self.width,
            "report_status": self.report_status,
            "pool": dict(self.pool.to_metadata()),
        }


@dataclass(frozen=True, slots=True)
class BenchmarkPlan:
    """Ordered list of scenario runs sharing one target responder."""

    target: TargetConfig = field(default_factory=TargetConfig)
    scenarios: tuple[ScenarioConfig, ...] = ()

    def __iter__(self):
        return iter(self.scenarios)

    def validate(self) -> None:
        designated = 0
        for scenario in self.scenarios:
            if not scenario.name:
                msg = "Scenario name must not be empty"
                raise ValueError(msg)
            if scenario.total < 0:
                msg = f"Scenario {scenario.name!r} has a negative total: {scenario.total}"
                raise ValueError(msg)
            if scenario.kind is ScenarioKind.STEADY_STATE and scenario.width < 1:
                msg = f"Scenario {scenario.name!r} needs a window width >= 1"
                raise ValueError(msg)
            if scenario.report_status:
                designated += 1
                if scenario.pool.kind is not PoolKind.CANDIDATE:
                    msg = f"Scenario {scenario.name!r} reports status but uses a baseline pool"
                    raise ValueError(msg)
        if designated > 1:
            msg = f"At most one scenario may report client status, got {designated}"
            raise ValueError(msg)

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "target": dict(self.target.to_metadata()),
            "scenarios": [dict(s.to_metadata()) for s in self.scenarios],
        }


def default_benchmark_plan(target: TargetConfig | None = None) -> BenchmarkPlan:
    """Return the standard candidate-vs-baseline suite."""

    def candidate(size: int, keepalive: int) -> PoolConfig:
        return PoolConfig(PoolKind.CANDIDATE, size, keepalive)

    def baseline(size: int, keepalive: int) -> PoolConfig:
        return PoolConfig(PoolKind.BASELINE, size, keepalive, free_connection_timeout_sec=None)

    scenarios = (
        ScenarioConfig(
            name="Candidate Pool - Steady State",
            pool=candidate(10, 10),
            kind=ScenarioKind.STEADY_STATE,
            total=1000,
        ),
        ScenarioConfig(
            name="Baseline Pool - Steady State",
            pool=baseline(10, 10),
            kind=ScenarioKind.STEADY_STATE,
            total=1000,
        ),
        ScenarioConfig(
            name="Candidate Pool - Latency Probe",
            pool=candidate(5, 5),
            kind=ScenarioKind.LATENCY_PROBE,
            total=500,
            width=1,
        ),
        ScenarioConfig(
            name="Candidate Pool - Burst (100 concurrent)",
            pool=candidate(100, 50),
            kind=ScenarioKind.BURST,
            total=100,
        ),
        ScenarioConfig(
            name="Baseline Pool - Burst (100 concurrent)",
            pool=baseline(100, 50),
            kind=ScenarioKind.BURST,
            total=100,
        ),
        ScenarioConfig(
            name="Candidate Pool - High Throughput (5000 requests)",
            pool=candidate(20, 20),
            kind=ScenarioKind.STEADY_STATE,
            total=5000,
            report_status=True,
        ),
    )
    return BenchmarkPlan(target=target or TargetConfig(), scenarios=scenarios)


def plan_from_mapping(data: Mapping[str, Any]) -> BenchmarkPlan:
    if not isinstance(data, Mapping):
        msg = f"Malformed benchmark plan: expected an object, got {type(data).__name__}"
        raise ValueError(msg)
    try:
        target_data = dict(data.get("target") or {})
        if isinstance(target_data.get("body"), str):
            target_data["body"] = target_data["body"].encode("utf-8")
        target = TargetConfig(**target_data)
        scenarios = tuple(_scenario_from_mapping(item) for item in data.get("scenarios", []))
    except (TypeError, KeyError, ValueError) as exc:
        msg = f"Malformed benchmark plan: {exc}"
        raise ValueError(msg) from exc
    plan = BenchmarkPlan(target=target, scenarios=scenarios)
    plan.validate()
    return plan


def load_plan(path: str | Path | None) -> BenchmarkPlan:
    if not path:
        return default_benchmark_plan()
    with open(path, encoding="utf-8") as handle:
        return plan_from_mapping(json.load(handle))


def _scenario_from_mapping(item: Mapping[str, Any]) -> ScenarioConfig:
    pool_data = dict(item["pool"])
    pool_data["kind"] = PoolKind(pool_data["kind"])
    return ScenarioConfig(
        name=item["name"],
        pool=PoolConfig(**pool_data),
        kind=ScenarioKind(item["kind"]),
        total=int(item["total"]),
        width=int(item.get("width", 50)),
        report_status=bool(item.get("report_status", False)),
    )
