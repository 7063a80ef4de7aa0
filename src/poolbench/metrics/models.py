from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum


class ErrorType(str, Enum):
    TIMEOUT = "timeout"
    CONNECT = "connect"
    READ = "read"
    STATUS = "status"
    OTHER = "other"


class MetricsStateError(RuntimeError):
    """Raised when start()/end() are called out of order."""


@dataclass(frozen=True, slots=True)
class RequestOutcome:
    success: bool
    reused: bool = False
    status_code: int | None = None
    error_type: ErrorType | None = None

    @classmethod
    def ok(cls, reused: bool, status_code: int | None = None) -> RequestOutcome:
        return cls(success=True, reused=reused, status_code=status_code)

    @classmethod
    def failed(cls, error_type: ErrorType, status_code: int | None = None) -> RequestOutcome:
        return cls(success=False, status_code=status_code, error_type=error_type)


@dataclass(frozen=True, slots=True)
class ClientStatus:
    connections_created: int
    requests_served: int
    socket_errors: int
    socket_timeouts: int


@dataclass(frozen=True, slots=True)
class LatencySummary:
    p50_ms: float
    p95_ms: float
    p99_ms: float
    max_ms: float


@dataclass(slots=True)
class BenchmarkMetrics:
    """Counters and timestamps for a single scenario run.

    Every successful operation is classified exactly once as either a new
    connection or a reused one, so ``connections_created +
    connections_reused == operations`` holds at all times. Failed operations
    only ever touch ``errors``.
    """

    name: str
    started_at: float | None = None
    ended_at: float | None = None
    operations: int = 0
    errors: int = 0
    connections_created: int = 0
    connections_reused: int = 0
    latencies_ms: list[float] = field(default_factory=list)

    def start(self) -> None:
        if self.started_at is not None:
            msg = f"Metrics for {self.name!r} already started"
            raise MetricsStateError(msg)
        self.started_at = time.perf_counter()

    def end(self) -> None:
        if self.started_at is None:
            msg = f"Metrics for {self.name!r} ended before start"
            raise MetricsStateError(msg)
        if self.ended_at is not None:
            msg = f"Metrics for {self.name!r} already ended"
            raise MetricsStateError(msg)
        self.ended_at = max(time.perf_counter(), self.started_at)

    def record_success(self, reused: bool, latency_ms: float | None = None) -> None:
        self.operations += 1
        if reused:
            self.connections_reused += 1
        else:
            self.connections_created += 1
        if latency_ms is not None:
            self.latencies_ms.append(latency_ms)

    def record_error(self, latency_ms: float | None = None) -> None:
        self.errors += 1
        if latency_ms is not None:
            self.latencies_ms.append(latency_ms)

    def record(self, outcome: RequestOutcome, latency_ms: float | None = None) -> None:
        if outcome.success:
            self.record_success(outcome.reused, latency_ms)
        else:
            self.record_error(latency_ms)

    @property
    def completed(self) -> int:
        return self.operations + self.errors

    @property
    def duration_ms(self) -> float:
        if self.started_at is None or self.ended_at is None:
            return 0.0
        return (self.ended_at - self.started_at) * 1000.0

    @property
    def throughput(self) -> int:
        duration = self.duration_ms
        if self.operations == 0 or duration <= 0:
            return 0
        return round(self.operations / duration * 1000)

    @property
    def avg_latency_ms(self) -> float:
        if self.operations == 0:
            return 0.0
        return round(self.duration_ms / self.operations, 2)

    @property
    def reuse_ratio(self) -> float:
        if self.operations == 0:
            return 0.0
        return round(self.connections_reused / self.operations * 100, 2)
