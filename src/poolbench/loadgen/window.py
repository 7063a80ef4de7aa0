from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from poolbench.metrics import BenchmarkMetrics, ErrorType, RequestOutcome

logger = logging.getLogger(__name__)

IssueFn = Callable[[], Awaitable[RequestOutcome]]


@dataclass(slots=True)
class WindowState:
    width: int | None
    target: int
    issued: int = 0
    completed: int = 0
    peak_in_flight: int = 0

    @property
    def in_flight(self) -> int:
        return self.issued - self.completed


class CompletionLatch:
    """Countdown that fires exactly once when it reaches zero.

    Count-downs past zero are ignored, so a late or duplicated terminal
    outcome can never re-trigger completion.
    """

    def __init__(self, count: int) -> None:
        if count < 0:
            msg = f"Latch count must be >= 0, got {count}"
            raise ValueError(msg)
        self._remaining = count
        self._event = asyncio.Event()
        self.fired = 0
        if count == 0:
            self._fire()

    @property
    def remaining(self) -> int:
        return self._remaining

    def count_down(self) -> bool:
        if self._remaining == 0:
            return False
        self._remaining -= 1
        if self._remaining == 0:
            self._fire()
            return True
        return False

    async def wait(self) -> None:
        await self._event.wait()

    def _fire(self) -> None:
        if self._event.is_set():
            return
        self.fired += 1
        self._event.set()


class ConcurrencyWindow:
    """Drive ``total`` operations through ``issue`` with at most ``width`` in flight.

    ``width=None`` selects burst mode: every operation is issued up front and
    the window only waits for the outcomes. Otherwise a semaphore of ``width``
    tokens gates issuance and each completion hands its token to the next
    operation.
    """

    def __init__(
        self,
        issue: IssueFn,
        metrics: BenchmarkMetrics,
        total: int,
        width: int | None,
    ) -> None:
        if total < 0:
            msg = f"Total operations must be >= 0, got {total}"
            raise ValueError(msg)
        if width is not None and width < 1:
            msg = f"Window width must be >= 1, got {width}"
            raise ValueError(msg)
        self._issue = issue
        self._metrics = metrics
        self.state = WindowState(width=width, target=total)
        self._latch = CompletionLatch(total)
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def latch(self) -> CompletionLatch:
        return self._latch

    async def run(self) -> WindowState:
        if self.state.width is None:
            self._issue_burst()
        else:
            await self._issue_bounded(self.state.width)
        await self._latch.wait()
        return self.state

    async def _issue_bounded(self, width: int) -> None:
        tokens = asyncio.Semaphore(width)
        for _ in range(self.state.target):
            await tokens.acquire()
            self._spawn(tokens)

    def _issue_burst(self) -> None:
        for _ in range(self.state.target):
            self._spawn(None)

    def _spawn(self, tokens: asyncio.Semaphore | None) -> None:
        self.state.issued += 1
        self.state.peak_in_flight = max(self.state.peak_in_flight, self.state.in_flight)
        task = asyncio.create_task(self._run_one(tokens))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_one(self, tokens: asyncio.Semaphore | None) -> None:
        started = time.perf_counter()
        try:
            outcome = await self._issue()
        except Exception as exc:
            logger.debug("%s: operation raised %r", self._metrics.name, exc)
            outcome = RequestOutcome.failed(ErrorType.OTHER)
        latency_ms = (time.perf_counter() - started) * 1000.0
        if not outcome.success:
            logger.debug(
                "%s: operation failed (%s, status=%s)",
                self._metrics.name,
                outcome.error_type.value if outcome.error_type else "unknown",
                outcome.status_code,
            )
        self._complete(outcome, latency_ms)
        if tokens is not None:
            tokens.release()

    def _complete(self, outcome: RequestOutcome, latency_ms: float) -> None:
        self._metrics.record(outcome, latency_ms)
        self.state.completed += 1
        self._latch.count_down()
