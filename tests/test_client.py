from __future__ import annotations

import asyncio
import socket

import pytest

from poolbench.config import PoolConfig, PoolKind, TargetConfig
from poolbench.loadgen.client import BaselineClient, KeepAliveClient, SupportsStatus, build_client
from poolbench.loadgen.target import TestTarget
from poolbench.metrics import ErrorType, RequestOutcome

CANDIDATE = PoolConfig(PoolKind.CANDIDATE, max_connections=5, max_keepalive_connections=5, timeout_sec=5.0)
BASELINE = PoolConfig(
    PoolKind.BASELINE,
    max_connections=5,
    max_keepalive_connections=5,
    timeout_sec=5.0,
    free_connection_timeout_sec=None,
)


def _closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


async def _sequential(client, port: int, n: int) -> list[RequestOutcome]:
    try:
        return [await client.issue("GET", "127.0.0.1", port, "/") for _ in range(n)]
    finally:
        await client.release()


def test_build_client_by_kind() -> None:
    candidate = build_client(CANDIDATE)
    baseline = build_client(BASELINE)
    assert isinstance(candidate, KeepAliveClient)
    assert isinstance(baseline, BaselineClient)
    assert isinstance(candidate, SupportsStatus)
    assert not isinstance(baseline, SupportsStatus)
    asyncio.run(candidate.release())
    asyncio.run(baseline.release())


@pytest.mark.parametrize("config", [CANDIDATE, BASELINE])
def test_sequential_requests_reuse_one_connection(config: PoolConfig) -> None:
    with TestTarget(TargetConfig(port=0)) as target:
        outcomes = asyncio.run(_sequential(build_client(config), target.port, 4))
    assert all(o.success for o in outcomes)
    assert [o.reused for o in outcomes] == [False, True, True, True]
    assert all(o.status_code == 200 for o in outcomes)


def test_candidate_status_counts_lifetime_activity() -> None:
    client = KeepAliveClient(CANDIDATE)
    with TestTarget(TargetConfig(port=0, failure_every=3)) as target:
        outcomes = asyncio.run(_sequential(client, target.port, 6))
    failed = [o for o in outcomes if not o.success]
    assert len(failed) == 2
    assert all(o.error_type is ErrorType.STATUS and o.status_code == 503 for o in failed)
    status = client.status()
    assert status.connections_created == 1
    assert status.requests_served == 6
    assert status.socket_errors == 0
    assert status.socket_timeouts == 0


def test_refused_connection_is_an_error_outcome() -> None:
    client = KeepAliveClient(CANDIDATE)
    outcomes = asyncio.run(_sequential(client, _closed_port(), 2))
    assert all(not o.success for o in outcomes)
    assert all(o.error_type is ErrorType.CONNECT for o in outcomes)
    status = client.status()
    assert status.socket_errors == 2
    assert status.requests_served == 0
