from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import httpx

from poolbench.config import PoolConfig, PoolKind
from poolbench.metrics import ClientStatus, ErrorType, RequestOutcome

_CONNECT_COMPLETE = "connection.connect_tcp.complete"


class PoolClient(Protocol):
    async def issue(self, method: str, host: str, port: int, path: str) -> RequestOutcome:
        ...

    async def release(self) -> None:
        ...


@runtime_checkable
class SupportsStatus(Protocol):
    def status(self) -> ClientStatus:
        ...


class _HttpxPoolClient:
    """Shared request path for both pools.

    Whether a request opened a new connection is read from httpcore's
    ``trace`` extension: a ``connect_tcp`` event only fires when the pool had
    no idle connection to hand out.
    """

    def __init__(self, config: PoolConfig, limits: httpx.Limits) -> None:
        self.config = config
        self._client = httpx.AsyncClient(
            limits=limits,
            timeout=config.timeout_sec,
            trust_env=False,
        )

    async def issue(self, method: str, host: str, port: int, path: str) -> RequestOutcome:
        connected = False

        async def trace(event_name: str, info: dict[str, Any]) -> None:
            nonlocal connected
            if event_name == _CONNECT_COMPLETE:
                connected = True
                self._on_connection_created()

        try:
            resp = await self._client.request(
                method,
                f"http://{host}:{port}{path}",
                extensions={"trace": trace},
            )
        except httpx.TimeoutException:
            err = ErrorType.TIMEOUT
        except httpx.ConnectError:
            err = ErrorType.CONNECT
        except (httpx.ReadError, httpx.RemoteProtocolError):
            err = ErrorType.READ
        except httpx.HTTPError:
            err = ErrorType.OTHER
        else:
            self._on_response()
            if not resp.is_success:
                return RequestOutcome.failed(ErrorType.STATUS, status_code=resp.status_code)
            return RequestOutcome.ok(reused=not connected, status_code=resp.status_code)
        self._on_error(err)
        return RequestOutcome.failed(err)

    async def release(self) -> None:
        await self._client.aclose()

    def _on_connection_created(self) -> None:
        pass

    def _on_response(self) -> None:
        pass

    def _on_error(self, err: ErrorType) -> None:
        pass


class KeepAliveClient(_HttpxPoolClient):
    """Candidate pool: idle connections expire after a free-connection timeout
    and lifetime counters are kept for status reporting."""

    def __init__(self, config: PoolConfig) -> None:
        limits = httpx.Limits(
            max_connections=config.max_connections,
            max_keepalive_connections=config.max_keepalive_connections,
            keepalive_expiry=config.free_connection_timeout_sec,
        )
        super().__init__(config, limits)
        self._connections_created = 0
        self._requests_served = 0
        self._socket_errors = 0
        self._socket_timeouts = 0

    def status(self) -> ClientStatus:
        return ClientStatus(
            connections_created=self._connections_created,
            requests_served=self._requests_served,
            socket_errors=self._socket_errors,
            socket_timeouts=self._socket_timeouts,
        )

    def _on_connection_created(self) -> None:
        self._connections_created += 1

    def _on_response(self) -> None:
        self._requests_served += 1

    def _on_error(self, err: ErrorType) -> None:
        if err is ErrorType.TIMEOUT:
            self._socket_timeouts += 1
        else:
            self._socket_errors += 1


class BaselineClient(_HttpxPoolClient):
    """Baseline pool: same sizing, library default idle expiry, no status."""

    def __init__(self, config: PoolConfig) -> None:
        limits = httpx.Limits(
            max_connections=config.max_connections,
            max_keepalive_connections=config.max_keepalive_connections,
        )
        super().__init__(config, limits)


def build_client(config: PoolConfig) -> KeepAliveClient | BaselineClient:
    if config.kind is PoolKind.CANDIDATE:
        return KeepAliveClient(config)
    if config.kind is PoolKind.BASELINE:
        return BaselineClient(config)
    msg = f"Unsupported pool kind: {config.kind}"
    raise ValueError(msg)
