"""
Shared fixtures: an in-memory gateway server standing in for the websocket transport.
"""

from __future__ import annotations

import asyncio
import contextlib
import typing
from collections.abc import AsyncIterator, Callable
from typing import Any

import msgspec
import pytest
import pytest_asyncio

from cordgate.errors import GatewayClosedError, TransportClosed
from cordgate.gateway import Backoff, Gateway

GATEWAY_URL = "wss://gateway.test"
RESUME_URL = "wss://resume.test"
WAIT_TIMEOUT = 2.0


async def wait_until(predicate: Callable[[], bool], timeout: float = WAIT_TIMEOUT) -> None:
    async def poll() -> None:
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(poll(), timeout)


class FakeTransport:
    """Scripted websocket: tests push inbound frames, outbound frames are decoded into ``sent``."""

    def __init__(self, url: str) -> None:
        self.url = url
        self.sent: list[dict[str, Any]] = []
        self.close_code: int | None = None
        self.send_error: Exception | None = None
        self._incoming: asyncio.Queue[bytes | str | TransportClosed] = asyncio.Queue()

    def feed(self, op: int, d: Any = None, *, s: int | None = None, t: str | None = None) -> None:
        self._incoming.put_nowait(msgspec.json.encode({"op": op, "d": d, "s": s, "t": t}))

    def feed_raw(self, data: bytes | str) -> None:
        self._incoming.put_nowait(data)

    def hello(self, interval_ms: int = 41250) -> None:
        self.feed(10, {"heartbeat_interval": interval_ms})

    def dispatch(self, name: str, d: Any, s: int) -> None:
        self.feed(0, d, s=s, t=name)

    def drop(self, code: int | None, reason: str = "") -> None:
        """Close from the server side."""
        self._incoming.put_nowait(TransportClosed(code, reason))

    def ops(self) -> list[int]:
        return [frame["op"] for frame in self.sent]

    async def wait_for_op(self, op: int, *, count: int = 1) -> dict[str, Any]:
        await wait_until(lambda: self.ops().count(op) >= count)
        return [frame for frame in self.sent if frame["op"] == op][count - 1]

    async def send(self, data: bytes) -> None:
        if self.close_code is not None:
            raise TransportClosed(self.close_code, "closed")
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(msgspec.json.decode(data))

    async def receive(self) -> bytes | str:
        item = await self._incoming.get()
        if isinstance(item, TransportClosed):
            raise item
        return item

    async def close(self, code: int = 1000) -> None:
        if self.close_code is None:
            self.close_code = code
            self._incoming.put_nowait(TransportClosed(code, "closed locally"))


class FakeGatewayServer:
    """Transport factory recording every connection attempt."""

    def __init__(self) -> None:
        self.transports: list[FakeTransport] = []
        self.failures: list[BaseException] = []

    async def __call__(
        self, url: Any, *, client_session: Any, transport_compression: bool, logger: Any
    ) -> FakeTransport:
        if self.failures:
            raise self.failures.pop(0)
        transport = FakeTransport(str(url))
        self.transports.append(transport)
        return transport

    async def connection(self, index: int) -> FakeTransport:
        await wait_until(lambda: len(self.transports) > index)
        return self.transports[index]


def ready_data(session_id: str = "abc123", resume_url: str = RESUME_URL) -> dict[str, Any]:
    return {
        "v": 10,
        "user": {"id": "80351110224678912", "username": "nelly", "discriminator": "0", "bot": True},
        "guilds": [{"id": "41771983423143937", "unavailable": True}],
        "session_id": session_id,
        "resume_gateway_url": resume_url,
        "application": {"id": "80351110224678912", "flags": 0},
    }


def message_data(content: str = "hello", message_id: str = "1101") -> dict[str, Any]:
    return {
        "id": message_id,
        "channel_id": "290926798999357250",
        "author": {"id": "80351110224678912", "username": "nelly", "discriminator": "0"},
        "content": content,
        "timestamp": "2024-01-01T00:00:00+00:00",
    }


@pytest.fixture
def server() -> FakeGatewayServer:
    return FakeGatewayServer()


@pytest.fixture
def make_gateway(server: FakeGatewayServer) -> Callable[..., Gateway]:
    def make(**kwargs: Any) -> Gateway:
        kwargs.setdefault("backoff", Backoff(base=0, maximum=0, jitter=0))
        return Gateway(GATEWAY_URL, "token", transport_factory=server, **kwargs)

    return make


@pytest.fixture
def running() -> Callable[[Gateway], typing.AsyncContextManager[asyncio.Task[None]]]:
    @contextlib.asynccontextmanager
    async def run(gateway: Gateway) -> AsyncIterator[asyncio.Task[None]]:
        task = asyncio.create_task(gateway.connect())
        try:
            yield task
        finally:
            await gateway.close()
            with contextlib.suppress(GatewayClosedError):
                await asyncio.wait_for(task, WAIT_TIMEOUT)

    return run


@pytest_asyncio.fixture
async def connected(
    make_gateway: Callable[..., Gateway],
    server: FakeGatewayServer,
    running: Callable[[Gateway], typing.AsyncContextManager[asyncio.Task[None]]],
) -> AsyncIterator[tuple[Gateway, FakeTransport]]:
    """A gateway past ``READY`` with session ``abc123``."""
    gateway = make_gateway()
    async with running(gateway):
        transport = await server.connection(0)
        transport.hello()
        await transport.wait_for_op(2)
        transport.dispatch("READY", ready_data(), s=1)
        await wait_until(lambda: gateway.state.value == "connected")
        yield gateway, transport
