from __future__ import annotations

import asyncio
import logging
import typing
import zlib
from collections.abc import Sequence
from contextlib import AsyncExitStack

from aiohttp import ClientSession, ClientWebSocketResponse, WSMessage, WSMsgType
from aiohttp.typedefs import StrOrURL

from cordgate.errors import TransportClosed

__all__: Sequence[str] = ("GatewayTransport", "Transport", "TransportFactory")

ZLIB_SUFFIX: typing.Final[bytes] = b"\x00\x00\xff\xff"

_CLOSE_TYPES: typing.Final[frozenset[WSMsgType]] = frozenset({WSMsgType.CLOSE, WSMsgType.CLOSING, WSMsgType.CLOSED})


class Transport(typing.Protocol):
    """Duplex frame stream the gateway runs over."""

    async def send(self, data: bytes) -> None: ...

    async def receive(self) -> bytes | str:
        """Return the next complete frame, raising :class:`~cordgate.errors.TransportClosed` once closed."""
        ...

    async def close(self, code: int = 1000) -> None: ...


class TransportFactory(typing.Protocol):
    async def __call__(
        self,
        url: StrOrURL,
        *,
        client_session: ClientSession | None,
        transport_compression: bool,
        logger: logging.Logger,
    ) -> Transport: ...


@typing.final
class GatewayTransport:
    @classmethod
    async def connect(
        cls,
        url: StrOrURL,
        *,
        client_session: ClientSession | None = None,
        transport_compression: bool = False,
        logger: logging.Logger | None = None,
    ) -> GatewayTransport:
        exit_stack: AsyncExitStack = AsyncExitStack()
        try:
            if client_session is None:
                client_session = ClientSession()
                await exit_stack.enter_async_context(client_session)
            connection = await exit_stack.enter_async_context(
                client_session.ws_connect(url, max_msg_size=0, autoclose=False)
            )
        except BaseException:
            await exit_stack.aclose()
            raise
        return cls(connection, exit_stack, transport_compression=transport_compression, logger=logger)

    def __init__(
        self,
        connection: ClientWebSocketResponse,
        exit_stack: AsyncExitStack,
        *,
        transport_compression: bool,
        logger: logging.Logger | None = None,
    ) -> None:
        self.connection: ClientWebSocketResponse = connection
        self.transport_compression: bool = transport_compression

        self._logger: logging.Logger = logger or logging.getLogger("cordgate.transport")
        self._exit_stack: AsyncExitStack = exit_stack
        self._write_lock: asyncio.Lock = asyncio.Lock()
        self._closed: bool = False

        self._inflator: zlib._Decompress | None = zlib.decompressobj() if self.transport_compression else None
        self._buffer: bytearray = bytearray()

    @property
    def closed(self) -> bool:
        return self._closed or self.connection.closed

    async def send(self, data: bytes) -> None:
        if self.closed:
            raise TransportClosed(self.connection.close_code, "send on closed transport")
        async with self._write_lock:
            self._logger.debug("send [%s bytes]", len(data))
            await self.connection.send_str(data.decode())

    async def _receive_message(self) -> WSMessage:
        message: WSMessage = await self.connection.receive()
        if message.type in _CLOSE_TYPES:
            code = message.data if message.type == WSMsgType.CLOSE else self.connection.close_code
            reason = message.extra if message.type == WSMsgType.CLOSE else ""
            self._logger.debug("received close [code:%s] %s", code, reason or "")
            raise TransportClosed(code, reason or "")
        if message.type == WSMsgType.ERROR:
            raise TransportClosed(self.connection.close_code, f"websocket error: {message.data}")
        return message

    async def _receive_stream(self, data: bytes) -> bytes:
        assert self._inflator is not None
        self._buffer.extend(data)
        while not self._buffer.endswith(ZLIB_SUFFIX):
            message = await self._receive_message()
            if message.type != WSMsgType.BINARY:
                raise TransportClosed(None, f"unexpected {message.type.name} frame inside zlib stream")
            self._buffer.extend(message.data)
        inflated = self._inflator.decompress(self._buffer)
        self._buffer.clear()
        return inflated

    async def receive(self) -> bytes | str:
        message = await self._receive_message()
        if message.type == WSMsgType.BINARY and self.transport_compression:
            return await self._receive_stream(message.data)
        if message.type == WSMsgType.TEXT and not self.transport_compression:
            return typing.cast(str, message.data)
        raise TransportClosed(None, f"unexpected {message.type.name} frame")

    async def close(self, code: int = 1000) -> None:
        if self._closed:
            return
        self._closed = True
        self._logger.debug("closing [code:%s]", code)
        try:
            if not self.connection.closed:
                await self.connection.close(code=code)
        finally:
            await self._exit_stack.aclose()
