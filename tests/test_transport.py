from __future__ import annotations

import zlib

import pytest
from aiohttp import test_utils, web

from cordgate.errors import TransportClosed
from cordgate.gateway import GatewayTransport

HELLO = '{"op": 10, "d": {"heartbeat_interval": 41250}}'


async def _echo_then_close(request: web.Request) -> web.WebSocketResponse:
    ws = web.WebSocketResponse()
    await ws.prepare(request)
    await ws.send_str(HELLO)
    message = await ws.receive()
    await ws.send_str(message.data)
    await ws.close(code=4009, message=b"Session timed out")
    return ws


async def _compressed(request: web.Request) -> web.WebSocketResponse:
    ws = web.WebSocketResponse()
    await ws.prepare(request)
    compressor = zlib.compressobj()
    for frame in (HELLO.encode(), b'{"op": 11}'):
        data = compressor.compress(frame) + compressor.flush(zlib.Z_SYNC_FLUSH)
        await ws.send_bytes(data[:4])
        await ws.send_bytes(data[4:])
    await ws.receive()
    return ws


def _app() -> web.Application:
    app = web.Application()
    app.router.add_get("/", _echo_then_close)
    app.router.add_get("/zlib", _compressed)
    return app


@pytest.mark.asyncio
async def test_text_frames_and_close_code() -> None:
    async with test_utils.TestServer(_app()) as server:
        transport = await GatewayTransport.connect(server.make_url("/"))
        try:
            assert await transport.receive() == HELLO
            await transport.send(b'{"op": 1, "d": null}')
            assert await transport.receive() == '{"op": 1, "d": null}'

            with pytest.raises(TransportClosed) as exc_info:
                await transport.receive()
            assert exc_info.value.code == 4009
            assert exc_info.value.reason == "Session timed out"
        finally:
            await transport.close(1000)

        assert transport.closed
        with pytest.raises(TransportClosed):
            await transport.send(b"{}")
        await transport.close(1000)


@pytest.mark.asyncio
async def test_zlib_stream_is_reassembled() -> None:
    async with test_utils.TestServer(_app()) as server:
        transport = await GatewayTransport.connect(server.make_url("/zlib"), transport_compression=True)
        try:
            assert await transport.receive() == HELLO.encode()
            assert await transport.receive() == b'{"op": 11}'
        finally:
            await transport.close(1000)
