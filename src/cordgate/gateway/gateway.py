from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
import platform
import sys
import time
import typing
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum
from typing import Any, Final

import aiohttp
from aiohttp import ClientSession
from msgspec import Struct
from yarl import URL

from cordgate.errors import (
    CordgateError,
    DecodeError,
    GatewayClosedError,
    GatewayNotConnectedError,
    TransportClosed,
)
from cordgate.events import RawType, Ready, UnknownEvent
from cordgate.intents import Intents
from cordgate.models import Activity, Snowflake, Status, User

from . import _registry
from ._backoff import Backoff
from ._close_codes import lookup_close_code
from ._codec import GatewayCodec
from ._heartbeat import HeartbeatDriver
from ._payload import (
    ConnectionProperties,
    GatewayPayload,
    Hello,
    Identify,
    OpCode,
    RequestGuildMembers,
    Resume,
    ShardInfo,
    UpdatePresence,
    UpdateVoiceState,
)
from ._session import Session
from ._transport import GatewayTransport, Transport, TransportFactory

__all__: Sequence[str] = ("Disconnect", "Gateway", "GatewayState", "ShardInfo")

GATEWAY_VERSION: Final[int] = 10

_LIBRARY_NAME: Final[str] = sys.intern("cordgate")

_READY: Final[str] = sys.intern(RawType.READY.value)
_RESUMED: Final[str] = sys.intern(RawType.RESUMED.value)

# close codes below this are websocket level, not gateway verdicts
_GATEWAY_CLOSE_CODES: Final[int] = 4000
# closing with 1000 or 1001 invalidates the session server side
_RESUMABLE_CLOSE: Final[int] = 4000
_NORMAL_CLOSE: Final[int] = 1000

Subscriber = Callable[[GatewayPayload], "Awaitable[None] | None"]
DisconnectListener = Callable[["Disconnect"], "Awaitable[None] | None"]


class GatewayState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AWAITING_HELLO = "awaiting_hello"
    IDENTIFYING = "identifying"
    RESUMING = "resuming"
    CONNECTED = "connected"
    CLOSING = "closing"


class Disconnect(Struct, frozen=True):
    """Why a connection ended and what happens next.

    ``will_retry`` is ``False`` when the gateway gave up; ``connect`` then raises
    :class:`~cordgate.errors.GatewayClosedError`.
    """

    code: int | None
    description: str
    resumable: bool
    will_retry: bool


class _Received(Struct):
    data: bytes | str


class _Lost(Struct):
    code: int | None
    description: str
    resumable: bool = True


class _HeartbeatTimeout(Struct):
    pass


class _Shutdown(Struct):
    pass


_Signal = typing.Union[_Received, _Lost, _HeartbeatTimeout, _Shutdown]


class _Subscription(Struct):
    callback: Subscriber
    names: frozenset[str] | None


def _event_name(raw_type: RawType | str) -> str:
    return raw_type.value if isinstance(raw_type, RawType) else raw_type


class Gateway:
    """One shard's connection to the gateway.

    ``connect`` runs until :meth:`close` is called or the gateway refuses to
    continue (bad token, invalid shard, disallowed intents...), reconnecting
    and resuming the session on its own in between. All state transitions
    happen in ``connect``'s task: inbound frames, heartbeat timeouts and
    shutdown requests are queued and handled one at a time.
    """

    _logger: logging.Logger = logging.getLogger("cordgate.gateway")

    def __init__(
        self,
        url: str,
        token: str,
        *,
        intents: Intents = Intents.default(),
        shard_id: int | None = None,
        shard_count: int | None = None,
        large_threshold: int = 50,
        presence: UpdatePresence | None = None,
        client_session: ClientSession | None = None,
        transport_compression: bool = False,
        browser: str = _LIBRARY_NAME,
        device: str = _LIBRARY_NAME,
        backoff: Backoff | None = None,
        backoff_reset_after: float = 60.0,
        hello_timeout: float = 20.0,
        logger: logging.Logger | None = None,
        transport_factory: TransportFactory | None = None,
    ) -> None:
        if not 50 <= large_threshold <= 250:
            raise ValueError("large_threshold must be between 50 and 250")
        if (shard_id is None) != (shard_count is None):
            raise ValueError("shard_id and shard_count must be given together")
        if shard_id is not None and shard_count is not None and not 0 <= shard_id < shard_count:
            raise ValueError("shard_id must be in [0, shard_count)")

        if logger is not None:
            self._logger = logger
        elif shard_id is not None:
            self._logger = self._logger.getChild(str(shard_id))

        self.shard_id: int | None = shard_id
        self.shard_count: int | None = shard_count
        self.large_threshold: int = large_threshold
        self.presence: UpdatePresence | None = presence

        self._token: str = token
        self._gateway_url: str = url
        self._client_session: ClientSession | None = client_session
        self._transport_compression: bool = transport_compression
        self._transport_factory: TransportFactory = transport_factory or GatewayTransport.connect
        self._browser: str = browser
        self._device: str = device
        self._backoff: Backoff = backoff or Backoff()
        self._backoff_reset_after: float = backoff_reset_after
        self._hello_timeout: float = hello_timeout

        self._codec: GatewayCodec = GatewayCodec()
        self._session: Session = Session(shard=self.shard_info, intents=intents)
        self._state: GatewayState = GatewayState.DISCONNECTED
        self._transport: Transport | None = None
        self._heartbeat: HeartbeatDriver | None = None
        self._signals: asyncio.Queue[_Signal] | None = None
        self._connected_at: float | None = None
        self._user: User | None = None

        self._subscriptions: list[_Subscription] = []
        self._disconnect_listeners: list[DisconnectListener] = []
        self._deliveries: asyncio.Queue[GatewayPayload | None] | None = None

        self._running: bool = False
        self._stop_event: asyncio.Event = asyncio.Event()

    @property
    def state(self) -> GatewayState:
        return self._state

    @property
    def session(self) -> Session:
        return self._session

    @property
    def user(self) -> User | None:
        """The user this session was identified as, from the last ``READY``."""
        return self._user

    @property
    def intents(self) -> Intents:
        return self._session.intents

    @property
    def shard_info(self) -> ShardInfo | None:
        if self.shard_id is not None and self.shard_count is not None:
            return ShardInfo(self.shard_id, self.shard_count)
        return None

    @property
    def heartbeat_latency(self) -> float:
        if self._heartbeat is None:
            return float("nan")
        return self._heartbeat.latency

    @property
    def _identify(self) -> Identify:
        return Identify(
            token=self._token,
            properties=ConnectionProperties(system=platform.system(), browser=self._browser, device=self._device),
            intents=self._session.intents,
            compress=self._transport_compression,
            large_threshold=self.large_threshold,
            shard=self._session.shard,
            presence=self.presence,
        )

    @property
    def _resume(self) -> Resume:
        assert self._session.session_id is not None
        return Resume(token=self._token, session_id=self._session.session_id, seq=self._session.sequence or 0)

    def subscribe(self, callback: Subscriber, *raw_types: RawType | str) -> Subscriber:
        """Call ``callback`` with every dispatch named in ``raw_types``, or every dispatch if none are given.

        Callbacks run one at a time in the order the events were received and
        may be coroutine functions. Dispatches with an unregistered event name
        only reach subscribers of every dispatch.
        """
        names = frozenset(_event_name(raw_type) for raw_type in raw_types) or None
        for name in names or ():
            required = _registry.required_intents(name)
            if required and not self.intents & required:
                self._logger.warning("subscribed to %s, but none of %r is enabled", name, required)
        self._subscriptions.append(_Subscription(callback, names))
        return callback

    def unsubscribe(self, callback: Subscriber) -> None:
        self._subscriptions = [sub for sub in self._subscriptions if sub.callback != callback]

    def on_disconnect(self, callback: DisconnectListener) -> DisconnectListener:
        self._disconnect_listeners.append(callback)
        return callback

    def _set_state(self, state: GatewayState) -> None:
        if state is not self._state:
            self._logger.debug("state %s -> %s", self._state.value, state.value)
            self._state = state

    def _gateway_url_for_attempt(self) -> URL:
        url_query: dict[str, Any] = {"v": GATEWAY_VERSION, "encoding": "json"}
        if self._transport_compression:
            url_query["compress"] = "zlib-stream"
        base = self._session.resume_url if self._session.resumable and self._session.resume_url else self._gateway_url
        return URL(base).with_query(url_query)

    async def _send(self, payload: GatewayPayload) -> None:
        if self._transport is None:
            raise GatewayNotConnectedError("no open connection")
        data = self._codec.encode(payload)
        self._logger.debug("send [op:%s]", payload.op.name)
        await self._transport.send(data)

    async def _send_heartbeat(self) -> None:
        await self._send(GatewayPayload(op=OpCode.HEARTBEAT, d=self._session.sequence))
        self._logger.debug("send heartbeat [s:%s]", self._session.sequence)

    def _signal(self, signal: _Signal) -> None:
        if self._signals is not None:
            self._signals.put_nowait(signal)

    async def _read_loop(self, transport: Transport, signals: asyncio.Queue[_Signal]) -> None:
        try:
            while True:
                signals.put_nowait(_Received(await transport.receive()))
        except TransportClosed as exc:
            signals.put_nowait(_Lost(exc.code, exc.reason or "connection closed"))
        except (aiohttp.ClientError, ConnectionError, asyncio.TimeoutError) as exc:
            signals.put_nowait(_Lost(None, f"transport error: {exc!r}"))
        except Exception as exc:
            self._logger.exception("reading from the transport failed")
            signals.put_nowait(_Lost(None, f"transport error: {exc!r}"))

    async def _handle_hello(self, hello: Hello) -> None:
        if self._state is not GatewayState.AWAITING_HELLO:
            self._logger.warning("unexpected hello in state %s, ignoring", self._state.value)
            return

        interval = hello.heartbeat_interval / 1_000.0
        self._logger.debug("connected, heartbeat interval %s s", interval)
        self._heartbeat = HeartbeatDriver(
            interval,
            self._send_heartbeat,
            lambda: self._signal(_HeartbeatTimeout()),
            logger=self._logger,
        )
        self._heartbeat.start()

        if self._session.resumable:
            self._set_state(GatewayState.RESUMING)
            self._logger.info("resuming session %r [s:%s]", self._session.session_id, self._session.sequence)
            await self._send(GatewayPayload(op=OpCode.RESUME, d=self._resume))
        else:
            self._set_state(GatewayState.IDENTIFYING)
            await self._send(GatewayPayload(op=OpCode.IDENTIFY, d=self._identify))

    def _handle_ready(self, payload: GatewayPayload) -> None:
        ready: Ready = payload.d
        self._session.start(ready, payload.s)
        self._user = ready.user
        self._set_state(GatewayState.CONNECTED)
        self._connected_at = time.monotonic()
        self._logger.info(
            "ready: %s guilds, %s (ID: %s), session %r on v%s gateway",
            len(ready.guilds),
            ready.user.display_name,
            ready.user.id,
            ready.session_id,
            ready.v,
        )

    async def _handle_dispatch(self, payload: GatewayPayload) -> None:
        if not self._session.update_sequence(payload.s):
            self._logger.warning(
                "sequence went backwards [s:%s -> %s] on %s", self._session.sequence, payload.s, payload.t
            )

        if payload.t == _READY and isinstance(payload.d, Ready):
            self._handle_ready(payload)
        elif self._state is GatewayState.RESUMING:
            self._set_state(GatewayState.CONNECTED)
            self._connected_at = time.monotonic()
            if payload.t == _RESUMED:
                self._logger.info("resumed session %r [s:%s]", self._session.session_id, self._session.sequence)
        elif self._state is not GatewayState.CONNECTED:
            self._logger.warning("dispatch %s before ready in state %s", payload.t, self._state.value)

        if isinstance(payload.d, UnknownEvent):
            self._logger.debug("unknown dispatch event %s [s:%s]", payload.t, payload.s)
        if self._deliveries is not None:
            self._deliveries.put_nowait(payload)

    async def _handle_payload(self, payload: GatewayPayload) -> _Lost | None:
        if not payload.op.is_inbound:
            self._logger.warning("server sent outbound-only op code [op:%s], ignoring", payload.op.name)
            return None

        if payload.op == OpCode.DISPATCH:
            await self._handle_dispatch(payload)
        elif payload.op == OpCode.HEARTBEAT_ACK:
            if self._heartbeat is not None:
                self._heartbeat.acknowledge()
        elif payload.op == OpCode.HEARTBEAT:
            if self._heartbeat is not None:
                await self._heartbeat.beat()
            else:
                await self._send_heartbeat()
        elif payload.op == OpCode.HELLO:
            await self._handle_hello(payload.d)
        elif payload.op == OpCode.RECONNECT:
            return _Lost(None, "server requested reconnect")
        elif payload.op == OpCode.INVALID_SESSION:
            return _Lost(None, "invalid session", resumable=bool(payload.d))
        return None

    async def _process(self, signals: asyncio.Queue[_Signal]) -> _Lost | None:
        loop = asyncio.get_running_loop()
        # one deadline for the whole wait, other frames do not extend it
        hello_deadline = loop.time() + self._hello_timeout
        while not self._stop_event.is_set():
            timeout = None
            if self._state is GatewayState.AWAITING_HELLO:
                timeout = max(0.0, hello_deadline - loop.time())
            try:
                signal = await asyncio.wait_for(signals.get(), timeout)
            except asyncio.TimeoutError:
                return _Lost(None, f"no hello within {self._hello_timeout}s")

            if isinstance(signal, _Shutdown):
                return None
            if isinstance(signal, _Lost):
                return signal
            if isinstance(signal, _HeartbeatTimeout):
                return _Lost(None, "heartbeat not acknowledged or not sent")

            try:
                payload = self._codec.decode(signal.data)
            except DecodeError as exc:
                self._logger.warning("dropping frame: %s", exc)
                continue

            self._logger.debug("received [op:%s]", payload.op.name)
            try:
                lost = await self._handle_payload(payload)
            except (TransportClosed, ConnectionError, aiohttp.ClientError) as exc:
                return _Lost(getattr(exc, "code", None), f"send failed: {exc!r}")
            if lost is not None:
                return lost
        return None

    async def _teardown(self, reader: asyncio.Task[None] | None, code: int) -> None:
        if self._heartbeat is not None:
            await self._heartbeat.stop()
            self._heartbeat = None
        transport, self._transport = self._transport, None
        self._signals = None
        if transport is not None:
            try:
                await transport.close(code)
            except (CordgateError, ConnectionError, aiohttp.ClientError) as exc:
                self._logger.debug("error while closing transport: %r", exc)
        if reader is not None:
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader

    async def _run_once(self) -> _Lost | None:
        """Open one connection and run it until it is lost; ``None`` means shutdown."""
        self._set_state(GatewayState.CONNECTING)
        url = self._gateway_url_for_attempt()
        self._logger.debug("connecting to %s", url)
        try:
            self._transport = await self._transport_factory(
                url,
                client_session=self._client_session,
                transport_compression=self._transport_compression,
                logger=self._logger.getChild("transport"),
            )
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as exc:
            return _Lost(None, f"cannot connect: {exc!r}")

        signals: asyncio.Queue[_Signal] = asyncio.Queue()
        self._signals = signals
        if self._stop_event.is_set():
            signals.put_nowait(_Shutdown())
        self._set_state(GatewayState.AWAITING_HELLO)
        reader = asyncio.create_task(self._read_loop(self._transport, signals), name="poll events")

        lost: _Lost | None = None
        try:
            lost = await self._process(signals)
            return lost
        finally:
            resumable = lost is not None and lost.resumable and lost.code is None
            await self._teardown(reader, _RESUMABLE_CLOSE if resumable else _NORMAL_CLOSE)

    def _verdict(self, lost: _Lost) -> Disconnect:
        if lost.code is not None and lost.code >= _GATEWAY_CLOSE_CODES:
            policy = lookup_close_code(lost.code)
            return Disconnect(
                code=lost.code,
                description=policy.description,
                resumable=policy.reconnect,
                will_retry=policy.reconnect,
            )
        return Disconnect(code=lost.code, description=lost.description, resumable=lost.resumable, will_retry=True)

    async def _notify_disconnect(self, disconnect: Disconnect) -> None:
        for listener in tuple(self._disconnect_listeners):
            try:
                result = listener(disconnect)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                self._logger.exception("disconnect listener %r failed", listener)

    async def _deliver(self, deliveries: asyncio.Queue[GatewayPayload | None]) -> None:
        while (payload := await deliveries.get()) is not None:
            for sub in tuple(self._subscriptions):
                if sub.names is not None and (payload.t not in sub.names or isinstance(payload.d, UnknownEvent)):
                    continue
                try:
                    result = sub.callback(payload)
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    self._logger.exception("subscriber %r failed on %s [s:%s]", sub.callback, payload.t, payload.s)

    async def _sleep_unless_stopped(self, delay: float) -> None:
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._stop_event.wait(), delay)

    async def connect(self) -> None:
        """Connect and keep the session alive until :meth:`close`.

        Raises :class:`~cordgate.errors.GatewayClosedError` when the gateway
        closes with a code that must not be reconnected.
        """
        if self._running:
            raise RuntimeError("gateway is already running")
        self._running = True
        self._stop_event.clear()
        deliveries: asyncio.Queue[GatewayPayload | None] = asyncio.Queue()
        self._deliveries = deliveries
        delivery_task = asyncio.create_task(self._deliver(deliveries), name="deliver events")

        try:
            while not self._stop_event.is_set():
                lost = await self._run_once()
                if lost is None or self._stop_event.is_set():
                    break

                connected_at = self._connected_at
                if connected_at is not None and time.monotonic() - connected_at >= self._backoff_reset_after:
                    self._backoff.reset()
                self._connected_at = None

                disconnect = self._verdict(lost)
                if not disconnect.resumable:
                    self._session.clear()
                self._set_state(GatewayState.DISCONNECTED)
                await self._notify_disconnect(disconnect)

                if not disconnect.will_retry:
                    self._logger.error("gateway closed [code:%s] %s, giving up", disconnect.code, disconnect.description)
                    raise GatewayClosedError(disconnect.code or 0, disconnect.description, will_retry=False)

                delay = self._backoff.next_delay()
                self._logger.warning(
                    "disconnected [code:%s] %s, %s in %.2fs",
                    disconnect.code,
                    disconnect.description,
                    "resuming" if self._session.resumable else "reconnecting",
                    delay,
                )
                await self._sleep_unless_stopped(delay)
        finally:
            self._session.clear()
            self._set_state(GatewayState.DISCONNECTED)
            self._deliveries = None
            deliveries.put_nowait(None)
            await delivery_task
            self._running = False

    async def close(self) -> None:
        """Stop the gateway without reconnecting; no more frames are sent after this."""
        if not self._running:
            return
        self._set_state(GatewayState.CLOSING)
        self._stop_event.set()
        if self._heartbeat is not None:
            await self._heartbeat.stop()
        self._signal(_Shutdown())

    def _require_connected(self) -> None:
        if self._state is not GatewayState.CONNECTED:
            raise GatewayNotConnectedError(f"gateway is {self._state.value}")

    async def update_presence(
        self,
        *,
        status: Status = Status.ONLINE,
        activities: Sequence[Activity] = (),
        since: int | None = None,
        afk: bool = False,
    ) -> None:
        self._require_connected()
        self.presence = UpdatePresence(since=since, activities=list(activities), status=status, afk=afk)
        await self._send(GatewayPayload(op=OpCode.PRESENCE_UPDATE, d=self.presence))

    async def update_voice_state(
        self, guild_id: Snowflake, channel_id: Snowflake | None, *, self_mute: bool = False, self_deaf: bool = False
    ) -> None:
        self._require_connected()
        await self._send(
            GatewayPayload(
                op=OpCode.VOICE_STATE_UPDATE,
                d=UpdateVoiceState(
                    guild_id=str(guild_id),
                    channel_id=str(channel_id) if channel_id is not None else None,
                    self_mute=self_mute,
                    self_deaf=self_deaf,
                ),
            )
        )

    async def request_guild_members(
        self,
        guild_id: Snowflake,
        *,
        query: str | None = None,
        limit: int = 0,
        presences: bool = False,
        user_ids: Sequence[Snowflake] | None = None,
        nonce: str | None = None,
    ) -> None:
        """Ask for ``GUILD_MEMBERS_CHUNK`` dispatches, by username prefix or by user ids."""
        if query is not None and user_ids is not None:
            raise ValueError("query and user_ids are mutually exclusive")
        if nonce is not None and len(nonce) > 32:
            raise ValueError("nonce must be at most 32 characters")
        if presences and not self.intents & Intents.GUILD_PRESENCES:
            raise ValueError("presences requires the GUILD_PRESENCES intent")
        self._require_connected()

        request = RequestGuildMembers(guild_id=str(guild_id), presences=presences, nonce=nonce)
        if user_ids is not None:
            request.user_ids = [str(user_id) for user_id in user_ids]
        else:
            request.query = query or ""
            request.limit = limit
        await self._send(GatewayPayload(op=OpCode.REQUEST_GUILD_MEMBERS, d=request))
