from __future__ import annotations

import typing
from collections.abc import Sequence
from enum import Enum
from typing import Annotated, Any

from msgspec import Meta, Struct, field

from cordgate.intents import Intents
from cordgate.models import Activity, Status

__all__: Sequence[str] = (
    "ConnectionProperties",
    "GatewayPayload",
    "Hello",
    "Identify",
    "OpCode",
    "RequestGuildMembers",
    "Resume",
    "ShardInfo",
    "UpdatePresence",
    "UpdateVoiceState",
)


@typing.final
class OpCode(int, Enum):
    DISPATCH = 0
    HEARTBEAT = 1
    IDENTIFY = 2
    PRESENCE_UPDATE = 3
    VOICE_STATE_UPDATE = 4
    RESUME = 6
    RECONNECT = 7
    REQUEST_GUILD_MEMBERS = 8
    INVALID_SESSION = 9
    HELLO = 10
    HEARTBEAT_ACK = 11

    @property
    def is_inbound(self) -> bool:
        return self in _INBOUND

    @property
    def is_outbound(self) -> bool:
        return self in _OUTBOUND


_INBOUND: typing.Final[frozenset[OpCode]] = frozenset(
    {
        OpCode.DISPATCH,
        OpCode.HEARTBEAT,
        OpCode.RECONNECT,
        OpCode.INVALID_SESSION,
        OpCode.HELLO,
        OpCode.HEARTBEAT_ACK,
    }
)
_OUTBOUND: typing.Final[frozenset[OpCode]] = frozenset(
    {
        OpCode.HEARTBEAT,
        OpCode.IDENTIFY,
        OpCode.PRESENCE_UPDATE,
        OpCode.VOICE_STATE_UPDATE,
        OpCode.RESUME,
        OpCode.REQUEST_GUILD_MEMBERS,
    }
)


class GatewayPayload(Struct):
    """Envelope of every gateway message; ``s`` and ``t`` are only set on dispatches."""

    op: OpCode
    d: Any | None = None
    s: int | None = None
    t: str | None = None


class Hello(Struct):
    heartbeat_interval: Annotated[int, Meta(gt=0)]
    trace: list[str] = field(name="_trace", default_factory=list)


class ConnectionProperties(Struct):
    system: str = field(name="os")
    browser: str
    device: str


class ShardInfo(Struct, array_like=True):
    shard_id: Annotated[int, Meta(ge=0)]
    shard_count: Annotated[int, Meta(ge=1)]


class UpdatePresence(Struct):
    since: int | None = None
    activities: list[Activity] = field(default_factory=list)
    status: Status = Status.ONLINE
    afk: bool = False


class Identify(Struct, omit_defaults=True):
    token: str
    properties: ConnectionProperties
    intents: Intents
    compress: bool = False
    large_threshold: Annotated[int, Meta(ge=50, le=250)] | None = None
    shard: ShardInfo | None = None
    presence: UpdatePresence | None = None


class Resume(Struct):
    token: str
    session_id: str
    seq: int


class UpdateVoiceState(Struct):
    guild_id: str
    channel_id: str | None
    self_mute: bool = False
    self_deaf: bool = False


class RequestGuildMembers(Struct, omit_defaults=True):
    guild_id: str
    query: str | None = None
    limit: Annotated[int, Meta(ge=0)] | None = None
    presences: bool = False
    user_ids: list[str] | None = None
    nonce: Annotated[str, Meta(max_length=32)] | None = None
