from __future__ import annotations

from collections.abc import Sequence

from ._backoff import Backoff
from ._close_codes import CloseCode, ClosePolicy, lookup_close_code
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
from ._registry import EVENT_TYPES, RAW_TYPES, get_payload_type, get_raw_type, register_event, required_intents
from ._session import Session
from ._transport import GatewayTransport, Transport, TransportFactory
from .gateway import Disconnect, Gateway, GatewayState

__all__: Sequence[str] = (
    "EVENT_TYPES",
    "RAW_TYPES",
    "Backoff",
    "CloseCode",
    "ClosePolicy",
    "ConnectionProperties",
    "Disconnect",
    "Gateway",
    "GatewayCodec",
    "GatewayPayload",
    "GatewayState",
    "GatewayTransport",
    "HeartbeatDriver",
    "Hello",
    "Identify",
    "OpCode",
    "RequestGuildMembers",
    "Resume",
    "Session",
    "ShardInfo",
    "Transport",
    "TransportFactory",
    "UpdatePresence",
    "UpdateVoiceState",
    "get_payload_type",
    "get_raw_type",
    "lookup_close_code",
    "register_event",
    "required_intents",
)
