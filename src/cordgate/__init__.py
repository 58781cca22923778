"""Client for the Discord gateway: session lifecycle, heartbeats, resume and typed dispatch events."""

from __future__ import annotations

from collections.abc import Sequence

from .errors import (
    CordgateError,
    DecodeError,
    EncodeError,
    GatewayClosedError,
    GatewayError,
    GatewayNotConnectedError,
    TransportClosed,
)
from .events import RawType, UnknownEvent
from .gateway import Disconnect, Gateway, GatewayPayload, GatewayState, OpCode, lookup_close_code
from .intents import Intents

__all__: Sequence[str] = (
    "CordgateError",
    "DecodeError",
    "Disconnect",
    "EncodeError",
    "Gateway",
    "GatewayClosedError",
    "GatewayError",
    "GatewayNotConnectedError",
    "GatewayPayload",
    "GatewayState",
    "Intents",
    "OpCode",
    "RawType",
    "TransportClosed",
    "UnknownEvent",
    "lookup_close_code",
)
