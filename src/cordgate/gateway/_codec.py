from __future__ import annotations

import typing
from collections.abc import Mapping, Sequence
from typing import Any

import msgspec
from msgspec import Raw, Struct, field, json

from cordgate.errors import DecodeError, EncodeError
from cordgate.events import UnknownEvent

from . import _registry
from ._payload import (
    GatewayPayload,
    Hello,
    Identify,
    OpCode,
    RequestGuildMembers,
    Resume,
    UpdatePresence,
    UpdateVoiceState,
)

__all__: Sequence[str] = ("GatewayCodec",)

_NULL: typing.Final[bytes] = b"null"


class _Envelope(Struct):
    op: OpCode
    d: Raw = field(default_factory=lambda: Raw(_NULL))
    s: int | None = None
    t: str | None = None


@typing.final
class GatewayCodec:
    """JSON codec for gateway envelopes.

    Decoding is done in two steps: the envelope first, with ``d`` kept as raw
    JSON, then ``d`` against the schema selected by the opcode, or for
    dispatches by the event name. Dispatches with an unregistered event name
    decode to :class:`~cordgate.events.UnknownEvent`.
    """

    def __init__(self) -> None:
        self._encoder: json.Encoder = json.Encoder()
        self._envelope_decoder: json.Decoder[_Envelope] = json.Decoder(_Envelope)
        self._any_decoder: json.Decoder[Any] = json.Decoder()
        self._control_decoders: Mapping[OpCode, json.Decoder[Any]] = {
            OpCode.HEARTBEAT: json.Decoder(typing.Optional[int]),
            OpCode.IDENTIFY: json.Decoder(Identify),
            OpCode.PRESENCE_UPDATE: json.Decoder(UpdatePresence),
            OpCode.VOICE_STATE_UPDATE: json.Decoder(UpdateVoiceState),
            OpCode.RESUME: json.Decoder(Resume),
            OpCode.RECONNECT: json.Decoder(None),
            OpCode.REQUEST_GUILD_MEMBERS: json.Decoder(RequestGuildMembers),
            OpCode.INVALID_SESSION: json.Decoder(bool),
            OpCode.HELLO: json.Decoder(Hello),
            OpCode.HEARTBEAT_ACK: json.Decoder(None),
        }

    def decode(self, data: bytes | str) -> GatewayPayload:
        try:
            envelope = self._envelope_decoder.decode(data)
        except msgspec.DecodeError as exc:
            raise DecodeError(f"malformed envelope: {exc}") from exc

        if envelope.op != OpCode.DISPATCH:
            try:
                d = self._control_decoders[envelope.op].decode(envelope.d)
            except msgspec.DecodeError as exc:
                raise DecodeError(f"malformed payload [op:{envelope.op.name}]: {exc}") from exc
            return GatewayPayload(op=envelope.op, d=d)

        if envelope.t is None:
            raise DecodeError(f"dispatch without event name [s:{envelope.s}]")

        decoder = _registry.get_decoder(envelope.t)
        try:
            if decoder is None:
                d = UnknownEvent(name=envelope.t, data=self._any_decoder.decode(envelope.d))
            else:
                d = decoder.decode(envelope.d)
        except msgspec.DecodeError as exc:
            raise DecodeError(f"malformed payload [t:{envelope.t}]: {exc}") from exc
        return GatewayPayload(op=envelope.op, d=d, s=envelope.s, t=envelope.t)

    def encode(self, payload: GatewayPayload) -> bytes:
        if isinstance(payload.d, UnknownEvent):
            payload = GatewayPayload(op=payload.op, d=payload.d.data, s=payload.s, t=payload.t)
        try:
            return self._encoder.encode(payload)
        except (TypeError, msgspec.EncodeError) as exc:
            raise EncodeError(f"cannot encode payload [op:{payload.op}]: {exc}") from exc
