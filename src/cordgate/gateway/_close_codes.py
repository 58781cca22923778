from __future__ import annotations

import types
import typing
from collections.abc import Mapping, Sequence
from enum import Enum

from msgspec import Struct

__all__: Sequence[str] = ("CloseCode", "ClosePolicy", "lookup_close_code")


@typing.final
class CloseCode(int, Enum):
    UNKNOWN_ERROR = 4000
    UNKNOWN_OPCODE = 4001
    DECODE_ERROR = 4002
    NOT_AUTHENTICATED = 4003
    AUTHENTICATION_FAILED = 4004
    ALREADY_AUTHENTICATED = 4005
    INVALID_SEQUENCE = 4007
    RATE_LIMITED = 4008
    SESSION_TIMED_OUT = 4009
    INVALID_SHARD = 4010
    SHARDING_REQUIRED = 4011
    INVALID_API_VERSION = 4012
    INVALID_INTENTS = 4013
    DISALLOWED_INTENTS = 4014


class ClosePolicy(Struct, frozen=True):
    code: int
    reconnect: bool
    description: str

    @property
    def known(self) -> bool:
        """``False`` for the catch-all verdict returned for codes missing from the table."""
        return self.code != 0


_UNKNOWN: typing.Final[ClosePolicy] = ClosePolicy(0, False, "Unknown Close Code")

_POLICIES: typing.Final[Mapping[int, ClosePolicy]] = types.MappingProxyType(
    {
        int(policy.code): policy
        for policy in (
            ClosePolicy(CloseCode.UNKNOWN_ERROR, True, "Unknown Error"),
            ClosePolicy(CloseCode.UNKNOWN_OPCODE, True, "Unknown opcode"),
            ClosePolicy(CloseCode.DECODE_ERROR, True, "Decode Error"),
            ClosePolicy(CloseCode.NOT_AUTHENTICATED, True, "Not Authenticated"),
            ClosePolicy(CloseCode.AUTHENTICATION_FAILED, False, "Authentication Failed"),
            ClosePolicy(CloseCode.ALREADY_AUTHENTICATED, True, "Already Authenticated"),
            ClosePolicy(CloseCode.INVALID_SEQUENCE, True, "Invalid Sequence Number"),
            ClosePolicy(CloseCode.RATE_LIMITED, True, "Rate Limited"),
            ClosePolicy(CloseCode.SESSION_TIMED_OUT, True, "Session Timed Out"),
            ClosePolicy(CloseCode.INVALID_SHARD, False, "Invalid Shard"),
            ClosePolicy(CloseCode.SHARDING_REQUIRED, False, "Sharding Required"),
            ClosePolicy(CloseCode.INVALID_API_VERSION, False, "Invalid API Version"),
            ClosePolicy(CloseCode.INVALID_INTENTS, False, "Invalid Intent(s)"),
            ClosePolicy(CloseCode.DISALLOWED_INTENTS, False, "Disallowed Intent(s)"),
        )
    }
)


def lookup_close_code(code: int) -> ClosePolicy:
    """Return whether a connection closed with ``code`` may be reconnected, and why it closed.

    Codes missing from the table are not reconnectable.
    """
    return _POLICIES.get(code, _UNKNOWN)
