from __future__ import annotations

from collections.abc import Sequence

__all__: Sequence[str] = (
    "CordgateError",
    "DecodeError",
    "EncodeError",
    "GatewayClosedError",
    "GatewayError",
    "GatewayNotConnectedError",
    "TransportClosed",
)


class CordgateError(Exception):
    """Base class for every error raised by cordgate."""


class DecodeError(CordgateError):
    """A gateway frame could not be decoded into a payload."""


class EncodeError(CordgateError):
    """An outbound payload could not be serialized."""


class TransportClosed(CordgateError):
    """The websocket closed, either by the remote end or after a socket error."""

    def __init__(self, code: int | None, reason: str = "") -> None:
        super().__init__(f"websocket closed [code:{code}] {reason}".rstrip())
        self.code: int | None = code
        self.reason: str = reason


class GatewayError(CordgateError):
    pass


class GatewayNotConnectedError(GatewayError):
    pass


class GatewayClosedError(GatewayError):
    """The gateway stopped.

    ``will_retry`` is ``False`` when the connection gave up for good, for example
    after an authentication failure or a disallowed intent.
    """

    def __init__(self, code: int, description: str, *, will_retry: bool = False) -> None:
        super().__init__(f"gateway closed [code:{code}] {description}")
        self.code: int = code
        self.description: str = description
        self.will_retry: bool = will_retry
