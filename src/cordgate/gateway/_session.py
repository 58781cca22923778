from __future__ import annotations

from collections.abc import Sequence

from msgspec import Struct

from cordgate.events import Ready
from cordgate.intents import Intents

from ._payload import ShardInfo

__all__: Sequence[str] = ("Session",)


class Session(Struct, kw_only=True):
    """Logical gateway session, kept across physical connections while it can be resumed.

    ``shard`` and ``intents`` are identify settings and survive :meth:`clear`.
    """

    session_id: str | None = None
    resume_url: str | None = None
    sequence: int | None = None
    shard: ShardInfo | None = None
    intents: Intents = Intents.NONE

    @property
    def resumable(self) -> bool:
        return bool(self.session_id)

    def update_sequence(self, sequence: int | None) -> bool:
        """Record the sequence of a dispatch; returns ``False`` if it would move backwards."""
        if sequence is None:
            return True
        if self.sequence is not None and sequence < self.sequence:
            return False
        self.sequence = sequence
        return True

    def start(self, ready: Ready, sequence: int | None) -> None:
        self.session_id = ready.session_id
        self.resume_url = ready.resume_gateway_url
        self.sequence = sequence if sequence is not None else 0

    def clear(self) -> None:
        self.session_id = None
        self.resume_url = None
        self.sequence = None
