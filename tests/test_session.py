from __future__ import annotations

from cordgate import Intents
from cordgate.events import Ready
from cordgate.gateway import Session, ShardInfo
from cordgate.models import User


def _ready(session_id: str = "abc123") -> Ready:
    return Ready(
        v=10,
        user=User(id=1, username="nelly"),
        guilds=(),
        session_id=session_id,
        resume_gateway_url="wss://resume.test",
    )


def test_new_session_is_not_resumable() -> None:
    session = Session()

    assert not session.resumable
    assert session.sequence is None


def test_start_from_ready() -> None:
    session = Session()

    session.start(_ready(), 1)

    assert session.resumable
    assert session.session_id == "abc123"
    assert session.resume_url == "wss://resume.test"
    assert session.sequence == 1


def test_start_without_sequence() -> None:
    session = Session()

    session.start(_ready(), None)

    assert session.sequence == 0


def test_sequence_never_moves_backwards() -> None:
    session = Session()

    for sequence in (1, 2, 3, 5):
        assert session.update_sequence(sequence)
    assert not session.update_sequence(4)
    assert session.update_sequence(None)

    assert session.sequence == 5


def test_repeated_sequence_is_accepted() -> None:
    session = Session(sequence=7)

    assert session.update_sequence(7)
    assert session.sequence == 7


def test_clear_keeps_identify_settings() -> None:
    session = Session(shard=ShardInfo(1, 4), intents=Intents.GUILDS)
    session.start(_ready(), 12)

    session.clear()

    assert not session.resumable
    assert session.resume_url is None
    assert session.sequence is None
    assert session.shard == ShardInfo(1, 4)
    assert session.intents == Intents.GUILDS
