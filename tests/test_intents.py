from __future__ import annotations

import pytest

from cordgate import Intents

_UNASSIGNED = (1 << 17) | (1 << 18) | (1 << 19)


@pytest.mark.parametrize(
    ("intent", "bit"),
    [
        (Intents.GUILDS, 0),
        (Intents.GUILD_MEMBERS, 1),
        (Intents.GUILD_MODERATION, 2),
        (Intents.GUILD_PRESENCES, 8),
        (Intents.GUILD_MESSAGES, 9),
        (Intents.DIRECT_MESSAGES, 12),
        (Intents.MESSAGE_CONTENT, 15),
        (Intents.GUILD_SCHEDULED_EVENTS, 16),
        (Intents.AUTO_MODERATION_CONFIGURATION, 20),
        (Intents.AUTO_MODERATION_EXECUTION, 21),
    ],
)
def test_bit_positions(intent: Intents, bit: int) -> None:
    assert intent == 1 << bit


def test_all_skips_unassigned_bits() -> None:
    everything = Intents.all()

    assert everything == ((1 << 17) - 1) | (1 << 20) | (1 << 21)
    assert not everything & _UNASSIGNED


def test_default_excludes_privileged() -> None:
    default = Intents.default()

    assert not default.is_privileged
    assert Intents.GUILDS in default
    assert Intents.MESSAGE_CONTENT not in default
    assert default | Intents.privileged() == Intents.all()


def test_privileged() -> None:
    assert Intents.privileged() == Intents.GUILD_MEMBERS | Intents.GUILD_PRESENCES | Intents.MESSAGE_CONTENT
    assert Intents.MESSAGE_CONTENT.is_privileged
    assert not Intents.GUILDS.is_privileged


def test_set_operations() -> None:
    messages = Intents.GUILD_MESSAGES.union(Intents.DIRECT_MESSAGES, Intents.MESSAGE_CONTENT)

    assert messages.contains(Intents.GUILD_MESSAGES | Intents.DIRECT_MESSAGES)
    assert not messages.contains(Intents.GUILDS | Intents.GUILD_MESSAGES)
    assert messages.intersection(Intents.default()) == Intents.GUILD_MESSAGES | Intents.DIRECT_MESSAGES
    assert Intents.NONE.union() == Intents.NONE


def test_guild_bans_alias() -> None:
    assert Intents.GUILD_BANS is Intents.GUILD_MODERATION
