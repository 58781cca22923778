from __future__ import annotations

import functools
import operator
from collections.abc import Sequence
from enum import IntFlag

__all__: Sequence[str] = ("Intents",)


class Intents(IntFlag):
    """Groups of dispatch events the gateway delivers to this connection.

    Bits 17 to 19 are not assigned.
    """

    NONE = 0
    GUILDS = 1 << 0
    GUILD_MEMBERS = 1 << 1
    GUILD_MODERATION = 1 << 2
    GUILD_EMOJIS_AND_STICKERS = 1 << 3
    GUILD_INTEGRATIONS = 1 << 4
    GUILD_WEBHOOKS = 1 << 5
    GUILD_INVITES = 1 << 6
    GUILD_VOICE_STATES = 1 << 7
    GUILD_PRESENCES = 1 << 8
    GUILD_MESSAGES = 1 << 9
    GUILD_MESSAGE_REACTIONS = 1 << 10
    GUILD_MESSAGE_TYPING = 1 << 11
    DIRECT_MESSAGES = 1 << 12
    DIRECT_MESSAGE_REACTIONS = 1 << 13
    DIRECT_MESSAGE_TYPING = 1 << 14
    MESSAGE_CONTENT = 1 << 15
    GUILD_SCHEDULED_EVENTS = 1 << 16
    AUTO_MODERATION_CONFIGURATION = 1 << 20
    AUTO_MODERATION_EXECUTION = 1 << 21

    GUILD_BANS = GUILD_MODERATION

    @classmethod
    def all(cls) -> Intents:
        return functools.reduce(operator.or_, cls, cls.NONE)

    @classmethod
    def privileged(cls) -> Intents:
        """Intents that must be enabled for the application before identifying with them."""
        return cls.GUILD_MEMBERS | cls.GUILD_PRESENCES | cls.MESSAGE_CONTENT

    @classmethod
    def default(cls) -> Intents:
        return cls.all() & ~cls.privileged()

    @property
    def is_privileged(self) -> bool:
        return bool(self & Intents.privileged())

    def union(self, *others: Intents) -> Intents:
        return functools.reduce(operator.or_, others, self)

    def intersection(self, *others: Intents) -> Intents:
        return functools.reduce(operator.and_, others, self)

    def contains(self, other: Intents) -> bool:
        return (self & other) == other
