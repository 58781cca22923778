from __future__ import annotations

import datetime
from collections.abc import Sequence
from enum import Enum, IntFlag
from typing import Any, Final, TypeAlias

import msgspec
from msgspec import Struct

__all__: Sequence[str] = (
    "Activity",
    "ActivityFlag",
    "ActivityType",
    "AuditLogEntry",
    "AutoModerationAction",
    "AutoModerationRule",
    "Channel",
    "ClientStatus",
    "Emoji",
    "Guild",
    "GuildMember",
    "GuildScheduledEvent",
    "Integration",
    "Interaction",
    "Message",
    "Model",
    "PartialApplication",
    "PartialUser",
    "PremiumType",
    "Role",
    "Snowflake",
    "StageInstance",
    "Status",
    "Sticker",
    "ThreadMember",
    "UnavailableGuild",
    "User",
    "UserFlag",
    "VoiceState",
    "snowflake_time",
)

Snowflake: TypeAlias = int

DISCORD_EPOCH: Final[int] = 1_420_070_400_000


def snowflake_time(snowflake: Snowflake) -> datetime.datetime:
    """Creation time encoded in the upper 42 bits of a snowflake."""
    return datetime.datetime.fromtimestamp(((snowflake >> 22) + DISCORD_EPOCH) / 1_000, tz=datetime.timezone.utc)


class Model(Struct, frozen=True, kw_only=True):
    """Immutable snapshot of gateway data.

    Only the fields the gateway core cares about are declared, anything else the
    server sends is ignored on decode. msgspec does not inherit ``kw_only``, so
    every subclass that declares fields passes it again.
    """


class UserFlag(IntFlag):
    NONE = 0
    STAFF = 1 << 0
    PARTNER = 1 << 1
    HYPESQUAD = 1 << 2
    BUG_HUNTER_LEVEL_1 = 1 << 3
    HYPESQUAD_ONLINE_HOUSE_1 = 1 << 6
    HYPESQUAD_ONLINE_HOUSE_2 = 1 << 7
    HYPESQUAD_ONLINE_HOUSE_3 = 1 << 8
    PREMIUM_EARLY_SUPPORTER = 1 << 9
    TEAM_PSEUDO_USER = 1 << 10
    BUG_HUNTER_LEVEL_2 = 1 << 14
    VERIFIED_BOT = 1 << 16
    VERIFIED_DEVELOPER = 1 << 17
    CERTIFIED_MODERATOR = 1 << 18
    BOT_HTTP_INTERACTIONS = 1 << 19
    ACTIVE_DEVELOPER = 1 << 22


class PremiumType(int, Enum):
    NONE = 0
    CLASSIC = 1
    DEFAULT = 2
    BASIC = 3


class Status(str, Enum):
    ONLINE = "online"
    DO_NOT_DISTURB = "dnd"
    IDLE = "idle"
    INVISIBLE = "invisible"
    OFFLINE = "offline"


class ActivityType(int, Enum):
    GAME = 0
    STREAMING = 1
    LISTENING = 2
    WATCHING = 3
    CUSTOM = 4
    COMPETING = 5


class ActivityFlag(IntFlag):
    NONE = 0
    INSTANCE = 1 << 0
    JOIN = 1 << 1
    SPECTATE = 1 << 2
    JOIN_REQUEST = 1 << 3
    SYNC = 1 << 4
    PLAY = 1 << 5
    PARTY_PRIVACY_FRIENDS = 1 << 6
    PARTY_PRIVACY_VOICE_CHANNEL = 1 << 7
    EMBEDDED = 1 << 8


class PartialUser(Model, kw_only=True):
    id: Snowflake


class User(PartialUser, kw_only=True):
    username: str
    discriminator: int | None = msgspec.field(default=None)
    global_name: str | None = None
    avatar: str | None = None
    bot: bool = False
    flags: UserFlag = UserFlag.NONE
    public_flags: UserFlag = UserFlag.NONE
    premium_type: PremiumType = PremiumType.NONE

    @property
    def display_name(self) -> str:
        if self.discriminator:
            return f"{self.username}#{self.discriminator:04}"
        return self.global_name or self.username


class PartialApplication(Model, kw_only=True):
    id: Snowflake
    flags: int = 0


class UnavailableGuild(Model, kw_only=True):
    id: Snowflake
    unavailable: bool = False


class Role(Model, kw_only=True):
    id: Snowflake
    name: str
    color: int = 0
    position: int = 0
    permissions: str = "0"
    managed: bool = False


class Emoji(Model, kw_only=True):
    id: Snowflake | None = None
    name: str | None = None
    animated: bool = False


class Sticker(Model, kw_only=True):
    id: Snowflake
    name: str
    format_type: int = 1


class GuildMember(Model, kw_only=True):
    user: User | None = None
    nick: str | None = None
    avatar: str | None = None
    roles: tuple[Snowflake, ...] = ()
    joined_at: datetime.datetime | None = None
    premium_since: datetime.datetime | None = None
    deaf: bool = False
    mute: bool = False
    pending: bool = False
    communication_disabled_until: datetime.datetime | None = None


class Guild(Model, kw_only=True):
    id: Snowflake
    name: str = ""
    icon: str | None = None
    owner_id: Snowflake | None = None
    unavailable: bool = False
    roles: tuple[Role, ...] = ()
    emojis: tuple[Emoji, ...] = ()


class Channel(Model, kw_only=True):
    id: Snowflake
    type: int
    guild_id: Snowflake | None = None
    name: str | None = None
    parent_id: Snowflake | None = None
    position: int | None = None
    last_message_id: Snowflake | None = None
    newly_created: bool = False


class ThreadMember(Model, kw_only=True):
    id: Snowflake | None = None
    user_id: Snowflake | None = None
    join_timestamp: datetime.datetime | None = None
    flags: int = 0


class Message(Model, kw_only=True):
    id: Snowflake
    channel_id: Snowflake
    author: User | None = None
    content: str = ""
    timestamp: datetime.datetime | None = None
    edited_timestamp: datetime.datetime | None = None
    tts: bool = False
    mention_everyone: bool = False
    pinned: bool = False
    type: int = 0


class VoiceState(Model, kw_only=True):
    guild_id: Snowflake | None = None
    channel_id: Snowflake | None = None
    user_id: Snowflake
    member: GuildMember | None = None
    session_id: str
    deaf: bool = False
    mute: bool = False
    self_deaf: bool = False
    self_mute: bool = False


class StageInstance(Model, kw_only=True):
    id: Snowflake
    guild_id: Snowflake
    channel_id: Snowflake
    topic: str = ""
    privacy_level: int = 2


class GuildScheduledEvent(Model, kw_only=True):
    id: Snowflake
    guild_id: Snowflake
    channel_id: Snowflake | None = None
    creator_id: Snowflake | None = None
    name: str = ""
    scheduled_start_time: datetime.datetime | None = None
    scheduled_end_time: datetime.datetime | None = None
    status: int = 1
    entity_type: int = 1


class AutoModerationAction(Model, kw_only=True):
    type: int
    metadata: dict[str, Any] = {}


class AutoModerationRule(Model, kw_only=True):
    id: Snowflake
    guild_id: Snowflake
    name: str = ""
    creator_id: Snowflake | None = None
    event_type: int = 1
    trigger_type: int = 1
    actions: tuple[AutoModerationAction, ...] = ()
    enabled: bool = False


class Integration(Model, kw_only=True):
    id: Snowflake
    name: str = ""
    type: str = ""
    enabled: bool = False


class AuditLogEntry(Model, kw_only=True):
    id: Snowflake
    action_type: int
    target_id: str | None = None
    user_id: Snowflake | None = None
    reason: str | None = None


class Interaction(Model, kw_only=True):
    id: Snowflake
    application_id: Snowflake
    type: int
    token: str
    guild_id: Snowflake | None = None
    channel_id: Snowflake | None = None
    data: dict[str, Any] | None = None


class ClientStatus(Model, kw_only=True):
    desktop: Status | None = None
    mobile: Status | None = None
    web: Status | None = None


class Activity(Model, kw_only=True, omit_defaults=True):
    name: str
    type: ActivityType = ActivityType.GAME
    url: str | None = None
    state: str | None = None
    details: str | None = None
    created_at: int | None = None
    application_id: Snowflake | None = None
    flags: ActivityFlag = ActivityFlag.NONE
