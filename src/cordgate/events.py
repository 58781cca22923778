from __future__ import annotations

import datetime
import typing
from collections.abc import Sequence
from enum import Enum
from typing import Any

from msgspec import field

from cordgate.models import (
    Activity,
    AuditLogEntry,
    AutoModerationAction,
    Channel,
    ClientStatus,
    Emoji,
    Guild,
    GuildMember,
    Integration,
    Message,
    Model,
    PartialApplication,
    PartialUser,
    Role,
    Snowflake,
    Status,
    Sticker,
    ThreadMember,
    UnavailableGuild,
    User,
    VoiceState,
)

__all__: Sequence[str] = (
    "ApplicationCommandPermissionsUpdate",
    "AutoModerationActionExecution",
    "ChannelPinsUpdate",
    "GuildAuditLogEntryCreate",
    "GuildBan",
    "GuildCreate",
    "GuildEmojisUpdate",
    "GuildIntegration",
    "GuildIntegrationsUpdate",
    "GuildMemberAdd",
    "GuildMemberRemove",
    "GuildMemberUpdate",
    "GuildMembersChunk",
    "GuildRoleDelete",
    "GuildRoleEvent",
    "GuildScheduledEventUser",
    "GuildStickersUpdate",
    "IntegrationDelete",
    "InviteCreate",
    "InviteDelete",
    "MessageCreate",
    "MessageDelete",
    "MessageDeleteBulk",
    "MessageReactionAdd",
    "MessageReactionRemove",
    "MessageReactionRemoveAll",
    "MessageReactionRemoveEmoji",
    "PresenceUpdate",
    "RawType",
    "Ready",
    "Resumed",
    "ThreadListSync",
    "ThreadMemberUpdate",
    "ThreadMembersUpdate",
    "TypingStart",
    "UnknownEvent",
    "VoiceServerUpdate",
    "WebhooksUpdate",
)


@typing.final
class RawType(str, Enum):
    """Dispatch event names, as sent in the ``t`` field of the envelope."""

    READY = "READY"
    RESUMED = "RESUMED"
    APPLICATION_COMMAND_PERMISSIONS_UPDATE = "APPLICATION_COMMAND_PERMISSIONS_UPDATE"
    AUTO_MODERATION_RULE_CREATE = "AUTO_MODERATION_RULE_CREATE"
    AUTO_MODERATION_RULE_UPDATE = "AUTO_MODERATION_RULE_UPDATE"
    AUTO_MODERATION_RULE_DELETE = "AUTO_MODERATION_RULE_DELETE"
    AUTO_MODERATION_ACTION_EXECUTION = "AUTO_MODERATION_ACTION_EXECUTION"
    CHANNEL_CREATE = "CHANNEL_CREATE"
    CHANNEL_UPDATE = "CHANNEL_UPDATE"
    CHANNEL_DELETE = "CHANNEL_DELETE"
    CHANNEL_PINS_UPDATE = "CHANNEL_PINS_UPDATE"
    THREAD_CREATE = "THREAD_CREATE"
    THREAD_UPDATE = "THREAD_UPDATE"
    THREAD_DELETE = "THREAD_DELETE"
    THREAD_LIST_SYNC = "THREAD_LIST_SYNC"
    THREAD_MEMBER_UPDATE = "THREAD_MEMBER_UPDATE"
    THREAD_MEMBERS_UPDATE = "THREAD_MEMBERS_UPDATE"
    GUILD_CREATE = "GUILD_CREATE"
    GUILD_UPDATE = "GUILD_UPDATE"
    GUILD_DELETE = "GUILD_DELETE"
    GUILD_AUDIT_LOG_ENTRY_CREATE = "GUILD_AUDIT_LOG_ENTRY_CREATE"
    GUILD_BAN_ADD = "GUILD_BAN_ADD"
    GUILD_BAN_REMOVE = "GUILD_BAN_REMOVE"
    GUILD_EMOJIS_UPDATE = "GUILD_EMOJIS_UPDATE"
    GUILD_STICKERS_UPDATE = "GUILD_STICKERS_UPDATE"
    GUILD_INTEGRATIONS_UPDATE = "GUILD_INTEGRATIONS_UPDATE"
    GUILD_MEMBER_ADD = "GUILD_MEMBER_ADD"
    GUILD_MEMBER_REMOVE = "GUILD_MEMBER_REMOVE"
    GUILD_MEMBER_UPDATE = "GUILD_MEMBER_UPDATE"
    GUILD_MEMBERS_CHUNK = "GUILD_MEMBERS_CHUNK"
    GUILD_ROLE_CREATE = "GUILD_ROLE_CREATE"
    GUILD_ROLE_UPDATE = "GUILD_ROLE_UPDATE"
    GUILD_ROLE_DELETE = "GUILD_ROLE_DELETE"
    GUILD_SCHEDULED_EVENT_CREATE = "GUILD_SCHEDULED_EVENT_CREATE"
    GUILD_SCHEDULED_EVENT_UPDATE = "GUILD_SCHEDULED_EVENT_UPDATE"
    GUILD_SCHEDULED_EVENT_DELETE = "GUILD_SCHEDULED_EVENT_DELETE"
    GUILD_SCHEDULED_EVENT_USER_ADD = "GUILD_SCHEDULED_EVENT_USER_ADD"
    GUILD_SCHEDULED_EVENT_USER_REMOVE = "GUILD_SCHEDULED_EVENT_USER_REMOVE"
    INTEGRATION_CREATE = "INTEGRATION_CREATE"
    INTEGRATION_UPDATE = "INTEGRATION_UPDATE"
    INTEGRATION_DELETE = "INTEGRATION_DELETE"
    INTERACTION_CREATE = "INTERACTION_CREATE"
    INVITE_CREATE = "INVITE_CREATE"
    INVITE_DELETE = "INVITE_DELETE"
    MESSAGE_CREATE = "MESSAGE_CREATE"
    MESSAGE_UPDATE = "MESSAGE_UPDATE"
    MESSAGE_DELETE = "MESSAGE_DELETE"
    MESSAGE_DELETE_BULK = "MESSAGE_DELETE_BULK"
    MESSAGE_REACTION_ADD = "MESSAGE_REACTION_ADD"
    MESSAGE_REACTION_REMOVE = "MESSAGE_REACTION_REMOVE"
    MESSAGE_REACTION_REMOVE_ALL = "MESSAGE_REACTION_REMOVE_ALL"
    MESSAGE_REACTION_REMOVE_EMOJI = "MESSAGE_REACTION_REMOVE_EMOJI"
    PRESENCE_UPDATE = "PRESENCE_UPDATE"
    STAGE_INSTANCE_CREATE = "STAGE_INSTANCE_CREATE"
    STAGE_INSTANCE_DELETE = "STAGE_INSTANCE_DELETE"
    STAGE_INSTANCE_UPDATE = "STAGE_INSTANCE_UPDATE"
    TYPING_START = "TYPING_START"
    USER_UPDATE = "USER_UPDATE"
    VOICE_STATE_UPDATE = "VOICE_STATE_UPDATE"
    VOICE_SERVER_UPDATE = "VOICE_SERVER_UPDATE"
    WEBHOOKS_UPDATE = "WEBHOOKS_UPDATE"


class UnknownEvent(Model, kw_only=True):
    """Dispatch whose event name has no registered schema; ``data`` is the raw decoded JSON."""

    name: str
    data: Any = None


class Ready(Model, kw_only=True):
    v: int
    user: User
    guilds: tuple[UnavailableGuild, ...]
    session_id: str
    resume_gateway_url: str
    shard: tuple[int, int] | None = None
    application: PartialApplication | None = None


class Resumed(Model, kw_only=True):
    trace: tuple[str, ...] = field(name="_trace", default=())


class ApplicationCommandPermissionsUpdate(Model, kw_only=True):
    id: Snowflake
    application_id: Snowflake
    guild_id: Snowflake
    permissions: tuple[dict[str, Any], ...] = ()


class AutoModerationActionExecution(Model, kw_only=True):
    guild_id: Snowflake
    action: AutoModerationAction
    rule_id: Snowflake
    rule_trigger_type: int
    user_id: Snowflake
    channel_id: Snowflake | None = None
    message_id: Snowflake | None = None
    alert_system_message_id: Snowflake | None = None
    content: str = ""
    matched_keyword: str | None = None
    matched_content: str | None = None


class ChannelPinsUpdate(Model, kw_only=True):
    guild_id: Snowflake | None = None
    channel_id: Snowflake
    last_pin_timestamp: datetime.datetime | None = None


class ThreadListSync(Model, kw_only=True):
    guild_id: Snowflake
    channel_ids: tuple[Snowflake, ...] = ()
    threads: tuple[Channel, ...] = ()
    members: tuple[ThreadMember, ...] = ()


class ThreadMemberUpdate(ThreadMember, kw_only=True):
    guild_id: Snowflake | None = None


class ThreadMembersUpdate(Model, kw_only=True):
    id: Snowflake
    guild_id: Snowflake
    member_count: int
    added_members: tuple[ThreadMember, ...] = ()
    removed_member_ids: tuple[Snowflake, ...] = ()


class GuildCreate(Guild, kw_only=True):
    joined_at: datetime.datetime | None = None
    large: bool = False
    member_count: int = 0
    voice_states: tuple[VoiceState, ...] = ()
    members: tuple[GuildMember, ...] = ()
    channels: tuple[Channel, ...] = ()
    threads: tuple[Channel, ...] = ()


class GuildAuditLogEntryCreate(AuditLogEntry, kw_only=True):
    guild_id: Snowflake


class GuildBan(Model, kw_only=True):
    guild_id: Snowflake
    user: User


class GuildEmojisUpdate(Model, kw_only=True):
    guild_id: Snowflake
    emojis: tuple[Emoji, ...]


class GuildStickersUpdate(Model, kw_only=True):
    guild_id: Snowflake
    stickers: tuple[Sticker, ...]


class GuildIntegrationsUpdate(Model, kw_only=True):
    guild_id: Snowflake


class GuildMemberAdd(GuildMember, kw_only=True):
    guild_id: Snowflake


class GuildMemberRemove(Model, kw_only=True):
    guild_id: Snowflake
    user: User


class GuildMemberUpdate(GuildMember, kw_only=True):
    guild_id: Snowflake


class PresenceUpdate(Model, kw_only=True):
    user: PartialUser
    guild_id: Snowflake | None = None
    status: Status = Status.OFFLINE
    activities: tuple[Activity, ...] = ()
    client_status: ClientStatus = field(default_factory=ClientStatus)


class GuildMembersChunk(Model, kw_only=True):
    guild_id: Snowflake
    members: tuple[GuildMember, ...]
    chunk_index: int
    chunk_count: int
    not_found: tuple[Snowflake, ...] = ()
    presences: tuple[PresenceUpdate, ...] = ()
    nonce: str | None = None


class GuildRoleEvent(Model, kw_only=True):
    guild_id: Snowflake
    role: Role


class GuildRoleDelete(Model, kw_only=True):
    guild_id: Snowflake
    role_id: Snowflake


class GuildScheduledEventUser(Model, kw_only=True):
    guild_scheduled_event_id: Snowflake
    user_id: Snowflake
    guild_id: Snowflake


class GuildIntegration(Integration, kw_only=True):
    guild_id: Snowflake


class IntegrationDelete(Model, kw_only=True):
    id: Snowflake
    guild_id: Snowflake
    application_id: Snowflake | None = None


class InviteCreate(Model, kw_only=True):
    channel_id: Snowflake
    code: str
    created_at: datetime.datetime
    guild_id: Snowflake | None = None
    inviter: User | None = None
    max_age: int = 0
    max_uses: int = 0
    target_type: int | None = None
    target_user: User | None = None
    temporary: bool = False
    uses: int = 0


class InviteDelete(Model, kw_only=True):
    channel_id: Snowflake
    guild_id: Snowflake | None = None
    code: str


class MessageCreate(Message, kw_only=True):
    guild_id: Snowflake | None = None
    member: GuildMember | None = None
    mentions: tuple[User, ...] = ()


class MessageDelete(Model, kw_only=True):
    id: Snowflake
    channel_id: Snowflake
    guild_id: Snowflake | None = None


class MessageDeleteBulk(Model, kw_only=True):
    ids: tuple[Snowflake, ...]
    channel_id: Snowflake
    guild_id: Snowflake | None = None


class MessageReactionAdd(Model, kw_only=True):
    user_id: Snowflake
    channel_id: Snowflake
    message_id: Snowflake
    guild_id: Snowflake | None = None
    member: GuildMember | None = None
    emoji: Emoji


class MessageReactionRemove(Model, kw_only=True):
    user_id: Snowflake
    channel_id: Snowflake
    message_id: Snowflake
    guild_id: Snowflake | None = None
    emoji: Emoji


class MessageReactionRemoveAll(Model, kw_only=True):
    channel_id: Snowflake
    message_id: Snowflake
    guild_id: Snowflake | None = None


class MessageReactionRemoveEmoji(Model, kw_only=True):
    channel_id: Snowflake
    guild_id: Snowflake | None = None
    message_id: Snowflake
    emoji: Emoji


class TypingStart(Model, kw_only=True):
    channel_id: Snowflake
    guild_id: Snowflake | None = None
    user_id: Snowflake
    timestamp: int
    member: GuildMember | None = None


class VoiceServerUpdate(Model, kw_only=True):
    token: str
    guild_id: Snowflake
    endpoint: str | None = None


class WebhooksUpdate(Model, kw_only=True):
    guild_id: Snowflake
    channel_id: Snowflake
