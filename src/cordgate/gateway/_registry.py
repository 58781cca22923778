"""Event name to payload schema registry.

The tables are filled at import time and only ever grow, so they can be read
from any shard without locking. Several event names deliberately share a
schema (the three ``AUTO_MODERATION_RULE_*`` events all carry a rule), so
consumers must tell events apart by name, never by payload type.
"""

from __future__ import annotations

import types
import typing
from collections.abc import Mapping, Sequence

from msgspec import json

from cordgate import events
from cordgate.events import RawType
from cordgate.intents import Intents
from cordgate.models import (
    AutoModerationRule,
    Channel,
    Guild,
    GuildScheduledEvent,
    Interaction,
    Model,
    StageInstance,
    UnavailableGuild,
    User,
    VoiceState,
)

__all__: Sequence[str] = (
    "EVENT_TYPES",
    "RAW_TYPES",
    "get_decoder",
    "get_payload_type",
    "get_raw_type",
    "register_event",
    "required_intents",
)

_event_types: dict[str, type[Model]] = {}
_raw_types: dict[str, RawType] = {}
_intents: dict[str, Intents] = {}
_decoders: dict[str, json.Decoder[typing.Any]] = {}

EVENT_TYPES: typing.Final[Mapping[str, type[Model]]] = types.MappingProxyType(_event_types)
RAW_TYPES: typing.Final[Mapping[str, RawType]] = types.MappingProxyType(_raw_types)


def register_event(name: str, payload_type: type[Model], *, intents: Intents = Intents.NONE) -> None:
    """Add a dispatch event schema.

    ``intents`` is the set of intents any one of which makes the gateway send the
    event; ``Intents.NONE`` means the event is always sent.
    """
    if name in _event_types:
        raise ValueError(f"event {name!r} is already registered")
    _event_types[name] = payload_type
    _intents[name] = intents
    _decoders[name] = json.Decoder(typing.Optional[payload_type], strict=False)
    if name in RawType.__members__:
        _raw_types[name] = RawType[name]


def get_payload_type(name: str) -> type[Model] | None:
    return _event_types.get(name)


def get_raw_type(name: str) -> RawType | None:
    return _raw_types.get(name)


def get_decoder(name: str) -> json.Decoder[typing.Any] | None:
    return _decoders.get(name)


def required_intents(name: str) -> Intents:
    return _intents.get(name, Intents.NONE)


_DEFAULTS: typing.Final[tuple[tuple[RawType, type[Model], Intents], ...]] = (
    (RawType.READY, events.Ready, Intents.NONE),
    (RawType.RESUMED, events.Resumed, Intents.NONE),
    (RawType.APPLICATION_COMMAND_PERMISSIONS_UPDATE, events.ApplicationCommandPermissionsUpdate, Intents.NONE),
    (RawType.AUTO_MODERATION_RULE_CREATE, AutoModerationRule, Intents.AUTO_MODERATION_CONFIGURATION),
    (RawType.AUTO_MODERATION_RULE_UPDATE, AutoModerationRule, Intents.AUTO_MODERATION_CONFIGURATION),
    (RawType.AUTO_MODERATION_RULE_DELETE, AutoModerationRule, Intents.AUTO_MODERATION_CONFIGURATION),
    (
        RawType.AUTO_MODERATION_ACTION_EXECUTION,
        events.AutoModerationActionExecution,
        Intents.AUTO_MODERATION_EXECUTION,
    ),
    (RawType.CHANNEL_CREATE, Channel, Intents.GUILDS),
    (RawType.CHANNEL_UPDATE, Channel, Intents.GUILDS),
    (RawType.CHANNEL_DELETE, Channel, Intents.GUILDS),
    (RawType.CHANNEL_PINS_UPDATE, events.ChannelPinsUpdate, Intents.GUILDS | Intents.DIRECT_MESSAGES),
    (RawType.THREAD_CREATE, Channel, Intents.GUILDS),
    (RawType.THREAD_UPDATE, Channel, Intents.GUILDS),
    (RawType.THREAD_DELETE, Channel, Intents.GUILDS),
    (RawType.THREAD_LIST_SYNC, events.ThreadListSync, Intents.GUILDS),
    (RawType.THREAD_MEMBER_UPDATE, events.ThreadMemberUpdate, Intents.GUILDS),
    (RawType.THREAD_MEMBERS_UPDATE, events.ThreadMembersUpdate, Intents.GUILDS | Intents.GUILD_MEMBERS),
    (RawType.GUILD_CREATE, events.GuildCreate, Intents.GUILDS),
    (RawType.GUILD_UPDATE, Guild, Intents.GUILDS),
    (RawType.GUILD_DELETE, UnavailableGuild, Intents.GUILDS),
    (RawType.GUILD_AUDIT_LOG_ENTRY_CREATE, events.GuildAuditLogEntryCreate, Intents.GUILD_MODERATION),
    (RawType.GUILD_BAN_ADD, events.GuildBan, Intents.GUILD_MODERATION),
    (RawType.GUILD_BAN_REMOVE, events.GuildBan, Intents.GUILD_MODERATION),
    (RawType.GUILD_EMOJIS_UPDATE, events.GuildEmojisUpdate, Intents.GUILD_EMOJIS_AND_STICKERS),
    (RawType.GUILD_STICKERS_UPDATE, events.GuildStickersUpdate, Intents.GUILD_EMOJIS_AND_STICKERS),
    (RawType.GUILD_INTEGRATIONS_UPDATE, events.GuildIntegrationsUpdate, Intents.GUILD_INTEGRATIONS),
    (RawType.GUILD_MEMBER_ADD, events.GuildMemberAdd, Intents.GUILD_MEMBERS),
    (RawType.GUILD_MEMBER_REMOVE, events.GuildMemberRemove, Intents.GUILD_MEMBERS),
    (RawType.GUILD_MEMBER_UPDATE, events.GuildMemberUpdate, Intents.GUILD_MEMBERS),
    (RawType.GUILD_MEMBERS_CHUNK, events.GuildMembersChunk, Intents.NONE),
    (RawType.GUILD_ROLE_CREATE, events.GuildRoleEvent, Intents.GUILDS),
    (RawType.GUILD_ROLE_UPDATE, events.GuildRoleEvent, Intents.GUILDS),
    (RawType.GUILD_ROLE_DELETE, events.GuildRoleDelete, Intents.GUILDS),
    (RawType.GUILD_SCHEDULED_EVENT_CREATE, GuildScheduledEvent, Intents.GUILD_SCHEDULED_EVENTS),
    (RawType.GUILD_SCHEDULED_EVENT_UPDATE, GuildScheduledEvent, Intents.GUILD_SCHEDULED_EVENTS),
    (RawType.GUILD_SCHEDULED_EVENT_DELETE, GuildScheduledEvent, Intents.GUILD_SCHEDULED_EVENTS),
    (RawType.GUILD_SCHEDULED_EVENT_USER_ADD, events.GuildScheduledEventUser, Intents.GUILD_SCHEDULED_EVENTS),
    (RawType.GUILD_SCHEDULED_EVENT_USER_REMOVE, events.GuildScheduledEventUser, Intents.GUILD_SCHEDULED_EVENTS),
    (RawType.INTEGRATION_CREATE, events.GuildIntegration, Intents.GUILD_INTEGRATIONS),
    (RawType.INTEGRATION_UPDATE, events.GuildIntegration, Intents.GUILD_INTEGRATIONS),
    (RawType.INTEGRATION_DELETE, events.IntegrationDelete, Intents.GUILD_INTEGRATIONS),
    (RawType.INTERACTION_CREATE, Interaction, Intents.NONE),
    (RawType.INVITE_CREATE, events.InviteCreate, Intents.GUILD_INVITES),
    (RawType.INVITE_DELETE, events.InviteDelete, Intents.GUILD_INVITES),
    (RawType.MESSAGE_CREATE, events.MessageCreate, Intents.GUILD_MESSAGES | Intents.DIRECT_MESSAGES),
    (RawType.MESSAGE_UPDATE, events.MessageCreate, Intents.GUILD_MESSAGES | Intents.DIRECT_MESSAGES),
    (RawType.MESSAGE_DELETE, events.MessageDelete, Intents.GUILD_MESSAGES | Intents.DIRECT_MESSAGES),
    (RawType.MESSAGE_DELETE_BULK, events.MessageDeleteBulk, Intents.GUILD_MESSAGES),
    (
        RawType.MESSAGE_REACTION_ADD,
        events.MessageReactionAdd,
        Intents.GUILD_MESSAGE_REACTIONS | Intents.DIRECT_MESSAGE_REACTIONS,
    ),
    (
        RawType.MESSAGE_REACTION_REMOVE,
        events.MessageReactionRemove,
        Intents.GUILD_MESSAGE_REACTIONS | Intents.DIRECT_MESSAGE_REACTIONS,
    ),
    (
        RawType.MESSAGE_REACTION_REMOVE_ALL,
        events.MessageReactionRemoveAll,
        Intents.GUILD_MESSAGE_REACTIONS | Intents.DIRECT_MESSAGE_REACTIONS,
    ),
    (
        RawType.MESSAGE_REACTION_REMOVE_EMOJI,
        events.MessageReactionRemoveEmoji,
        Intents.GUILD_MESSAGE_REACTIONS | Intents.DIRECT_MESSAGE_REACTIONS,
    ),
    (RawType.PRESENCE_UPDATE, events.PresenceUpdate, Intents.GUILD_PRESENCES),
    (RawType.STAGE_INSTANCE_CREATE, StageInstance, Intents.GUILDS),
    (RawType.STAGE_INSTANCE_DELETE, StageInstance, Intents.GUILDS),
    (RawType.STAGE_INSTANCE_UPDATE, StageInstance, Intents.GUILDS),
    (RawType.TYPING_START, events.TypingStart, Intents.GUILD_MESSAGE_TYPING | Intents.DIRECT_MESSAGE_TYPING),
    (RawType.USER_UPDATE, User, Intents.NONE),
    (RawType.VOICE_STATE_UPDATE, VoiceState, Intents.GUILD_VOICE_STATES),
    (RawType.VOICE_SERVER_UPDATE, events.VoiceServerUpdate, Intents.NONE),
    (RawType.WEBHOOKS_UPDATE, events.WebhooksUpdate, Intents.GUILD_WEBHOOKS),
)

for _raw_type, _payload_type, _required in _DEFAULTS:
    register_event(_raw_type.value, _payload_type, intents=_required)

del _raw_type, _payload_type, _required
