from __future__ import annotations

"""Typed schema definitions for gateway frames.

Purpose: Provide precise TypedDicts for the frames exchanged with the chat
gateway to aid static checks and keep the protocol explicit.

"""

from typing import List, Literal, Optional, TypedDict


InboundType = Literal[
    "ready",
    "invalid_session",
    "message_create",
    "user_joined",
    "user_left",
    "user_banned",
    "user_unbanned",
    "log",
    "ping",
]

OutboundType = Literal[
    "identify",
    "action_request",
    "pong",
]


class UserPayload(TypedDict, total=False):
    id: str
    name: str
    bot: bool


class GuildPayload(TypedDict, total=False):
    id: str
    name: str
    system_channel_id: Optional[str]


class MessagePayload(TypedDict, total=False):
    id: str
    content: str
    channel_id: str
    author: UserPayload
    guild: Optional[GuildPayload]
    mentions: List[UserPayload]


class Identify(TypedDict):
    type: Literal["identify"]
    token: str
    token_type: str


class Ready(TypedDict):
    type: Literal["ready"]
    user: UserPayload


class InvalidSession(TypedDict, total=False):
    type: Literal["invalid_session"]
    reason: str


class MessageCreate(TypedDict):
    type: Literal["message_create"]
    message: MessagePayload


class MemberEvent(TypedDict, total=False):
    type: Literal["user_joined", "user_left", "user_banned", "user_unbanned"]
    user: UserPayload
    target: Optional[UserPayload]
    guild: Optional[GuildPayload]


class LogEvent(TypedDict, total=False):
    type: Literal["log"]
    severity: str
    source: str
    text: str


class ActionRequest(TypedDict, total=False):
    type: Literal["action_request"]
    action_id: str
    op: str
    channel_id: Optional[str]
    guild_id: Optional[str]
    user: Optional[str]
    user_id: Optional[str]
    content: Optional[str]
    reason: Optional[str]
    role: Optional[str]
    message_id: Optional[str]
