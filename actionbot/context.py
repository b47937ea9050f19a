from __future__ import annotations

"""Per-dispatch execution context.

Purpose: Bundle who triggered a dispatch (actor), who it is aimed at
(target), where it happened (group, channel) and the connection handle that
operations talk through. A fresh context is built for every message or
lifecycle event and passed explicitly down to argument resolution and each
operation; nothing about it is stored between dispatches.

Binding does no I/O and cannot fail: payloads are validated into entities at
the gateway boundary before they get here.
"""

import enum
from dataclasses import dataclass
from typing import Any, Optional

from .entities import Group, Message, User


class EventKind(str, enum.Enum):
    USER_JOINED = "UserJoined"
    USER_LEFT = "UserLeft"
    USER_BANNED = "UserBanned"
    USER_UNBANNED = "UserUnbanned"

    @classmethod
    def parse(cls, name: str) -> Optional["EventKind"]:
        for kind in cls:
            if kind.value == name:
                return kind
        return None


@dataclass(frozen=True)
class EventPayload:
    actor: User
    target: Optional[User] = None
    group: Optional[Group] = None


@dataclass(frozen=True)
class ExecutionContext:
    connection: Any
    actor: User
    target: Optional[User] = None
    group: Optional[Group] = None
    message: Optional[Message] = None
    channel: Optional[str] = None


def bind_event(kind: EventKind, payload: EventPayload, connection: Any) -> ExecutionContext:
    group = payload.group
    return ExecutionContext(
        connection=connection,
        actor=payload.actor,
        target=payload.target,
        group=group,
        channel=group.system_channel_id if group is not None else None,
    )


def bind_message(message: Message, connection: Any) -> ExecutionContext:
    target = next(
        (u for u in message.mentions if not u.bot and u.id != message.author.id),
        None,
    )
    return ExecutionContext(
        connection=connection,
        actor=message.author,
        target=target,
        group=message.guild,
        message=message,
        channel=message.channel_id,
    )
