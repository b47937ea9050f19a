from __future__ import annotations

"""Platform entities carried by gateway events.

Purpose: Turn raw gateway payload dicts into small immutable objects. This is
the boundary where ill-typed payloads are rejected (ValueError); everything
past it can trust the shapes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


def _require_str(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str) or not value:
        raise ValueError(f"payload field '{key}' missing or not a string")
    return value


def _optional_bool(payload: Dict[str, Any], key: str) -> bool:
    value = payload.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"payload field '{key}' must be a boolean")
    return value


@dataclass(frozen=True)
class User:
    id: str
    name: str
    bot: bool = False

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"

    def __str__(self) -> str:
        return self.mention

    @classmethod
    def from_payload(cls, payload: Any) -> "User":
        if not isinstance(payload, dict):
            raise ValueError("user payload must be an object")
        return cls(
            id=_require_str(payload, "id"),
            name=_require_str(payload, "name"),
            bot=_optional_bool(payload, "bot"),
        )


@dataclass(frozen=True)
class Group:
    id: str
    name: str
    system_channel_id: Optional[str] = None

    def __str__(self) -> str:
        return self.name

    @classmethod
    def from_payload(cls, payload: Any) -> "Group":
        if not isinstance(payload, dict):
            raise ValueError("guild payload must be an object")
        channel = payload.get("system_channel_id")
        return cls(
            id=_require_str(payload, "id"),
            name=_require_str(payload, "name"),
            system_channel_id=str(channel) if channel is not None else None,
        )


@dataclass(frozen=True)
class Message:
    id: str
    content: str
    channel_id: str
    author: User
    guild: Optional[Group] = None
    mentions: Tuple[User, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return self.content

    @classmethod
    def from_payload(cls, payload: Any) -> "Message":
        if not isinstance(payload, dict):
            raise ValueError("message payload must be an object")
        content = payload.get("content", "")
        if not isinstance(content, str):
            raise ValueError("message content must be a string")
        mentions_raw = payload.get("mentions") or []
        if not isinstance(mentions_raw, list):
            raise ValueError("message mentions must be a list")
        guild_raw = payload.get("guild")
        return cls(
            id=_require_str(payload, "id"),
            content=content,
            channel_id=_require_str(payload, "channel_id"),
            author=User.from_payload(payload.get("author")),
            guild=Group.from_payload(guild_raw) if guild_raw is not None else None,
            mentions=tuple(User.from_payload(m) for m in mentions_raw),
        )
