from __future__ import annotations

"""Built-in platform operations.

Purpose: The actions a definitions file can name. Each operation receives the
execution context first and its declared, already-coerced arguments after;
it talks to the platform through ``ctx.connection.request(op, **fields)``.

Users may be given as a mention ("<@123>"), a bare id, or a name; mentions are
reduced to the id before they go on the wire.
"""

import logging
import re

from .context import ExecutionContext
from .entities import User
from .errors import OperationError
from .registry import operation


logger = logging.getLogger("actionbot.operations")

_MENTION_RE = re.compile(r"^<@!?(\d+)>$")


def _user_ref(user: str) -> str:
    m = _MENTION_RE.match(user.strip())
    return m.group(1) if m else user.strip()


def _channel(ctx: ExecutionContext) -> str:
    if not ctx.channel:
        raise OperationError("no channel available to send to", code="no_channel")
    return ctx.channel


def _group_id(ctx: ExecutionContext) -> str:
    if ctx.group is None:
        raise OperationError("this action needs a guild", code="no_group")
    return ctx.group.id


@operation("SendMessage")
async def send_message(ctx: ExecutionContext, text: str) -> None:
    await ctx.connection.request("send_message", channel_id=_channel(ctx), content=text)


@operation("SendChannelMessage")
async def send_channel_message(ctx: ExecutionContext, channel: str, text: str) -> None:
    await ctx.connection.request("send_message", channel_id=channel, content=text)


@operation("SendDirectMessage")
async def send_direct_message(ctx: ExecutionContext, user: User, text: str) -> None:
    await ctx.connection.request("send_direct_message", user_id=user.id, content=text)


@operation("SendWelcome")
async def send_welcome(ctx: ExecutionContext, user: str) -> None:
    await ctx.connection.request("send_message", channel_id=_channel(ctx), content=f"Welcome, {user}!")


@operation("BanUser")
async def ban_user(ctx: ExecutionContext, user: str, reason: str) -> None:
    logger.info("banning %s: %s", user, reason)
    await ctx.connection.request("ban", guild_id=_group_id(ctx), user=_user_ref(user), reason=reason)


@operation("UnbanUser")
async def unban_user(ctx: ExecutionContext, user: str) -> None:
    await ctx.connection.request("unban", guild_id=_group_id(ctx), user=_user_ref(user))


@operation("KickUser")
async def kick_user(ctx: ExecutionContext, user: str, reason: str) -> None:
    logger.info("kicking %s: %s", user, reason)
    await ctx.connection.request("kick", guild_id=_group_id(ctx), user=_user_ref(user), reason=reason)


@operation("AddRole")
async def add_role(ctx: ExecutionContext, user: str, role: str) -> None:
    await ctx.connection.request("add_role", guild_id=_group_id(ctx), user=_user_ref(user), role=role)


@operation("RemoveRole")
async def remove_role(ctx: ExecutionContext, user: str, role: str) -> None:
    await ctx.connection.request("remove_role", guild_id=_group_id(ctx), user=_user_ref(user), role=role)


@operation("DeleteMessage")
async def delete_message(ctx: ExecutionContext) -> None:
    if ctx.message is None:
        raise OperationError("no triggering message to delete", code="no_message")
    await ctx.connection.request("delete_message", channel_id=ctx.message.channel_id, message_id=ctx.message.id)
