from __future__ import annotations

"""Dispatcher: route one message or lifecycle event to its configured actions.

Purpose: Decide whether a stimulus triggers anything, find the command or
event definition, bind a fresh execution context, resolve each action's
arguments and await the operations one after another.

Engineering notes: No state is shared between dispatches beyond the
read-only registry and tables. A failing action is logged and recorded in the
returned results; the remaining actions of the same list still run. Nothing
raised by an action escapes handle_message/handle_event.

"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from .arguments import resolve_arguments
from .context import EventKind, EventPayload, ExecutionContext, bind_event, bind_message
from .entities import Message, User
from .errors import DispatchError
from .registry import ActionRegistry
from .tables import ActionInvocation, CommandTable, EventTable
from .tokenizer import ParsedCommand, tokenize


logger = logging.getLogger("actionbot.dispatcher")


@dataclass(frozen=True)
class InvocationResult:
    operation: str
    ok: bool
    error: Optional[BaseException] = None


class Dispatcher:
    def __init__(
        self,
        registry: ActionRegistry,
        commands: CommandTable,
        events: EventTable,
        *,
        prefix: str,
        allow_mention_prefix: bool = True,
        reply_on_unknown_command: bool = False,
    ) -> None:
        self.registry = registry
        self.commands = commands
        self.events = events
        self.prefix = prefix
        self.allow_mention_prefix = allow_mention_prefix
        self.reply_on_unknown_command = reply_on_unknown_command

    def parse(self, content: str, bot_user: Optional[User] = None) -> Optional[ParsedCommand]:
        """Return the parsed command, or None when the text is not addressed to the bot."""
        if self.prefix and content.startswith(self.prefix):
            return tokenize(content, self.prefix)
        if self.allow_mention_prefix and bot_user is not None:
            for mention in (f"<@{bot_user.id}>", f"<@!{bot_user.id}>"):
                if not content.startswith(mention):
                    continue
                rest = content[len(mention):]
                if rest and not rest[0].isspace():
                    continue
                return tokenize(rest, "")
        return None

    async def handle_message(
        self,
        message: Message,
        connection: Any,
        bot_user: Optional[User] = None,
    ) -> List[InvocationResult]:
        if message.author.bot or (bot_user is not None and message.author.id == bot_user.id):
            return []
        parsed = self.parse(message.content, bot_user)
        if parsed is None:
            return []
        command = self.commands.get(parsed.command)
        if command is None:
            logger.debug("no command %r (from %s)", parsed.command, message.author.name)
            if self.reply_on_unknown_command and parsed.command:
                await self._reply_unknown(message, parsed.command, connection)
            return []
        logger.info("command %s from %s args=%s", command.name, message.author.name, parsed.args)
        ctx = bind_message(message, connection)
        return await self._run(command.actions, ctx, parsed.args, f"command {command.name}")

    async def handle_event(self, kind: EventKind, payload: EventPayload, connection: Any) -> List[InvocationResult]:
        definition = self.events.get(kind)
        if definition is None:
            return []
        logger.info("event %s for %s", kind.value, payload.actor.name)
        ctx = bind_event(kind, payload, connection)
        return await self._run(definition.actions, ctx, (), f"event {kind.value}")

    async def _run(
        self,
        actions: Sequence[ActionInvocation],
        ctx: ExecutionContext,
        tokens: Sequence[str],
        label: str,
    ) -> List[InvocationResult]:
        results: List[InvocationResult] = []
        for action in actions:
            results.append(await self._invoke(action, ctx, tokens, label))
        return results

    async def _invoke(
        self,
        action: ActionInvocation,
        ctx: ExecutionContext,
        tokens: Sequence[str],
        label: str,
    ) -> InvocationResult:
        try:
            desc = self.registry.require(action.operation)
            values = resolve_arguments(action.arguments, desc.params, ctx, tokens)
            await desc.invoker(ctx, *values)
        except DispatchError as exc:
            logger.warning("%s: %s failed: %s", label, action.operation, exc)
            return InvocationResult(action.operation, False, exc)
        except Exception as exc:
            logger.exception("%s: %s raised", label, action.operation)
            return InvocationResult(action.operation, False, exc)
        return InvocationResult(action.operation, True)

    async def _reply_unknown(self, message: Message, name: str, connection: Any) -> None:
        try:
            await connection.request(
                "send_message",
                channel_id=message.channel_id,
                content=f"Unknown command: {name}",
            )
        except Exception as exc:
            logger.warning("failed to send unknown-command reply: %s", exc)
