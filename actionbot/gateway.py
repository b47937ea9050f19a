from __future__ import annotations

"""Gateway client: log in, receive platform events, send platform actions.

Purpose: WebSocket connection to the chat gateway. Identifies with the bot
credential, turns inbound frames into entities and hands each message or wired
lifecycle event to the dispatcher in its own task. Operations reach the
platform through the shared GatewayConnection handle.

How: One receive loop; every stimulus becomes an independent task so a slow
action only stalls its own dispatch. Frames that fail to parse or carry
ill-typed payloads are dropped here with a warning.

"""

import asyncio
import json
import logging
import signal
import uuid
from typing import Any, Callable, Coroutine, Dict, Optional, Set

import websockets

from .config import Settings, configure_logging, load_settings
from .context import EventKind, EventPayload
from .data_files import load_tables_from_file
from .dispatcher import Dispatcher
from .entities import Group, Message, User
from .errors import LoginError
from .registry import ActionRegistry
from .schemas import ActionRequest, Identify


logger = logging.getLogger("actionbot.gateway")


MEMBER_EVENTS: Dict[str, EventKind] = {
    "user_joined": EventKind.USER_JOINED,
    "user_left": EventKind.USER_LEFT,
    "user_banned": EventKind.USER_BANNED,
    "user_unbanned": EventKind.USER_UNBANNED,
}


class GatewayConnection:
    """Connection handle shared by every in-flight dispatch."""

    def __init__(self, websocket: Any) -> None:
        self.websocket = websocket
        self._send_lock = asyncio.Lock()

    async def send_json(self, obj: Dict[str, Any]) -> None:
        text = json.dumps(obj, separators=(",", ":"))
        async with self._send_lock:
            await self.websocket.send(text)

    async def request(self, op: str, **fields: Any) -> str:
        action_id = str(uuid.uuid4())
        frame: ActionRequest = {"type": "action_request", "action_id": action_id, "op": op}
        frame.update(fields)  # type: ignore[typeddict-item]
        await self.send_json(dict(frame))
        return action_id


class GatewayClient:
    def __init__(
        self,
        settings: Settings,
        dispatcher: Dispatcher,
        *,
        connect: Callable[[str], Any] = websockets.connect,
    ) -> None:
        self.settings = settings
        self.dispatcher = dispatcher
        self._connect = connect
        self.connection: Optional[GatewayConnection] = None
        self.bot_user: Optional[User] = None
        self._tasks: Set[asyncio.Task] = set()
        # Connection-level log lines are toggled by print_log
        self._log = logger.info if settings.print_log else logger.debug

    async def login(self) -> GatewayConnection:
        try:
            websocket = await self._connect(self.settings.gateway_url)
        except (OSError, TimeoutError, websockets.InvalidURI, websockets.InvalidHandshake) as exc:
            raise LoginError(f"unable to connect to gateway at {self.settings.gateway_url}: {exc}") from exc

        connection = GatewayConnection(websocket)
        try:
            identify: Identify = {
                "type": "identify",
                "token": self.settings.token,
                "token_type": self.settings.token_type,
            }
            await connection.send_json(dict(identify))
            raw = await websocket.recv()
        except websockets.ConnectionClosed as exc:
            raise LoginError(f"gateway closed the connection during login: {exc}") from exc

        try:
            frame = json.loads(raw)
        except ValueError as exc:
            await websocket.close()
            raise LoginError("gateway sent an unreadable login response") from exc
        ftype = frame.get("type") if isinstance(frame, dict) else None
        if ftype == "invalid_session":
            await websocket.close()
            raise LoginError(f"invalid token: {frame.get('reason', 'rejected by gateway')}")
        if ftype != "ready":
            await websocket.close()
            raise LoginError(f"unexpected login response: {ftype}")
        try:
            self.bot_user = User.from_payload(frame.get("user"))
        except ValueError as exc:
            await websocket.close()
            raise LoginError(f"ready frame without a valid bot user: {exc}") from exc

        self.connection = connection
        self._log("logged in as %s (%s)", self.bot_user.name, self.bot_user.id)
        wired = self.dispatcher.events.wired_kinds()
        self._log("wired events: %s", ", ".join(k.value for k in wired) or "<none>")
        return connection

    async def run(self) -> None:
        connection = self.connection or await self.login()
        try:
            async for raw in connection.websocket:
                await self.handle_frame(raw)
        except websockets.ConnectionClosedError as exc:
            logger.warning("gateway connection lost: %s", exc)
        finally:
            self._log("gateway connection closed")
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def start(self) -> None:
        await self.login()
        await self.run()

    async def stop(self) -> None:
        if self.connection is not None:
            await self.connection.websocket.close()

    async def handle_frame(self, raw: Any) -> Optional[asyncio.Task]:
        """Route one inbound frame; returns the dispatch task if one was started."""
        connection = self.connection
        if connection is None:
            raise RuntimeError("handle_frame called before login")
        try:
            msg = json.loads(raw)
        except ValueError:
            logger.warning("invalid JSON from gateway")
            return None
        if not isinstance(msg, dict):
            logger.warning("gateway frame is not an object")
            return None

        mtype = msg.get("type")
        if not isinstance(mtype, str):
            logger.warning("gateway frame without a string type")
            return None
        if mtype == "message_create":
            try:
                message = Message.from_payload(msg.get("message"))
            except ValueError as exc:
                logger.warning("dropping malformed message_create: %s", exc)
                return None
            return self._spawn(self.dispatcher.handle_message(message, connection, self.bot_user))

        if mtype in MEMBER_EVENTS:
            kind = MEMBER_EVENTS[mtype]
            if not self.dispatcher.events.is_wired(kind):
                return None
            try:
                payload = EventPayload(
                    actor=User.from_payload(msg.get("user")),
                    target=User.from_payload(msg["target"]) if msg.get("target") is not None else None,
                    group=Group.from_payload(msg["guild"]) if msg.get("guild") is not None else None,
                )
            except ValueError as exc:
                logger.warning("dropping malformed %s: %s", mtype, exc)
                return None
            return self._spawn(self.dispatcher.handle_event(kind, payload, connection))

        if mtype == "log":
            self._log("[%s] %s: %s", msg.get("severity", "info"), msg.get("source", "gateway"), msg.get("text", ""))
            return None

        if mtype == "ping":
            await connection.send_json({"type": "pong"})
            return None

        logger.debug("unhandled frame type: %s", mtype)
        return None

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    registry = ActionRegistry.default()
    commands, events = load_tables_from_file(settings.definitions_path)
    dispatcher = Dispatcher(
        registry,
        commands,
        events,
        prefix=settings.prefix,
        allow_mention_prefix=settings.allow_mention_prefix,
        reply_on_unknown_command=settings.reply_on_unknown_command,
    )
    client = GatewayClient(settings, dispatcher)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def _signal_handler() -> None:
        logger.info("shutdown requested")
        loop.create_task(client.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Signals not supported on some platforms (e.g., Windows)
            pass

    try:
        loop.run_until_complete(client.start())
    except LoginError as exc:
        logger.error("login failed, not serving: %s", exc)
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()


if __name__ == "__main__":
    main()
