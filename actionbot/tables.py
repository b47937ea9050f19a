from __future__ import annotations

"""Command and event tables built from the definitions file.

Purpose: Validate the raw definitions structure once, before the gateway starts
delivering events, and expose read-only lookups to the dispatcher.

Contract:
- load_tables(data) -> (CommandTable, EventTable); raises ConfigError on any
  malformed entry, naming where it is.
- Command lookup is case-insensitive; two commands that differ only in case
  are a load-time error.
- Operation names are not checked here; the registry resolves them lazily at
  dispatch time.

Definitions shape:
    {
      "binds":    {"user": "actor.mention"},
      "commands": [{"name": "greet", "actions": [{"name": "SendMessage", "arguments": ["Hi {user}"]}]}],
      "events":   [{"name": "UserJoined", "actions": [...]}]
    }
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .arguments import Template, parse_binds, parse_template, positionals
from .context import EventKind
from .errors import ConfigError


logger = logging.getLogger("actionbot.tables")


@dataclass(frozen=True)
class ActionInvocation:
    operation: str
    arguments: Tuple[Template, ...] = ()


@dataclass(frozen=True)
class CommandDefinition:
    name: str
    actions: Tuple[ActionInvocation, ...]


@dataclass(frozen=True)
class EventDefinition:
    kind: EventKind
    actions: Tuple[ActionInvocation, ...]


class CommandTable:
    def __init__(self, commands: Mapping[str, CommandDefinition]) -> None:
        self._by_key = MappingProxyType({k.casefold(): v for k, v in commands.items()})

    def get(self, name: str) -> Optional[CommandDefinition]:
        if not name:
            return None
        return self._by_key.get(name.casefold())

    def names(self) -> List[str]:
        return sorted(c.name for c in self._by_key.values())

    def __iter__(self) -> Iterator[CommandDefinition]:
        return iter(self._by_key.values())

    def __len__(self) -> int:
        return len(self._by_key)


class EventTable:
    def __init__(self, events: Mapping[EventKind, EventDefinition]) -> None:
        self._by_kind = MappingProxyType(dict(events))

    def get(self, kind: EventKind) -> Optional[EventDefinition]:
        return self._by_kind.get(kind)

    def is_wired(self, kind: EventKind) -> bool:
        return kind in self._by_kind

    def wired_kinds(self) -> List[EventKind]:
        return [k for k in EventKind if k in self._by_kind]

    def __len__(self) -> int:
        return len(self._by_kind)


def _require_list(data: Dict[str, Any], key: str, where: str) -> List[Any]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ConfigError(f"{where}: '{key}' must be a list")
    return value


def _parse_actions(raw: Any, where: str, binds: Mapping[str, str], allow_positional: bool) -> Tuple[ActionInvocation, ...]:
    if not isinstance(raw, list) or not raw:
        raise ConfigError(f"{where}: 'actions' must be a non-empty list")
    out: List[ActionInvocation] = []
    for i, action in enumerate(raw):
        loc = f"{where}.actions[{i}]"
        if not isinstance(action, dict):
            raise ConfigError(f"{loc}: action must be an object")
        name = action.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ConfigError(f"{loc}: missing required field 'name'")
        args_raw = action.get("arguments", [])
        if not isinstance(args_raw, list):
            raise ConfigError(f"{loc}: 'arguments' must be a list")
        templates: List[Template] = []
        for j, arg in enumerate(args_raw):
            try:
                template = parse_template(arg, binds)
            except ConfigError as exc:
                raise ConfigError(f"{loc}.arguments[{j}]: {exc}") from exc
            if not allow_positional and positionals(template):
                raise ConfigError(
                    f"{loc}.arguments[{j}]: events do not supply arguments, '{arg}' cannot be bound"
                )
            templates.append(template)
        out.append(ActionInvocation(operation=name.strip(), arguments=tuple(templates)))
    return tuple(out)


def load_tables(data: Any) -> Tuple[CommandTable, EventTable]:
    if not isinstance(data, dict):
        raise ConfigError("definitions must be an object with 'commands' and/or 'events'")
    binds = parse_binds(data.get("binds"))

    commands: Dict[str, CommandDefinition] = {}
    seen: Dict[str, str] = {}
    for i, raw in enumerate(_require_list(data, "commands", "definitions")):
        where = f"commands[{i}]"
        if not isinstance(raw, dict):
            raise ConfigError(f"{where}: command must be an object")
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip() or any(c.isspace() for c in name.strip()):
            raise ConfigError(f"{where}: 'name' must be a single non-empty word")
        name = name.strip()
        key = name.casefold()
        if key in seen:
            raise ConfigError(f"{where}: command '{name}' duplicates '{seen[key]}'")
        seen[key] = name
        commands[name] = CommandDefinition(
            name=name,
            actions=_parse_actions(raw.get("actions"), f"{where} ({name})", binds, allow_positional=True),
        )

    events: Dict[EventKind, EventDefinition] = {}
    for i, raw in enumerate(_require_list(data, "events", "definitions")):
        where = f"events[{i}]"
        if not isinstance(raw, dict):
            raise ConfigError(f"{where}: event must be an object")
        name = raw.get("name")
        if not isinstance(name, str):
            raise ConfigError(f"{where}: missing required field 'name'")
        kind = EventKind.parse(name)
        if kind is None:
            known = ", ".join(k.value for k in EventKind)
            raise ConfigError(f"{where}: unknown event kind '{name}' (known: {known})")
        if kind in events:
            raise ConfigError(f"{where}: event '{name}' defined twice")
        events[kind] = EventDefinition(
            kind=kind,
            actions=_parse_actions(raw.get("actions"), f"{where} ({name})", binds, allow_positional=False),
        )

    logger.info(
        "loaded %d commands, %d events (%s)",
        len(commands),
        len(events),
        ", ".join(k.value for k in events) or "none wired",
    )
    return CommandTable(commands), EventTable(events)
