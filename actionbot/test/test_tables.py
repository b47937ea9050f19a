from __future__ import annotations

import copy
import unittest
from typing import Any, Dict

from actionbot.arguments import ContextRef, Interpolation, Literal, Positional
from actionbot.context import EventKind
from actionbot.errors import ConfigError
from actionbot.tables import ActionInvocation, load_tables


BASE: Dict[str, Any] = {
    "binds": {"user": "actor.mention"},
    "commands": [
        {"name": "greet", "actions": [{"name": "SendMessage", "arguments": ["Hi {user}"]}]},
        {
            "name": "ban",
            "actions": [
                {"name": "BanUser", "arguments": ["$0", "$1*"]},
                {"name": "SendMessage", "arguments": ["done"]},
            ],
        },
    ],
    "events": [
        {"name": "UserJoined", "actions": [{"name": "SendWelcome", "arguments": ["{actor}"]}]},
    ],
}


def _data() -> Dict[str, Any]:
    return copy.deepcopy(BASE)


class TestLoadTables(unittest.TestCase):
    def test_valid_definitions(self) -> None:
        commands, events = load_tables(_data())
        self.assertEqual(commands.names(), ["ban", "greet"])
        ban = commands.get("ban")
        assert ban is not None
        self.assertEqual(
            ban.actions[0],
            ActionInvocation("BanUser", (Positional(0), Positional(1, rest=True))),
        )
        greet = commands.get("greet")
        assert greet is not None
        self.assertEqual(greet.actions[0].arguments, (Interpolation(("Hi ", ContextRef("actor.mention"))),))
        joined = events.get(EventKind.USER_JOINED)
        assert joined is not None
        self.assertEqual(joined.actions[0].arguments, (ContextRef("actor"),))

    def test_command_lookup_is_case_insensitive(self) -> None:
        commands, _ = load_tables(_data())
        for name in ("ban", "BAN", "Ban"):
            found = commands.get(name)
            self.assertIsNotNone(found, name)
            self.assertTrue(found.actions)  # type: ignore[union-attr]

    def test_absent_command_returns_none(self) -> None:
        commands, _ = load_tables(_data())
        self.assertIsNone(commands.get("nope"))
        self.assertIsNone(commands.get(""))

    def test_event_wiring(self) -> None:
        _, events = load_tables(_data())
        self.assertTrue(events.is_wired(EventKind.USER_JOINED))
        self.assertFalse(events.is_wired(EventKind.USER_BANNED))
        self.assertIsNone(events.get(EventKind.USER_LEFT))
        self.assertEqual(events.wired_kinds(), [EventKind.USER_JOINED])

    def test_sections_are_optional(self) -> None:
        commands, events = load_tables({})
        self.assertEqual(len(commands), 0)
        self.assertEqual(len(events), 0)

    def test_missing_arguments_means_none(self) -> None:
        commands, _ = load_tables({"commands": [{"name": "x", "actions": [{"name": "DeleteMessage"}]}]})
        self.assertEqual(commands.get("x").actions[0].arguments, ())  # type: ignore[union-attr]

    def test_literal_arguments_kept(self) -> None:
        commands, _ = load_tables({"commands": [{"name": "x", "actions": [{"name": "Op", "arguments": [3, "plain"]}]}]})
        self.assertEqual(commands.get("x").actions[0].arguments, (Literal(3), Literal("plain")))  # type: ignore[union-attr]


class TestMalformedDefinitions(unittest.TestCase):
    def assertRejected(self, data: Any, fragment: str) -> None:
        with self.assertRaises(ConfigError) as cm:
            load_tables(data)
        self.assertIn(fragment, str(cm.exception))

    def test_not_an_object(self) -> None:
        self.assertRejected([], "definitions")

    def test_unknown_event_kind(self) -> None:
        data = _data()
        data["events"].append({"name": "UserDanced", "actions": [{"name": "SendMessage", "arguments": ["x"]}]})
        self.assertRejected(data, "unknown event kind 'UserDanced'")

    def test_duplicate_event(self) -> None:
        data = _data()
        data["events"].append(copy.deepcopy(data["events"][0]))
        self.assertRejected(data, "defined twice")

    def test_duplicate_command_differing_in_case(self) -> None:
        data = _data()
        data["commands"].append({"name": "GREET", "actions": [{"name": "SendMessage", "arguments": ["x"]}]})
        self.assertRejected(data, "duplicates 'greet'")

    def test_missing_fields(self) -> None:
        data = _data()
        del data["commands"][0]["name"]
        self.assertRejected(data, "commands[0]")
        data = _data()
        del data["commands"][1]["actions"][0]["name"]
        self.assertRejected(data, "commands[1] (ban).actions[0]: missing required field 'name'")
        data = _data()
        del data["events"][0]["name"]
        self.assertRejected(data, "events[0]: missing required field 'name'")

    def test_empty_or_wrong_actions(self) -> None:
        data = _data()
        data["commands"][0]["actions"] = []
        self.assertRejected(data, "non-empty list")
        data = _data()
        data["commands"][0]["actions"][0]["arguments"] = "oops"
        self.assertRejected(data, "'arguments' must be a list")
        data = _data()
        data["commands"] = {"greet": []}
        self.assertRejected(data, "'commands' must be a list")

    def test_command_name_with_spaces(self) -> None:
        data = _data()
        data["commands"][0]["name"] = "two words"
        self.assertRejected(data, "single non-empty word")

    def test_positional_in_event_rejected(self) -> None:
        for arg in ("$0", "{$1*}", "hello {$0}"):
            data = _data()
            data["events"][0]["actions"][0]["arguments"] = [arg]
            self.assertRejected(data, "events do not supply arguments")

    def test_bad_reference_names_location(self) -> None:
        data = _data()
        data["commands"][0]["actions"][0]["arguments"] = ["{who}"]
        self.assertRejected(data, "commands[0] (greet).actions[0].arguments[0]: unknown reference 'who'")

    def test_bad_binds(self) -> None:
        data = _data()
        data["binds"] = {"user": "nowhere"}
        self.assertRejected(data, "bind 'user'")


if __name__ == "__main__":
    unittest.main()
