from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from actionbot.context import EventKind
from actionbot.data_files import load_definitions, load_tables_from_file
from actionbot.errors import ConfigError


class TestDataFiles(unittest.TestCase):
    def test_load_tables_from_file(self) -> None:
        data = {
            "commands": [{"name": "ping", "actions": [{"name": "SendMessage", "arguments": ["pong"]}]}],
            "events": [{"name": "UserLeft", "actions": [{"name": "SendMessage", "arguments": ["bye"]}]}],
        }
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "bot.json"
            path.write_text(json.dumps(data), encoding="utf-8")
            self.assertEqual(load_definitions(path), data)
            commands, events = load_tables_from_file(path)
        self.assertIsNotNone(commands.get("PING"))
        self.assertEqual(events.wired_kinds(), [EventKind.USER_LEFT])

    def test_errors_name_the_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "bot.json"
            path.write_text(json.dumps({"events": [{"name": "Nope", "actions": []}]}), encoding="utf-8")
            with self.assertRaises(ConfigError) as cm:
                load_tables_from_file(path)
            self.assertIn("bot.json", str(cm.exception))

            path.write_text("[1, 2]", encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_definitions(path)

            path.write_text("{oops", encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_definitions(path)

            with self.assertRaises(FileNotFoundError):
                load_definitions(Path(td) / "missing.json")


if __name__ == "__main__":
    unittest.main()
