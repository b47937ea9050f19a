from __future__ import annotations

import unittest
from typing import Any, Optional

from actionbot.arguments import (
    ContextRef,
    Interpolation,
    Literal,
    Positional,
    coerce,
    parse_binds,
    parse_template,
    resolve_arguments,
    resolve_template,
)
from actionbot.context import ExecutionContext
from actionbot.entities import Group, User
from actionbot.errors import ArityError, BindingError, ConfigError, TypeCoercionError


ALICE = User(id="1", name="alice")
GUILD = Group(id="g1", name="Test Guild", system_channel_id="c1")


def _ctx(**kw: Any) -> ExecutionContext:
    kw.setdefault("actor", ALICE)
    return ExecutionContext(connection=None, **kw)


class TestParseTemplate(unittest.TestCase):
    def test_non_strings_are_literals(self) -> None:
        self.assertEqual(parse_template(5), Literal(5))
        self.assertEqual(parse_template(True), Literal(True))
        self.assertEqual(parse_template(None), Literal(None))

    def test_positional_forms(self) -> None:
        self.assertEqual(parse_template("$0"), Positional(0))
        self.assertEqual(parse_template("{$3}"), Positional(3))
        self.assertEqual(parse_template("$1*"), Positional(1, rest=True))
        self.assertEqual(parse_template("{$2*}"), Positional(2, rest=True))

    def test_context_refs(self) -> None:
        self.assertEqual(parse_template("{actor}"), ContextRef("actor"))
        self.assertEqual(parse_template("{ group.name }"), ContextRef("group.name"))

    def test_binds_expand_aliases(self) -> None:
        binds = {"user": "actor.mention", "server": "group"}
        self.assertEqual(parse_template("{user}", binds), ContextRef("actor.mention"))
        self.assertEqual(parse_template("{server.name}", binds), ContextRef("group.name"))

    def test_interpolation(self) -> None:
        t = parse_template("Hi {actor.name}, arg {$0}!")
        self.assertEqual(
            t,
            Interpolation(("Hi ", ContextRef("actor.name"), ", arg ", Positional(0), "!")),
        )

    def test_plain_text_and_escapes(self) -> None:
        self.assertEqual(parse_template("hello"), Literal("hello"))
        self.assertEqual(parse_template("{{x}}"), Literal("{x}"))
        self.assertEqual(parse_template("$5 off"), Literal("$5 off"))
        self.assertEqual(parse_template(""), Literal(""))

    def test_bad_references_fail_at_load(self) -> None:
        for raw in ("{nope}", "{actor..name}", "{1abc}", "x {_private} y"):
            with self.assertRaises(ConfigError, msg=raw):
                parse_template(raw)
        with self.assertRaises(ConfigError):
            parse_template({"a": 1})

    def test_parse_binds_validation(self) -> None:
        self.assertEqual(parse_binds(None), {})
        self.assertEqual(parse_binds({"u": "actor.name"}), {"u": "actor.name"})
        with self.assertRaises(ConfigError):
            parse_binds({"actor": "target"})
        with self.assertRaises(ConfigError):
            parse_binds({"u": "somewhere.else"})
        with self.assertRaises(ConfigError):
            parse_binds(["u"])


class TestResolve(unittest.TestCase):
    def test_context_ref_returns_native_value(self) -> None:
        self.assertIs(resolve_template(ContextRef("actor"), _ctx()), ALICE)
        self.assertEqual(resolve_template(ContextRef("actor.name"), _ctx()), "alice")

    def test_absent_context_field_is_binding_error(self) -> None:
        ctx = _ctx()  # two-party shape: no target, no group
        for path in ("target", "group", "group.name", "message", "channel"):
            with self.assertRaises(BindingError, msg=path):
                resolve_template(ContextRef(path), ctx)

    def test_missing_attribute_is_binding_error(self) -> None:
        with self.assertRaises(BindingError):
            resolve_template(ContextRef("actor.nickname"), _ctx())

    def test_methods_are_not_reachable(self) -> None:
        for path in ("actor.from_payload", "actor.__str__", "group.from_payload"):
            with self.assertRaises(BindingError, msg=path):
                resolve_template(ContextRef(path), _ctx(group=GUILD))
        self.assertEqual(resolve_template(ContextRef("actor.mention"), _ctx()), "<@1>")

    def test_positional(self) -> None:
        tokens = ["troll user", "spamming", "a", "lot"]
        self.assertEqual(resolve_template(Positional(0), _ctx(), tokens), "troll user")
        self.assertEqual(resolve_template(Positional(1, rest=True), _ctx(), tokens), "spamming a lot")
        with self.assertRaises(ArityError):
            resolve_template(Positional(4), _ctx(), tokens)
        with self.assertRaises(ArityError):
            resolve_template(Positional(0), _ctx(), [])

    def test_interpolation_renders_str(self) -> None:
        t = Interpolation(("Welcome ", ContextRef("actor"), " to ", ContextRef("group"), "!"))
        self.assertEqual(resolve_template(t, _ctx(group=GUILD)), "Welcome <@1> to Test Guild!")
        with self.assertRaises(BindingError):
            resolve_template(t, _ctx())

    def test_resolve_arguments_exact_count(self) -> None:
        params = [("user", str), ("reason", str)]
        self.assertEqual(
            resolve_arguments([Positional(0), Positional(1)], params, _ctx(), ["troll user", "spamming"]),
            ["troll user", "spamming"],
        )
        with self.assertRaises(ArityError):
            resolve_arguments([Positional(0)], params, _ctx(), ["x"])
        with self.assertRaises(ArityError):
            resolve_arguments([Literal("a"), Literal("b"), Literal("c")], params, _ctx())

    def test_resolve_arguments_never_partial(self) -> None:
        params = [("a", str), ("n", int)]
        with self.assertRaises(TypeCoercionError) as cm:
            resolve_arguments([Literal("ok"), Positional(0)], params, _ctx(), ["not-a-number"])
        self.assertIn("'n'", str(cm.exception))

    def test_literal_coerced_to_declared_type(self) -> None:
        params = [("count", int), ("ratio", float), ("loud", bool)]
        values = resolve_arguments([Literal("42"), Literal(2), Literal("yes")], params, _ctx())
        self.assertEqual(values, [42, 2.0, True])


class TestCoerce(unittest.TestCase):
    def test_passthrough(self) -> None:
        self.assertIs(coerce(ALICE, User), ALICE)
        self.assertIs(coerce(ALICE, Any), ALICE)
        self.assertIs(coerce(ALICE, object), ALICE)

    def test_to_str(self) -> None:
        self.assertEqual(coerce(ALICE, str), "<@1>")
        self.assertEqual(coerce(GUILD, str), "Test Guild")
        self.assertEqual(coerce(7, str), "7")

    def test_numbers(self) -> None:
        self.assertEqual(coerce(" 12 ", int), 12)
        self.assertEqual(coerce(3.0, int), 3)
        self.assertEqual(coerce("1.5", float), 1.5)
        for bad, typ in (("abc", int), ("1.5", int), (True, int), (2.5, int), (ALICE, int)):
            with self.assertRaises(TypeCoercionError, msg=repr(bad)):
                coerce(bad, typ)

    def test_bools(self) -> None:
        self.assertTrue(coerce("ON", bool))
        self.assertFalse(coerce("no", bool))
        with self.assertRaises(TypeCoercionError):
            coerce("maybe", bool)

    def test_optional_and_none(self) -> None:
        self.assertIsNone(coerce(None, Optional[int]))
        self.assertEqual(coerce("4", Optional[int]), 4)
        with self.assertRaises(TypeCoercionError):
            coerce(None, str)

    def test_entity_from_text_is_rejected(self) -> None:
        with self.assertRaises(TypeCoercionError):
            coerce("123", User)


if __name__ == "__main__":
    unittest.main()
