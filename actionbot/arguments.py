from __future__ import annotations

"""Argument templates and their resolution against an execution context.

Purpose: Parse the argument values written in the definitions file into a
small tagged model once at load time, then turn them into concrete, typed
values for one operation call at dispatch time.

Template syntax (strings):
- "$0", "{$0}"        -> Positional(0)
- "$1*", "{$1*}"      -> Positional(1, rest=True): tokens 1.. joined by spaces
- "{actor}"           -> ContextRef("actor"), keeps the native value
- "{actor.name}"      -> ContextRef with attribute steps
- "Hi {actor.name}!"  -> Interpolation, always a str
- anything else       -> Literal; "{{" and "}}" escape braces
Non-string JSON values are always Literals.

"""

import re
import types
import typing
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import ArityError, BindingError, ConfigError, TypeCoercionError


CONTEXT_FIELDS = ("actor", "target", "group", "message", "channel")

_POSITIONAL_RE = re.compile(r"^\$(\d+)(\*)?$")
_PATH_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*(\.[A-Za-z][A-Za-z0-9_]*)*$")
_REF_RE = re.compile(r"\{\{|\}\}|\{([^{}]*)\}")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class ContextRef:
    path: str

    @property
    def root(self) -> str:
        return self.path.split(".", 1)[0]


@dataclass(frozen=True)
class Positional:
    index: int
    rest: bool = False


@dataclass(frozen=True)
class Interpolation:
    parts: Tuple[Union[str, ContextRef, Positional], ...]


Template = Union[Literal, ContextRef, Positional, Interpolation]


# ---------------------------------------------------------------------------
# Parsing (load time)
# ---------------------------------------------------------------------------

def _parse_ref(body: str, binds: Mapping[str, str]) -> Union[ContextRef, Positional]:
    body = body.strip()
    m = _POSITIONAL_RE.match(body)
    if m:
        return Positional(int(m.group(1)), rest=bool(m.group(2)))
    if not _PATH_RE.match(body):
        raise ConfigError(f"malformed reference '{{{body}}}'")
    root, _, tail = body.partition(".")
    if root in binds:
        body = binds[root] + ("." + tail if tail else "")
        root = body.split(".", 1)[0]
    if root not in CONTEXT_FIELDS:
        raise ConfigError(
            f"unknown reference '{root}' (expected one of {', '.join(CONTEXT_FIELDS)} or a bind)"
        )
    return ContextRef(body)


def parse_template(raw: Any, binds: Optional[Mapping[str, str]] = None) -> Template:
    if not isinstance(raw, str):
        if isinstance(raw, (dict, list)):
            raise ConfigError(f"argument must be a scalar, got {type(raw).__name__}")
        return Literal(raw)
    binds = binds or {}
    m = _POSITIONAL_RE.match(raw)
    if m:
        return Positional(int(m.group(1)), rest=bool(m.group(2)))

    parts: List[Union[str, ContextRef, Positional]] = []
    text: List[str] = []
    pos = 0
    for m in _REF_RE.finditer(raw):
        text.append(raw[pos:m.start()])
        pos = m.end()
        token = m.group(0)
        if token == "{{":
            text.append("{")
        elif token == "}}":
            text.append("}")
        else:
            if text:
                parts.append("".join(text))
                text = []
            parts.append(_parse_ref(m.group(1), binds))
    text.append(raw[pos:])
    tail = "".join(text)
    if tail:
        parts.append(tail)
    parts = [p for p in parts if p != ""]

    if not any(not isinstance(p, str) for p in parts):
        return Literal("".join(parts))  # type: ignore[arg-type]
    if len(parts) == 1:
        return parts[0]  # type: ignore[return-value]
    return Interpolation(tuple(parts))


def parse_binds(raw: Any) -> Dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("'binds' must be an object of {alias: context_path}")
    out: Dict[str, str] = {}
    for alias, path in raw.items():
        if not isinstance(alias, str) or not _PATH_RE.match(alias) or "." in alias:
            raise ConfigError(f"invalid bind alias {alias!r}")
        if alias in CONTEXT_FIELDS:
            raise ConfigError(f"bind alias '{alias}' shadows a context field")
        if not isinstance(path, str) or not _PATH_RE.match(path):
            raise ConfigError(f"bind '{alias}' must map to a context path")
        if path.split(".", 1)[0] not in CONTEXT_FIELDS:
            raise ConfigError(f"bind '{alias}' must start with a context field, got '{path}'")
        out[alias] = path
    return out


def positionals(template: Template) -> List[Positional]:
    if isinstance(template, Positional):
        return [template]
    if isinstance(template, Interpolation):
        return [p for p in template.parts if isinstance(p, Positional)]
    return []


# ---------------------------------------------------------------------------
# Resolution (dispatch time)
# ---------------------------------------------------------------------------

def _lookup(ctx: Any, ref: ContextRef) -> Any:
    segments = ref.path.split(".")
    value = getattr(ctx, segments[0], None)
    if value is None:
        raise BindingError(f"'{segments[0]}' is not available for this event")
    walked = segments[0]
    for seg in segments[1:]:
        walked = f"{walked}.{seg}"
        if isinstance(value, dict):
            if seg not in value:
                raise BindingError(f"'{walked}' is not available")
            value = value[seg]
        elif seg.startswith("_") or not hasattr(value, seg):
            raise BindingError(f"'{walked}' is not available")
        else:
            value = getattr(value, seg)
        if value is None or callable(value):
            raise BindingError(f"'{walked}' is not available")
    return value


def _token(pos: Positional, tokens: Sequence[str]) -> str:
    if pos.index >= len(tokens):
        raise ArityError(f"argument ${pos.index} missing ({len(tokens)} supplied)")
    if pos.rest:
        return " ".join(tokens[pos.index:])
    return tokens[pos.index]


def resolve_template(template: Template, ctx: Any, tokens: Sequence[str] = ()) -> Any:
    if isinstance(template, ContextRef):
        return _lookup(ctx, template)
    if isinstance(template, Positional):
        return _token(template, tokens)
    if isinstance(template, Interpolation):
        out: List[str] = []
        for part in template.parts:
            if isinstance(part, str):
                out.append(part)
            else:
                out.append(str(resolve_template(part, ctx, tokens)))
        return "".join(out)
    return template.value


def _unwrap_optional(expected: Any) -> Tuple[Any, bool]:
    if typing.get_origin(expected) in (Union, types.UnionType):
        args = [a for a in typing.get_args(expected) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
    return expected, False


def coerce(value: Any, expected: Any) -> Any:
    if expected is Any or expected is object:
        return value
    expected, optional = _unwrap_optional(expected)
    if value is None:
        if optional:
            return None
        raise TypeCoercionError("null is not allowed here")
    if not isinstance(expected, type):
        raise TypeCoercionError(f"unsupported parameter type {expected!r}")

    if expected is bool:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise TypeCoercionError(f"'{value}' is not a boolean")

    if expected in (int, float):
        if isinstance(value, bool):
            raise TypeCoercionError(f"'{value}' is not a number")
        if isinstance(value, expected):
            return value
        if isinstance(value, float) and expected is int:
            if value.is_integer():
                return int(value)
            raise TypeCoercionError(f"'{value}' is not an integer")
        if isinstance(value, int) and expected is float:
            return float(value)
        if isinstance(value, str):
            try:
                return expected(value.strip())
            except ValueError:
                raise TypeCoercionError(f"'{value}' is not a valid {expected.__name__}") from None
        raise TypeCoercionError(f"cannot coerce {type(value).__name__} to {expected.__name__}")

    if isinstance(value, expected):
        return value
    if expected is str:
        return str(value)
    raise TypeCoercionError(f"cannot coerce {type(value).__name__} to {expected.__name__}")


def resolve_arguments(
    templates: Sequence[Template],
    params: Sequence[Tuple[str, Any]],
    ctx: Any,
    tokens: Sequence[str] = (),
) -> List[Any]:
    """Resolve templates into exactly len(params) values, or raise."""
    if len(templates) != len(params):
        raise ArityError(f"expected {len(params)} arguments, got {len(templates)}")
    values: List[Any] = []
    for template, (pname, ptype) in zip(templates, params):
        raw = resolve_template(template, ctx, tokens)
        try:
            values.append(coerce(raw, ptype))
        except TypeCoercionError as exc:
            raise TypeCoercionError(f"parameter '{pname}': {exc}") from exc
    return values
