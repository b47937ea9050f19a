from __future__ import annotations

"""Action registry: operation name -> descriptor.

Purpose: Operations declare themselves once with @operation("Name"). The
parameter shape is read from the function annotations at registration time;
dispatch only ever does a dict lookup by case-folded name.

Contract:
- The first parameter of every operation receives the ExecutionContext and is
  not part of the declared shape.
- ActionRegistry.build() keeps the first descriptor for a case-folded name and
  logs and skips later duplicates.
- The registry is read-only once built.
"""

import inspect
import logging
import typing
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Iterable, Iterator, List, Mapping, Optional, Tuple

from .errors import UnknownOperationError


logger = logging.getLogger("actionbot.registry")

Invoker = Callable[..., Awaitable[Any]]
ParamShape = Tuple[str, Any]


@dataclass(frozen=True)
class OperationDescriptor:
    name: str
    params: Tuple[ParamShape, ...]
    invoker: Invoker

    @property
    def key(self) -> str:
        return self.name.casefold()


# Filled by the @operation decorator as modules are imported.
_DECLARED: List[OperationDescriptor] = []


def describe(name: str, func: Invoker) -> OperationDescriptor:
    if not inspect.iscoroutinefunction(func):
        raise TypeError(f"operation {name} must be an async function")
    hints = typing.get_type_hints(func)
    params = list(inspect.signature(func).parameters.values())
    if not params:
        raise TypeError(f"operation {name} must accept the execution context")
    shape: List[ParamShape] = []
    for p in params[1:]:
        if p.kind not in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD):
            raise TypeError(f"operation {name}: parameter '{p.name}' must be positional")
        shape.append((p.name, hints.get(p.name, Any)))
    return OperationDescriptor(name=name, params=tuple(shape), invoker=func)


def operation(name: str) -> Callable[[Invoker], Invoker]:
    """Declare an async function as the operation called ``name``."""

    def decorator(func: Invoker) -> Invoker:
        _DECLARED.append(describe(name, func))
        return func

    return decorator


def declared_operations() -> List[OperationDescriptor]:
    return list(_DECLARED)


class ActionRegistry:
    def __init__(self, descriptors: Mapping[str, OperationDescriptor]) -> None:
        self._by_key = MappingProxyType(dict(descriptors))

    @classmethod
    def build(cls, descriptors: Iterable[OperationDescriptor]) -> "ActionRegistry":
        table: dict[str, OperationDescriptor] = {}
        for desc in descriptors:
            if desc.key in table:
                logger.warning(
                    "duplicate operation name %s (keeping %s)",
                    desc.name,
                    table[desc.key].invoker.__qualname__,
                )
                continue
            table[desc.key] = desc
        logger.debug("registered %d operations: %s", len(table), sorted(table))
        return cls(table)

    @classmethod
    def default(cls) -> "ActionRegistry":
        from . import operations  # noqa: F401  (registers the built-ins)

        return cls.build(declared_operations())

    def get(self, name: str) -> Optional[OperationDescriptor]:
        return self._by_key.get(name.casefold())

    def require(self, name: str) -> OperationDescriptor:
        desc = self.get(name)
        if desc is None:
            raise UnknownOperationError(name)
        return desc

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.casefold() in self._by_key

    def __iter__(self) -> Iterator[OperationDescriptor]:
        return iter(self._by_key.values())

    def __len__(self) -> int:
        return len(self._by_key)
