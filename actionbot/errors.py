from __future__ import annotations

"""Error taxonomy for the bot.

Purpose: Separate load-time failures (ConfigError, LoginError) from the
per-invocation failures the dispatcher isolates (DispatchError subclasses).
"""

from typing import Any, Dict, Optional


class ActionBotError(Exception):
    """Base class for all errors raised by actionbot."""


class ConfigError(ActionBotError, ValueError):
    """Settings or definitions are malformed; raised at load time."""


class LoginError(ActionBotError):
    """The gateway rejected the credential or could not be reached."""


class DispatchError(ActionBotError):
    """A single action invocation failed; siblings keep running."""


class UnknownOperationError(DispatchError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown operation: {name}")
        self.name = name


class BindingError(DispatchError):
    """A context reference points at a field absent for this event shape."""


class ArityError(DispatchError):
    """Argument count mismatch or positional index out of range."""


class TypeCoercionError(DispatchError):
    """A value cannot be coerced to the declared parameter type."""


class OperationError(DispatchError):
    """Raised from an operation to surface a platform-level failure."""

    def __init__(self, message: str, code: str = "error", data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data or {}
