"""actionbot package.

Purpose: Declarative command/event dispatch for a chat gateway. Commands and
lifecycle events are mapped to named operations in a definitions file; the
dispatcher tokenizes messages, binds a per-dispatch context, resolves
arguments and awaits the operations in order.

"""

__all__ = [
    "__version__",
]

__version__ = "0.1.0"
