"""Names that generated code uses from the targeted actor runtime."""

from __future__ import annotations

DEFAULT_RUNTIME_MODULE = "actor_runtime"

# Handler methods take the receiver, the message and the actor context.
HANDLER_ARITY = 3

ADDR_SUFFIX = "Addr"
IMPL_SUFFIX = "Impl"
HANDLER_SUFFIX = "Handler"

DECORATOR_NAME = "actor_handler"


class RuntimeSymbol:
    """Symbols exported by the actor runtime module."""

    HANDLER = "Handler"
    CONTEXT = "Context"
    ADDR = "Addr"
    REQUEST = "Request"
    RECIPIENT_REQUEST = "RecipientRequest"
    MESSAGE_RESULT = "MessageResult"


# Decorators that turn a function into something the runtime cannot bind as a handler.
NON_HANDLER_DECORATORS = frozenset({"staticmethod", "classmethod", "property"})
