"""Transaction context propagation.

A transaction context is request-scoped data carried independently of the
global evaluation context. The facade delegates storage to a pluggable
propagator; the default one stores nothing.
"""

from contextvars import ContextVar
from typing import Any, Callable, Mapping, Optional, Protocol, TypeVar

TransactionContext = Mapping[str, Any]

R = TypeVar("R")

REQUIRED_OPERATIONS = ("get_transaction_context", "set_transaction_context")


class TransactionContextPropagator(Protocol):
    """Stores and retrieves the transaction context."""

    def get_transaction_context(self) -> TransactionContext: ...

    def set_transaction_context(
        self, transaction_context: TransactionContext, callback: Callable[..., R], *args: Any
    ) -> R: ...


def missing_operation(propagator: Any) -> Optional[str]:
    """Name of the first required operation ``propagator`` lacks, if any."""
    for name in REQUIRED_OPERATIONS:
        if not callable(getattr(propagator, name, None)):
            return name
    return None


class NoopTransactionContextPropagator:
    """Propagator that stores nothing and always returns an empty context."""

    def get_transaction_context(self) -> TransactionContext:
        return {}

    def set_transaction_context(
        self, transaction_context: TransactionContext, callback: Callable[..., R], *args: Any
    ) -> R:
        return callback(*args)


NOOP_TRANSACTION_CONTEXT_PROPAGATOR = NoopTransactionContextPropagator()


_transaction_context: ContextVar[Optional[TransactionContext]] = ContextVar("flagwire_transaction_context", default=None)


class ContextVarTransactionContextPropagator:
    """
    Propagator backed by a ``ContextVar``.

    The context is visible to ``callback`` and to everything it calls,
    including tasks it creates, and is restored once ``callback`` returns.
    For coroutine callbacks the returned coroutine keeps no binding once it
    leaves ``set_transaction_context``; await it inside the callback instead.
    """

    def get_transaction_context(self) -> TransactionContext:
        return _transaction_context.get() or {}

    def set_transaction_context(
        self, transaction_context: TransactionContext, callback: Callable[..., R], *args: Any
    ) -> R:
        token = _transaction_context.set(dict(transaction_context))
        try:
            return callback(*args)
        finally:
            _transaction_context.reset(token)
