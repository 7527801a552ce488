"""Event emitter for provider lifecycle events.

One emitter exists per scope: the global API scope and one scope per client
name. Providers may use the same class as their own event source.
"""

import inspect
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from ..domain.events import EventDetails, ProviderEvent
from ..logging_config import get_logger
from .tasks import spawn

EventHandler = Callable[[EventDetails], Any]

logger = get_logger(__name__)


class EventEmitter:
    """
    Thread-safe, ordered multi-listener dispatcher keyed by event kind.

    Handlers are called synchronously in order of registration. The handler
    list is snapshotted when an emission starts: handlers added during
    dispatch run from the next emission on, handlers removed during dispatch
    still run for the current one. A failing handler is logged and the
    remaining handlers are still called. Coroutine handlers are scheduled
    without being awaited.
    """

    def __init__(self, logger_getter: Optional[Callable[[], Any]] = None):
        """
        Args:
            logger_getter: Returns the logger handler failures are reported
                to. Resolved on every failure so the owner can swap loggers.
        """
        self._handlers: Dict[ProviderEvent, List[EventHandler]] = {}
        self._lock = threading.Lock()
        self._logger_getter = logger_getter or (lambda: logger)

    def add_handler(self, kind: Union[ProviderEvent, str], handler: EventHandler) -> None:
        """
        Append a handler for an event kind.

        Args:
            kind: The event kind to listen to
            handler: Callable receiving the event details
        """
        kind = ProviderEvent.parse(kind)
        with self._lock:
            self._handlers.setdefault(kind, []).append(handler)

    def remove_handler(self, kind: Union[ProviderEvent, str], handler: EventHandler) -> None:
        """Remove the first registration of ``handler`` for ``kind``, if any."""
        kind = ProviderEvent.parse(kind)
        with self._lock:
            handlers = self._handlers.get(kind)
            if handlers and handler in handlers:
                handlers.remove(handler)

    def remove_all_handlers(self, kind: Union[ProviderEvent, str, None] = None) -> None:
        """Remove every handler for ``kind``, or for all kinds when omitted."""
        with self._lock:
            if kind is None:
                self._handlers.clear()
            else:
                self._handlers.pop(ProviderEvent.parse(kind), None)

    def get_handlers(self, kind: Union[ProviderEvent, str]) -> Tuple[EventHandler, ...]:
        """Handlers currently registered for ``kind``, in registration order."""
        kind = ProviderEvent.parse(kind)
        with self._lock:
            return tuple(self._handlers.get(kind, ()))

    def emit(self, kind: Union[ProviderEvent, str], details: Optional[Mapping[str, Any]] = None) -> None:
        """
        Dispatch an event to every handler registered for its kind.

        Args:
            kind: The event kind
            details: Event payload; plain mappings are frozen into EventDetails
        """
        kind = ProviderEvent.parse(kind)
        if not isinstance(details, EventDetails):
            details = EventDetails(**dict(details or {}))

        handlers = self.get_handlers(kind)
        for handler in handlers:
            self.invoke(kind, handler, details)

    def invoke(self, kind: ProviderEvent, handler: EventHandler, details: EventDetails) -> None:
        """Run a single handler with the same isolation ``emit`` applies."""
        try:
            result = handler(details)
        except Exception as e:  # noqa: BLE001
            self._report(kind, handler, e)
            return

        if inspect.isawaitable(result):
            spawn(self._await_handler(kind, handler, result), name=f"flagwire-handler-{kind.value}")

    async def _await_handler(self, kind: ProviderEvent, handler: EventHandler, awaitable: Any) -> None:
        try:
            await awaitable
        except Exception as e:  # noqa: BLE001
            self._report(kind, handler, e)

    def _report(self, kind: ProviderEvent, handler: EventHandler, error: Exception) -> None:
        self._logger_getter().error(
            "event_handler_failed",
            kind=kind.value,
            handler=getattr(handler, "__qualname__", repr(handler)),
            error=str(error),
            exc_info=error,
        )
