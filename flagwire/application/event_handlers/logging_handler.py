"""Logging event handler - logs all provider lifecycle events."""

import logging
from typing import Any, Dict, Optional

from ...domain.events import EventDetails, ProviderEvent
from ...logging_config import get_logger

logger = get_logger(__name__)

_LEVELS = {
    ProviderEvent.READY: logging.INFO,
    ProviderEvent.ERROR: logging.WARNING,
    ProviderEvent.STALE: logging.WARNING,
    ProviderEvent.CONFIGURATION_CHANGED: logging.DEBUG,
}


class LoggingEventHandler:
    """
    Event handler that logs every lifecycle event in structured format.

    Attach it to the global scope of an API (or any object exposing
    ``add_handler``/``remove_handler``) to get an audit trail of provider
    state changes.
    """

    def __init__(self, log_level: Optional[int] = None):
        """
        Initialize the logging handler.

        Args:
            log_level: Force one level for all events (default: per-kind level)
        """
        self.log_level = log_level
        self._handlers: Dict[ProviderEvent, Any] = {}

    def attach(self, target: Any) -> None:
        """Register a handler for every event kind on ``target``."""
        for kind in ProviderEvent:
            if kind in self._handlers:
                continue
            handler = self._handler_for(kind)
            self._handlers[kind] = handler
            target.add_handler(kind, handler)

    def detach(self, target: Any) -> None:
        """Remove the handlers registered by :meth:`attach`."""
        for kind, handler in self._handlers.items():
            target.remove_handler(kind, handler)
        self._handlers.clear()

    def _handler_for(self, kind: ProviderEvent) -> Any:
        def handle(details: EventDetails) -> None:
            self.handle(kind, details)

        return handle

    def handle(self, kind: ProviderEvent, details: EventDetails) -> None:
        """
        Handle a lifecycle event by logging it.

        Args:
            kind: The event kind
            details: The event details
        """
        level = self.log_level if self.log_level is not None else _LEVELS[kind]
        logger.log(
            level,
            f"event_{kind.name.lower()}",
            client_name=details.client_name,
            message=details.message,
            fields=dict(details.extra),
        )
