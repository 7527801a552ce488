"""Event handlers for reacting to provider lifecycle events."""

from .logging_handler import LoggingEventHandler

__all__ = ["LoggingEventHandler"]
