"""Infrastructure: event dispatch and background scheduling."""

from .event_emitter import EventEmitter, EventHandler
from .tasks import pending_tasks, spawn

__all__ = ["EventEmitter", "EventHandler", "pending_tasks", "spawn"]
