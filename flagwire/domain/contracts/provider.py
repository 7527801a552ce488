"""Provider capability contract.

A provider only has to expose ``metadata``. Everything else is optional and
discovered once per bind through :class:`ProviderCapabilities`:

- ``initialize(context)`` - sync or async; success makes the provider READY
- ``on_close()`` - sync or async; best-effort shutdown
- ``on_context_change(old, new)`` - sync or async; global context updates
- ``events`` - an event source with ``add_handler``/``remove_handler``
- ``hooks`` - provider hooks, opaque to this package
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol, runtime_checkable

EvaluationContext = Mapping[str, Any]


@dataclass(frozen=True)
class ProviderMetadata:
    """Identifies a provider in logs and client metadata."""

    name: str


@runtime_checkable
class EventSource(Protocol):
    """Anything a provider can publish lifecycle events through."""

    def add_handler(self, kind: Any, handler: Callable[..., Any]) -> None: ...

    def remove_handler(self, kind: Any, handler: Callable[..., Any]) -> None: ...


class FeatureProvider(Protocol):
    """Minimal structural type of a provider."""

    metadata: ProviderMetadata


@dataclass(frozen=True)
class ProviderCapabilities:
    """Optional operations a provider supports, resolved at bind time."""

    initialize: Optional[Callable[..., Any]] = None
    on_close: Optional[Callable[..., Any]] = None
    on_context_change: Optional[Callable[..., Any]] = None
    events: Optional[EventSource] = None

    @classmethod
    def of(cls, provider: Any) -> "ProviderCapabilities":
        events = getattr(provider, "events", None)
        return cls(
            initialize=_callable_or_none(provider, "initialize"),
            on_close=_callable_or_none(provider, "on_close"),
            on_context_change=_callable_or_none(provider, "on_context_change"),
            events=events if isinstance(events, EventSource) else None,
        )


def _callable_or_none(provider: Any, name: str) -> Optional[Callable[..., Any]]:
    member = getattr(provider, name, None)
    return member if callable(member) else None


def provider_name(provider: Any) -> str:
    """Best-effort display name for a provider."""
    metadata = getattr(provider, "metadata", None)
    return getattr(metadata, "name", None) or provider.__class__.__name__
