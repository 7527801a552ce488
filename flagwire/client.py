"""Client handles.

A client is a lightweight, named view onto the API: it always resolves its
provider at call time, so rebinding a provider is picked up by existing
clients, and its handlers live in the client-scoped emitter, so they
survive provider swaps.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Union

from .domain.contracts import EvaluationContext, ProviderMetadata
from .domain.events import EventDetails, ProviderEvent, ProviderStatus
from .infrastructure.event_emitter import EventEmitter, EventHandler


@dataclass(frozen=True)
class ClientMetadata:
    """Identity of a client and the provider it currently uses."""

    name: Optional[str]
    version: Optional[str]
    provider_metadata: ProviderMetadata


class FeatureClient:
    """Named client handle created by :meth:`FlagwireAPI.get_client`."""

    def __init__(
        self,
        provider_getter: Callable[[], Any],
        emitter_getter: Callable[[], EventEmitter],
        status_getter: Callable[[], ProviderStatus],
        ready_getter: Callable[[], bool],
        name: Optional[str] = None,
        version: Optional[str] = None,
    ):
        # Getters instead of values keep the client in sync with later rebinds.
        self._provider_getter = provider_getter
        self._emitter_getter = emitter_getter
        self._status_getter = status_getter
        self._ready_getter = ready_getter
        self._name = name
        self._version = version
        self._context: EvaluationContext = {}
        self._hooks: List[Any] = []

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def metadata(self) -> ClientMetadata:
        return ClientMetadata(
            name=self._name,
            version=self._version,
            provider_metadata=self._provider_getter().metadata,
        )

    @property
    def provider_status(self) -> ProviderStatus:
        """Status of the provider this client currently resolves to."""
        return self._status_getter()

    # --- events ---

    def add_handler(self, kind: Union[ProviderEvent, str], handler: EventHandler) -> None:
        """
        Add a handler for a provider event kind on this client.

        A READY handler added while the client's provider is already ready
        runs immediately.
        """
        kind = ProviderEvent.parse(kind)
        emitter = self._emitter_getter()
        emitter.add_handler(kind, handler)
        if kind is ProviderEvent.READY and self._ready_getter():
            emitter.invoke(kind, handler, EventDetails(client_name=self._name))

    def remove_handler(self, kind: Union[ProviderEvent, str], handler: EventHandler) -> None:
        self._emitter_getter().remove_handler(kind, handler)

    def get_handlers(self, kind: Union[ProviderEvent, str]) -> tuple:
        return self._emitter_getter().get_handlers(kind)

    # --- context & hooks ---

    def set_context(self, context: Mapping[str, Any]) -> "FeatureClient":
        self._context = dict(context)
        return self

    def get_context(self) -> EvaluationContext:
        return self._context

    def add_hooks(self, *hooks: Any) -> "FeatureClient":
        self._hooks = [*self._hooks, *hooks]
        return self

    def get_hooks(self) -> List[Any]:
        return self._hooks

    def clear_hooks(self) -> "FeatureClient":
        self._hooks = []
        return self

    def __repr__(self) -> str:
        return f"FeatureClient(name={self._name!r}, version={self._version!r})"
