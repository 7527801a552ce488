"""The flagwire API facade.

:class:`FlagwireAPI` is the object application code talks to. It owns the
provider registry, the global and per-client event scopes and the lifecycle
coordinator, and never lets a failure in provider, handler or propagator
code escape one of its methods.

Applications normally build one instance in their composition root
(see :func:`flagwire.bootstrap.create_runtime`); :func:`get_api` offers a
lazily created process-wide instance for code that cannot receive one.
"""

import inspect
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar, Union

from .application.lifecycle import Binding, ProviderLifecycleCoordinator
from .client import FeatureClient
from .domain.contracts import (
    EvaluationContext,
    missing_operation,
    NOOP_TRANSACTION_CONTEXT_PROPAGATOR,
    provider_name,
    ProviderCapabilities,
    ProviderMetadata,
    TransactionContext,
    TransactionContextPropagator,
)
from .domain.events import EventDetails, ProviderEvent, ProviderStatus
from .domain.exceptions import InvalidPropagatorError
from .domain.model import ProviderRegistry
from .infrastructure.event_emitter import EventEmitter, EventHandler
from .infrastructure.tasks import spawn
from .logging_config import SafeLogger
from .providers import NOOP_PROVIDER

R = TypeVar("R")


class FlagwireAPI:
    """
    Provider registry and event facade.

    Handlers registered here receive the events of every slot; handlers
    registered on a client only receive the events of that client's slot.
    Handlers persist across provider changes.
    """

    def __init__(
        self,
        default_provider: Any = None,
        init_timeout_s: Optional[float] = None,
        logger: Any = None,
    ):
        """
        Args:
            default_provider: Initial provider of the default slot (no-op if omitted)
            init_timeout_s: Optional limit for provider initialization
            logger: Optional logger, see :meth:`set_logger`
        """
        self._logger = SafeLogger(logger)
        self._context: EvaluationContext = {}
        self._hooks: List[Any] = []
        self._propagator: TransactionContextPropagator = NOOP_TRANSACTION_CONTEXT_PROPAGATOR

        self._events = EventEmitter(lambda: self._logger)
        self._client_events: Dict[Optional[str], EventEmitter] = {}
        self._client_events_lock = threading.Lock()

        self._registry = ProviderRegistry(NOOP_PROVIDER)
        self._coordinator = ProviderLifecycleCoordinator(
            registry=self._registry,
            global_emitter=self._events,
            emitter_for=self._get_event_emitter_for_client,
            context_getter=lambda: self._context,
            logger_getter=lambda: self._logger,
            init_timeout_s=init_timeout_s,
        )
        if default_provider is not None:
            self.set_provider(default_provider)

    # --- logging ---

    def set_logger(self, logger: Any) -> "FlagwireAPI":
        """Replace the logger; invalid loggers are rejected and logged."""
        self._logger = SafeLogger(logger)
        return self

    @property
    def logger(self) -> SafeLogger:
        return self._logger

    # --- providers ---

    @property
    def provider_metadata(self) -> ProviderMetadata:
        """Metadata of the default provider."""
        return self._registry.default_provider.metadata

    def set_provider(self, provider: Any, name: Optional[str] = None) -> "FlagwireAPI":
        """
        Bind a provider to a client name, or to the default slot.

        The default provider is used by unnamed clients and by named clients
        without a provider of their own. Initialization runs in the
        background; READY or ERROR is emitted once it settles.

        Args:
            provider: The provider responsible for flag evaluations
            name: Client name to bind to (default slot when omitted)

        Returns:
            The API, for chaining
        """
        self._bind(provider, name)
        return self

    async def set_provider_and_wait(self, provider: Any, name: Optional[str] = None) -> ProviderStatus:
        """
        Bind a provider and wait for its initialization to settle.

        Returns:
            The resulting status of the slot (READY or ERROR); initialization
            failures are reported through the status, not raised.
        """
        binding = self._bind(provider, name)
        if binding is None:
            return self.get_status(name)
        return await self._coordinator.wait(binding)

    def _bind(self, provider: Any, name: Optional[str]) -> Optional[Binding]:
        if provider is None:
            self._logger.warning("set_provider_ignored", client_name=name, reason="provider is None")
            return None
        return self._coordinator.bind(name, provider)

    def get_provider_for_client(self, name: Optional[str] = None) -> Any:
        """Provider bound to ``name``, or the default provider."""
        return self._registry.get_provider_for_client(name)

    def get_status(self, name: Optional[str] = None) -> ProviderStatus:
        """Status of the provider a client with this name uses."""
        return self._coordinator.status(name)

    def get_client(self, name: Optional[str] = None, version: Optional[str] = None) -> FeatureClient:
        """
        Create a client handle.

        If a provider is bound to ``name`` the client uses it; otherwise it
        uses the default provider until one is bound to that name.
        """
        return FeatureClient(
            provider_getter=lambda: self.get_provider_for_client(name),
            emitter_getter=lambda: self._get_event_emitter_for_client(name),
            status_getter=lambda: self._coordinator.status(name),
            ready_getter=lambda: self._is_slot_ready(name),
            name=name,
            version=version,
        )

    def _get_event_emitter_for_client(self, name: Optional[str] = None) -> EventEmitter:
        slot = name or None
        with self._client_events_lock:
            emitter = self._client_events.get(slot)
            if emitter is None:
                emitter = EventEmitter(lambda: self._logger)
                self._client_events[slot] = emitter
            return emitter

    def _is_slot_ready(self, name: Optional[str]) -> bool:
        binding = self._coordinator.binding(name)
        return binding is not None and binding.status is ProviderStatus.READY

    # --- global handlers ---

    def add_handler(self, kind: Union[ProviderEvent, str], handler: EventHandler) -> None:
        """
        Add a handler for a provider event kind on the global scope.

        Handlers run in the order they were added. A READY handler runs
        immediately once for every slot that is already ready.
        """
        kind = ProviderEvent.parse(kind)
        self._events.add_handler(kind, handler)
        if kind is ProviderEvent.READY:
            for name in self._coordinator.ready_names():
                self._events.invoke(kind, handler, EventDetails(client_name=name))

    def remove_handler(self, kind: Union[ProviderEvent, str], handler: EventHandler) -> None:
        self._events.remove_handler(kind, handler)

    def get_handlers(self, kind: Union[ProviderEvent, str]) -> tuple:
        return self._events.get_handlers(kind)

    # --- evaluation context ---

    def set_context(self, context: Mapping[str, Any]) -> "FlagwireAPI":
        """
        Replace the global evaluation context.

        The default provider's ``on_context_change(old, new)`` is invoked;
        its failures are logged.
        """
        old_context = self._context
        self._context = dict(context)

        provider = self._registry.default_provider
        on_context_change = ProviderCapabilities.of(provider).on_context_change
        if on_context_change is None:
            return self

        try:
            result = on_context_change(old_context, self._context)
        except Exception as e:  # noqa: BLE001
            self._report_context_change_error(provider, e)
            return self

        if inspect.isawaitable(result):
            spawn(self._await_context_change(provider, result), name="flagwire-context-change")
        return self

    async def _await_context_change(self, provider: Any, awaitable: Any) -> None:
        try:
            await awaitable
        except Exception as e:  # noqa: BLE001
            self._report_context_change_error(provider, e)

    def _report_context_change_error(self, provider: Any, error: Exception) -> None:
        self._logger.error(
            "provider_context_change_failed",
            provider=provider_name(provider),
            error=str(error),
            exc_info=error,
        )

    def get_context(self) -> EvaluationContext:
        return self._context

    # --- hooks ---

    def add_hooks(self, *hooks: Any) -> "FlagwireAPI":
        self._hooks = [*self._hooks, *hooks]
        return self

    def get_hooks(self) -> List[Any]:
        return self._hooks

    def clear_hooks(self) -> "FlagwireAPI":
        self._hooks = []
        return self

    # --- transaction context ---

    def set_transaction_context_propagator(self, propagator: TransactionContextPropagator) -> "FlagwireAPI":
        """Install a propagator; one missing a required operation is rejected and logged."""
        missing = missing_operation(propagator)
        if missing is not None:
            error = InvalidPropagatorError(missing)
            self._logger.error("invalid_transaction_context_propagator", error=error.message, missing=missing)
            return self
        self._propagator = propagator
        return self

    @property
    def transaction_context_propagator(self) -> TransactionContextPropagator:
        return self._propagator

    def set_transaction_context(
        self, transaction_context: TransactionContext, callback: Callable[..., R], *args: Any
    ) -> R:
        """Run ``callback(*args)`` with ``transaction_context`` installed."""
        return self._propagator.set_transaction_context(transaction_context, callback, *args)

    def get_transaction_context(self) -> TransactionContext:
        """Current transaction context; empty when the propagator fails."""
        try:
            return self._propagator.get_transaction_context()
        except Exception as e:  # noqa: BLE001
            self._logger.error("transaction_context_unavailable", error=str(e), exc_info=e)
            return {}

    # --- shutdown ---

    async def close(self) -> None:
        """Close every distinct bound provider; failures are logged."""
        await self._coordinator.close_all()


# Process-wide API instance
_global_api: Optional[FlagwireAPI] = None
_global_api_lock = threading.Lock()


def get_api() -> FlagwireAPI:
    """
    Get the process-wide API instance (singleton pattern).

    Returns:
        The global FlagwireAPI instance
    """
    global _global_api

    if _global_api is None:
        with _global_api_lock:
            if _global_api is None:
                _global_api = FlagwireAPI()

    return _global_api


def reset_api() -> None:
    """Reset the process-wide API instance (mainly for testing)."""
    global _global_api

    with _global_api_lock:
        _global_api = None
