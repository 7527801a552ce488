"""Provider lifecycle coordination.

The coordinator owns everything that happens when a provider is bound to a
slot: moving event propagation from the old provider to the new one,
driving ``initialize`` to READY or ERROR, and closing the superseded
provider once no slot references it anymore.

State machine per slot::

    NOT_READY (initializing) -> READY
                             -> ERROR -> READY (provider event or rebind)

STALE and CONFIGURATION_CHANGED pass through without touching the status.
"""

import asyncio
from dataclasses import dataclass, field
from functools import partial
import inspect
import itertools
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..domain.contracts import EvaluationContext, provider_name, ProviderCapabilities
from ..domain.events import EventDetails, ProviderEvent, ProviderStatus
from ..domain.exceptions import ProviderInitializationError, ProviderInitializationTimeout
from ..domain.model import ProviderRegistry
from ..infrastructure.event_emitter import EventEmitter, EventHandler
from ..infrastructure.tasks import spawn
from ..logging_config import get_logger

_default_logger = get_logger(__name__)


@dataclass(eq=False)
class Binding:
    """
    Handle for one provider-to-slot bind operation.

    A binding is superseded as soon as another provider is bound to the same
    slot; results of a superseded binding's initialization are dropped.
    """

    client_name: Optional[str]
    provider: Any
    capabilities: ProviderCapabilities
    generation: int
    status: ProviderStatus = ProviderStatus.NOT_READY
    error: Optional[str] = None
    superseded: bool = False
    initializing: bool = False
    task: Optional["asyncio.Task[Any]"] = field(default=None, repr=False)
    subscriptions: List[Tuple[ProviderEvent, EventHandler]] = field(default_factory=list, repr=False)

    @property
    def provider_name(self) -> str:
        return provider_name(self.provider)

    @property
    def settled(self) -> bool:
        """Whether initialization finished (or was never needed)."""
        return self.status is not ProviderStatus.NOT_READY

    def cancel(self) -> bool:
        """Stop waiting for initialization. The provider's own work is not cancelled."""
        if self.task is None or self.task.done():
            return False
        return self.task.cancel()


class ProviderLifecycleCoordinator:
    """
    Binds providers to registry slots and keeps event propagation wired.

    Events a provider emits, and the READY/ERROR outcome of its
    initialization, are re-emitted with the slot's client name into the
    slot's scope and then into the global scope.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        global_emitter: EventEmitter,
        emitter_for: Callable[[Optional[str]], EventEmitter],
        context_getter: Callable[[], EvaluationContext],
        logger_getter: Optional[Callable[[], Any]] = None,
        init_timeout_s: Optional[float] = None,
    ):
        """
        Args:
            registry: Slot storage
            global_emitter: API-level scope
            emitter_for: Returns the scope of a client name (None for default)
            context_getter: Returns the evaluation context passed to initialize
            logger_getter: Returns the logger to report through
            init_timeout_s: Optional limit for a provider's initialize
        """
        self._registry = registry
        self._global = global_emitter
        self._emitter_for = emitter_for
        self._context_getter = context_getter
        self._logger_getter = logger_getter or (lambda: _default_logger)
        self.init_timeout_s = init_timeout_s

        self._lock = threading.RLock()
        self._generations = itertools.count(1)
        self._bindings: Dict[Optional[str], Binding] = {
            None: self._new_binding(None, registry.default_provider),
        }
        self._provider_status: Dict[int, ProviderStatus] = {}
        self._inflight: Dict[int, "asyncio.Future[Any]"] = {}
        self._closing: Dict[int, Any] = {}

    @property
    def _logger(self) -> Any:
        return self._logger_getter()

    def _new_binding(self, name: Optional[str], provider: Any) -> Binding:
        return Binding(
            client_name=name,
            provider=provider,
            capabilities=ProviderCapabilities.of(provider),
            generation=next(self._generations),
        )

    # --- queries ---

    def binding(self, name: Optional[str] = None) -> Optional[Binding]:
        """The slot's own binding, or None for an unbound client name."""
        with self._lock:
            return self._bindings.get(name or None)

    def status(self, name: Optional[str] = None) -> ProviderStatus:
        """Status of the provider a client with this name currently uses."""
        with self._lock:
            binding = self._bindings.get(name or None) or self._bindings[None]
            return binding.status

    def ready_names(self) -> List[Optional[str]]:
        """Slots whose own binding is READY (None is the default slot)."""
        with self._lock:
            return [name for name, binding in self._bindings.items() if binding.status is ProviderStatus.READY]

    # --- binding ---

    def bind(self, name: Optional[str], provider: Any) -> Binding:
        """
        Make ``provider`` the active provider of a slot.

        Binding the provider a name already resolves to is a no-op; an
        unbound name that resolves to it through the default slot stays
        unbound.

        Args:
            name: Client name, or None for the default slot
            provider: Provider to bind

        Returns:
            The slot's current binding
        """
        slot = name or None
        with self._registry.lock:
            previous = self._registry.swap(slot, provider)
            if previous is None:
                return self._bindings.get(slot) or self._bindings[None]

            binding = self._new_binding(slot, provider)
            with self._lock:
                old_binding = self._bindings.get(slot)
                self._bindings[slot] = binding
                if old_binding is not None:
                    old_binding.superseded = True

        if old_binding is not None:
            self._detach(old_binding)

        self._logger.info(
            "provider_bound",
            client_name=slot,
            provider=binding.provider_name,
            previous=provider_name(previous),
            generation=binding.generation,
        )

        pending = self._start_initialization(binding)
        self._attach(binding)
        if pending is not None:
            binding.task = spawn(self._await_initialization(binding, pending), name=_task_name(binding))
        self._schedule_close(previous)
        return binding

    async def wait(self, binding: Binding) -> ProviderStatus:
        """Wait for a binding's initialization to settle and return its status."""
        task = binding.task
        if task is not None and not task.done():
            await asyncio.wait({task})
        return binding.status

    # --- event wiring ---

    def _attach(self, binding: Binding) -> None:
        events = binding.capabilities.events
        if events is None:
            return
        for kind in ProviderEvent:
            handler = self._forwarder(binding, kind)
            events.add_handler(kind, handler)
            binding.subscriptions.append((kind, handler))

    def _detach(self, binding: Binding) -> None:
        events = binding.capabilities.events
        if events is None:
            return
        for kind, handler in binding.subscriptions:
            try:
                events.remove_handler(kind, handler)
            except Exception as e:  # noqa: BLE001
                self._logger.warning(
                    "provider_unsubscribe_failed",
                    provider=binding.provider_name,
                    kind=kind.value,
                    error=str(e),
                )
        binding.subscriptions.clear()

    def _forwarder(self, binding: Binding, kind: ProviderEvent) -> EventHandler:
        def forward(details: Any = None) -> None:
            if binding.superseded:
                return
            # READY/ERROR from an unsettled initialization are reported by _settle.
            if binding.initializing and kind in (ProviderEvent.READY, ProviderEvent.ERROR):
                return
            merged = EventDetails.merge(details, binding.client_name)
            if kind is ProviderEvent.READY:
                self._set_status(binding, ProviderStatus.READY, None)
            elif kind is ProviderEvent.ERROR:
                self._set_status(binding, ProviderStatus.ERROR, merged.message)
            self._emit(binding.client_name, kind, merged)

        forward.__qualname__ = f"forward[{kind.value}]"
        return forward

    def _emit(self, name: Optional[str], kind: ProviderEvent, details: EventDetails) -> None:
        self._emitter_for(name).emit(kind, details)
        self._global.emit(kind, details)

    def _set_status(self, binding: Binding, status: ProviderStatus, error: Optional[str]) -> None:
        with self._lock:
            binding.status = status
            binding.error = error
        if self._registry.is_bound(binding.provider):
            self._provider_status[id(binding.provider)] = status

    # --- initialization ---

    def _start_initialization(self, binding: Binding) -> Optional[Any]:
        """Call ``initialize`` and return what is left to await, if anything."""
        key = id(binding.provider)
        inflight = self._inflight.get(key)
        if inflight is not None and not inflight.done() and _on_running_loop(inflight):
            binding.initializing = True
            return inflight

        initialize = binding.capabilities.initialize
        if initialize is None or self._provider_status.get(key) is ProviderStatus.READY:
            self._settle(binding, None)
            return None

        try:
            result = initialize(self._context_getter())
        except Exception as e:  # noqa: BLE001
            self._settle(binding, ProviderInitializationError(binding.provider_name, e))
            return None

        if not inspect.isawaitable(result):
            self._settle(binding, None)
            return None

        binding.initializing = True
        if _running_loop() is None:
            return result
        # Must be in _inflight before bind returns.
        return self._track_initialization(key, asyncio.ensure_future(result))

    def _track_initialization(self, key: int, future: "asyncio.Future[Any]") -> "asyncio.Future[Any]":
        if self._inflight.get(key) is not future:
            self._inflight[key] = future
            future.add_done_callback(partial(self._initialization_done, key))
        return future

    async def _await_initialization(self, binding: Binding, awaitable: Any) -> None:
        future = self._track_initialization(id(binding.provider), asyncio.ensure_future(awaitable))

        error: Optional[Exception] = None
        try:
            if self.init_timeout_s is None:
                await asyncio.shield(future)
            else:
                await asyncio.wait_for(asyncio.shield(future), self.init_timeout_s)
        except asyncio.TimeoutError:
            error = ProviderInitializationTimeout(binding.provider_name, self.init_timeout_s)
        except asyncio.CancelledError as e:
            if not future.cancelled():
                binding.initializing = False
                raise
            error = ProviderInitializationError(binding.provider_name, e)
        except Exception as e:  # noqa: BLE001
            error = ProviderInitializationError(binding.provider_name, e)

        self._settle(binding, error)

    def _initialization_done(self, key: int, future: "asyncio.Future[Any]") -> None:
        if self._inflight.get(key) is future:
            del self._inflight[key]
        if not future.cancelled():
            future.exception()

    def _settle(self, binding: Binding, error: Optional[Exception]) -> None:
        binding.initializing = False
        if binding.superseded:
            self._logger.debug(
                "stale_initialization_dropped",
                client_name=binding.client_name,
                provider=binding.provider_name,
                generation=binding.generation,
            )
            return

        if error is None:
            self._set_status(binding, ProviderStatus.READY, None)
            self._logger.info("provider_ready", client_name=binding.client_name, provider=binding.provider_name)
            self._emit(binding.client_name, ProviderEvent.READY, EventDetails(client_name=binding.client_name))
            return

        message = str(error)
        self._set_status(binding, ProviderStatus.ERROR, message)
        self._logger.error(
            "provider_initialization_failed",
            client_name=binding.client_name,
            provider=binding.provider_name,
            error=message,
        )
        self._emit(
            binding.client_name,
            ProviderEvent.ERROR,
            EventDetails(client_name=binding.client_name, message=message),
        )

    # --- shutdown ---

    def _schedule_close(self, provider: Any) -> None:
        key = id(provider)
        with self._lock:
            if key in self._closing:
                return
            self._closing[key] = provider
        spawn(self._close_if_unbound(provider), name=f"flagwire-close-{provider_name(provider)}")

    async def _close_if_unbound(self, provider: Any) -> None:
        try:
            if self._registry.is_bound(provider):
                self._logger.debug(
                    "provider_still_bound",
                    provider=provider_name(provider),
                    slots=sorted(self._registry.bound_names(provider), key=str),
                )
                return
            await self._shutdown(provider)
        finally:
            with self._lock:
                self._closing.pop(id(provider), None)

    async def _shutdown(self, provider: Any) -> None:
        self._provider_status.pop(id(provider), None)
        on_close = ProviderCapabilities.of(provider).on_close
        if on_close is None:
            return
        try:
            result = on_close()
            if inspect.isawaitable(result):
                await result
        except Exception as e:  # noqa: BLE001
            self._logger.error(
                "provider_shutdown_failed",
                provider=provider_name(provider),
                error=str(e),
                exc_info=e,
            )
            return
        self._logger.info("provider_closed", provider=provider_name(provider))

    async def close_all(self) -> None:
        """Close every distinct bound provider exactly once, concurrently."""
        providers = self._registry.distinct_providers()
        await asyncio.gather(*(self._shutdown(provider) for provider in providers))


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def _on_running_loop(future: "asyncio.Future[Any]") -> bool:
    try:
        return future.get_loop() is asyncio.get_running_loop()
    except RuntimeError:
        return False


def _task_name(binding: Binding) -> str:
    return f"flagwire-init-{binding.client_name or 'default'}-{binding.generation}"
