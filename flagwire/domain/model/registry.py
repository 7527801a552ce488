"""Provider registry - maps client names to their active provider."""

import threading
from typing import Any, Dict, List, Optional, Set


class ProviderRegistry:
    """
    Thread-safe map from client name to provider.

    The default slot (``None``) always holds a provider. Named slots exist
    only once a provider has been bound to them; unbound names resolve to
    whatever the default slot holds at lookup time.

    A provider instance may occupy several slots. Whether it is still in
    use is answered by an identity-keyed reverse index rather than a
    reference counter, so rebinding one instance under many names stays
    consistent.
    """

    def __init__(self, default_provider: Any):
        self._lock = threading.RLock()
        self._default = default_provider
        self._named: Dict[str, Any] = {}
        self._slots_by_provider: Dict[int, Set[Optional[str]]] = {id(default_provider): {None}}

    @property
    def lock(self) -> threading.RLock:
        """Lock guarding read-modify-write sequences over the registry."""
        return self._lock

    @property
    def default_provider(self) -> Any:
        return self._default

    def get_provider_for_client(self, name: Optional[str] = None) -> Any:
        """Resolve ``name`` to its bound provider, falling back to the default."""
        with self._lock:
            if not name:
                return self._default
            return self._named.get(name, self._default)

    def has_binding(self, name: Optional[str]) -> bool:
        """True for the default slot and for names with their own provider."""
        with self._lock:
            return not name or name in self._named

    def swap(self, name: Optional[str], provider: Any) -> Optional[Any]:
        """
        Bind ``provider`` to the slot for ``name``.

        Args:
            name: Client name, or None for the default slot
            provider: Provider to bind

        Returns:
            The provider previously used by that slot (the default provider
            for a previously unbound name), or None if ``name`` already
            resolves to ``provider`` and nothing changed. An unbound name
            whose lookup yields ``provider`` through the default slot stays
            unbound.
        """
        slot = name or None
        with self._lock:
            if slot is None:
                previous = self._default
                if previous is provider:
                    return None
                self._default = provider
                self._unindex(previous, None)
            else:
                previous = self._named.get(slot, self._default)
                if previous is provider:
                    return None
                if slot in self._named:
                    self._unindex(previous, slot)
                self._named[slot] = provider

            self._slots_by_provider.setdefault(id(provider), set()).add(slot)
            return previous

    def _unindex(self, provider: Any, slot: Optional[str]) -> None:
        slots = self._slots_by_provider.get(id(provider))
        if slots is None:
            return
        slots.discard(slot)
        if not slots:
            del self._slots_by_provider[id(provider)]

    def is_bound(self, provider: Any) -> bool:
        """Check whether ``provider`` occupies any slot, including the default."""
        with self._lock:
            return bool(self._slots_by_provider.get(id(provider)))

    def bound_names(self, provider: Any) -> Set[Optional[str]]:
        """Slots ``provider`` currently occupies (None is the default slot)."""
        with self._lock:
            return set(self._slots_by_provider.get(id(provider), ()))

    def names(self) -> List[str]:
        """Names of all explicitly bound clients, in binding order."""
        with self._lock:
            return list(self._named)

    def slots(self) -> Dict[Optional[str], Any]:
        """Snapshot of every slot, default first."""
        with self._lock:
            snapshot: Dict[Optional[str], Any] = {None: self._default}
            snapshot.update(self._named)
            return snapshot

    def distinct_providers(self) -> List[Any]:
        """Every bound provider exactly once, default first."""
        seen: Set[int] = set()
        providers = []
        for provider in self.slots().values():
            if id(provider) not in seen:
                seen.add(id(provider))
                providers.append(provider)
        return providers

    def __len__(self) -> int:
        with self._lock:
            return len(self._named) + 1
