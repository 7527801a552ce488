"""Application layer: provider lifecycle coordination and event handlers."""

from .lifecycle import Binding, ProviderLifecycleCoordinator

__all__ = ["Binding", "ProviderLifecycleCoordinator"]
