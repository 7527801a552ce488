"""Built-in providers."""

from .noop import NOOP_PROVIDER, NoopProvider

__all__ = ["NOOP_PROVIDER", "NoopProvider"]
