"""Domain model."""

from .registry import ProviderRegistry

__all__ = ["ProviderRegistry"]
