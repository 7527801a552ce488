"""Composition root helpers."""

from .runtime import create_runtime, Runtime

__all__ = ["create_runtime", "Runtime"]
