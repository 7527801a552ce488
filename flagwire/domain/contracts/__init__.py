"""Domain contracts - interfaces for external collaborators.

Providers and transaction context propagators are supplied by the
application; this package only depends on the shapes defined here.
"""

from .propagator import (
    ContextVarTransactionContextPropagator,
    missing_operation,
    NOOP_TRANSACTION_CONTEXT_PROPAGATOR,
    NoopTransactionContextPropagator,
    TransactionContext,
    TransactionContextPropagator,
)
from .provider import EvaluationContext, EventSource, FeatureProvider, provider_name, ProviderCapabilities, ProviderMetadata

__all__ = [
    "ContextVarTransactionContextPropagator",
    "EvaluationContext",
    "EventSource",
    "FeatureProvider",
    "missing_operation",
    "NOOP_TRANSACTION_CONTEXT_PROPAGATOR",
    "NoopTransactionContextPropagator",
    "provider_name",
    "ProviderCapabilities",
    "ProviderMetadata",
    "TransactionContext",
    "TransactionContextPropagator",
]
