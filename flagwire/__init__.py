"""flagwire - provider registry and lifecycle events for feature-flag clients.

The package binds client names to pluggable flag providers, drives each
provider through initialization and shutdown, and delivers provider
lifecycle events to handlers registered on the API or on a single client.

Typical use::

    from flagwire import create_runtime, ProviderEvent

    runtime = create_runtime(config_path="flagwire.yaml")
    api = runtime.api
    api.add_handler(ProviderEvent.READY, lambda details: print(details.client_name))
    await api.set_provider_and_wait(MyProvider(), name="checkout")
"""

from .api import FlagwireAPI, get_api, reset_api
from .application import Binding, ProviderLifecycleCoordinator
from .application.event_handlers import LoggingEventHandler
from .bootstrap import create_runtime, Runtime
from .client import ClientMetadata, FeatureClient
from .config import FlagwireConfig, load_configuration
from .domain.contracts import (
    ContextVarTransactionContextPropagator,
    EvaluationContext,
    FeatureProvider,
    NOOP_TRANSACTION_CONTEXT_PROPAGATOR,
    NoopTransactionContextPropagator,
    ProviderMetadata,
    TransactionContext,
    TransactionContextPropagator,
)
from .domain.events import EventDetails, ProviderEvent, ProviderStatus
from .domain.exceptions import (
    ConfigurationError,
    FlagwireError,
    InvalidPropagatorError,
    ProviderError,
    ProviderInitializationError,
    ProviderInitializationTimeout,
)
from .domain.model import ProviderRegistry
from .infrastructure import EventEmitter, EventHandler
from .logging_config import get_logger, SafeLogger, setup_logging
from .providers import NOOP_PROVIDER, NoopProvider

__all__ = [
    # Facade
    "FlagwireAPI",
    "get_api",
    "reset_api",
    "FeatureClient",
    "ClientMetadata",
    # Composition root
    "create_runtime",
    "Runtime",
    "FlagwireConfig",
    "load_configuration",
    # Lifecycle
    "Binding",
    "ProviderLifecycleCoordinator",
    "ProviderRegistry",
    # Events
    "EventDetails",
    "EventEmitter",
    "EventHandler",
    "LoggingEventHandler",
    "ProviderEvent",
    "ProviderStatus",
    # Contracts
    "EvaluationContext",
    "FeatureProvider",
    "ProviderMetadata",
    "TransactionContext",
    "TransactionContextPropagator",
    "NoopTransactionContextPropagator",
    "NOOP_TRANSACTION_CONTEXT_PROPAGATOR",
    "ContextVarTransactionContextPropagator",
    "NoopProvider",
    "NOOP_PROVIDER",
    # Exceptions
    "FlagwireError",
    "ConfigurationError",
    "ProviderError",
    "ProviderInitializationError",
    "ProviderInitializationTimeout",
    "InvalidPropagatorError",
    # Logging
    "get_logger",
    "setup_logging",
    "SafeLogger",
]
