"""Domain exceptions.

Most of these never reach application code: provider, handler and
propagator failures are absorbed by the facade and turned into lifecycle
events or safe defaults. They exist so that the absorbed failure carries a
precise type and message into logs and ``ERROR`` event details.
"""

from typing import Any, Dict, Optional


class FlagwireError(Exception):
    """Base exception for all flagwire errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(FlagwireError):
    """Invalid configuration values or file."""


class ProviderError(FlagwireError):
    """Base for errors attributed to a specific provider."""

    def __init__(self, provider_name: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, {"provider": provider_name, **(details or {})})
        self.provider_name = provider_name


class ProviderInitializationError(ProviderError):
    """A provider's ``initialize`` raised or returned a failed awaitable."""

    def __init__(self, provider_name: str, cause: BaseException):
        reason = str(cause) or cause.__class__.__name__
        super().__init__(
            provider_name,
            f"Provider '{provider_name}' failed to initialize: {reason}",
            {"cause": cause.__class__.__name__},
        )
        self.cause = cause


class ProviderInitializationTimeout(ProviderError):
    """A provider's ``initialize`` did not settle within the configured timeout."""

    def __init__(self, provider_name: str, timeout_s: float):
        super().__init__(
            provider_name,
            f"Provider '{provider_name}' initialization timed out after {timeout_s:g}s",
            {"timeout_s": timeout_s},
        )
        self.timeout_s = timeout_s


class InvalidPropagatorError(FlagwireError):
    """A transaction context propagator is missing a required operation."""

    def __init__(self, missing: str):
        super().__init__(
            f"Invalid TransactionContextPropagator, will not be set: {missing} is not a function",
            {"missing": missing},
        )
        self.missing = missing
