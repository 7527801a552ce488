"""Bootstrap helpers for wiring runtime dependencies.

This module is the composition root: it turns configuration into a ready to
use :class:`FlagwireAPI` so that application code can receive the API
explicitly instead of reaching for the process-wide instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..api import FlagwireAPI
from ..application.event_handlers import LoggingEventHandler
from ..config import FlagwireConfig, load_configuration
from ..logging_config import setup_logging


@dataclass(frozen=True)
class Runtime:
    """Container for runtime dependencies."""

    api: FlagwireAPI
    config: FlagwireConfig
    event_logger: Optional[LoggingEventHandler] = None


def create_runtime(
    *,
    config: Optional[FlagwireConfig] = None,
    config_path: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    default_provider: Any = None,
    configure_logging: bool = False,
) -> Runtime:
    """Create runtime dependencies explicitly.

    Args:
        config: Explicit configuration (skips file and environment lookup).
        config_path: Optional YAML configuration file.
        env: Optional environment mapping (defaults to os.environ).
        default_provider: Optional provider for the default slot.
        configure_logging: Also set up structlog/stdlib logging from the config.

    Returns:
        Runtime container.
    """
    config = config or load_configuration(config_path, env)

    if configure_logging:
        setup_logging(level=config.log_level, json_format=config.json_logs, log_file=config.log_file)

    api = FlagwireAPI(init_timeout_s=config.init_timeout_s)

    event_logger = None
    if config.log_events:
        event_logger = LoggingEventHandler()
        event_logger.attach(api)

    if default_provider is not None:
        api.set_provider(default_provider)

    return Runtime(api=api, config=config, event_logger=event_logger)
