"""Configuration loading.

Settings come from an optional YAML file (a top-level ``flagwire:`` section)
and are overridden by ``FLAGWIRE_*`` environment variables::

    flagwire:
      init_timeout_s: 5
      logging:
        level: DEBUG
        json_format: true
        file: /var/log/flagwire.log
        log_events: true
"""

from dataclasses import dataclass, replace
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .domain.exceptions import ConfigurationError

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}
_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class FlagwireConfig:
    """Runtime settings.

    Attributes:
        init_timeout_s: Limit for provider initialization; None waits forever.
        log_level: Root log level name.
        json_logs: Render logs as JSON.
        log_file: Optional file logs are appended to.
        log_events: Log every lifecycle event through LoggingEventHandler.
    """

    init_timeout_s: Optional[float] = None
    log_level: str = "INFO"
    json_logs: bool = False
    log_file: Optional[str] = None
    log_events: bool = False

    def __post_init__(self):
        if self.init_timeout_s is not None and self.init_timeout_s <= 0:
            raise ConfigurationError(
                "init_timeout_s must be positive", {"init_timeout_s": self.init_timeout_s}
            )
        if self.log_level.upper() not in _LEVELS:
            raise ConfigurationError(f"Unknown log level: {self.log_level}", {"log_level": self.log_level})


def load_config_from_file(config_path: str) -> Dict[str, Any]:
    """
    Load the ``flagwire`` section of a YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        The section as a dictionary (empty when the file has none)

    Raises:
        ConfigurationError: If the file is missing or not valid YAML
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(path, "r") as f:
            document = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(document, dict):
        raise ConfigurationError(f"Invalid configuration: expected a mapping in {config_path}")

    section = document.get("flagwire") or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Invalid configuration: 'flagwire' must be a mapping in {config_path}")
    return section


def config_from_dict(data: Mapping[str, Any], base: Optional[FlagwireConfig] = None) -> FlagwireConfig:
    """Build a config from a ``flagwire`` section, on top of ``base``."""
    config = base or FlagwireConfig()
    logging_section = data.get("logging") or {}
    if not isinstance(logging_section, Mapping):
        raise ConfigurationError("Invalid configuration: 'logging' must be a mapping")
    overrides: Dict[str, Any] = {}

    if "init_timeout_s" in data:
        overrides["init_timeout_s"] = _parse_timeout(data["init_timeout_s"])
    if "level" in logging_section:
        overrides["log_level"] = str(logging_section["level"]).upper()
    if "json_format" in logging_section:
        overrides["json_logs"] = _parse_bool("logging.json_format", logging_section["json_format"])
    if "file" in logging_section:
        overrides["log_file"] = logging_section["file"] or None
    if "log_events" in logging_section:
        overrides["log_events"] = _parse_bool("logging.log_events", logging_section["log_events"])

    return replace(config, **overrides)


def config_from_env(env: Mapping[str, str], base: Optional[FlagwireConfig] = None) -> FlagwireConfig:
    """Apply ``FLAGWIRE_*`` environment overrides on top of ``base``."""
    config = base or FlagwireConfig()
    overrides: Dict[str, Any] = {}

    if "FLAGWIRE_INIT_TIMEOUT_S" in env:
        overrides["init_timeout_s"] = _parse_timeout(env["FLAGWIRE_INIT_TIMEOUT_S"])
    if "FLAGWIRE_LOG_LEVEL" in env:
        overrides["log_level"] = env["FLAGWIRE_LOG_LEVEL"].upper()
    if "FLAGWIRE_JSON_LOGS" in env:
        overrides["json_logs"] = _parse_bool("FLAGWIRE_JSON_LOGS", env["FLAGWIRE_JSON_LOGS"])
    if "FLAGWIRE_LOG_FILE" in env:
        overrides["log_file"] = env["FLAGWIRE_LOG_FILE"] or None
    if "FLAGWIRE_LOG_EVENTS" in env:
        overrides["log_events"] = _parse_bool("FLAGWIRE_LOG_EVENTS", env["FLAGWIRE_LOG_EVENTS"])

    return replace(config, **overrides)


def load_configuration(config_path: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> FlagwireConfig:
    """
    Resolve the effective configuration.

    Args:
        config_path: Optional YAML file
        env: Environment mapping (defaults to os.environ)

    Returns:
        File settings overridden by environment settings
    """
    env = os.environ if env is None else env
    config = FlagwireConfig()
    if config_path:
        config = config_from_dict(load_config_from_file(config_path), config)
    return config_from_env(env, config)


def _parse_timeout(value: Any) -> Optional[float]:
    if value is None or (isinstance(value, str) and value.strip().lower() in ("", "none", "off")):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid init_timeout_s: {value!r}") from None


def _parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigurationError(f"Invalid boolean for {key}: {value!r}")
