"""Structured logging setup.

All modules obtain loggers through :func:`get_logger` and log snake_case
event names with keyword fields::

    logger = get_logger(__name__)
    logger.info("provider_bound", client_name="checkout", provider="env")

:func:`setup_logging` routes structlog through the stdlib logging bridge so
records end up on stderr (and optionally a file) as JSON or console text.
"""

import logging
from pathlib import Path
import sys
from typing import Any, Optional

import structlog

_LOG_METHODS = ("debug", "info", "warning", "error")


def setup_logging(level: str | int = "INFO", json_format: bool = False, log_file: Optional[str] = None) -> None:
    """Configure structlog and the root stdlib logger.

    Args:
        level: Log level name or number.
        json_format: Render records as JSON instead of console text.
        log_file: Optional file to append records to.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    renderer = structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer(colors=False)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    root_logger.addHandler(stderr_handler)

    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(f"Could not setup file logging: {e}")

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> Any:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)


class SafeLogger:
    """Wraps an application-supplied logger.

    The wrapped object must expose ``debug``, ``info``, ``warning`` and
    ``error``. Anything else is rejected in favour of the default logger.
    Stdlib ``logging.Logger`` targets do not accept arbitrary keyword
    fields, so the fields are rendered into the message for them. A logger
    that raises never takes the caller down with it.
    """

    def __init__(self, logger: Any = None, default: Any = None):
        self._default = default if default is not None else get_logger("flagwire")
        self._logger = self._default

        if logger is None:
            return

        missing = [name for name in _LOG_METHODS if not callable(getattr(logger, name, None))]
        if missing:
            self._default.error("invalid_logger", missing_methods=missing)
            return

        self._logger = logger

    @property
    def target(self) -> Any:
        """The logger records are written to."""
        return self._logger

    def debug(self, event: str, **fields: Any) -> None:
        self._log("debug", event, fields)

    def info(self, event: str, **fields: Any) -> None:
        self._log("info", event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._log("warning", event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._log("error", event, fields)

    def _log(self, method: str, event: str, fields: dict[str, Any]) -> None:
        try:
            if isinstance(self._logger, logging.Logger):
                exc_info = fields.pop("exc_info", None)
                rendered = " ".join(f"{key}={value!r}" for key, value in fields.items())
                message = f"{event} {rendered}" if rendered else event
                getattr(self._logger, method)(message, exc_info=exc_info)
            else:
                getattr(self._logger, method)(event, **fields)
        except Exception:  # noqa: BLE001
            if self._logger is not self._default:
                getattr(self._default, method)(event, **fields)
