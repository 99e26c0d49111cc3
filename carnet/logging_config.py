from __future__ import annotations

import logging

import structlog

from carnet.errors import ConfigError


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    """Configure structlog for hosts embedding the engine.

    The library never calls this itself; carnet modules only emit through
    ``structlog.get_logger()`` and inherit whatever the host configured.
    """
    try:
        min_level = logging.getLevelNamesMapping()[level.upper()]
    except KeyError as exc:
        raise ConfigError(f"Unknown log level: {level}", {"level": level}) from exc

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        cache_logger_on_first_use=False,
    )
