"""Structlog configuration for the driver.

Driver output (diagnostics, help, `--showConfig` JSON) owns stdout, so every
log line goes to stderr. Records from stdlib loggers, such as the settings
and config loaders, are rendered by the same structlog renderer.
"""

from __future__ import annotations

import logging as std_logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

from compdrive import __version__
from compdrive.lib.help import PROGRAM_NAME


def _level_from_verbosity(verbosity: int) -> int:
    if verbosity <= 0:
        return std_logging.WARNING
    if verbosity == 1:
        return std_logging.INFO
    return std_logging.DEBUG


def add_driver_fields(
    _logger: Any,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Tag events with the driver name and version unless already bound."""

    event_dict.setdefault("driver", PROGRAM_NAME)
    event_dict.setdefault("driver_version", __version__)
    return event_dict


def shared_processors() -> list[structlog.typing.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        add_driver_fields,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def configure_logging(json_mode: bool = False, verbosity: int = 0) -> None:
    """Configure stdlib logging and structlog for the driver CLI."""

    level = _level_from_verbosity(verbosity)
    renderer: structlog.typing.Processor = (
        structlog.processors.JSONRenderer() if json_mode else structlog.dev.ConsoleRenderer()
    )

    handler = std_logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[structlog.stdlib.add_logger_name, *shared_processors()],
        )
    )
    std_logging.basicConfig(level=level, handlers=[handler], force=True)

    structlog.configure(
        processors=[*shared_processors(), renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
