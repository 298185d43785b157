# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structured logging for todobatch.

Every event carries the service environment. Batch code binds its own
fields (batch_id, strategy, worker_id), and request handlers bind the
endpoint through bind_context() so executor events can be traced back to
the call that started them.

Development and debug runs render colored key=value lines; other
environments emit one JSON object per event.

Example:
    >>> setup_logging(get_settings())
    >>> logger = get_logger(__name__)
    >>> logger.info("Batch complete", success_count=5, failure_count=0)
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from todobatch.core.config.settings import Settings

# Per-request access lines duplicate the batch events
_ACCESS_LOGGERS = ("uvicorn.access",)


def _environment_adder(environment: str) -> Processor:
    def add_environment(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_environment


def setup_logging(settings: "Settings") -> None:
    """Configure structlog and the stdlib handlers it writes through.

    Args:
        settings: Provides log_level, environment and the debug flag.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _environment_adder(settings.environment),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if settings.is_development or settings.debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # structlog renders the line, stdlib only prints it
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    logging.getLogger("todobatch").setLevel(log_level)
    for name in _ACCESS_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Get a structured logger, usually for ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: object) -> None:
    """Attach fields to every event logged from the current task.

    Tasks spawned afterwards (batch workers included) inherit the fields.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop all fields bound with bind_context()."""
    structlog.contextvars.clear_contextvars()
