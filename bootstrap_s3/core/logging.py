"""Structured logging for the bucket, object and ignition services.

Every event carries a ``component`` field (``bootstrap-s3`` unless the caller
names another) so records from the CLI and from an embedding controller can be
told apart once they share a log stream.
"""

import logging
from typing import Optional

import structlog
from pythonjsonlogger import jsonlogger
from structlog.typing import Processor

DEFAULT_COMPONENT = "bootstrap-s3"
PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def add_component(component: str) -> Processor:
    """Return a processor that stamps ``component`` on events lacking one."""

    def processor(logger, method_name, event_dict):
        event_dict.setdefault("component", component)
        return event_dict

    return processor


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    handler: Optional[logging.Handler] = None,
    component: str = DEFAULT_COMPONENT,
) -> None:
    """
    Route structlog through the stdlib root logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON records instead of console lines
        handler: Optional extra handler, e.g. a file handler
        component: Value of the ``component`` field on every event
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(jsonlogger.JsonFormatter() if json_output else logging.Formatter(PLAIN_FORMAT))
    root_logger.addHandler(console_handler)

    if handler:
        handler.setLevel(level)
        root_logger.addHandler(handler)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_component(component),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger named ``name`` (typically ``__name__``)."""
    return structlog.get_logger(name)
