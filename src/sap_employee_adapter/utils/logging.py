"""
Structured logging utilities for the SAP Employee Basic Data Adapter

Every log line carries the context of the unit of work it belongs to: the
correlation ID and message ID of the inbound message, and the accepter of
the branch fetching it. The values live in context variables so that each
branch task sees its own accepter while sharing the message context it was
created under.
"""
import sys
import logging
from typing import Any, Dict, List, Optional, Tuple
from contextvars import ContextVar, Token

import structlog
from structlog.types import FilteringBoundLogger

from ..settings import Settings

correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
message_id_var: ContextVar[Optional[str]] = ContextVar("message_id", default=None)
accepter_var: ContextVar[Optional[str]] = ContextVar("accepter", default=None)

# Log key -> context variable
CONTEXT_FIELDS: Dict[str, ContextVar] = {
    "correlationId": correlation_id_var,
    "messageId": message_id_var,
    "accepter": accepter_var,
}

QUIET_LOGGERS = ("uvicorn", "httpx", "httpcore", "aio_pika", "aiormq")


def add_correlation_context(
    logger: FilteringBoundLogger, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Copy the bound message/branch context into the event"""
    for key, var in CONTEXT_FIELDS.items():
        value = var.get()
        if value:
            event_dict.setdefault(key, value)
    return event_dict


def setup_logging(settings: Settings) -> None:
    """JSON logs in production, console rendering under test"""
    renderer = (
        structlog.dev.ConsoleRenderer(colors=True)
        if settings.testing
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            add_correlation_context,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="ISO", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        # capture_logs in tests needs loggers rebuilt from the current config
        cache_logger_on_first_use=not settings.testing,
    )

    logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s" if settings.testing else "%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> FilteringBoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name or __name__)


class LoggingContext:
    """
    Bind message or branch context for the duration of a block.

    Only the values given are bound; the rest keep whatever the enclosing
    context set, so a branch can add its accepter under the message context.
    """

    def __init__(
        self,
        correlation_id: Optional[str] = None,
        message_id: Optional[str] = None,
        accepter: Optional[str] = None,
    ):
        self._values = {
            "correlationId": correlation_id,
            "messageId": message_id,
            "accepter": accepter,
        }
        self._tokens: List[Tuple[ContextVar, Token]] = []

    def __enter__(self) -> "LoggingContext":
        for key, value in self._values.items():
            if value:
                var = CONTEXT_FIELDS[key]
                self._tokens.append((var, var.set(value)))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)
