"""
Utility modules for the SAP Employee Basic Data Adapter
"""

from .logging import get_logger, setup_logging, LoggingContext
from .metrics import metrics, MetricsCollector
from .correlation import generate_correlation_id, message_correlation_id

__all__ = [
    "get_logger",
    "setup_logging",
    "LoggingContext",
    "metrics",
    "MetricsCollector",
    "generate_correlation_id",
    "message_correlation_id",
]
