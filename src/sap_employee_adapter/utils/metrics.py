"""
Prometheus metrics utilities for the SAP Employee Basic Data Adapter
"""
import time
from contextlib import contextmanager

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

from .. import __version__

# Custom registry for our metrics
REGISTRY = CollectorRegistry()

app_info = Info(
    "sap_employee_adapter_info",
    "Information about the SAP Employee Basic Data Adapter",
    registry=REGISTRY
)

# Message processing metrics
messages_total = Counter(
    "sap_employee_adapter_messages_total",
    "Total inbound messages processed",
    ["status"],
    registry=REGISTRY
)

message_duration_seconds = Histogram(
    "sap_employee_adapter_message_duration_seconds",
    "Inbound message processing duration in seconds",
    registry=REGISTRY
)

branches_total = Counter(
    "sap_employee_adapter_branches_total",
    "Accepter branches completed",
    ["accepter", "status"],
    registry=REGISTRY
)

# SAP integration metrics
sap_requests_total = Counter(
    "sap_employee_adapter_sap_requests_total",
    "Total requests to SAP",
    ["entity", "status"],
    registry=REGISTRY
)

sap_request_duration_seconds = Histogram(
    "sap_employee_adapter_sap_request_duration_seconds",
    "SAP request duration in seconds",
    ["entity"],
    registry=REGISTRY
)

records_truncated_total = Counter(
    "sap_employee_adapter_records_truncated_total",
    "Responses truncated to the record limit",
    ["entity"],
    registry=REGISTRY
)

# Outbound queue metrics
publishes_total = Counter(
    "sap_employee_adapter_publishes_total",
    "Total publishes to the outbound queue",
    ["function", "status"],
    registry=REGISTRY
)


class MetricsCollector:
    """Utility class for collecting and managing metrics"""

    def __init__(self):
        self.registry = REGISTRY

        app_info.info({
            "version": __version__,
            "service": "sap_employee_adapter",
        })

    def get_metrics(self) -> str:
        """Get Prometheus metrics in text format"""
        return generate_latest(self.registry).decode('utf-8')

    def get_content_type(self) -> str:
        """Get Prometheus content type"""
        return CONTENT_TYPE_LATEST

    @contextmanager
    def time_message(self):
        """Context manager to time inbound message handling"""
        start_time = time.time()
        status = "failed"

        try:
            yield
            status = "succeeded"
        finally:
            message_duration_seconds.observe(time.time() - start_time)
            messages_total.labels(status=status).inc()

    @contextmanager
    def time_sap_request(self, entity: str):
        """Context manager to time SAP requests"""
        start_time = time.time()
        status = "error"

        try:
            yield
            status = "success"
        finally:
            sap_request_duration_seconds.labels(entity=entity).observe(time.time() - start_time)
            sap_requests_total.labels(entity=entity, status=status).inc()

    def record_branch(self, accepter: str, status: str):
        """Record a completed accepter branch"""
        branches_total.labels(accepter=accepter, status=status).inc()

    def record_publish(self, function: str, status: str = "success"):
        """Record an outbound publish"""
        publishes_total.labels(function=function, status=status).inc()

    def record_truncation(self, entity: str):
        """Record a response cut down to the record limit"""
        records_truncated_total.labels(entity=entity).inc()


# Global metrics instance
metrics = MetricsCollector()
