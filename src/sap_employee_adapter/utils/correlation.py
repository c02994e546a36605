"""
Correlation ID helpers
"""
import uuid
from typing import Optional


def generate_correlation_id() -> str:
    """Generate a unique correlation ID"""
    return str(uuid.uuid4())


def message_correlation_id(correlation_id: Optional[str]) -> str:
    """Reuse the broker-supplied correlation ID when present"""
    return correlation_id or generate_correlation_id()
