"""
Input extraction - turns an inbound queue payload into an EmployeeRequest
"""
from typing import Any, List, Sequence

from .models.request_models import ACCEPT_ALL, KNOWN_ACCEPTERS, EmployeeRequest, InboundMessage


def resolve_accepter(accepter: Sequence[str]) -> List[str]:
    """Expand an empty or "All" accepter list to every known sub-resource"""
    resolved = list(accepter) or [ACCEPT_ALL]
    if resolved[0] == ACCEPT_ALL:
        return list(KNOWN_ACCEPTERS)
    return resolved


def read_inbound_message(payload: Any) -> InboundMessage:
    """Decode a payload against the inbound schema; never raises"""
    if not isinstance(payload, dict):
        payload = {}
    return InboundMessage.model_validate(payload)


def extract_request(payload: Any) -> EmployeeRequest:
    """
    Build the fetch command for one inbound message.

    Missing identifiers come through as empty strings and are sent to SAP
    as-is; unknown accepter entries are kept and later skipped.
    """
    message = read_inbound_message(payload)
    section = message.business_user_collection

    return EmployeeRequest(
        employee_id=section.employee_id,
        user_id=section.role_assignment.employee_basic_data.user_id,
        accepter=tuple(resolve_accepter(message.accepter)),
    )
