"""
Data models for the SAP Employee Basic Data Adapter
"""

from .sap_models import (
    SAPRecord,
    BusinessUserCollection,
    BusinessUserCollectionResult,
    BusinessUserBusinessRoleAssignment,
    EmployeeBasicData,
    ODataEnvelope,
    ODataNavigation,
)
from .request_models import (
    ACCEPT_ALL,
    BUSINESS_USER_COLLECTION,
    EMPLOYEE_BASIC_DATA,
    KNOWN_ACCEPTERS,
    EmployeeRequest,
    InboundMessage,
)

__all__ = [
    "SAPRecord",
    "BusinessUserCollection",
    "BusinessUserCollectionResult",
    "BusinessUserBusinessRoleAssignment",
    "EmployeeBasicData",
    "ODataEnvelope",
    "ODataNavigation",
    "ACCEPT_ALL",
    "BUSINESS_USER_COLLECTION",
    "EMPLOYEE_BASIC_DATA",
    "KNOWN_ACCEPTERS",
    "EmployeeRequest",
    "InboundMessage",
]
