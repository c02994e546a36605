"""
Inbound request models

The inbound schema never rejects a payload: sections with the wrong shape
decode to their defaults.
"""
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

BUSINESS_USER_COLLECTION = "BusinessUserCollection"
EMPLOYEE_BASIC_DATA = "EmployeeBasicData"
ACCEPT_ALL = "All"

KNOWN_ACCEPTERS: Tuple[str, ...] = (BUSINESS_USER_COLLECTION, EMPLOYEE_BASIC_DATA)


def _as_section(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


class EmployeeBasicDataSection(BaseModel):
    user_id: str = Field("", alias="UserID")
    model_config = ConfigDict(extra="ignore")

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _as_text(v)


class RoleAssignmentSection(BaseModel):
    employee_basic_data: EmployeeBasicDataSection = Field(
        default_factory=EmployeeBasicDataSection, alias="EmployeeBasicData"
    )
    model_config = ConfigDict(extra="ignore")

    @field_validator("employee_basic_data", mode="before")
    @classmethod
    def coerce_section(cls, v: Any) -> Dict[str, Any]:
        return _as_section(v)


class BusinessUserCollectionSection(BaseModel):
    employee_id: str = Field("", alias="EmployeeID")
    role_assignment: RoleAssignmentSection = Field(
        default_factory=RoleAssignmentSection, alias="BusinessUserBusinessRoleAssignment"
    )
    model_config = ConfigDict(extra="ignore")

    @field_validator("employee_id", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("role_assignment", mode="before")
    @classmethod
    def coerce_section(cls, v: Any) -> Dict[str, Any]:
        return _as_section(v)


class InboundMessage(BaseModel):
    """Payload consumed from the inbound queue"""
    business_user_collection: BusinessUserCollectionSection = Field(
        default_factory=BusinessUserCollectionSection, alias="BusinessUserCollection"
    )
    accepter: List[str] = Field(default_factory=list, alias="Accepter")
    model_config = ConfigDict(extra="ignore")

    @field_validator("business_user_collection", mode="before")
    @classmethod
    def coerce_section(cls, v: Any) -> Dict[str, Any]:
        return _as_section(v)

    @field_validator("accepter", mode="before")
    @classmethod
    def keep_string_entries(cls, value: Any) -> List[str]:
        """Drop anything that is not a list of strings"""
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, str)]


class EmployeeRequest(BaseModel):
    """Fetch command built once per inbound message"""
    employee_id: str = ""
    user_id: str = ""
    accepter: Tuple[str, ...] = KNOWN_ACCEPTERS
    model_config = ConfigDict(frozen=True)
