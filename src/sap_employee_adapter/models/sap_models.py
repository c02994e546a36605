"""
SAP C4C OData models for employee basic data reads

Records expose snake_case attributes and serialize back to the SAP field
names through their aliases.
"""
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class SAPRecord(BaseModel):
    """Base class for flat records republished to the outbound queue"""
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    def to_message(self) -> Dict[str, Any]:
        """Serialize using SAP field names"""
        return self.model_dump(by_alias=True)


class BusinessUserCollection(SAPRecord):
    """Business user entity from BusinessUserCollectionData"""
    object_id: Optional[str] = Field("", alias="ObjectID")
    etag: Optional[str] = Field("", alias="ETag")
    employee_id: Optional[str] = Field("", alias="EmployeeID")
    employee_uuid: Optional[str] = Field("", alias="EmployeeUUID")
    user_id: Optional[str] = Field("", alias="UserID")
    technical_user_id: Optional[str] = Field("", alias="TechnicalUserID")
    identity_uuid: Optional[str] = Field("", alias="IdentityUUID")
    business_partner_id: Optional[str] = Field("", alias="BusinessPartnerID")
    business_partner_formatted_name: Optional[str] = Field("", alias="BusinessPartnerFormattedName")
    department_name: Optional[str] = Field("", alias="DepartmentName")
    company_name: Optional[str] = Field("", alias="CompanyName")
    manager_name: Optional[str] = Field("", alias="ManagerName")
    email_uri: Optional[str] = Field("", alias="EmailURI")
    decimal_format_code: Optional[str] = Field("", alias="DecimalFormatCode")
    decimal_format_code_text: Optional[str] = Field("", alias="DecimalFormatCodeText")
    date_format_code: Optional[str] = Field("", alias="DateFormatCode")
    date_format_code_text: Optional[str] = Field("", alias="DateFormatCodeText")
    time_format_code: Optional[str] = Field("", alias="TimeFormatCode")
    time_format_code_text: Optional[str] = Field("", alias="TimeFormatCodeText")
    time_zone_code: Optional[str] = Field("", alias="TimeZoneCode")
    time_zone_code_text: Optional[str] = Field("", alias="TimeZoneCodeText")
    logon_language_code: Optional[str] = Field("", alias="LogonLanguageCode")
    logon_language_code_text: Optional[str] = Field("", alias="LogonLanguageCodeText")
    user_validity_start_date: Optional[str] = Field("", alias="UserValidityStartDate")
    user_validity_end_date: Optional[str] = Field("", alias="UserValidityEndDate")
    user_locked_indicator: Optional[bool] = Field(False, alias="UserLockedIndicator")
    user_counted_indicator: Optional[bool] = Field(False, alias="UserCountedIndicator")
    password_policy_code: Optional[str] = Field("", alias="PasswordPolicyCode")
    password_policy_code_text: Optional[str] = Field("", alias="PasswordPolicyCodeText")
    password_inactive_indicator: Optional[bool] = Field(False, alias="PasswordInactiveIndicator")
    password_locked_indicator: Optional[bool] = Field(False, alias="PasswordLockedIndicator")
    user_account_type_code: Optional[str] = Field("", alias="UserAccountTypeCode")
    user_account_type_code_text: Optional[str] = Field("", alias="UserAccountTypeCodeText")
    created_on: Optional[str] = Field("", alias="CreatedOn")
    user_created_by: Optional[str] = Field("", alias="UserCreatedBy")
    entity_last_changed_on: Optional[str] = Field("", alias="EntityLastChangedOn")
    user_changed_by: Optional[str] = Field("", alias="UserChangedBy")
    user_changed_on: Optional[str] = Field("", alias="UserChangedOn")
    to_business_user_business_role_assignment: str = Field(
        "",
        alias="ToBusinessUserBusinessRoleAssignment",
        description="Navigation URL of the user's role assignments",
    )


class BusinessUserBusinessRoleAssignment(SAPRecord):
    """Business role assigned to a business user"""
    object_id: Optional[str] = Field("", alias="ObjectID")
    parent_object_id: Optional[str] = Field("", alias="ParentObjectID")
    employee_id: Optional[str] = Field("", alias="EmployeeID")
    user_id: Optional[str] = Field("", alias="UserID")
    business_role_id: Optional[str] = Field("", alias="BusinessRoleID")
    entity_last_changed_on: Optional[str] = Field("", alias="EntityLastChangedOn")


class EmployeeBasicData(SAPRecord):
    """Employee profile from EmployeeBasicDataData"""
    object_id: Optional[str] = Field("", alias="ObjectID")
    etag: Optional[str] = Field("", alias="ETag")
    employee_id: Optional[str] = Field("", alias="EmployeeID")
    employee_uuid: Optional[str] = Field("", alias="EmployeeUUID")
    user_id: Optional[str] = Field("", alias="UserID")
    identity_uuid: Optional[str] = Field("", alias="IdentityUUID")
    business_partner_id: Optional[str] = Field("", alias="BusinessPartnerID")
    current_internal_employee_indicator: Optional[bool] = Field(False, alias="CurrentInternalEmployeeIndicator")
    current_external_employee_indicator: Optional[bool] = Field(False, alias="CurrentExternalEmployeeIndicator")
    formatted_name: Optional[str] = Field("", alias="FormattedName")
    title_code: Optional[str] = Field("", alias="TitleCode")
    academic_title_code: Optional[str] = Field("", alias="AcademicTitleCode")
    first_name: Optional[str] = Field("", alias="FirstName")
    middle_name: Optional[str] = Field("", alias="MiddleName")
    last_name: Optional[str] = Field("", alias="LastName")
    second_last_name: Optional[str] = Field("", alias="SecondLastName")
    nick_name: Optional[str] = Field("", alias="NickName")
    gender_code: Optional[str] = Field("", alias="GenderCode")
    language_code: Optional[str] = Field("", alias="LanguageCode")
    formatted_address: Optional[str] = Field("", alias="FormattedAddress")
    country_code: Optional[str] = Field("", alias="CountryCode")
    region_code: Optional[str] = Field("", alias="RegionCode")
    address_line1: Optional[str] = Field("", alias="AddressLine1")
    address_line2: Optional[str] = Field("", alias="AddressLine2")
    house_number: Optional[str] = Field("", alias="HouseNumber")
    street: Optional[str] = Field("", alias="Street")
    address_line4: Optional[str] = Field("", alias="AddressLine4")
    address_line5: Optional[str] = Field("", alias="AddressLine5")
    city: Optional[str] = Field("", alias="City")
    postal_code: Optional[str] = Field("", alias="PostalCode")
    phone: Optional[str] = Field("", alias="Phone")
    mobile: Optional[str] = Field("", alias="Mobile")
    fax: Optional[str] = Field("", alias="Fax")
    email: Optional[str] = Field("", alias="Email")
    user_validity_start_date: Optional[str] = Field("", alias="UserValidityStartDate")
    user_validity_end_date: Optional[str] = Field("", alias="UserValidityEndDate")
    user_password_policy_code: Optional[str] = Field("", alias="UserPasswordPolicyCode")
    user_locked_indicator: Optional[bool] = Field(False, alias="UserLockedIndicator")
    time_zone_code: Optional[str] = Field("", alias="TimeZoneCode")
    manager_uuid: Optional[str] = Field("", alias="ManagerUUID")
    manager_formatted_name: Optional[str] = Field("", alias="ManagerFormattedName")
    job_name: Optional[str] = Field("", alias="JobName")
    created_on: Optional[str] = Field("", alias="CreatedOn")
    created_by: Optional[str] = Field("", alias="CreatedBy")
    changed_on: Optional[str] = Field("", alias="ChangedOn")
    changed_by: Optional[str] = Field("", alias="ChangedBy")
    entity_last_changed_on: Optional[str] = Field("", alias="EntityLastChangedOn")


# Response envelope

class ODataDeferred(BaseModel):
    uri: str = ""


class ODataNavigation(BaseModel):
    """Deferred navigation property pointing at a related collection"""
    deferred: ODataDeferred = Field(default_factory=ODataDeferred, alias="__deferred")
    model_config = ConfigDict(populate_by_name=True)


class BusinessUserCollectionResult(BusinessUserCollection):
    """Raw business user result, including its deferred role assignment link"""
    business_user_business_role_assignment: ODataNavigation = Field(
        default_factory=ODataNavigation,
        alias="BusinessUserBusinessRoleAssignment",
    )


T = TypeVar("T", bound=BaseModel)


class ODataResults(BaseModel, Generic[T]):
    # SAP omits or nulls the array when nothing matches
    results: Optional[List[T]] = None


class ODataEnvelope(BaseModel, Generic[T]):
    """OData v2 JSON envelope: {"d": {"results": [...]}}"""
    d: ODataResults[T]
