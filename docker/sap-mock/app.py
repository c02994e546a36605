"""
FastAPI-based SAP C4C OData Mock Service
Simulates the employee basic data reads of the c4codataapi service for
adapter development
"""
import json
import logging
import os
import re
from typing import Any, Dict, List, Optional
from pathlib import Path

from fastapi import FastAPI, Header, HTTPException, Query, Request
import uvicorn

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="SAP C4C OData Mock Service",
    description="Mock SAP C4C OData API for employee basic data adapter development",
    version="1.0.0"
)

SERVICE_ROOT = "/sap/c4c/odata/v1/c4codataapi"
API_KEY = os.getenv("MOCK_API_KEY", "")

# Data store
DATA_DIR = Path("data")
BUSINESS_USERS_FILE = DATA_DIR / "business_users.json"
ROLE_ASSIGNMENTS_FILE = DATA_DIR / "role_assignments.json"
EMPLOYEES_FILE = DATA_DIR / "employees.json"

FILTER_PATTERN = re.compile(r"^\s*(\w+)\s+eq\s+'(.*)'\s*$")


def load_data():
    """Load mock data from JSON files"""
    try:
        with open(BUSINESS_USERS_FILE) as f:
            business_users = json.load(f)
    except FileNotFoundError:
        business_users = create_default_business_users()

    try:
        with open(ROLE_ASSIGNMENTS_FILE) as f:
            role_assignments = json.load(f)
    except FileNotFoundError:
        role_assignments = create_default_role_assignments()

    try:
        with open(EMPLOYEES_FILE) as f:
            employees = json.load(f)
    except FileNotFoundError:
        employees = create_default_employees()

    return business_users, role_assignments, employees


def create_default_business_users():
    """Create default business user data"""
    return [
        {
            "ObjectID": "00163E0A0001",
            "EmployeeID": "E0001",
            "UserID": "U0001",
            "TechnicalUserID": "T0001",
            "BusinessPartnerID": "8000001",
            "BusinessPartnerFormattedName": "Taro Yamada",
            "DepartmentName": "Sales",
            "CompanyName": "Latona",
            "ManagerName": "Hanako Suzuki",
            "EmailURI": "taro.yamada@example.com",
            "TimeZoneCode": "JAPAN",
            "LogonLanguageCode": "JA",
            "UserValidityStartDate": "/Date(1609459200000)/",
            "UserValidityEndDate": "/Date(253402214400000)/",
            "UserLockedIndicator": False,
            "UserCountedIndicator": True,
            "PasswordPolicyCode": "S_BUSINESS",
            "UserAccountTypeCode": "1",
            "CreatedOn": "/Date(1609459200000+0000)/",
            "EntityLastChangedOn": "/Date(1630490400000+0000)/",
        },
        {
            "ObjectID": "00163E0A0002",
            "EmployeeID": "E0002",
            "UserID": "U0002",
            "TechnicalUserID": "T0002",
            "BusinessPartnerID": "8000002",
            "BusinessPartnerFormattedName": "Hanako Suzuki",
            "DepartmentName": "Management",
            "CompanyName": "Latona",
            "EmailURI": "hanako.suzuki@example.com",
            "TimeZoneCode": "JAPAN",
            "LogonLanguageCode": "EN",
            "UserLockedIndicator": False,
            "UserCountedIndicator": True,
            "UserAccountTypeCode": "1",
        },
    ]


def create_default_role_assignments():
    """Create default role assignment data"""
    return [
        {"ObjectID": "00163E0B0001", "ParentObjectID": "00163E0A0001", "EmployeeID": "E0001",
         "UserID": "U0001", "BusinessRoleID": "SALES_REP"},
        {"ObjectID": "00163E0B0002", "ParentObjectID": "00163E0A0001", "EmployeeID": "E0001",
         "UserID": "U0001", "BusinessRoleID": "SERVICE_AGENT"},
        {"ObjectID": "00163E0B0003", "ParentObjectID": "00163E0A0002", "EmployeeID": "E0002",
         "UserID": "U0002", "BusinessRoleID": "SALES_MANAGER"},
    ]


def create_default_employees():
    """Create default employee basic data"""
    return [
        {
            "ObjectID": "00163E0C0001",
            "EmployeeID": "E0001",
            "UserID": "U0001",
            "BusinessPartnerID": "8000001",
            "CurrentInternalEmployeeIndicator": True,
            "CurrentExternalEmployeeIndicator": False,
            "FormattedName": "Taro Yamada",
            "FirstName": "Taro",
            "LastName": "Yamada",
            "GenderCode": "1",
            "LanguageCode": "JA",
            "CountryCode": "JP",
            "City": "Tokyo",
            "PostalCode": "100-0001",
            "Email": "taro.yamada@example.com",
            "UserLockedIndicator": False,
            "TimeZoneCode": "JAPAN",
            "ManagerFormattedName": "Hanako Suzuki",
            "JobName": "Sales Representative",
        },
        {
            "ObjectID": "00163E0C0002",
            "EmployeeID": "E0002",
            "UserID": "U0002",
            "BusinessPartnerID": "8000002",
            "CurrentInternalEmployeeIndicator": True,
            "CurrentExternalEmployeeIndicator": False,
            "FormattedName": "Hanako Suzuki",
            "FirstName": "Hanako",
            "LastName": "Suzuki",
            "GenderCode": "2",
            "LanguageCode": "EN",
            "CountryCode": "JP",
            "City": "Osaka",
            "Email": "hanako.suzuki@example.com",
            "UserLockedIndicator": False,
            "TimeZoneCode": "JAPAN",
            "JobName": "Sales Manager",
        },
    ]


# Load data at startup
BUSINESS_USERS, ROLE_ASSIGNMENTS, EMPLOYEES = load_data()


def check_api_key(api_key: Optional[str]):
    """Reject requests without the configured API key"""
    if API_KEY and api_key != API_KEY:
        raise HTTPException(status_code=401, detail="Invalid API key")


def parse_filter(expression: Optional[str]) -> Optional[tuple]:
    """Parse a single `Field eq 'value'` filter"""
    if not expression:
        return None

    match = FILTER_PATTERN.match(expression)
    if not match:
        raise HTTPException(status_code=400, detail=f"Unsupported $filter: {expression}")
    return match.group(1), match.group(2)


def apply_filter(records: List[Dict[str, Any]], expression: Optional[str]) -> List[Dict[str, Any]]:
    parsed = parse_filter(expression)
    if parsed is None:
        return records

    field, value = parsed
    return [record for record in records if record.get(field) == value]


def envelope(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Wrap results in the OData v2 JSON envelope"""
    return {"d": {"results": results}}


def with_metadata(request: Request, entity_type: str, record: Dict[str, Any]) -> Dict[str, Any]:
    base = str(request.base_url).rstrip("/") + SERVICE_ROOT
    return {
        "__metadata": {"uri": f"{base}/{entity_type}('{record['ObjectID']}')", "type": f"c4codata.{entity_type}"},
        **record,
    }


@app.get("/healthz")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "sap-mock"}


@app.get(SERVICE_ROOT + "/")
async def service_document(apikey: Optional[str] = Header(None)):
    """OData service document"""
    check_api_key(apikey)
    return {"d": {"EntitySets": ["BusinessUserCollection", "EmployeeBasicDataCollection"]}}


@app.get(SERVICE_ROOT + "/BusinessUserCollectionData")
async def business_user_collection(
    request: Request,
    filter_: Optional[str] = Query(None, alias="$filter"),
    apikey: Optional[str] = Header(None),
):
    """Business users with a deferred link to their role assignments"""
    check_api_key(apikey)
    logger.info(f"BusinessUserCollectionData $filter={filter_}")

    base = str(request.base_url).rstrip("/") + SERVICE_ROOT
    results = []
    for record in apply_filter(BUSINESS_USERS, filter_):
        result = with_metadata(request, "BusinessUserCollection", record)
        result["BusinessUserBusinessRoleAssignment"] = {
            "__deferred": {
                "uri": f"{base}/BusinessUserCollection('{record['ObjectID']}')/BusinessUserBusinessRoleAssignment"
            }
        }
        results.append(result)

    return envelope(results)


@app.get(SERVICE_ROOT + "/BusinessUserCollection('{object_id}')/BusinessUserBusinessRoleAssignment")
async def business_user_role_assignments(request: Request, object_id: str, apikey: Optional[str] = Header(None)):
    """Role assignments of one business user"""
    check_api_key(apikey)
    logger.info(f"BusinessUserBusinessRoleAssignment for {object_id}")

    if not any(user["ObjectID"] == object_id for user in BUSINESS_USERS):
        raise HTTPException(status_code=404, detail="Business user not found")

    return envelope([
        with_metadata(request, "BusinessUserBusinessRoleAssignment", record)
        for record in ROLE_ASSIGNMENTS
        if record["ParentObjectID"] == object_id
    ])


@app.get(SERVICE_ROOT + "/EmployeeBasicDataData")
async def employee_basic_data(
    request: Request,
    filter_: Optional[str] = Query(None, alias="$filter"),
    apikey: Optional[str] = Header(None),
):
    """Employee basic data"""
    check_api_key(apikey)
    logger.info(f"EmployeeBasicDataData $filter={filter_}")

    return envelope([
        with_metadata(request, "EmployeeBasicData", record)
        for record in apply_filter(EMPLOYEES, filter_)
    ])


@app.get("/")
async def root():
    """Root endpoint with service info"""
    return {
        "service": "SAP C4C OData Mock Service",
        "version": "1.0.0",
        "service_root": SERVICE_ROOT,
        "data_summary": {
            "business_users": len(BUSINESS_USERS),
            "role_assignments": len(ROLE_ASSIGNMENTS),
            "employees": len(EMPLOYEES),
        }
    }


@app.get("/debug/employees")
async def debug_employees():
    """Debug endpoint to list all employees"""
    return {"business_users": BUSINESS_USERS, "employees": EMPLOYEES}


@app.post("/debug/employees/bulk/{count}")
async def add_bulk_employees(count: int, user_id: str = "U0001"):
    """Debug endpoint to add employees sharing a UserID, for exercising the record limit"""
    start = len(EMPLOYEES)
    for index in range(start, start + count):
        EMPLOYEES.append({
            "ObjectID": f"00163E0C{index:04d}",
            "EmployeeID": f"E{index:04d}",
            "UserID": user_id,
            "FormattedName": f"Bulk Employee {index}",
        })
    return {"message": f"Added {count} employees with UserID {user_id}"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8081)
