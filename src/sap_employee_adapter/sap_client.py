"""
SAP C4C OData client for employee basic data reads
"""
from typing import Any, Dict, Optional

import httpx

from .utils.logging import get_logger
from .utils.metrics import metrics

logger = get_logger(__name__)

ODATA_SERVICE = "c4codataapi"
BUSINESS_USER_COLLECTION_API = "BusinessUserCollectionData"
EMPLOYEE_BASIC_DATA_API = "EmployeeBasicDataData"
ROLE_ASSIGNMENT_ENTITY = "BusinessUserBusinessRoleAssignment"


class SAPError(Exception):
    """Base exception for SAP-related errors"""
    pass


class SAPConnectionError(SAPError):
    """Network failure or non-success HTTP status from SAP"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def build_filter(field: str, value: str) -> str:
    """Build an OData equality filter; the value is not escaped"""
    return f"{field} eq '{value}'"


class SAPClient:
    """Async client for the SAP C4C OData API"""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info("SAP client initialized", base_url=self.base_url, timeout=self.timeout)

    async def __aenter__(self) -> "SAPClient":
        """Async context manager entry"""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit"""
        await self.close()

    async def connect(self) -> None:
        """Initialize HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )

    async def close(self) -> None:
        """Close HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_headers(self) -> Dict[str, str]:
        return {
            "APIKey": self.api_key,
            "Accept": "application/json",
        }

    def collection_url(self, api: str) -> str:
        return "/".join([self.base_url, ODATA_SERVICE, api])

    async def _get(self, url: str, entity: str, params: Optional[Dict[str, Any]] = None) -> bytes:
        """GET a URL and return the raw response body"""
        if not self._client:
            await self.connect()

        if not url:
            raise SAPConnectionError(f"No URL to request for {entity}")

        logger.debug("SAP request", entity=entity, url=url, params=params)

        with metrics.time_sap_request(entity):
            try:
                response = await self._client.get(url, headers=self._get_headers(), params=params)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise SAPConnectionError(
                    f"HTTP error {e.response.status_code} from {entity}: {e.response.text}",
                    status_code=e.response.status_code,
                )
            except (httpx.RequestError, httpx.InvalidURL) as e:
                raise SAPConnectionError(f"API request error for {entity}: {e}")

        return response.content

    async def get_business_user_collection(self, employee_id: str) -> bytes:
        """Fetch business users filtered by employee ID"""
        return await self._get(
            self.collection_url(BUSINESS_USER_COLLECTION_API),
            BUSINESS_USER_COLLECTION_API,
            params={"$filter": build_filter("EmployeeID", employee_id)},
        )

    async def get_employee_basic_data(self, user_id: str) -> bytes:
        """Fetch employee basic data filtered by user ID"""
        return await self._get(
            self.collection_url(EMPLOYEE_BASIC_DATA_API),
            EMPLOYEE_BASIC_DATA_API,
            params={"$filter": build_filter("UserID", user_id)},
        )

    async def get_url(self, url: str, entity: str = ROLE_ASSIGNMENT_ENTITY) -> bytes:
        """Follow a deferred navigation link; its query is already embedded"""
        return await self._get(url, entity)

    async def health_check(self) -> bool:
        """Check if the OData service document is reachable"""
        try:
            await self._get(self.collection_url(""), "ServiceDocument")
            return True
        except Exception as e:
            logger.warning("SAP health check failed", error=str(e))
            return False
