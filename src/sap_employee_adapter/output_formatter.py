"""
Output formatting - decodes SAP OData envelopes into flat records
"""
from typing import List, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .models.sap_models import (
    BusinessUserBusinessRoleAssignment,
    BusinessUserCollection,
    BusinessUserCollectionResult,
    EmployeeBasicData,
    ODataEnvelope,
)
from .sap_client import SAPError
from .utils.logging import get_logger
from .utils.metrics import metrics

logger = get_logger(__name__)

MAX_RESULTS = 10

R = TypeVar("R", bound=BaseModel)


class SAPDecodeError(SAPError):
    """Response body is not the expected OData envelope"""
    pass


class SAPEmptyResultError(SAPError):
    """Response envelope holds no results"""
    pass


def _decode_results(raw: Union[bytes, str], result_type: Type[R], entity: str) -> List[R]:
    """Decode the envelope, require results and keep the first MAX_RESULTS"""
    try:
        envelope = ODataEnvelope[result_type].model_validate_json(raw)
    except ValidationError as e:
        raise SAPDecodeError(f"cannot convert to {entity}: {e}") from e

    results = envelope.d.results or []
    if not results:
        raise SAPEmptyResultError(f"{entity}: result data does not exist")

    if len(results) > MAX_RESULTS:
        logger.info(
            "Too many results, keeping the first 10",
            entity=entity,
            result_count=len(results),
        )
        metrics.record_truncation(entity)

    return results[:MAX_RESULTS]


def convert_to_business_user_collection(raw: Union[bytes, str]) -> List[BusinessUserCollection]:
    """Project business users, lifting the role assignment navigation URL"""
    results = _decode_results(raw, BusinessUserCollectionResult, "BusinessUserCollection")

    return [
        BusinessUserCollection(
            **result.model_dump(exclude={
                "business_user_business_role_assignment",
                "to_business_user_business_role_assignment",
            }),
            to_business_user_business_role_assignment=(
                result.business_user_business_role_assignment.deferred.uri
            ),
        )
        for result in results
    ]


def convert_to_business_user_business_role_assignment(
    raw: Union[bytes, str]
) -> List[BusinessUserBusinessRoleAssignment]:
    return _decode_results(
        raw, BusinessUserBusinessRoleAssignment, "BusinessUserBusinessRoleAssignment"
    )


def convert_to_employee_basic_data(raw: Union[bytes, str]) -> List[EmployeeBasicData]:
    return _decode_results(raw, EmployeeBasicData, "EmployeeBasicData")
