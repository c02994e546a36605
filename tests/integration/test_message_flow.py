"""
Integration tests for the complete message flow: inbound message, SAP
OData requests over HTTP, outbound publish and acknowledgement
"""
import pytest
import pytest_asyncio
from typing import Dict, List

import httpx

from sap_employee_adapter.sap_client import SAPClient
from sap_employee_adapter.workers.employee_sync import EmployeeSyncWorker

from conftest import (
    OUTPUT_QUEUE,
    SAP_BASE_URL,
    create_mock_message,
    make_business_user_result,
    make_employee_basic_data_result,
    make_envelope,
    make_role_assignment_result,
    role_assignment_uri,
    sent_payloads,
)


class FakeSAPService:
    """Routes OData requests to canned envelopes and records them"""

    def __init__(self, responses: Dict[str, bytes]):
        self.responses = responses
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for suffix, body in self.responses.items():
            if request.url.path.endswith(suffix):
                return httpx.Response(200, content=body, headers={"Content-Type": "application/json"})
        return httpx.Response(404, content=b"Resource not found")


def all_fields_payload(accepter):
    return {
        "BusinessUserCollection": {
            "EmployeeID": "E1",
            "BusinessUserBusinessRoleAssignment": {"EmployeeBasicData": {"UserID": "U1"}},
        },
        "Accepter": accepter,
    }


@pytest.fixture
def sap_service():
    return FakeSAPService({
        "/BusinessUserCollectionData": make_envelope([make_business_user_result(0)]),
        "/BusinessUserBusinessRoleAssignment": make_envelope([make_role_assignment_result(i) for i in range(2)]),
        "/EmployeeBasicDataData": make_envelope([make_employee_basic_data_result(0, "U1")]),
    })


@pytest_asyncio.fixture
async def worker(sap_service, mock_rmq_client):
    sap_client = SAPClient(SAP_BASE_URL, "test-api-key", transport=httpx.MockTransport(sap_service))
    async with sap_client:
        yield EmployeeSyncWorker(sap_client, mock_rmq_client, OUTPUT_QUEUE)


@pytest.mark.integration
class TestMessageFlowIntegration:
    """Test complete message processing flow"""

    @pytest.mark.asyncio
    async def test_employee_basic_data_request(self, worker, sap_service, mock_rmq_client):
        """One EmployeeBasicData request produces one GET and one publish"""
        message = create_mock_message(all_fields_payload(["EmployeeBasicData"]))

        assert await worker.handle_message(message) is True

        assert len(sap_service.requests) == 1
        request = sap_service.requests[0]
        assert request.url.path == "/sap/c4c/odata/v1/c4codataapi/EmployeeBasicDataData"
        assert request.url.params["$filter"] == "UserID eq 'U1'"
        assert request.headers["APIKey"] == "test-api-key"

        mock_rmq_client.send.assert_awaited_once()
        queue, payload = mock_rmq_client.send.call_args.args
        assert queue == OUTPUT_QUEUE
        assert payload["function"] == "EmployeeBasicDataData"
        assert payload["message"][0]["UserID"] == "U1"
        assert "__metadata" not in payload["message"][0]

        message.success.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_all_accepters(self, worker, sap_service, mock_rmq_client):
        message = create_mock_message(all_fields_payload(["All"]))

        assert await worker.handle_message(message) is True

        paths = sorted(request.url.path.rsplit("/", 1)[-1] for request in sap_service.requests)
        assert paths == ["BusinessUserBusinessRoleAssignment", "BusinessUserCollectionData", "EmployeeBasicDataData"]

        role_request = next(r for r in sap_service.requests if r.url.path.endswith("/BusinessUserBusinessRoleAssignment"))
        assert role_request.url == httpx.URL(role_assignment_uri("00163E0A0000"))

        payloads = {payload["function"]: payload for payload in sent_payloads(mock_rmq_client)}
        assert set(payloads) == {
            "BusinessUserCollectionData",
            "BusinessUserBusinessRoleAssignmentData",
            "EmployeeBasicDataData",
        }
        assert len(payloads["BusinessUserBusinessRoleAssignmentData"]["message"]) == 2

    @pytest.mark.asyncio
    async def test_fifteen_results_published_as_ten(self, sap_service, mock_rmq_client):
        sap_service.responses["/EmployeeBasicDataData"] = make_envelope(
            [make_employee_basic_data_result(i, "U1") for i in range(15)]
        )
        sap_client = SAPClient(SAP_BASE_URL, "test-api-key", transport=httpx.MockTransport(sap_service))

        async with sap_client:
            worker = EmployeeSyncWorker(sap_client, mock_rmq_client, OUTPUT_QUEUE)
            await worker.handle_message(create_mock_message(all_fields_payload(["EmployeeBasicData"])))

        payload = sent_payloads(mock_rmq_client)[0]
        assert [record["EmployeeID"] for record in payload["message"]] == [f"E{i}" for i in range(10)]

    @pytest.mark.asyncio
    async def test_sap_error_status_acks_without_publish(self, sap_service, mock_rmq_client):
        sap_service.responses.clear()
        sap_client = SAPClient(SAP_BASE_URL, "test-api-key", transport=httpx.MockTransport(sap_service))
        message = create_mock_message(all_fields_payload(["BusinessUserCollection", "EmployeeBasicData"]))

        async with sap_client:
            worker = EmployeeSyncWorker(sap_client, mock_rmq_client, OUTPUT_QUEUE)
            assert await worker.handle_message(message) is True

        assert len(sap_service.requests) == 2
        mock_rmq_client.send.assert_not_awaited()
        message.success.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_malformed_message_queries_with_empty_identifiers(self, worker, sap_service, mock_rmq_client):
        message = create_mock_message({})

        assert await worker.handle_message(message) is True

        filters = sorted(request.url.params["$filter"] for request in sap_service.requests if "$filter" in request.url.params)
        assert filters == ["EmployeeID eq ''", "UserID eq ''"]
