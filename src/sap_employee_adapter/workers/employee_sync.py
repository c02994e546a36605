"""
Employee sync worker - fetches SAP employee data per inbound message and
publishes the formatted records
"""
import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..input_reader import extract_request
from ..models.request_models import BUSINESS_USER_COLLECTION, EMPLOYEE_BASIC_DATA, EmployeeRequest
from ..models.sap_models import SAPRecord
from ..output_formatter import (
    convert_to_business_user_business_role_assignment,
    convert_to_business_user_collection,
    convert_to_employee_basic_data,
)
from ..rmq_client import RabbitMQClient, RabbitMQError, RabbitMQMessage
from ..sap_client import SAPClient, SAPError
from ..utils.correlation import message_correlation_id
from ..utils.logging import get_logger, LoggingContext
from ..utils.metrics import metrics

logger = get_logger(__name__)

BUSINESS_USER_COLLECTION_FUNCTION = "BusinessUserCollectionData"
ROLE_ASSIGNMENT_FUNCTION = "BusinessUserBusinessRoleAssignmentData"
EMPLOYEE_BASIC_DATA_FUNCTION = "EmployeeBasicDataData"


class BranchResult(BaseModel):
    """Completion signal of one accepter branch"""
    accepter: str
    status: str = Field(..., description="published, failed or skipped")
    functions: List[str] = Field(default_factory=list, description="Functions published by the branch")
    model_config = ConfigDict(frozen=True)


class EmployeeSyncWorker:
    """Consumes fetch requests and fans them out over the requested SAP sub-resources"""

    def __init__(
        self,
        sap_client: SAPClient,
        rmq_client: RabbitMQClient,
        output_queue: str,
        requeue_on_failure: bool = False,
    ):
        self.sap_client = sap_client
        self.rmq_client = rmq_client
        self.output_queue = output_queue
        self.requeue_on_failure = requeue_on_failure
        self.running = False

        self._branches: Dict[str, Callable[[EmployeeRequest, List[str]], Awaitable[None]]] = {
            BUSINESS_USER_COLLECTION: self._business_user_collection,
            EMPLOYEE_BASIC_DATA: self._employee_basic_data,
        }

        logger.info("Employee sync worker initialized", output_queue=self.output_queue)

    async def start(self) -> None:
        """Consume the inbound queue, one message at a time"""
        if self.running:
            logger.warning("Employee sync worker already running")
            return

        self.running = True
        logger.info("Starting employee sync worker")

        try:
            async for message in self.rmq_client.iterate():
                try:
                    await self.handle_message(message)
                except Exception as e:
                    # ack/nack failed; the broker redelivers the unsettled message
                    logger.error(
                        "Error settling message",
                        message_id=message.message_id,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                if not self.running:
                    break
        except asyncio.CancelledError:
            logger.info("Employee sync worker cancelled")
            raise
        finally:
            self.running = False

    async def stop(self) -> None:
        """Stop consuming after the current message"""
        if not self.running:
            return

        logger.info("Stopping employee sync worker")
        self.running = False

    async def handle_message(self, message: RabbitMQMessage) -> bool:
        """
        Process one inbound message and settle it.

        Branch-level SAP and publish errors are logged inside their branch
        and leave the message acknowledged. Anything else escaping the flow
        rejects the message.
        """
        correlation_id = message_correlation_id(message.correlation_id)

        with LoggingContext(correlation_id=correlation_id, message_id=message.message_id):
            try:
                with metrics.time_message():
                    results = await self.process_payload(message.data)
            except Exception as e:
                logger.error("Message processing failed", error=str(e), exc_info=True)
                await message.fail(requeue=self.requeue_on_failure)
                return False

            await message.success()
            logger.info(
                "Message processed",
                branches={result.accepter: result.status for result in results},
            )
            return True

    async def process_payload(self, payload: Any) -> List[BranchResult]:
        """Run the full fetch/format/publish flow for one payload"""
        request = extract_request(payload)
        logger.info(
            "Processing fetch request",
            employee_id=request.employee_id,
            user_id=request.user_id,
            accepter=list(request.accepter),
        )
        return await self.fetch_employee_data(request)

    async def fetch_employee_data(self, request: EmployeeRequest) -> List[BranchResult]:
        """Run one task per accepter entry and wait for all of them"""
        tasks = [
            asyncio.create_task(self._run_branch(accepter, request))
            for accepter in request.accepter
        ]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

        return list(outcomes)

    async def _run_branch(self, accepter: str, request: EmployeeRequest) -> BranchResult:
        # each branch runs in its own task, so the accepter binding stays local to it
        with LoggingContext(accepter=accepter):
            handler = self._branches.get(accepter)
            if handler is None:
                logger.debug("Unknown accepter entry, nothing to fetch")
                metrics.record_branch(accepter, "skipped")
                return BranchResult(accepter=accepter, status="skipped")

            published: List[str] = []
            try:
                await handler(request, published)
                status = "published"
            except (SAPError, RabbitMQError) as e:
                logger.error("Branch failed", error=str(e), error_type=type(e).__name__)
                status = "failed"

            metrics.record_branch(accepter, status)
            return BranchResult(accepter=accepter, status=status, functions=published)

    async def _business_user_collection(self, request: EmployeeRequest, published: List[str]) -> None:
        """Business users, then the role assignments of the first one"""
        raw = await self.sap_client.get_business_user_collection(request.employee_id)
        business_users = convert_to_business_user_collection(raw)
        await self._publish(BUSINESS_USER_COLLECTION_FUNCTION, business_users)
        published.append(BUSINESS_USER_COLLECTION_FUNCTION)

        raw = await self.sap_client.get_url(business_users[0].to_business_user_business_role_assignment)
        role_assignments = convert_to_business_user_business_role_assignment(raw)
        await self._publish(ROLE_ASSIGNMENT_FUNCTION, role_assignments)
        published.append(ROLE_ASSIGNMENT_FUNCTION)

    async def _employee_basic_data(self, request: EmployeeRequest, published: List[str]) -> None:
        raw = await self.sap_client.get_employee_basic_data(request.user_id)
        employees = convert_to_employee_basic_data(raw)
        await self._publish(EMPLOYEE_BASIC_DATA_FUNCTION, employees)
        published.append(EMPLOYEE_BASIC_DATA_FUNCTION)

    async def _publish(self, function: str, records: Sequence[SAPRecord]) -> None:
        messages = [record.to_message() for record in records]

        try:
            await self.rmq_client.send(self.output_queue, {"message": messages, "function": function})
        except RabbitMQError:
            metrics.record_publish(function, "error")
            raise

        metrics.record_publish(function)
        logger.info("Published records", function=function, record_count=len(messages), records=messages)
