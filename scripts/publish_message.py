#!/usr/bin/env python3
"""
Publish a fetch request to the adapter's inbound queue

Builds an inbound message for an employee/user pair, publishes it through
the same RabbitMQ client the adapter uses and optionally waits for the
formatted records on the outbound queue.

    python scripts/publish_message.py --employee-id E0001 --user-id U0001 --accepter All --watch
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

import aio_pika

# Add src to Python path for imports
sys.path.append(str(Path(__file__).parent.parent / "src"))

from sap_employee_adapter.models.request_models import ACCEPT_ALL
from sap_employee_adapter.rmq_client import RabbitMQClient, RabbitMQError
from sap_employee_adapter.settings import Settings
from sap_employee_adapter.utils.logging import setup_logging, get_logger

settings = Settings()
setup_logging(settings)
logger = get_logger(__name__)


def build_message(employee_id: str, user_id: str, accepter: List[str]) -> Dict[str, Any]:
    """Inbound message in the shape the adapter consumes"""
    return {
        "BusinessUserCollection": {
            "EmployeeID": employee_id,
            "BusinessUserBusinessRoleAssignment": {
                "EmployeeBasicData": {"UserID": user_id}
            },
        },
        "Accepter": accepter,
    }


async def watch_output(queue_name: str, timeout: float) -> int:
    """Print outbound messages until none arrives within the timeout"""
    connection = await aio_pika.connect_robust(settings.rmq_url)
    received = 0

    async with connection:
        channel = await connection.channel()
        queue = await channel.declare_queue(queue_name, durable=True)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while loop.time() < deadline:
            message = await queue.get(fail=False)
            if message is None:
                await asyncio.sleep(0.5)
                continue

            async with message.process():
                payload = json.loads(message.body)
                received += 1
                logger.info(
                    "Received formatted records",
                    function=payload.get("function"),
                    record_count=len(payload.get("message", [])),
                )
                print(json.dumps(payload, indent=2, ensure_ascii=False))
            deadline = loop.time() + timeout

    return received


async def main():
    """Main function"""
    parser = argparse.ArgumentParser(description="Publish an employee basic data fetch request")
    parser.add_argument("--employee-id", default="E0001", help="BusinessUserCollection EmployeeID")
    parser.add_argument("--user-id", default="U0001", help="EmployeeBasicData UserID")
    parser.add_argument("--accepter", nargs="*", default=[ACCEPT_ALL], help="Sub-resources to fetch")
    parser.add_argument("--watch", action="store_true", help="Print records published to the outbound queue")
    parser.add_argument("--timeout", type=float, default=10.0, help="Seconds to wait for each outbound message")
    args = parser.parse_args()

    payload = build_message(args.employee_id, args.user_id, args.accepter)

    client = RabbitMQClient(
        url=settings.rmq_url,
        queue_from=settings.rmq_queue_from,
        queue_to=settings.rmq_queue_to,
    )

    try:
        async with client:
            await client.send(settings.rmq_queue_from, payload)
    except RabbitMQError as e:
        logger.error("Failed to publish fetch request", error=str(e))
        return 1

    logger.info("Published fetch request", queue=settings.rmq_queue_from, accepter=args.accepter)

    if args.watch:
        received = await watch_output(settings.rmq_queue_to[0], args.timeout)
        logger.info("Finished watching outbound queue", received=received)

    return 0


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
