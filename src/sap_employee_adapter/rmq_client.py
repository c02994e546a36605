"""
RabbitMQ client for consuming fetch requests and publishing formatted records
"""
import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import aio_pika
from aio_pika.abc import AbstractChannel, AbstractIncomingMessage, AbstractQueue, AbstractRobustConnection
from aio_pika.exceptions import AMQPError
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from .utils.logging import get_logger

logger = get_logger(__name__)


class RabbitMQError(Exception):
    """Base exception for RabbitMQ-related errors"""
    pass


class RabbitMQConnectionError(RabbitMQError):
    """Connection issues with RabbitMQ"""
    pass


class RabbitMQPublishError(RabbitMQError):
    """Publishing to an outbound queue failed"""
    pass


class RabbitMQMessage:
    """Inbound delivery with JSON access and ack/nack helpers"""

    def __init__(self, message: AbstractIncomingMessage):
        self._message = message
        self._data: Optional[Dict[str, Any]] = None

    @property
    def message_id(self) -> Optional[str]:
        return self._message.message_id

    @property
    def correlation_id(self) -> Optional[str]:
        return self._message.correlation_id

    @property
    def data(self) -> Dict[str, Any]:
        """Decoded JSON body; {} when the body is not a JSON object"""
        if self._data is None:
            try:
                decoded = json.loads(self._message.body)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning("Inbound message is not valid JSON", error=str(e))
                decoded = {}
            self._data = decoded if isinstance(decoded, dict) else {}
        return self._data

    async def success(self) -> None:
        """Acknowledge the message"""
        await self._message.ack()

    async def fail(self, requeue: bool = False) -> None:
        """Reject the message; without requeue the broker dead-letters it"""
        await self._message.nack(requeue=requeue)


class RabbitMQClient:
    """Async RabbitMQ client bound to one inbound queue and its outbound queues"""

    def __init__(
        self,
        url: str,
        queue_from: str,
        queue_to: List[str],
        prefetch_count: int = 1,
        connect_attempts: int = 5,
    ):
        self.url = url
        self.queue_from = queue_from
        self.queue_to = list(queue_to)
        self.prefetch_count = prefetch_count
        self.connect_attempts = connect_attempts

        self._connection: Optional[AbstractRobustConnection] = None
        self._channel: Optional[AbstractChannel] = None
        self._inbound_queue: Optional[AbstractQueue] = None

        logger.info("RabbitMQ client initialized", queue_from=self.queue_from, queue_to=self.queue_to)

    async def __aenter__(self) -> "RabbitMQClient":
        """Async context manager entry"""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit"""
        await self.close()

    async def connect(self) -> None:
        """Open the connection and declare inbound and outbound queues"""
        if self._connection is not None and not self._connection.is_closed:
            return

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.connect_attempts),
                wait=wait_exponential(multiplier=1, min=1, max=10),
                retry=retry_if_exception_type((AMQPError, ConnectionError, OSError)),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    self._connection = await aio_pika.connect_robust(self.url)
        except (AMQPError, ConnectionError, OSError) as e:
            raise RabbitMQConnectionError(f"Failed to connect to RabbitMQ: {e}")

        self._channel = await self._connection.channel()
        await self._channel.set_qos(prefetch_count=self.prefetch_count)

        self._inbound_queue = await self._channel.declare_queue(self.queue_from, durable=True)
        for queue_name in self.queue_to:
            await self._channel.declare_queue(queue_name, durable=True)

        logger.info("Connected to RabbitMQ", queue_from=self.queue_from)

    async def close(self) -> None:
        """Close channel and connection"""
        if self._connection:
            await self._connection.close()
        self._connection = None
        self._channel = None
        self._inbound_queue = None

    async def iterate(self) -> AsyncIterator[RabbitMQMessage]:
        """Yield inbound messages until the consumer is cancelled"""
        if self._inbound_queue is None:
            await self.connect()

        async with self._inbound_queue.iterator() as queue_iter:
            async for message in queue_iter:
                yield RabbitMQMessage(message)

    async def send(self, queue: str, payload: Dict[str, Any]) -> None:
        """Publish a JSON payload to a queue through the default exchange"""
        if self._channel is None:
            raise RabbitMQPublishError("RabbitMQ channel is not open")

        message = aio_pika.Message(
            body=json.dumps(payload, default=str).encode("utf-8"),
            content_type="application/json",
            delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
        )

        try:
            await self._channel.default_exchange.publish(message, routing_key=queue)
        except (AMQPError, ConnectionError) as e:
            raise RabbitMQPublishError(f"Failed to publish to {queue}: {e}")

    async def health_check(self) -> bool:
        """Check if the broker connection is open"""
        return self._connection is not None and not self._connection.is_closed
