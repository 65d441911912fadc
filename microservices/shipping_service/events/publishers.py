"""
Shipping Service Event Publishers

Outbound messaging for shipping service:
- FulfillmentReplyEmitter: durable replies over Kafka, awaited, errors surface
- AnalyticsNotificationPublisher: advisory notifications over NATS, never raise
"""

import asyncio
import logging
from typing import Any, Optional, Set

from kafka.errors import KafkaError

from core.kafka_client import send_and_wait
from core.nats_client import PublishState, publish_once

from ..protocols import ReplyEmissionError
from .models import (
    AnalyticsNotificationEvent,
    FulfillmentReplyEvent,
    NotificationPriority,
    ShippingChannels,
)

logger = logging.getLogger(__name__)


class FulfillmentReplyEmitter:
    """
    Publishes fulfillment replies to the reply topic.

    send() returns only after the broker acknowledged the record. There is
    no retry here; a failed send raises ReplyEmissionError and the caller
    decides what to do with the command.
    """

    def __init__(
        self,
        producer,
        topic: str = ShippingChannels.FULFILLMENT_REPLY_TOPIC,
        send_timeout: float = 10.0,
    ):
        self.producer = producer
        self.topic = topic
        self.send_timeout = send_timeout

    async def send(self, reply: FulfillmentReplyEvent, partition_key: str) -> Any:
        try:
            metadata = await send_and_wait(
                self.producer,
                self.topic,
                reply.to_json(),
                key=partition_key,
                timeout=self.send_timeout,
            )
        except KafkaError as e:
            logger.error(f"Failed to publish fulfillment reply for request {reply.request_id} on {self.topic}: {e}")
            raise ReplyEmissionError(str(e)) from e

        logger.info(
            f"Published fulfillment reply {reply.status.value} for request {reply.request_id} "
            f"(order {partition_key}) to {self.topic}"
        )
        return metadata


class AnalyticsNotificationPublisher:
    """
    Best-effort analytics notifications.

    Each publish opens its own NATS connection and is bounded by a fixed
    timeout. Loss is tolerated: failures are logged and never reach the
    caller. schedule() detaches the attempt from the caller entirely.
    """

    def __init__(
        self,
        nats_url: str,
        subject: str = ShippingChannels.ANALYTICS_NOTIFICATION_SUBJECT,
        timeout: float = 1.5,
        connect_timeout: float = 1.0,
    ):
        self.nats_url = nats_url
        self.subject = subject
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self._pending: Set[asyncio.Task] = set()

    async def publish(self, event: AnalyticsNotificationEvent) -> Optional[PublishState]:
        """Attempt one delivery. Returns the terminating state, or None if the attempt itself broke."""
        try:
            attempt = await publish_once(
                self.nats_url,
                self.subject,
                event.to_json(),
                timeout=self.timeout,
                connect_timeout=self.connect_timeout,
            )
        except Exception as e:
            logger.error(f"Failed to publish analytics notification on {self.subject}: {e}")
            return None

        if attempt.outcome == PublishState.PUBLISHING and attempt.error is None:
            logger.info(f"Published analytics notification {event.title} [{event.notification_id}] on {self.subject}")
        else:
            logger.warning(
                f"Analytics notification {event.title} [{event.notification_id}] not delivered "
                f"({attempt.outcome.value if attempt.outcome else 'unknown'})"
            )
        return attempt.outcome

    def schedule(self, event: AnalyticsNotificationEvent) -> asyncio.Task:
        """Start publish() in the background and return immediately"""
        task = asyncio.create_task(self.publish(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for in-flight attempts; each one is already bounded by its own timeout"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


def build_shipment_notification(
    shipment_id: str,
    title: str,
    body: str,
    priority: NotificationPriority = NotificationPriority.NORMAL,
) -> AnalyticsNotificationEvent:
    """Notification keyed by the shipment id"""
    return AnalyticsNotificationEvent(
        request_id=shipment_id,
        title=title,
        body=body,
        priority=priority,
    )
