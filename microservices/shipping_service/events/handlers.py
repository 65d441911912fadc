"""
Shipping Service Event Handlers

Dispatch command processing:
- parse_dispatch_command: bytes -> DispatchCommandEvent or InvalidDispatchCommandError
- DispatchCommandHandler: per-message fault boundary, decision, store mutation, reply
- DispatchCommandConsumer: Kafka poll/handle/commit loop
"""

import json
import logging
from collections import OrderedDict
from enum import Enum
from typing import Optional, Tuple

from pydantic import ValidationError

from core.kafka_client import commit, poll_records

from ..models import Shipment, parse_timestamp
from ..protocols import InvalidDispatchCommandError
from .models import (
    INVALID_REQUESTED_AT,
    DispatchCommandEvent,
    FulfillmentReplyEvent,
    ReplyStatus,
)

logger = logging.getLogger(__name__)


class DispatchOutcome(str, Enum):
    """What happened to one inbound message"""
    DROPPED = "dropped"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    DUPLICATE = "duplicate"


CommandFingerprint = Tuple[str, str, str, str]


def command_fingerprint(command: DispatchCommandEvent) -> CommandFingerprint:
    return (command.request_id, command.order_id, command.carrier, command.requested_at)


class ProcessedCommandInbox:
    """
    Bounded record of handled dispatch commands, keyed by messageId.

    Keeps the reply decided for each command so a redelivered message can
    be answered again without touching shipment state. An entry only
    matches a command with the same messageId and the same content; a
    different command reusing a messageId is not a redelivery. Commands
    with an empty messageId are never recorded. Oldest entries are evicted
    once capacity is reached.
    """

    def __init__(self, capacity: int = 10000):
        self.capacity = capacity
        self._entries: "OrderedDict[str, Tuple[CommandFingerprint, FulfillmentReplyEvent]]" = OrderedDict()

    def get(self, command: DispatchCommandEvent) -> Optional[FulfillmentReplyEvent]:
        """Reply previously sent for this exact command, if any"""
        if not command.message_id:
            return None
        entry = self._entries.get(command.message_id)
        if entry is None:
            return None
        fingerprint, reply = entry
        if fingerprint != command_fingerprint(command):
            logger.warning(
                f"messageId {command.message_id} reused by a different command "
                f"(request {command.request_id}), handling it as new"
            )
            return None
        return reply

    def record(self, command: DispatchCommandEvent, reply: FulfillmentReplyEvent) -> None:
        if not command.message_id:
            return
        self._entries[command.message_id] = (command_fingerprint(command), reply)
        self._entries.move_to_end(command.message_id)
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)

    def __contains__(self, message_id: str) -> bool:
        return message_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def parse_dispatch_command(raw: Optional[bytes]) -> DispatchCommandEvent:
    """Decode and structurally validate one message body"""
    if not raw:
        raise InvalidDispatchCommandError("empty message")

    try:
        payload = json.loads(raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidDispatchCommandError(f"unparsable body: {e}") from e

    if not isinstance(payload, dict):
        raise InvalidDispatchCommandError(f"expected a JSON object, got {type(payload).__name__}")

    try:
        return DispatchCommandEvent.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise InvalidDispatchCommandError(f"invalid fields: {fields}") from e


def decide_dispatch(command: DispatchCommandEvent) -> Tuple[FulfillmentReplyEvent, Optional[Shipment]]:
    """
    Decide a parsed command.

    Returns the reply and, on acceptance, the shipment to store. The reply's
    trackingId is the new shipment's tracking number.
    """
    if parse_timestamp(command.requested_at) is None:
        reply = FulfillmentReplyEvent(
            request_id=command.request_id,
            order_id=command.order_id,
            status=ReplyStatus.REJECTED,
            rejection_reason=INVALID_REQUESTED_AT,
        )
        return reply, None

    shipment = Shipment.create(order_id=command.order_id, carrier=command.carrier)
    reply = FulfillmentReplyEvent(
        request_id=command.request_id,
        order_id=command.order_id,
        status=ReplyStatus.ACCEPTED,
        tracking_id=shipment.tracking_number,
    )
    return reply, shipment


class DispatchCommandHandler:
    """
    Turns one raw dispatch command into a state change and a reply.

    Parse and validation problems are absorbed here (the message is dropped,
    no reply). Errors from the reply emitter are not caught and reach the
    consumption loop.
    """

    def __init__(self, repository, reply_emitter, inbox: Optional[ProcessedCommandInbox] = None):
        self.repository = repository
        self.reply_emitter = reply_emitter
        self.inbox = inbox

    async def handle(self, raw: Optional[bytes]) -> DispatchOutcome:
        try:
            command = parse_dispatch_command(raw)
        except InvalidDispatchCommandError as e:
            logger.warning(f"Dropping dispatch command: {e}")
            return DispatchOutcome.DROPPED

        if self.inbox is not None:
            previous = self.inbox.get(command)
            if previous is not None:
                logger.info(f"Dispatch command {command.message_id} already processed, re-sending reply")
                await self.reply_emitter.send(previous, partition_key=command.order_id)
                return DispatchOutcome.DUPLICATE

        reply, shipment = decide_dispatch(command)
        if shipment is not None:
            self.repository.put(shipment)
            logger.info(
                f"Created shipment {shipment.shipment_id} for order {command.order_id} "
                f"(request {command.request_id}, carrier {shipment.carrier})"
            )
        else:
            logger.info(f"Rejected dispatch command {command.message_id} for order {command.order_id}: {reply.rejection_reason}")

        if self.inbox is not None:
            self.inbox.record(command, reply)

        await self.reply_emitter.send(reply, partition_key=command.order_id)

        if reply.status == ReplyStatus.ACCEPTED:
            return DispatchOutcome.ACCEPTED
        return DispatchOutcome.REJECTED


class DispatchCommandConsumer:
    """
    Kafka consumption loop for dispatch commands.

    Records are handled strictly one after another; offsets are committed
    only after a record's reply was acknowledged. An exception from the
    handler ends run() so the host can surface it.
    """

    def __init__(self, consumer, handler: DispatchCommandHandler, poll_timeout_ms: int = 1000):
        self.consumer = consumer
        self.handler = handler
        self.poll_timeout_ms = poll_timeout_ms
        self._running = False
        self.processed = 0

    @property
    def running(self) -> bool:
        return self._running

    async def run(self) -> None:
        self._running = True
        logger.info("Dispatch command consumer started")
        try:
            while self._running:
                records = await poll_records(self.consumer, timeout_ms=self.poll_timeout_ms)
                if not records:
                    continue

                for record in records:
                    outcome = await self.handler.handle(record.value)
                    self.processed += 1
                    logger.debug(
                        f"Dispatch record {record.topic}[{record.partition}]@{record.offset}: {outcome.value}"
                    )

                await commit(self.consumer)
        finally:
            self._running = False
            logger.info(f"Dispatch command consumer stopped after {self.processed} messages")

    def stop(self) -> None:
        """Finish the in-flight record, then leave the loop"""
        self._running = False
