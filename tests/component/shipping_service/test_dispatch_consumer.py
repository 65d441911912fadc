"""
Component Tests: Dispatch Command Consumer

The poll/handle/commit loop against a mocked Kafka consumer and producer.
"""

import json

import pytest
from kafka.errors import KafkaTimeoutError

from microservices.shipping_service.events.handlers import (
    DispatchCommandConsumer,
    DispatchCommandHandler,
    ProcessedCommandInbox,
)
from microservices.shipping_service.events.publishers import FulfillmentReplyEmitter
from microservices.shipping_service.protocols import ReplyEmissionError
from tests.component.mocks import MockKafkaConsumer, MockKafkaProducer, make_record

pytestmark = [pytest.mark.component, pytest.mark.asyncio]

REPLY_TOPIC = "queue.order.fulfillment.reply"


def _build(repository, batches, producer=None):
    producer = producer or MockKafkaProducer()
    emitter = FulfillmentReplyEmitter(producer, topic=REPLY_TOPIC, send_timeout=2.0)
    handler = DispatchCommandHandler(repository, emitter, inbox=ProcessedCommandInbox())
    kafka_consumer = MockKafkaConsumer(batches)
    consumer = DispatchCommandConsumer(kafka_consumer, handler, poll_timeout_ms=10)
    kafka_consumer.on_exhausted = consumer.stop
    return consumer, kafka_consumer, producer


class TestConsumptionLoop:

    async def test_handles_records_in_order_and_commits(self, repository, factory):
        commands = [factory.make_dispatch_command() for _ in range(3)]
        batches = [[make_record(factory.encode(c), offset=i)] for i, c in enumerate(commands)]
        consumer, kafka_consumer, producer = _build(repository, batches)

        await consumer.run()

        assert consumer.processed == 3
        assert kafka_consumer.commit_calls == 3
        assert not consumer.running
        replies = [json.loads(item["value"]) for item in producer.sent]
        assert [r["requestId"] for r in replies] == [c["requestId"] for c in commands]
        assert [s.order_id for s in repository.list()] == [c["orderId"] for c in commands]

    async def test_reply_keyed_by_order(self, repository, factory):
        command = factory.make_dispatch_command()
        consumer, _, producer = _build(repository, [[make_record(factory.encode(command))]])

        await consumer.run()

        assert producer.sent[0]["topic"] == REPLY_TOPIC
        assert producer.sent[0]["key"] == command["orderId"]

    async def test_polls_one_record_at_a_time(self, repository, factory):
        consumer, kafka_consumer, _ = _build(repository, [[make_record(factory.make_dispatch_record_value())]])

        await consumer.run()

        assert all(call["max_records"] == 1 for call in kafka_consumer.poll_calls)
        assert kafka_consumer.poll_calls[0]["timeout_ms"] == 10

    async def test_malformed_record_is_committed_and_skipped(self, repository, factory):
        batches = [
            [make_record(b"not json", offset=0)],
            [make_record(factory.make_dispatch_record_value(), offset=1)],
        ]
        consumer, kafka_consumer, producer = _build(repository, batches)

        await consumer.run()

        assert consumer.processed == 2
        assert kafka_consumer.commit_calls == 2
        assert len(producer.sent) == 1
        assert repository.count() == 1

    async def test_idle_polls_do_not_commit(self, repository):
        consumer, kafka_consumer, _ = _build(repository, [[], []])

        await consumer.run()

        assert kafka_consumer.commit_calls == 0
        assert consumer.processed == 0


class TestConsumerHalt:

    async def test_unacknowledged_reply_halts_without_commit(self, repository, factory):
        producer = MockKafkaProducer(fail_with=KafkaTimeoutError("no ack"))
        batches = [
            [make_record(factory.make_dispatch_record_value(), offset=0)],
            [make_record(factory.make_dispatch_record_value(), offset=1)],
        ]
        consumer, kafka_consumer, _ = _build(repository, batches, producer=producer)

        with pytest.raises(ReplyEmissionError):
            await consumer.run()

        assert kafka_consumer.commit_calls == 0
        assert len(kafka_consumer.poll_calls) == 1
        assert not consumer.running

    async def test_stop_during_poll_ends_loop(self, repository):
        consumer, kafka_consumer, _ = _build(repository, [])

        await consumer.run()

        assert len(kafka_consumer.poll_calls) == 1
