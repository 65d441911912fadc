"""
Component Test Mocks

Shared mock implementations for component testing.
These mocks replace real I/O dependencies (Kafka, NATS, outbound messaging).
"""

from .kafka_mock import MockFuture, MockKafkaConsumer, MockKafkaProducer, MockRecord, make_record
from .messaging_mock import MockNotificationPublisher, MockReplyEmitter
from .nats_mock import FakeNATSClient

__all__ = [
    'FakeNATSClient',
    'MockFuture',
    'MockKafkaConsumer',
    'MockKafkaProducer',
    'MockNotificationPublisher',
    'MockRecord',
    'MockReplyEmitter',
    'make_record',
]
