"""
Kafka Client Mocks for Component Testing

Stand-ins for kafka-python's KafkaConsumer and KafkaProducer with the
subset of behaviour the shipping service relies on.
"""
import time
from collections import namedtuple
from typing import Any, Callable, Dict, List, Optional

from kafka.errors import KafkaTimeoutError
from kafka.structs import TopicPartition


MockRecord = namedtuple("MockRecord", ["topic", "partition", "offset", "key", "value"])


def make_record(value: Optional[bytes], topic: str = "queue.shipping.dispatch.command",
                partition: int = 0, offset: int = 0, key: Optional[bytes] = None) -> MockRecord:
    """Build a consumer record"""
    return MockRecord(topic=topic, partition=partition, offset=offset, key=key, value=value)


class MockKafkaConsumer:
    """
    Mock for KafkaConsumer.

    Each poll() returns the next queued batch. Once the queue is empty,
    on_exhausted is called (typically to stop the loop under test) and
    empty batches are returned. Without on_exhausted an empty poll blocks
    for timeout_ms like the real client.
    """

    def __init__(self, batches: Optional[List[List[MockRecord]]] = None,
                 on_exhausted: Optional[Callable[[], None]] = None):
        self._batches = list(batches or [])
        self.on_exhausted = on_exhausted
        self.poll_calls: List[Dict[str, Any]] = []
        self.commit_calls = 0
        self.closed = False

    def poll(self, timeout_ms: int = 0, max_records: Optional[int] = None):
        self.poll_calls.append({"timeout_ms": timeout_ms, "max_records": max_records})
        if not self._batches:
            if self.on_exhausted:
                self.on_exhausted()
            else:
                time.sleep(timeout_ms / 1000)
            return {}

        batch = self._batches.pop(0)
        result: Dict[TopicPartition, List[MockRecord]] = {}
        for record in batch:
            result.setdefault(TopicPartition(record.topic, record.partition), []).append(record)
        return result

    def commit(self):
        self.commit_calls += 1

    def close(self):
        self.closed = True


class MockFuture:
    """Mock for kafka-python's FutureRecordMetadata"""

    def __init__(self, metadata: Any = None, error: Optional[Exception] = None):
        self._metadata = metadata
        self._error = error
        self.timeout: Optional[float] = None

    def get(self, timeout: Optional[float] = None):
        self.timeout = timeout
        if self._error:
            raise self._error
        return self._metadata


class MockKafkaProducer:
    """Mock for KafkaProducer that records every send"""

    def __init__(self, fail_with: Optional[Exception] = None):
        self.sent: List[Dict[str, Any]] = []
        self.fail_with = fail_with
        self.closed = False

    def send(self, topic: str, value: bytes = None, key: Optional[str] = None):
        self.sent.append({"topic": topic, "value": value, "key": key})
        metadata = {"topic": topic, "partition": 0, "offset": len(self.sent) - 1}
        return MockFuture(metadata=metadata, error=self.fail_with)

    def set_timeout(self):
        """Make every later send fail as an unacknowledged publish"""
        self.fail_with = KafkaTimeoutError("Timeout after waiting for broker acknowledgment")

    def close(self):
        self.closed = True
