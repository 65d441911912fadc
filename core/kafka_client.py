"""
Kafka client helpers

Thin factories around kafka-python plus asyncio bridges. kafka-python is a
blocking library, so every network call is pushed onto the event loop's
default executor with asyncio.to_thread and awaited; callers stay on the loop.
"""

import asyncio
import logging
from typing import Any, List, Optional

from kafka import KafkaConsumer, KafkaProducer
from kafka.errors import KafkaError

logger = logging.getLogger(__name__)


def get_producer(brokers: List[str], client_id: str) -> Optional[KafkaProducer]:
    """Create a producer that waits for all in-sync replicas and never retries on its own."""
    try:
        producer = KafkaProducer(
            bootstrap_servers=brokers,
            client_id=client_id,
            key_serializer=lambda k: k.encode("utf-8") if k is not None else None,
            acks="all",
            retries=0,
        )
        return producer
    except KafkaError as e:
        logger.error(f"Failed to create Kafka producer: {e}")
        return None


def get_consumer(*topics: str, brokers: List[str], client_id: str, group_id: str) -> Optional[KafkaConsumer]:
    """
    Create a consumer with manual commits.

    Values are left as raw bytes; decoding happens in the handler so a bad
    payload is dropped per record instead of breaking the poll.
    """
    try:
        consumer = KafkaConsumer(
            *topics,
            bootstrap_servers=brokers,
            client_id=client_id,
            group_id=group_id,
            auto_offset_reset="latest",
            enable_auto_commit=False,
        )
        return consumer
    except KafkaError as e:
        logger.error(f"Failed to create Kafka consumer: {e}")
        return None


def _send_blocking(producer: KafkaProducer, topic: str, value: bytes, key: Optional[str], timeout: float):
    future = producer.send(topic, value=value, key=key)
    return future.get(timeout=timeout)


async def send_and_wait(
    producer: KafkaProducer,
    topic: str,
    value: bytes,
    key: Optional[str] = None,
    timeout: float = 10.0,
) -> Any:
    """Publish one record and wait for the broker acknowledgment. Raises KafkaError on failure."""
    return await asyncio.to_thread(_send_blocking, producer, topic, value, key, timeout)


async def poll_records(consumer: KafkaConsumer, timeout_ms: int = 1000, max_records: int = 1) -> list:
    """Poll the consumer and flatten the per-partition batches into one ordered list."""
    batches = await asyncio.to_thread(consumer.poll, timeout_ms=timeout_ms, max_records=max_records)
    records = []
    for partition_records in batches.values():
        records.extend(partition_records)
    return records


async def commit(consumer: KafkaConsumer) -> None:
    """Commit the offsets of everything returned by the last poll."""
    await asyncio.to_thread(consumer.commit)


async def close_client(client: Any, name: str) -> None:
    """Close a producer or consumer, logging instead of raising."""
    if client is None:
        return
    try:
        await asyncio.to_thread(client.close)
        logger.info(f"Kafka {name} closed")
    except Exception as e:
        logger.error(f"Error closing Kafka {name}: {e}")
