#!/usr/bin/env python3
"""Shipping service configuration

Bind address, Kafka dispatch/reply channels and the NATS analytics
side-channel. Every value has a default so the service boots with an
empty environment.
"""
import os
from dataclasses import dataclass, field
from typing import List

def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default

def _list(val: str) -> List[str]:
    return [item.strip() for item in val.split(",") if item.strip()]


@dataclass
class ShippingConfig:
    """Shipping service settings"""

    # ===========================================
    # HTTP
    # ===========================================
    service_name: str = "shipping_service"
    host: str = "0.0.0.0"
    port: int = 9000

    # ===========================================
    # Kafka (dispatch commands in, fulfillment replies out)
    # ===========================================
    kafka_enabled: bool = True
    kafka_brokers: List[str] = field(default_factory=lambda: ["localhost:9092"])
    kafka_client_id: str = "shipping-service"
    kafka_group_id: str = "shipping-service-dispatch"
    dispatch_command_topic: str = "queue.shipping.dispatch.command"
    fulfillment_reply_topic: str = "queue.order.fulfillment.reply"
    kafka_send_timeout_seconds: float = 10.0
    kafka_poll_timeout_ms: int = 1000

    # Redelivery handling
    dispatch_dedup_enabled: bool = True
    dispatch_dedup_capacity: int = 10000

    # ===========================================
    # NATS (analytics notifications)
    # ===========================================
    analytics_nats_url: str = "nats://localhost:4222"
    analytics_notification_subject: str = "notification.user"
    analytics_publish_timeout_seconds: float = 1.5  # whole attempt, connection teardown included
    analytics_connect_timeout_seconds: float = 1.0

    # ===========================================
    # Lifecycle
    # ===========================================
    shutdown_settle_seconds: float = 5.0

    @classmethod
    def from_env(cls) -> 'ShippingConfig':
        """Load shipping configuration from environment variables"""
        return cls(
            service_name=os.getenv("SERVICE_NAME", "shipping_service"),
            host=os.getenv("SHIPPING_HOST", "0.0.0.0"),
            port=_int(os.getenv("SHIPPING_PORT", "9000"), 9000),

            kafka_enabled=_bool(os.getenv("SHIPPING_KAFKA_ENABLED", "true")),
            kafka_brokers=_list(os.getenv("SHIPPING_KAFKA_BROKERS", "localhost:9092")),
            kafka_client_id=os.getenv("SHIPPING_KAFKA_CLIENT_ID", "shipping-service"),
            kafka_group_id=os.getenv("SHIPPING_KAFKA_GROUP_ID", "shipping-service-dispatch"),
            dispatch_command_topic=os.getenv("SHIPPING_DISPATCH_COMMAND_TOPIC", "queue.shipping.dispatch.command"),
            fulfillment_reply_topic=os.getenv("SHIPPING_FULFILLMENT_REPLY_TOPIC", "queue.order.fulfillment.reply"),
            kafka_send_timeout_seconds=_float(os.getenv("KAFKA_SEND_TIMEOUT_SECONDS", "10"), 10.0),
            kafka_poll_timeout_ms=_int(os.getenv("KAFKA_POLL_TIMEOUT_MS", "1000"), 1000),

            dispatch_dedup_enabled=_bool(os.getenv("SHIPPING_DISPATCH_DEDUP_ENABLED", "true")),
            dispatch_dedup_capacity=_int(os.getenv("SHIPPING_DISPATCH_DEDUP_CAPACITY", "10000"), 10000),

            analytics_nats_url=os.getenv("ANALYTICS_NATS_URL", "nats://localhost:4222"),
            analytics_notification_subject=(
                os.getenv("ANALYTICS_NOTIFICATION_SUBJECT")
                or os.getenv("ANALYTICS_NOTIFICATION_TOPIC", "notification.user")
            ),
            analytics_publish_timeout_seconds=_float(os.getenv("ANALYTICS_PUBLISH_TIMEOUT_SECONDS", "1.5"), 1.5),
            analytics_connect_timeout_seconds=_float(os.getenv("ANALYTICS_CONNECT_TIMEOUT_SECONDS", "1.0"), 1.0),

            shutdown_settle_seconds=_float(os.getenv("SHIPPING_SHUTDOWN_SETTLE_SECONDS", "5"), 5.0),
        )
