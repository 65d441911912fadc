"""
Shipping Service Factory

Factory functions for creating service instances with real dependencies.
This is the ONLY place that builds broker-backed collaborators.

Usage:
    from .factory import create_shipping_service
    service = create_shipping_service(config, repository)
"""
from typing import Optional

from core.config import ShippingConfig

from .events.handlers import DispatchCommandHandler, ProcessedCommandInbox
from .events.publishers import AnalyticsNotificationPublisher
from .shipment_repository import InMemoryShipmentRepository
from .shipping_service import ShippingService


def create_notification_publisher(config: ShippingConfig) -> AnalyticsNotificationPublisher:
    """Analytics publisher bound to the configured NATS server and subject"""
    return AnalyticsNotificationPublisher(
        nats_url=config.analytics_nats_url,
        subject=config.analytics_notification_subject,
        timeout=config.analytics_publish_timeout_seconds,
        connect_timeout=config.analytics_connect_timeout_seconds,
    )


def create_shipping_service(
    config: ShippingConfig,
    repository: Optional[InMemoryShipmentRepository] = None,
    notification_publisher=None,
) -> ShippingService:
    """
    Create ShippingService.

    Args:
        config: Shipping configuration
        repository: Shared shipment store (a new one is created if omitted)
        notification_publisher: Analytics publisher (built from config if omitted)

    Returns:
        Configured ShippingService instance
    """
    if repository is None:
        repository = InMemoryShipmentRepository()
    if notification_publisher is None:
        notification_publisher = create_notification_publisher(config)

    return ShippingService(repository=repository, notification_publisher=notification_publisher)


def create_dispatch_handler(
    config: ShippingConfig,
    repository: InMemoryShipmentRepository,
    reply_emitter,
) -> DispatchCommandHandler:
    """Dispatch handler sharing the HTTP layer's repository, with redelivery dedup per config"""
    inbox = None
    if config.dispatch_dedup_enabled:
        inbox = ProcessedCommandInbox(capacity=config.dispatch_dedup_capacity)

    return DispatchCommandHandler(repository=repository, reply_emitter=reply_emitter, inbox=inbox)
