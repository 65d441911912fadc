"""
Shipping Service Events Module

Exports all event-related functionality for shipping service
"""

from .models import (
    INVALID_REQUESTED_AT,
    ShippingChannels,
    ReplyStatus,
    NotificationPriority,
    DispatchCommandEvent,
    FulfillmentReplyEvent,
    AnalyticsNotificationEvent,
)

from .publishers import (
    FulfillmentReplyEmitter,
    AnalyticsNotificationPublisher,
    build_shipment_notification,
)

from .handlers import (
    DispatchOutcome,
    ProcessedCommandInbox,
    DispatchCommandHandler,
    DispatchCommandConsumer,
    parse_dispatch_command,
    decide_dispatch,
)

__all__ = [
    # Channels and enums
    "INVALID_REQUESTED_AT",
    "ShippingChannels",
    "ReplyStatus",
    "NotificationPriority",
    # Event Models
    "DispatchCommandEvent",
    "FulfillmentReplyEvent",
    "AnalyticsNotificationEvent",
    # Publishers
    "FulfillmentReplyEmitter",
    "AnalyticsNotificationPublisher",
    "build_shipment_notification",
    # Handlers
    "DispatchOutcome",
    "ProcessedCommandInbox",
    "DispatchCommandHandler",
    "DispatchCommandConsumer",
    "parse_dispatch_command",
    "decide_dispatch",
]
