"""
Shipping Service Event Models

Pydantic models for the messages the shipping service consumes and emits.
Wire format is camelCase JSON.
"""

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models import utc_now_iso


INVALID_REQUESTED_AT = "Invalid requestedAt"


# =============================================================================
# Channel Definitions
# =============================================================================

class ShippingChannels:
    """Default channel names for shipping_service"""
    DISPATCH_COMMAND_TOPIC = "queue.shipping.dispatch.command"
    FULFILLMENT_REPLY_TOPIC = "queue.order.fulfillment.reply"
    ANALYTICS_NOTIFICATION_SUBJECT = "notification.user"
    CONSUMER_GROUP = "shipping-service-dispatch"


class ReplyStatus(str, Enum):
    """Outcome reported back to the fulfillment partner"""
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    PARTIAL = "PARTIAL"


class NotificationPriority(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"


# =============================================================================
# Event Data Models
# =============================================================================

class DispatchCommandEvent(BaseModel):
    """
    Inbound request to ship an order.

    Strict: all five fields must be present under their camelCase names and
    be strings. Snake_case spellings count as unknown keys, which are ignored.
    """
    model_config = ConfigDict(strict=True, extra="ignore")

    message_id: str = Field(..., alias="messageId")
    request_id: str = Field(..., alias="requestId")
    order_id: str = Field(..., alias="orderId")
    carrier: str
    requested_at: str = Field(..., alias="requestedAt")


class FulfillmentReplyEvent(BaseModel):
    """Decision for one dispatch command, correlated by requestId"""
    model_config = ConfigDict(populate_by_name=True)

    message_id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="messageId")
    request_id: str = Field(..., alias="requestId")
    order_id: str = Field(..., alias="orderId")
    status: ReplyStatus
    replied_at: str = Field(default_factory=utc_now_iso, alias="repliedAt")
    tracking_id: Optional[str] = Field(None, alias="trackingId")
    rejection_reason: Optional[str] = Field(None, alias="rejectionReason")

    def to_json(self) -> bytes:
        """Wire encoding; absent optional fields are omitted rather than null"""
        return self.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")


class AnalyticsNotificationEvent(BaseModel):
    """Advisory state-change record for the analytics subscriber"""
    model_config = ConfigDict(populate_by_name=True)

    notification_id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="notificationId")
    request_id: str = Field(..., alias="requestId")
    title: str
    body: str
    priority: NotificationPriority = NotificationPriority.NORMAL

    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")
