"""
Shipping Service Data Models

Pydantic models for shipment records and their external projection.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_CARRIER = "ACME_SHIP"


class ShipmentStatus(str, Enum):
    """Shipment lifecycle status"""
    CREATED = "CREATED"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    DELAYED = "DELAYED"
    CANCELLED = "CANCELLED"


def new_shipment_id() -> str:
    """Generate an opaque shipment identifier"""
    return str(uuid.uuid4())


def make_tracking_number(shipment_id: str) -> str:
    """Derive the tracking number from a shipment id: TRK- plus its first 12 non-dash chars, upper-cased."""
    return f"TRK-{shipment_id.replace('-', '')[:12].upper()}"


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime. Returns None when the text is not a timestamp."""
    text = value.strip() if value else ""
    if not text:
        return None
    if text[-1] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


# Core Shipment Models

class ShipmentView(BaseModel):
    """Externally visible projection of a shipment"""
    model_config = ConfigDict(populate_by_name=True)

    shipment_id: str = Field(..., alias="shipmentId")
    order_id: str = Field(..., alias="orderId")
    carrier: str
    tracking_number: str = Field(..., alias="trackingNumber")
    status: ShipmentStatus


class Shipment(BaseModel):
    """
    Shipment record owned by the shipment repository.

    The record is immutable; state changes produce a new copy. The tracking
    number is fixed when the record is first built and is never recomputed.
    """
    model_config = ConfigDict(frozen=True)

    shipment_id: str
    order_id: str
    carrier: str = DEFAULT_CARRIER
    tracking_number: str
    status: ShipmentStatus = ShipmentStatus.CREATED
    cancelled_at: Optional[str] = None

    @classmethod
    def create(
        cls,
        order_id: str,
        carrier: Optional[str] = None,
        status: ShipmentStatus = ShipmentStatus.CREATED,
        shipment_id: Optional[str] = None,
    ) -> "Shipment":
        """Build a new shipment with a fresh id and derived tracking number"""
        shipment_id = shipment_id or new_shipment_id()
        return cls(
            shipment_id=shipment_id,
            order_id=order_id,
            carrier=carrier or DEFAULT_CARRIER,
            tracking_number=make_tracking_number(shipment_id),
            status=status,
        )

    @classmethod
    def placeholder(cls, shipment_id: str, order_id: Optional[str] = None) -> "Shipment":
        """Synthesized in-transit record used when a shipment is unknown"""
        return cls.create(
            order_id=order_id or f"order-{shipment_id}",
            status=ShipmentStatus.IN_TRANSIT,
            shipment_id=shipment_id,
        )

    def cancelled(self, cancelled_at: Optional[str] = None) -> "Shipment":
        """Copy of this shipment forced to CANCELLED with a fresh cancellation stamp"""
        return self.model_copy(update={
            "status": ShipmentStatus.CANCELLED,
            "cancelled_at": cancelled_at or utc_now_iso(),
        })

    def to_view(self) -> ShipmentView:
        return ShipmentView(
            shipment_id=self.shipment_id,
            order_id=self.order_id,
            carrier=self.carrier,
            tracking_number=self.tracking_number,
            status=self.status,
        )


# Request Models

class CreateShipmentRequest(BaseModel):
    """Validated body of POST /shipments"""
    order_id: str
    destination_postal_code: str
