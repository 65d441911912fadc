"""
Shipping Service Business Logic

HTTP-facing shipment operations. Create and cancel emit an analytics
notification in the background; the notification never affects the
outcome of the operation.
"""

import logging
from typing import Any, List, Optional

from .events.publishers import build_shipment_notification
from .models import CreateShipmentRequest, Shipment
from .protocols import ShipmentValidationError

logger = logging.getLogger(__name__)


class ShippingService:
    """Shipment CRUD on top of the shared shipment repository"""

    def __init__(self, repository, notification_publisher=None):
        """
        Initialize Shipping Service

        Args:
            repository: Shipment store shared with the dispatch consumer
            notification_publisher: Analytics publisher (optional)
        """
        self.repository = repository
        self.notification_publisher = notification_publisher

    async def create_shipment(self, payload: Any) -> Shipment:
        """
        Create a shipment from a POST /shipments body.

        Raises:
            ShipmentValidationError: orderId or destinationPostalCode missing or blank
        """
        request = self._validate_create_request(payload)

        shipment = Shipment.create(order_id=request.order_id)
        self.repository.put(shipment)
        logger.info(f"Created shipment {shipment.shipment_id} for order {shipment.order_id}")

        self._notify(
            shipment.shipment_id,
            "ShipmentCreated",
            f"Shipment {shipment.shipment_id} created for order {shipment.order_id}",
        )
        return shipment

    async def get_shipment(self, shipment_id: str) -> Shipment:
        return self.repository.get(shipment_id)

    async def list_shipments(self, order_id: Optional[str] = None) -> List[Shipment]:
        return self.repository.list(order_id=order_id or None)

    async def cancel_shipment(self, shipment_id: str) -> Shipment:
        shipment = self.repository.cancel(shipment_id)
        self._notify(shipment_id, "ShipmentCancelled", f"Shipment {shipment_id} cancelled")
        return shipment

    def _notify(self, shipment_id: str, title: str, body: str) -> None:
        if not self.notification_publisher:
            logger.debug(f"Notification publisher not configured, skipping {title}")
            return
        self.notification_publisher.schedule(build_shipment_notification(shipment_id, title, body))

    @staticmethod
    def _validate_create_request(payload: Any) -> CreateShipmentRequest:
        if not isinstance(payload, dict):
            payload = {}

        def _text(field: str) -> str:
            value = payload.get(field)
            text = value.strip() if isinstance(value, str) else ""
            if not text:
                raise ShipmentValidationError(f"{field} must be a non-empty string")
            return text

        order_id = _text("orderId")
        destination_postal_code = _text("destinationPostalCode")
        return CreateShipmentRequest(order_id=order_id, destination_postal_code=destination_postal_code)
