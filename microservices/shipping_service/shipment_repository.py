"""
Shipment Repository

In-memory shipment store. State lives for the lifetime of the process and
is not persisted. One instance is created at startup and shared by the HTTP
layer and the dispatch command consumer.
"""

import logging
import threading
from typing import Dict, List, Optional

from .models import Shipment, new_shipment_id

logger = logging.getLogger(__name__)


class InMemoryShipmentRepository:
    """
    Keyed registry of shipment records.

    Lookups never fail: unknown ids resolve to a synthesized in-transit
    shipment so callers always get a usable view. Reads and mutations run
    under one lock, which keeps read-modify-write updates such as cancel()
    atomic even when callers are not confined to the event loop thread.
    """

    def __init__(self):
        self._shipments: Dict[str, Shipment] = {}
        self._lock = threading.RLock()
        logger.info("InMemoryShipmentRepository initialized")

    def put(self, shipment: Shipment) -> Shipment:
        """Insert or overwrite by shipment id"""
        with self._lock:
            self._shipments[shipment.shipment_id] = shipment
        logger.debug(f"Stored shipment {shipment.shipment_id} ({shipment.status.value})")
        return shipment

    def get(self, shipment_id: str) -> Shipment:
        """Stored shipment, or a default built from the id when absent (not stored)"""
        with self._lock:
            shipment = self._shipments.get(shipment_id)
        if shipment is None:
            return Shipment.placeholder(shipment_id)
        return shipment

    def list(self, order_id: Optional[str] = None) -> List[Shipment]:
        """
        List shipments in insertion order.

        Args:
            order_id: Only return shipments for this order

        Returns:
            Matching shipments. An empty store queried with a filter yields a
            single synthesized placeholder for that order.
        """
        with self._lock:
            shipments = list(self._shipments.values())

        if not shipments and order_id:
            return [Shipment.placeholder(new_shipment_id(), order_id=order_id)]

        if order_id:
            return [s for s in shipments if s.order_id == order_id]
        return shipments

    def cancel(self, shipment_id: str) -> Shipment:
        """Force CANCELLED and re-stamp cancelled_at; unknown ids are cancelled from their default"""
        with self._lock:
            existing = self.get(shipment_id)
            cancelled = existing.cancelled()
            self._shipments[shipment_id] = cancelled
        logger.info(f"Shipment {shipment_id} cancelled at {cancelled.cancelled_at}")
        return cancelled

    def count(self) -> int:
        with self._lock:
            return len(self._shipments)

    def clear(self) -> None:
        with self._lock:
            self._shipments.clear()
