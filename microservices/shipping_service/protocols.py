"""
Shipping Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Any, List, Optional, Protocol, runtime_checkable

from .models import Shipment


# ============================================================================
# Custom Exceptions - defined here to avoid importing I/O modules
# ============================================================================

class ShippingServiceError(Exception):
    """Base exception for shipping service errors"""
    pass


class ShipmentValidationError(ShippingServiceError):
    """Client supplied an invalid shipment request"""
    pass


class InvalidDispatchCommandError(ShippingServiceError):
    """Inbound dispatch command could not be parsed or is structurally invalid"""
    pass


class ReplyEmissionError(ShippingServiceError):
    """Fulfillment reply could not be delivered to the reply topic"""
    pass


# ============================================================================
# Repository Protocol
# ============================================================================

@runtime_checkable
class ShipmentRepositoryProtocol(Protocol):
    """
    Interface for the shipment store.

    get() never reports a missing shipment; it synthesizes a placeholder.
    """

    def put(self, shipment: Shipment) -> Shipment:
        """Insert or overwrite by shipment id"""
        ...

    def get(self, shipment_id: str) -> Shipment:
        """Stored shipment or a synthesized default"""
        ...

    def list(self, order_id: Optional[str] = None) -> List[Shipment]:
        """All shipments in insertion order, optionally filtered by order"""
        ...

    def cancel(self, shipment_id: str) -> Shipment:
        """Force a shipment to CANCELLED and stamp the cancellation time"""
        ...

    def count(self) -> int:
        ...


# ============================================================================
# Messaging Protocols
# ============================================================================

@runtime_checkable
class ReplyEmitterProtocol(Protocol):
    """Publishes fulfillment replies to the durable reply topic"""

    async def send(self, reply: Any, partition_key: str) -> Any:
        """Deliver one reply; raises ReplyEmissionError on transport failure"""
        ...


@runtime_checkable
class NotificationPublisherProtocol(Protocol):
    """Best-effort analytics notification delivery; never raises"""

    async def publish(self, event: Any) -> Any:
        ...

    def schedule(self, event: Any) -> Any:
        """Start a publish without waiting for it"""
        ...

    async def drain(self) -> None:
        ...
