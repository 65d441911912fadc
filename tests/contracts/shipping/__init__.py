"""
Shipping Service Contracts

Data contracts and factories for shipping_service testing.
"""

from .data_contract import (
    ShipmentViewContract,
    FulfillmentReplyContract,
    ShippingTestDataFactory,
    TRACKING_NUMBER_PATTERN,
)

__all__ = [
    "ShipmentViewContract",
    "FulfillmentReplyContract",
    "ShippingTestDataFactory",
    "TRACKING_NUMBER_PATTERN",
]
