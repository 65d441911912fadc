"""
Shipping Service

Shipment lifecycle tracking for order fulfillment:
- HTTP shipment CRUD (main.py)
- Kafka dispatch command / fulfillment reply bridge (events/)
- Best-effort NATS analytics notifications (events/publishers.py)
"""

__version__ = "1.0.0"
