#!/usr/bin/env python3
"""
Core Module for the Shipping Service

Shared infrastructure used by microservices in this repository.

COMPONENTS:
    - config/: Environment-driven configuration (ShippingConfig, LoggingConfig)
    - logger.py: Process logging setup
    - kafka_client.py: kafka-python producer/consumer factories and async bridges
    - nats_client.py: One-shot NATS publishing with a hard deadline

USAGE:
    from core.config import get_settings
    from core.logger import setup_service_logger

    settings = get_settings()
    logger = setup_service_logger(settings.service_name)
"""

__version__ = "1.0.0"
