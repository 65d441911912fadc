"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - component/: Component tests (mocked Kafka, NATS and HTTP transport)
    - unit/     : Unit tests (pure functions, no I/O)
"""
import os
import sys

import pytest

# Set testing environment BEFORE any project imports
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("SHIPPING_KAFKA_ENABLED", "false")

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from core.config import ShippingConfig
from microservices.shipping_service.shipment_repository import InMemoryShipmentRepository
from tests.contracts.shipping.data_contract import ShippingTestDataFactory


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def factory() -> ShippingTestDataFactory:
    """Provide the shipping test data factory"""
    return ShippingTestDataFactory()


@pytest.fixture
def repository() -> InMemoryShipmentRepository:
    """Fresh, empty shipment store"""
    return InMemoryShipmentRepository()


@pytest.fixture
def shipping_config() -> ShippingConfig:
    """Settings with Kafka off and short notification timeouts"""
    return ShippingConfig(
        kafka_enabled=False,
        analytics_nats_url="nats://127.0.0.1:4222",
        analytics_publish_timeout_seconds=0.3,
        analytics_connect_timeout_seconds=0.2,
        shutdown_settle_seconds=1.0,
    )
