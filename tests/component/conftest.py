"""
Component Test Layer Configuration

Structure:
    tests/component/
    ├── shipping_service/   Service components wired to mocked brokers
    └── mocks/              Mock implementations

Usage:
    pytest tests/component -v
    pytest tests/component -m component -v
"""
import os
import sys

import pytest

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["SHIPPING_KAFKA_ENABLED"] = "false"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tests.component.mocks import (
    MockKafkaProducer,
    MockNotificationPublisher,
    MockReplyEmitter,
)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "component: marks tests as component tests (mocked brokers)"
    )


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_reply_emitter() -> MockReplyEmitter:
    """Provide mock reply emitter"""
    return MockReplyEmitter()


@pytest.fixture
def mock_notification_publisher() -> MockNotificationPublisher:
    """Provide mock analytics publisher"""
    return MockNotificationPublisher()


@pytest.fixture
def mock_kafka_producer() -> MockKafkaProducer:
    """Provide mock Kafka producer"""
    return MockKafkaProducer()
