"""
Pytest configuration and shared fixtures for the Aevo connector tests.

Provides the quiet test logging setup, a throwaway signing account and
fake websocket connections that stand in for the network.
"""

import os
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

# Configure test environment
os.environ['ENVIRONMENT'] = 'test'

from eth_account import Account

from config.environments import AevoEnvironment, get_environment_config
from config.structs import AevoCredentials, WebSocketConfig
from infrastructure.logging.factory import LoggerFactory
from infrastructure.logging.structs import LoggingConfig
from fakes import FakeConnection, FakeConnector

TEST_SIGNING_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Set up test-appropriate logging configuration."""
    LoggerFactory.configure(LoggingConfig.default_test())
    yield
    LoggerFactory.clear_cache()


@pytest.fixture
def test_account():
    return Account.from_key(TEST_SIGNING_KEY)


@pytest.fixture
def credentials(test_account):
    """Full credential set: signing pair plus API pair."""
    return AevoCredentials(
        signing_key=TEST_SIGNING_KEY,
        wallet_address=test_account.address,
        api_key="test-api-key",
        api_secret="test-api-secret",
    )


@pytest.fixture
def testnet_config():
    return get_environment_config(AevoEnvironment.TESTNET)


@pytest.fixture
def ws_config():
    """Short timeouts so failing tests fail fast."""
    return WebSocketConfig(close_timeout=0.5, reconnect_delay=0.01)


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def connector(connection):
    return FakeConnector(connection)
