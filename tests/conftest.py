"""Pytest configuration and shared fixtures."""

import logging

import httpx
import pytest

from stakesim.analysis.projection import ProjectionConfig
from stakesim.api.beacon_client import BeaconClient

PUBKEY = "a1" * 48
CREDENTIALS_0X01 = "0x010000000000000000000000" + "d" * 40


@pytest.fixture
def capped_config():
    """32 ETH legacy validator, 4.2% APR, per-epoch compounding over 5 years."""
    return ProjectionConfig(
        initial_balance=32.0,
        credential_type="capped",
        annual_reward_rate=0.042,
        time_period_years=5,
        cadence="epoch",
    )


@pytest.fixture
def compounding_config():
    """Slightly-over-32 ETH compounding validator, yearly compounding over 1 year."""
    return ProjectionConfig(
        initial_balance=32.1,
        credential_type="compounding",
        annual_reward_rate=0.042,
        time_period_years=1,
        cadence="yearly",
    )


@pytest.fixture
def validator_payload():
    """Sample beaconcha.in /validator/{index} data block."""
    return {
        "validatorindex": 12345,
        "pubkey": "0x" + PUBKEY,
        "balance": 32012345678,
        "effectivebalance": 32000000000,
        "status": "active_online",
        "withdrawalcredentials": CREDENTIALS_0X01,
    }


@pytest.fixture
def make_client():
    """Build a BeaconClient backed by a MockTransport handler, no backoff sleeps."""
    clients = []

    def _make(handler, max_retries: int = 3, api_key: str = "") -> BeaconClient:
        client = BeaconClient(
            base_url="https://beacon.test/api/v1",
            max_retries=max_retries,
            backoff=0.0,
            delay=0.0,
            api_key=api_key,
            transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo handlers installed by setup_logging (CLI runs, logging tests)."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
