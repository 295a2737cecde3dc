"""
Pytest configuration and shared fixtures for the trading dashboard tests.
"""

import pytest
from fastapi.testclient import TestClient

from trading_dashboard.config import Settings
from trading_dashboard.main import create_app
from trading_dashboard.store import TradingStore

WS_PATH = "/trading-ws"

BOOTSTRAP_TYPES = [
    "bandDataUpdated",
    "positionsUpdated",
    "ordersUpdated",
    "serviceStatusUpdated",
    "logsUpdated",
    "programStateUpdated",
    "quoteUpdated",
]

ORDER_PAYLOAD = {
    "accountId": 1,
    "symbol": "ES",
    "side": "Buy",
    "quantity": 1,
    "price": 4300,
    "orderType": "Limit",
    "timeInForce": "Day",
    "status": "Working",
}


@pytest.fixture
def settings(tmp_path):
    """Isolated settings: snapshots in a temp folder, no background generator."""
    return Settings(
        config_folder=str(tmp_path / "config"),
        simulate_updates=False,
        simulator_seed=7,
        ws_path=WS_PATH,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def store():
    return TradingStore(history_limit=1000)


def drain_bootstrap(ws, expected=BOOTSTRAP_TYPES):
    """Reads the handshake frames and returns them keyed by type."""
    frames = [ws.receive_json() for _ in expected]
    assert [frame["type"] for frame in frames] == list(expected)
    return {frame["type"]: frame["data"] for frame in frames}
