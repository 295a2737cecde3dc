# trading_dashboard/deps.py

from starlette.requests import HTTPConnection

from trading_dashboard.broadcaster import ConnectionManager
from trading_dashboard.config import Settings
from trading_dashboard.persistence import SnapshotWriter
from trading_dashboard.store import TradingStore


# Dependencies resolving the collaborators owned by the running app.
# HTTPConnection covers both HTTP requests and WebSocket handshakes.

def get_store(conn: HTTPConnection) -> TradingStore:
    return conn.app.state.store


def get_manager(conn: HTTPConnection) -> ConnectionManager:
    return conn.app.state.manager


def get_snapshots(conn: HTTPConnection) -> SnapshotWriter:
    return conn.app.state.snapshots


def get_settings(conn: HTTPConnection) -> Settings:
    return conn.app.state.settings
