# trading_dashboard/client/viewer.py

from typing import Any, Callable, Optional

from trading_dashboard.client.api import TradingApiClient
from trading_dashboard.client.connection import (
    BackoffPolicy,
    ConnectionState,
    ReconnectingConnection,
    websocket_transport,
)
from trading_dashboard.client.mirror import TradingMirror


def channel_url(base_url: str, ws_path: str = "/trading-ws") -> str:
    """http://host:port -> ws://host:port/trading-ws"""
    if base_url.startswith("https://"):
        base_url = "wss://" + base_url[len("https://"):]
    elif base_url.startswith("http://"):
        base_url = "ws://" + base_url[len("http://"):]
    return base_url.rstrip("/") + ws_path


class TradingViewer:
    """One connected viewer: a REST client, a channel and the mirror the channel keeps current."""

    def __init__(
        self,
        base_url: str,
        ws_path: str = "/trading-ws",
        api: Optional[TradingApiClient] = None,
        connect: Callable[[str], Any] = websocket_transport,
        backoff: Optional[BackoffPolicy] = None,
        on_state_change: Optional[Callable[[ConnectionState], Any]] = None,
    ):
        self.api = api or TradingApiClient(base_url)
        self.mirror = TradingMirror()
        self.connection = ReconnectingConnection(
            channel_url(base_url, ws_path),
            on_message=self.mirror.apply,
            connect=connect,
            backoff=backoff,
            on_state_change=on_state_change,
        )

    def refresh_accounts(self) -> None:
        self.mirror.set_accounts(self.api.get_accounts())

    async def run(self) -> ConnectionState:
        return await self.connection.run()

    async def stop(self) -> None:
        await self.connection.stop()
