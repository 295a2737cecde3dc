# trading_dashboard/broadcaster.py

from typing import List

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from logger import logger
from trading_dashboard.events import (
    BandDataUpdated,
    LogsUpdated,
    OrdersUpdated,
    PositionsUpdated,
    ProgramStateUpdated,
    QuoteUpdated,
    ServiceStatusUpdated,
    encode_event,
)
from trading_dashboard.models import WireModel
from trading_dashboard.store import TradingStore


class ConnectionManager:
    """Tracks open trading channels and fans events out to them."""

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"Trading channel client connected ({len(self.active_connections)} open).")

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(f"Trading channel client disconnected ({len(self.active_connections)} open).")

    async def send(self, websocket: WebSocket, event: WireModel) -> bool:
        """
        Pushes one event to one channel. A channel that is not open simply misses it.

        Returns:
            bool: True if the frame was handed to the transport.
        """
        if websocket.application_state != WebSocketState.CONNECTED:
            return False
        try:
            await websocket.send_json(encode_event(event))
            return True
        except Exception as e:
            logger.warning(f"Dropping {event.type} for a closed channel: {e}")
            self.disconnect(websocket)
            return False

    async def broadcast(self, event: WireModel) -> int:
        """
        Sends an event to every open channel. Best effort, no retry, no replay.

        Returns:
            int: Number of channels the event was delivered to.
        """
        delivered = 0
        for connection in list(self.active_connections):
            if await self.send(connection, event):
                delivered += 1
        logger.debug(f"Broadcast {event.type} to {delivered} channel(s).")
        return delivered


async def send_initial_data(websocket: WebSocket, store: TradingStore, manager: ConnectionManager, quote_symbol: str):
    """
    Brings a freshly connected viewer up to date.

    Pushes one snapshot event per collection, in a fixed order. Collections
    with nothing to show (no band data, no quote for the symbol) are skipped.
    """
    band_data = store.get_current_band_data()
    if band_data is not None:
        await manager.send(websocket, BandDataUpdated(data=band_data))

    await manager.send(websocket, PositionsUpdated(data=store.get_positions()))
    await manager.send(websocket, OrdersUpdated(data=store.get_orders()))
    await manager.send(websocket, ServiceStatusUpdated(data=store.get_service_statuses()))
    await manager.send(websocket, LogsUpdated(data=store.get_logs()))
    await manager.send(websocket, ProgramStateUpdated(data=store.get_program_state()))

    quote = store.get_current_quote(quote_symbol)
    if quote is not None:
        await manager.send(websocket, QuoteUpdated(data=quote))
