# trading_dashboard/routes/channel.py

import json
from typing import Optional

from fastapi import WebSocket, WebSocketDisconnect

from logger import logger
from trading_dashboard.broadcaster import send_initial_data
from trading_dashboard.events import TOGGLE_PROGRAM_STATE
from trading_dashboard.routes.program_state import toggle_and_broadcast


async def handle_client_message(websocket: WebSocket, raw: str):
    """
    Handles one viewer -> server frame. Bad frames are logged and dropped; the channel stays open.
    """
    state = websocket.app.state
    try:
        message = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Dropping malformed frame from trading channel: {e}")
        return

    message_type = message.get("type") if isinstance(message, dict) else None
    if message_type == TOGGLE_PROGRAM_STATE:
        await toggle_and_broadcast(state.store, state.manager, state.snapshots)
    else:
        logger.warning(f"Ignoring unsupported trading channel message type: {message_type!r}")


def frame_text(message: dict) -> Optional[str]:
    """
    Text of one received frame. Binary frames are decoded as UTF-8; undecodable frames are logged and dropped.
    """
    if message.get("text") is not None:
        return message["text"]
    data = message.get("bytes")
    if data is None:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(f"Dropping undecodable binary frame from trading channel: {e}")
        return None


async def trading_channel(websocket: WebSocket):
    """
    Duplex channel: bootstrap snapshot on open, then change events until the viewer leaves.
    """
    state = websocket.app.state
    manager = state.manager
    await manager.connect(websocket)
    try:
        await send_initial_data(websocket, state.store, manager, state.settings.default_quote_symbol)
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(f"Trading channel closed by viewer (code {message.get('code')}).")
                break
            raw = frame_text(message)
            if raw is None:
                continue
            try:
                await handle_client_message(websocket, raw)
            except Exception as e:
                logger.error(f"Error handling trading channel message: {e}", exc_info=True)
    except WebSocketDisconnect as e:
        logger.info(f"Trading channel closed by viewer (code {e.code}).")
    finally:
        manager.disconnect(websocket)
