# trading_dashboard/client/connection.py

"""
Viewer side of the trading channel.

`ReconnectingConnection` owns one duplex channel and walks it through

    CONNECTING -> OPEN -> (CLOSED -> RECONNECTING)* -> OPEN | FAILED

Any transport error is treated like a close. After a close the next attempt
is delayed by the backoff policy; once `max_attempts` reconnects in a row
have failed the connection gives up and stays FAILED.
"""

import asyncio
import contextlib
import json
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Dict, Optional

import websockets

from logger import logger
from trading_dashboard.events import ToggleProgramState


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    RECONNECTING = "reconnecting"
    FAILED = "failed"


@dataclass(frozen=True)
class BackoffPolicy:
    base: float = 1.0
    cap: float = 30.0
    max_attempts: int = 10

    def delay(self, attempt: int) -> float:
        """Seconds to wait before reconnect attempt number `attempt` (0-based)."""
        return min(self.cap, (2 ** attempt) * self.base)


async def websocket_transport(url: str):
    return await websockets.connect(url)


class ReconnectingConnection:
    def __init__(
        self,
        url: str,
        on_message: Callable[[str], Any],
        connect: Callable[[str], Awaitable[Any]] = websocket_transport,
        backoff: Optional[BackoffPolicy] = None,
        on_state_change: Optional[Callable[[ConnectionState], Any]] = None,
    ):
        self.url = url
        self.on_message = on_message
        self.backoff = backoff or BackoffPolicy()
        self.on_state_change = on_state_change
        self.attempts = 0
        self._connect = connect
        self._state = ConnectionState.CONNECTING
        self._transport = None
        self._outbox: Deque[str] = deque()
        self._stopped = False
        self._stop_event = asyncio.Event()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def pending_messages(self) -> int:
        return len(self._outbox)

    def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return
        logger.debug(f"Trading channel {self._state.value} -> {state.value}")
        self._state = state
        if self.on_state_change is not None:
            self.on_state_change(state)

    async def run(self) -> ConnectionState:
        """
        Connects and keeps the channel alive until `stop()` or until reconnects are exhausted.

        Returns:
            ConnectionState: CLOSED after stop(), FAILED after giving up.
        """
        self._set_state(ConnectionState.CONNECTING)
        while not self._stopped:
            await self._connect_and_pump()
            if self._stopped:
                break
            self._set_state(ConnectionState.CLOSED)
            if self.attempts >= self.backoff.max_attempts:
                logger.error(f"Trading channel gave up after {self.attempts} reconnect attempts.")
                self._set_state(ConnectionState.FAILED)
                return self._state
            delay = self.backoff.delay(self.attempts)
            self.attempts += 1
            self._set_state(ConnectionState.RECONNECTING)
            logger.info(f"Reconnecting to trading channel in {delay:.1f}s (attempt {self.attempts}/{self.backoff.max_attempts}).")
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        self._set_state(ConnectionState.CLOSED)
        return self._state

    async def stop(self) -> None:
        self._stopped = True
        self._stop_event.set()
        transport = self._transport
        if transport is not None:
            with contextlib.suppress(Exception):
                await transport.close()

    async def send(self, message: Dict[str, Any]) -> bool:
        """
        Sends a message now if the channel is open, otherwise queues it for the next open.

        Returns:
            bool: True if it was sent immediately.
        """
        frame = json.dumps(message)
        if self._state == ConnectionState.OPEN and self._transport is not None:
            try:
                await self._transport.send(frame)
                return True
            except Exception as e:
                logger.warning(f"Send failed, queueing for next open: {e}")
        self._outbox.append(frame)
        return False

    async def request_toggle_program_state(self) -> bool:
        return await self.send(ToggleProgramState().model_dump())

    async def _connect_and_pump(self) -> None:
        try:
            transport = await self._connect(self.url)
        except Exception as e:
            logger.warning(f"Trading channel connect to {self.url} failed: {e}")
            return

        self._transport = transport
        self.attempts = 0
        self._set_state(ConnectionState.OPEN)
        logger.info(f"Trading channel open at {self.url}.")
        try:
            await self._flush_outbox()
            async for frame in transport:
                self._dispatch(frame)
        except Exception as e:
            logger.warning(f"Trading channel transport error, treating as close: {e}")
        finally:
            self._transport = None
            with contextlib.suppress(Exception):
                await transport.close()

    async def _flush_outbox(self) -> None:
        while self._outbox:
            await self._transport.send(self._outbox[0])
            self._outbox.popleft()

    def _dispatch(self, frame: Any) -> None:
        try:
            self.on_message(frame)
        except Exception as e:
            logger.error(f"Error applying trading channel frame: {e}", exc_info=True)
