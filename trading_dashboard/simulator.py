# trading_dashboard/simulator.py

import asyncio
from typing import Awaitable, Callable, List, Optional

import numpy as np

from logger import logger
from trading_dashboard.broadcaster import ConnectionManager
from trading_dashboard.events import BandDataUpdated, LogAdded, QuoteUpdated
from trading_dashboard.models import BandData, Log, QuoteData
from trading_dashboard.schemas import BandDataCreate, LogCreate, QuoteDataCreate
from trading_dashboard.store import TradingStore

LOG_LEVELS = ["Info", "Warning", "Error", "Debug"]

LOG_MESSAGES = [
    "Recalculating bands: Upper=4.62, Lower=1.24",
    "Premium spike detected, evaluating response",
    "Connected to market data feed",
    "Premium values stabilizing within range",
    "API connection refreshed",
    "Latency detected in order execution",
    "Successfully placed order with broker",
    "Order filled at requested price",
    "Account balance updated",
]

QUOTE_REFERENCE_PRICE = 4275.0
LOG_PROBABILITY = 0.3


class MarketSimulator:
    """
    Demo generator that keeps the dashboard moving without a live feed.

    Perturbs the latest band and quote rows at fixed intervals and now and
    then writes a canned log line. Every generated row goes through the store
    and is broadcast like any other change.
    """

    def __init__(
        self,
        store: TradingStore,
        manager: ConnectionManager,
        quote_symbol: str = "ES2023",
        band_interval: float = 5.0,
        quote_interval: float = 3.0,
        log_interval: float = 7.0,
        seed: Optional[int] = None,
    ):
        self.store = store
        self.manager = manager
        self.quote_symbol = quote_symbol
        self.band_interval = band_interval
        self.quote_interval = quote_interval
        self.log_interval = log_interval
        self.rng = np.random.default_rng(seed)
        self._tasks: List[asyncio.Task] = []

    def next_band_data(self) -> Optional[BandData]:
        current = self.store.get_current_band_data()
        if current is None or current.premium is None:
            return None
        variation = float(self.rng.uniform(-0.1, 0.1))
        return self.store.append_band_data(BandDataCreate(
            premium=round(current.premium + variation, 2),
            upper_band=current.upper_band,
            lower_band=current.lower_band,
            m1_close=round(4200 + float(self.rng.uniform(0, 50)), 2),
            bollinger_upper_band=round(4250 + float(self.rng.uniform(0, 20)), 2),
            bollinger_lower_band=round(4150 + float(self.rng.uniform(0, 20)), 2),
        ))

    def next_quote(self) -> Optional[QuoteData]:
        current = self.store.get_current_quote(self.quote_symbol)
        if current is None or current.price is None:
            return None
        price = round(current.price + float(self.rng.uniform(-1, 1)), 2)
        change = round((price / QUOTE_REFERENCE_PRICE - 1) * 100, 2)
        return self.store.append_quote(QuoteDataCreate(symbol=self.quote_symbol, price=price, change=change))

    def next_log(self) -> Optional[Log]:
        if self.rng.random() > LOG_PROBABILITY:
            return None
        return self.store.create_log(LogCreate(
            level=LOG_LEVELS[int(self.rng.integers(len(LOG_LEVELS)))],
            message=LOG_MESSAGES[int(self.rng.integers(len(LOG_MESSAGES)))],
        ))

    async def tick_band(self):
        band = self.next_band_data()
        if band is not None:
            await self.manager.broadcast(BandDataUpdated(data=band))

    async def tick_quote(self):
        quote = self.next_quote()
        if quote is not None:
            await self.manager.broadcast(QuoteUpdated(data=quote))

    async def tick_log(self):
        log = self.next_log()
        if log is not None:
            await self.manager.broadcast(LogAdded(data=log))

    def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._every(self.band_interval, self.tick_band, "band data")),
            asyncio.create_task(self._every(self.quote_interval, self.tick_quote, "quote data")),
            asyncio.create_task(self._every(self.log_interval, self.tick_log, "log")),
        ]
        logger.info("Market simulator started.")

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Market simulator stopped.")

    async def _every(self, interval: float, tick: Callable[[], Awaitable[None]], label: str):
        while True:
            await asyncio.sleep(interval)
            try:
                await tick()
            except Exception as e:
                logger.error(f"Error updating {label}: {e}", exc_info=True)
