import asyncio

from trading_dashboard.broadcaster import ConnectionManager
from trading_dashboard.simulator import MarketSimulator
from trading_dashboard.store import TradingStore


class RecordingManager(ConnectionManager):
    def __init__(self):
        super().__init__()
        self.events = []

    async def broadcast(self, event):
        self.events.append(event)
        return 0


def seeded_simulator(seed=7):
    store = TradingStore()
    store.seed_demo_data()
    manager = RecordingManager()
    return store, manager, MarketSimulator(store, manager, seed=seed)


def test_band_rows_stay_in_range():
    store, _, simulator = seeded_simulator()
    start = store.get_current_band_data()

    for _ in range(20):
        previous = store.get_current_band_data()
        band = simulator.next_band_data()
        assert abs(band.premium - previous.premium) <= 0.1 + 0.006
        assert 4200 <= band.m1_close <= 4250
        assert 4250 <= band.bollinger_upper_band <= 4270
        assert 4150 <= band.bollinger_lower_band <= 4170
        assert band.upper_band == start.upper_band
        assert band.lower_band == start.lower_band

    assert len(store.get_band_data_history(100)) == 21


def test_quote_drifts_by_at_most_one_point():
    store, _, simulator = seeded_simulator()

    previous = store.get_current_quote("ES2023").price
    quote = simulator.next_quote()

    assert abs(quote.price - previous) <= 1 + 0.006
    assert quote.change == round((quote.price / 4275 - 1) * 100, 2)
    assert store.get_current_quote("ES2023") == quote


def test_same_seed_same_sequence():
    _, _, first = seeded_simulator(seed=42)
    _, _, second = seeded_simulator(seed=42)

    assert [first.next_quote().price for _ in range(5)] == [second.next_quote().price for _ in range(5)]


def test_ticks_broadcast_generated_rows():
    store, manager, simulator = seeded_simulator()

    async def scenario():
        await simulator.tick_band()
        await simulator.tick_quote()
        for _ in range(30):
            await simulator.tick_log()

    asyncio.run(scenario())

    types = [event.type for event in manager.events]
    assert types[:2] == ["bandDataUpdated", "quoteUpdated"]
    assert set(types[2:]) <= {"logAdded"}
    assert len(types) - 2 == len(store.get_logs())


def test_no_seed_rows_means_no_ticks():
    manager = RecordingManager()
    simulator = MarketSimulator(TradingStore(), manager, seed=1)

    asyncio.run(simulator.tick_band())
    asyncio.run(simulator.tick_quote())

    assert manager.events == []
