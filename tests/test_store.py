from trading_dashboard.schemas import (
    AccountCreate,
    BandDataCreate,
    LogCreate,
    OrderCreate,
    PositionCreate,
    QuoteDataCreate,
)
from trading_dashboard.store import TradingStore

from conftest import ORDER_PAYLOAD


def make_order(**overrides):
    return OrderCreate.model_validate({**ORDER_PAYLOAD, **overrides})


class TestBoundedHistory:
    def test_logs_keep_most_recent_entries(self):
        store = TradingStore(history_limit=1000)
        for i in range(1005):
            store.create_log(LogCreate(level="Info", message=f"entry {i}"))

        logs = store.get_logs()
        assert len(logs) == 1000
        assert logs[0].message == "entry 5"
        assert logs[-1].message == "entry 1004"

    def test_band_history_is_fifo_bounded(self):
        store = TradingStore(history_limit=10)
        for i in range(25):
            store.append_band_data(BandDataCreate(premium=i, upper_band=4.62, lower_band=1.24))

        history = store.get_band_data_history(100)
        assert len(history) == 10
        assert [band.premium for band in history] == [float(i) for i in range(15, 25)]
        assert store.get_current_band_data().premium == 24.0

    def test_quote_history_is_bounded_per_symbol(self):
        store = TradingStore(history_limit=5)
        for i in range(8):
            store.append_quote(QuoteDataCreate(symbol="ES", price=4000 + i, change=0))
        store.append_quote(QuoteDataCreate(symbol="NQ", price=15000, change=0))

        assert len(store.get_quote_history("ES", 100)) == 5
        assert store.get_quote_history("ES", 100)[0].price == 4003.0
        assert len(store.get_quote_history("NQ", 100)) == 1
        assert store.get_current_quote("ES").price == 4007.0
        assert store.get_current_quote("CL") is None
        assert store.get_quote_history("CL", 10) == []

    def test_history_limit_slices_from_the_end(self):
        store = TradingStore()
        for i in range(10):
            store.append_band_data(BandDataCreate(premium=i, upper_band=1, lower_band=0))

        assert [band.premium for band in store.get_band_data_history(3)] == [7.0, 8.0, 9.0]
        assert store.get_band_data_history(0) == []


class TestIdentity:
    def test_ids_strictly_increase_per_collection(self, store):
        first = store.create_order(make_order())
        second = store.create_order(make_order())
        store.delete_order(second.id)
        third = store.create_order(make_order())

        assert first.id < second.id < third.id
        assert third.id == 3

    def test_collections_have_independent_counters(self, store):
        account = store.create_account(AccountCreate(name="A", broker="IB", api_key="k", api_secret="s"))
        position = store.create_position(PositionCreate(account_id=1, symbol="ES", quantity=2, avg_price=4280, pnl=15))

        assert account.id == 1
        assert position.id == 1


class TestAccounts:
    def test_update_merges_fields(self, store):
        account = store.create_account(AccountCreate(name="A", broker="IB", api_key="k", api_secret="s"))
        updated = store.update_account(account.id, {"active": False, "percent_to_trade": 0.25})

        assert updated.name == "A"
        assert updated.active is False
        assert updated.percent_to_trade == 0.25
        assert store.get_account(account.id) == updated

    def test_unknown_ids_are_absent(self, store):
        assert store.get_account(42) is None
        assert store.update_account(42, {"name": "x"}) is None
        assert store.delete_account(42) is False


class TestOrders:
    def test_create_logs_the_order(self, store):
        order = store.create_order(make_order())

        assert order.created_at is not None
        assert store.get_logs()[-1].message == "New order created: Buy 1 ES @ 4300"
        assert store.get_logs()[-1].level == "Info"

    def test_update_logs_new_status(self, store):
        order = store.create_order(make_order())
        updated = store.update_order(order.id, {"status": "Filled"})

        assert updated.status == "Filled"
        assert updated.created_at == order.created_at
        assert store.get_logs()[-1].message == f"Order #{order.id} updated: Filled"

    def test_delete_logs_before_removal(self, store):
        order = store.create_order(make_order(price=4287.25, side="Sell", quantity=2))

        assert store.delete_order(order.id) is True
        assert store.get_order(order.id) is None
        assert store.get_logs()[-1].message == f"Order #{order.id} canceled: Sell 2 ES @ 4287.25"

    def test_delete_unknown_order_adds_no_log(self, store):
        before = len(store.get_logs())
        assert store.delete_order(999999) is False
        assert len(store.get_logs()) == before

    def test_filter_by_account(self, store):
        store.create_order(make_order(accountId=1))
        store.create_order(make_order(accountId=2))
        store.create_order(make_order(accountId=1))

        assert [order.id for order in store.get_orders(1)] == [1, 3]
        assert len(store.get_orders()) == 3


class TestPositions:
    def test_crud_and_account_filter(self, store):
        first = store.create_position(PositionCreate(account_id=1, symbol="ES", quantity=2, avg_price=4280, pnl=15))
        store.create_position(PositionCreate(account_id=2, symbol="NQ", quantity=1, avg_price=15000, pnl=-40))

        assert [p.symbol for p in store.get_positions(account_id=1)] == ["ES"]
        assert store.update_position(first.id, {"pnl": 25}).pnl == 25
        assert store.get_position(first.id).pnl == 25
        assert store.delete_position(first.id) is True
        assert store.get_position(first.id) is None
        assert store.delete_position(first.id) is False


class TestSettings:
    def test_upsert_keeps_single_row(self, store):
        data = {"futureSymbol": "ES", "contractSize": 50}
        first = store.create_or_update_setting("global", data)
        second = store.create_or_update_setting("global", data)

        assert first.id == second.id
        assert store.get_setting("global").data == data
        assert store.get_all_settings() == {"global": data, "daily": None}


class TestServiceStatus:
    def test_defaults_are_seeded(self, store):
        names = [status.name for status in store.get_service_statuses()]
        assert names == ["Backend API", "SignalR", "Market Data", "Order System"]

    def test_update_keeps_details_when_omitted(self, store):
        before = {s.name: s for s in store.get_service_statuses()}["Market Data"]
        updated = store.update_service_status("Market Data", "Warning")

        assert updated.id == before.id
        assert updated.status == "Warning"
        assert updated.details == before.details
        assert updated.updated_at >= before.updated_at

    def test_empty_details_clear_previous_value(self, store):
        updated = store.update_service_status("Market Data", "Stopped", "")
        assert updated.details == ""
        assert store.update_service_status("Market Data", "Active").details == ""

    def test_new_service_keeps_empty_details(self, store):
        assert store.update_service_status("Broker Bridge", "Disconnected", "").details == ""

    def test_update_creates_unknown_service(self, store):
        status = store.update_service_status("Broker Bridge", "Disconnected")
        assert status.id == 5
        assert status.details is None


class TestProgramState:
    def test_toggle_twice_restores_state_and_logs_each_call(self, store):
        original = store.get_program_state().running
        logs_before = len(store.get_logs())

        first = store.toggle_program_state()
        second = store.toggle_program_state()

        assert first.running is (not original)
        assert second.running is original
        assert second.id == first.id
        messages = [log.message for log in store.get_logs()[logs_before:]]
        assert messages == ["Program started", "Program stopped"]


class TestSeedData:
    def test_demo_data(self):
        store = TradingStore()
        store.seed_demo_data(quote_symbol="ES2023")

        assert [account.name for account in store.get_accounts()] == ["Account 1", "Account 2"]
        assert store.get_current_band_data().premium == 2.43
        assert store.get_current_quote("ES2023").price == 4287.25

    def test_demo_data_without_accounts(self):
        store = TradingStore()
        store.seed_demo_data(include_accounts=False)

        assert store.get_accounts() == []
