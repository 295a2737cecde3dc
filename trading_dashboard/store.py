# trading_dashboard/store.py

from collections import deque
from itertools import count
from typing import Any, Deque, Dict, List, Optional

from logger import logger
from trading_dashboard.codec import format_number
from trading_dashboard.models import (
    Account,
    BandData,
    Log,
    Order,
    Position,
    ProgramState,
    QuoteData,
    ServiceStatus,
    Setting,
    utcnow,
)
from trading_dashboard.schemas import (
    AccountCreate,
    BandDataCreate,
    LogCreate,
    OrderCreate,
    PositionCreate,
    QuoteDataCreate,
)

DEFAULT_HISTORY_LIMIT = 1000

DEFAULT_SERVICE_STATUSES = [
    ("Backend API", "Connected", "API running at http://localhost:8000"),
    ("SignalR", "Connected", "WebSocket connection established"),
    ("Market Data", "Active", "Real-time data feed operational"),
    ("Order System", "Connected", "Order routing system ready"),
]

DEMO_ACCOUNTS = [
    {"name": "Account 1", "broker": "Interactive Brokers", "apiKey": "test-key-1", "apiSecret": "test-secret-1", "active": True},
    {"name": "Account 2", "broker": "TD Ameritrade", "apiKey": "test-key-2", "apiSecret": "test-secret-2", "active": True},
]


class TradingStore:
    """
    Single in-memory source of truth for every collection the dashboard shows.

    Mutations are plain synchronous methods. All callers run on the event
    loop thread, so each call completes before another one starts.
    Nothing here validates input or raises for business reasons: unknown ids
    come back as None (or False for deletes).
    """

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self.history_limit = history_limit

        self._accounts: Dict[int, Account] = {}
        self._orders: Dict[int, Order] = {}
        self._positions: Dict[int, Position] = {}
        self._logs: Deque[Log] = deque(maxlen=history_limit)
        self._settings: Dict[str, Setting] = {}
        self._service_statuses: Dict[str, ServiceStatus] = {}
        self._band_history: Deque[BandData] = deque(maxlen=history_limit)
        self._quote_history: Dict[str, Deque[QuoteData]] = {}

        self._account_ids = count(1)
        self._order_ids = count(1)
        self._position_ids = count(1)
        self._log_ids = count(1)
        self._setting_ids = count(1)
        self._service_status_ids = count(1)
        self._band_ids = count(1)
        self._quote_ids = count(1)

        for name, status, details in DEFAULT_SERVICE_STATUSES:
            self.update_service_status(name, status, details)

        self._program_state = ProgramState(id=1, running=False, updated_at=utcnow())

    def seed_demo_data(self, include_accounts: bool = True, quote_symbol: str = "ES2023") -> None:
        """
        Populates the collections a fresh dashboard expects to see.

        Args:
            include_accounts (bool): Also create the two demo accounts.
            quote_symbol (str): Symbol of the initial quote.
        """
        if include_accounts:
            for account in DEMO_ACCOUNTS:
                self.create_account(AccountCreate.model_validate(account))
        self.append_band_data(BandDataCreate(premium=2.43, upper_band=4.62, lower_band=1.24))
        self.append_quote(QuoteDataCreate(symbol=quote_symbol, price=4287.25, change=0.25))
        logger.info("Demo data seeded.")

    # Accounts

    def get_accounts(self) -> List[Account]:
        return list(self._accounts.values())

    def get_account(self, account_id: int) -> Optional[Account]:
        return self._accounts.get(account_id)

    def create_account(self, account: AccountCreate) -> Account:
        """
        Stores a new account under the next account id.

        Args:
            account (AccountCreate): Validated account fields.

        Returns:
            Account: The stored account.
        """
        record = Account(id=next(self._account_ids), **account.model_dump())
        self._accounts[record.id] = record
        return record

    def update_account(self, account_id: int, changes: Dict[str, Any]) -> Optional[Account]:
        """
        Merges changes into an existing account.

        Args:
            account_id (int): Account id.
            changes (dict): Field name -> new value, only the fields being changed.

        Returns:
            Optional[Account]: The merged account, or None if the id is unknown.
        """
        account = self._accounts.get(account_id)
        if account is None:
            return None
        updated = account.model_copy(update=changes)
        self._accounts[account_id] = updated
        return updated

    def delete_account(self, account_id: int) -> bool:
        return self._accounts.pop(account_id, None) is not None

    # Orders

    def get_orders(self, account_id: Optional[int] = None) -> List[Order]:
        if account_id is None:
            return list(self._orders.values())
        return [order for order in self._orders.values() if order.account_id == account_id]

    def get_order(self, order_id: int) -> Optional[Order]:
        return self._orders.get(order_id)

    def create_order(self, order: OrderCreate) -> Order:
        """
        Stores a new order and records it in the log.

        Args:
            order (OrderCreate): Validated order fields.

        Returns:
            Order: The stored order, stamped with its creation time.
        """
        record = Order(id=next(self._order_ids), created_at=utcnow(), **order.model_dump())
        self._orders[record.id] = record
        self.create_log(LogCreate(
            level="Info",
            message=f"New order created: {record.side} {record.quantity} {record.symbol} @ {format_number(record.price)}",
        ))
        return record

    def update_order(self, order_id: int, changes: Dict[str, Any]) -> Optional[Order]:
        """
        Merges changes into an existing order and logs its resulting status.

        Returns:
            Optional[Order]: The merged order, or None if the id is unknown.
        """
        order = self._orders.get(order_id)
        if order is None:
            return None
        updated = order.model_copy(update=changes)
        self._orders[order_id] = updated
        self.create_log(LogCreate(level="Info", message=f"Order #{order_id} updated: {updated.status}"))
        return updated

    def delete_order(self, order_id: int) -> bool:
        order = self._orders.get(order_id)
        if order is None:
            return False
        self.create_log(LogCreate(
            level="Info",
            message=f"Order #{order_id} canceled: {order.side} {order.quantity} {order.symbol} @ {format_number(order.price)}",
        ))
        del self._orders[order_id]
        return True

    # Positions

    def get_positions(self, account_id: Optional[int] = None) -> List[Position]:
        if account_id is None:
            return list(self._positions.values())
        return [position for position in self._positions.values() if position.account_id == account_id]

    def get_position(self, position_id: int) -> Optional[Position]:
        return self._positions.get(position_id)

    def create_position(self, position: PositionCreate) -> Position:
        record = Position(id=next(self._position_ids), **position.model_dump())
        self._positions[record.id] = record
        return record

    def update_position(self, position_id: int, changes: Dict[str, Any]) -> Optional[Position]:
        position = self._positions.get(position_id)
        if position is None:
            return None
        updated = position.model_copy(update=changes)
        self._positions[position_id] = updated
        return updated

    def delete_position(self, position_id: int) -> bool:
        return self._positions.pop(position_id, None) is not None

    # Logs

    def get_logs(self, limit: Optional[int] = None) -> List[Log]:
        """
        Returns retained logs, oldest first.

        Args:
            limit (Optional[int]): Only the most recent `limit` entries.
        """
        return _tail(self._logs, limit)

    def create_log(self, log: LogCreate) -> Log:
        """
        Appends a log entry. Once the history is full the oldest entry is evicted.

        Returns:
            Log: The stored entry.
        """
        record = Log(id=next(self._log_ids), timestamp=utcnow(), **log.model_dump())
        self._logs.append(record)
        return record

    # Settings

    def get_setting(self, setting_type: str) -> Optional[Setting]:
        return self._settings.get(setting_type)

    def create_or_update_setting(self, setting_type: str, data: Any) -> Setting:
        """
        Upserts the single setting row of the given type.

        Args:
            setting_type (str): "global" or "daily".
            data (Any): Opaque settings blob, replaces the previous one.

        Returns:
            Setting: The stored row. Its id is stable across updates.
        """
        existing = self._settings.get(setting_type)
        if existing is not None:
            setting = existing.model_copy(update={"data": data})
        else:
            setting = Setting(id=next(self._setting_ids), type=setting_type, data=data)
        self._settings[setting_type] = setting
        return setting

    def get_all_settings(self) -> Dict[str, Any]:
        return {
            "global": self._settings["global"].data if "global" in self._settings else None,
            "daily": self._settings["daily"].data if "daily" in self._settings else None,
        }

    # Service status

    def get_service_statuses(self) -> List[ServiceStatus]:
        return list(self._service_statuses.values())

    def update_service_status(self, name: str, status: str, details: Optional[str] = None) -> ServiceStatus:
        """
        Upserts a service status row by name. Omitted details keep their previous value.
        """
        existing = self._service_statuses.get(name)
        if existing is not None:
            record = existing.model_copy(update={
                "status": status,
                "details": details if details is not None else existing.details,
                "updated_at": utcnow(),
            })
        else:
            record = ServiceStatus(
                id=next(self._service_status_ids),
                name=name,
                status=status,
                details=details,
                updated_at=utcnow(),
            )
        self._service_statuses[name] = record
        return record

    # Program state

    def get_program_state(self) -> ProgramState:
        return self._program_state

    def toggle_program_state(self) -> ProgramState:
        """
        Flips the running flag and logs the transition.

        Returns:
            ProgramState: The new state.
        """
        self._program_state = self._program_state.model_copy(update={
            "running": not self._program_state.running,
            "updated_at": utcnow(),
        })
        action = "started" if self._program_state.running else "stopped"
        self.create_log(LogCreate(level="Info", message=f"Program {action}"))
        return self._program_state

    # Band data

    def get_current_band_data(self) -> Optional[BandData]:
        return self._band_history[-1] if self._band_history else None

    def append_band_data(self, band: BandDataCreate) -> BandData:
        record = BandData(id=next(self._band_ids), timestamp=utcnow(), **band.model_dump())
        self._band_history.append(record)
        return record

    def get_band_data_history(self, limit: int) -> List[BandData]:
        return _tail(self._band_history, limit)

    # Quotes

    def get_current_quote(self, symbol: str) -> Optional[QuoteData]:
        quotes = self._quote_history.get(symbol)
        return quotes[-1] if quotes else None

    def append_quote(self, quote: QuoteDataCreate) -> QuoteData:
        """
        Appends a quote to its symbol's history, bounded per symbol.
        """
        record = QuoteData(id=next(self._quote_ids), timestamp=utcnow(), **quote.model_dump())
        if quote.symbol not in self._quote_history:
            self._quote_history[quote.symbol] = deque(maxlen=self.history_limit)
        self._quote_history[quote.symbol].append(record)
        return record

    def get_quote_history(self, symbol: str, limit: int) -> List[QuoteData]:
        return _tail(self._quote_history.get(symbol, ()), limit)


def _tail(items, limit: Optional[int]) -> list:
    items = list(items)
    if limit is None:
        return items
    if limit <= 0:
        return []
    return items[-limit:]
