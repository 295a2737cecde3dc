# trading_dashboard/client/mirror.py

import json
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from logger import logger
from trading_dashboard.events import EVENT_TYPES, decode_event
from trading_dashboard.models import (
    Account,
    BandData,
    Log,
    Order,
    Position,
    ProgramState,
    QuoteData,
    ServiceStatus,
)

DEFAULT_MIRROR_LIMIT = 1000


class TradingMirror:
    """
    A viewer's local copy of every collection, kept current by channel events.

    Snapshot/list events replace a collection, single-entity updates upsert by
    id, add events on bounded histories append and keep the newest entries,
    delete events remove by id.
    """

    def __init__(self, history_limit: int = DEFAULT_MIRROR_LIMIT):
        self.accounts: List[Account] = []
        self.orders: List[Order] = []
        self.positions: List[Position] = []
        self.logs: Deque[Log] = deque(maxlen=history_limit)
        self.service_statuses: List[ServiceStatus] = []
        self.band_data: Optional[BandData] = None
        self.band_history: Deque[BandData] = deque(maxlen=history_limit)
        self.quote: Optional[QuoteData] = None
        self.program_state: Optional[ProgramState] = None
        self.settings: Dict[str, Any] = {}

        self._handlers: Dict[str, Callable[[Any], None]] = {
            "bandDataUpdated": self._on_band_data_updated,
            "positionsUpdated": self._on_positions_updated,
            "ordersUpdated": self._on_orders_updated,
            "orderAdded": self._on_order_upserted,
            "orderUpdated": self._on_order_upserted,
            "orderDeleted": self._on_order_deleted,
            "serviceStatusUpdated": self._on_service_status_updated,
            "logAdded": self._on_log_added,
            "logsUpdated": self._on_logs_updated,
            "programStateUpdated": self._on_program_state_updated,
            "quoteUpdated": self._on_quote_updated,
            "settingUpdated": self._on_setting_updated,
        }
        missing = EVENT_TYPES - self._handlers.keys()
        if missing:
            raise RuntimeError(f"No mirror handler for event types: {sorted(missing)}")

    @property
    def program_running(self) -> bool:
        return bool(self.program_state and self.program_state.running)

    def apply(self, frame: Union[str, bytes, Dict[str, Any]]) -> bool:
        """
        Applies one channel frame.

        Returns:
            bool: True if the frame changed local state. Malformed frames and
            unknown event types are logged and ignored.
        """
        if isinstance(frame, (str, bytes)):
            try:
                frame = json.loads(frame)
            except ValueError as e:
                logger.warning(f"Dropping unparsable frame: {e}")
                return False
        if not isinstance(frame, dict):
            logger.warning(f"Dropping frame that is not an object: {type(frame).__name__}")
            return False

        event_type = frame.get("type")
        if event_type not in self._handlers:
            logger.info(f"Ignoring unknown event type {event_type!r}")
            return False

        try:
            event = decode_event(frame)
        except PydanticValidationError as e:
            logger.warning(f"Dropping malformed {event_type} event: {e.error_count()} error(s)")
            return False

        self._handlers[event.type](event.data)
        return True

    def set_accounts(self, accounts: List[Account]) -> None:
        # Accounts are not pushed over the channel; callers refresh them over REST
        self.accounts = list(accounts)

    def _on_band_data_updated(self, band: BandData) -> None:
        self.band_data = band
        self.band_history.append(band)

    def _on_positions_updated(self, positions: List[Position]) -> None:
        self.positions = list(positions)

    def _on_orders_updated(self, orders: List[Order]) -> None:
        self.orders = list(orders)

    def _on_order_upserted(self, order: Order) -> None:
        for index, existing in enumerate(self.orders):
            if existing.id == order.id:
                self.orders[index] = order
                return
        self.orders.append(order)

    def _on_order_deleted(self, ref) -> None:
        self.orders = [order for order in self.orders if order.id != ref.id]

    def _on_service_status_updated(self, statuses: List[ServiceStatus]) -> None:
        self.service_statuses = list(statuses)

    def _on_log_added(self, log: Log) -> None:
        self.logs.append(log)

    def _on_logs_updated(self, logs: List[Log]) -> None:
        self.logs.clear()
        self.logs.extend(logs)

    def _on_program_state_updated(self, state: ProgramState) -> None:
        self.program_state = state

    def _on_quote_updated(self, quote: QuoteData) -> None:
        self.quote = quote

    def _on_setting_updated(self, payload) -> None:
        self.settings[payload.type] = payload.data
