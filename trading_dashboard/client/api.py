# trading_dashboard/client/api.py

from typing import Any, Dict, List, Optional

import requests

from logger import logger
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


class ApiClientError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class TradingApiClient:
    """
    REST client a viewer uses to request mutations and to load state.

    Mutations are sent here, not over the channel; their effects come back
    to every viewer as channel events.
    """

    def __init__(self, base_url: str, session: Optional[Any] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.session.request(method, f"{self.base_url}{path}", **kwargs)
        if response.status_code >= 400:
            try:
                message = response.json().get("message", response.text)
            except (ValueError, AttributeError):
                message = response.text
            logger.warning(f"{method} {path} failed with {response.status_code}: {message}")
            raise ApiClientError(response.status_code, message)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # Accounts

    def get_accounts(self) -> List[Account]:
        return [Account.model_validate(item) for item in self._request("GET", "/api/accounts")]

    def create_account(self, account: Dict[str, Any]) -> Account:
        return Account.model_validate(self._request("POST", "/api/accounts", json=account))

    def update_account(self, account_id: int, changes: Dict[str, Any]) -> Account:
        return Account.model_validate(self._request("PUT", f"/api/accounts/{account_id}", json=changes))

    def delete_account(self, account_id: int) -> None:
        self._request("DELETE", f"/api/accounts/{account_id}")

    # Orders

    def get_orders(self, account_id: Optional[int] = None) -> List[Order]:
        params = {"accountId": account_id} if account_id is not None else None
        return [Order.model_validate(item) for item in self._request("GET", "/api/orders", params=params)]

    def place_order(self, order: Dict[str, Any]) -> Order:
        return Order.model_validate(self._request("POST", "/api/orders", json=order))

    def update_order(self, order_id: int, changes: Dict[str, Any]) -> Order:
        return Order.model_validate(self._request("PUT", f"/api/orders/{order_id}", json=changes))

    def cancel_order(self, order_id: int) -> None:
        self._request("DELETE", f"/api/orders/{order_id}")

    # Positions

    def get_positions(self, account_id: Optional[int] = None) -> List[Position]:
        params = {"accountId": account_id} if account_id is not None else None
        return [Position.model_validate(item) for item in self._request("GET", "/api/positions", params=params)]

    # Logs

    def get_logs(self) -> List[Log]:
        return [Log.model_validate(item) for item in self._request("GET", "/api/logs")]

    def create_log(self, level: str, message: str) -> Log:
        return Log.model_validate(self._request("POST", "/api/logs", json={"level": level, "message": message}))

    # Settings

    def get_setting(self, setting_type: str) -> Optional[Any]:
        """Returns the settings blob, or None if it was never saved."""
        try:
            return self._request("GET", f"/api/settings/{setting_type}")
        except ApiClientError as e:
            if e.status_code == 404:
                return None
            raise

    def save_setting(self, setting_type: str, data: Any) -> Any:
        return self._request("POST", f"/api/settings/{setting_type}", json=data)

    def get_inputs_from_file(self) -> Dict[str, Any]:
        return self._request("GET", "/api/inputs-from-file")

    # Service status and program state

    def get_service_status(self) -> List[ServiceStatus]:
        return [ServiceStatus.model_validate(item) for item in self._request("GET", "/api/service-status")]

    def get_program_state(self) -> ProgramState:
        return ProgramState.model_validate(self._request("GET", "/api/program-state"))

    def toggle_program_state(self) -> ProgramState:
        return ProgramState.model_validate(self._request("POST", "/api/program-state/toggle"))

    # Market data

    def get_band_data(self) -> Optional[BandData]:
        data = self._request("GET", "/api/band-data")
        return BandData.model_validate(data) if data is not None else None

    def get_band_data_history(self, limit: int = 100) -> List[BandData]:
        return [BandData.model_validate(item) for item in self._request("GET", "/api/band-data/history", params={"limit": limit})]

    def get_quote(self, symbol: str) -> QuoteData:
        return QuoteData.model_validate(self._request("GET", f"/api/quote/{symbol}"))

    def get_quote_history(self, symbol: str, limit: int = 100) -> List[QuoteData]:
        return [QuoteData.model_validate(item) for item in self._request("GET", f"/api/quote/{symbol}/history", params={"limit": limit})]
