# trading_dashboard/models.py

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Literal, Optional

from pydantic import BaseModel, BeforeValidator
from pydantic.alias_generators import to_camel

from trading_dashboard.codec import parse_numeric


def _parse_quantity(value: Any) -> Optional[int]:
    number = parse_numeric(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


# Numeric fields may cross the wire as formatted strings; unparsable values become None
Numeric = Annotated[Optional[float], BeforeValidator(parse_numeric)]
Quantity = Annotated[Optional[int], BeforeValidator(_parse_quantity)]

OrderSide = Literal["Buy", "Sell"]
OrderStatus = Literal["Working", "Filled", "Cancelled", "Rejected"]
LogLevel = Literal["Info", "Warning", "Error", "Debug"]
SettingType = Literal["global", "daily"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WireModel(BaseModel):
    """Base for every record exchanged with viewers: camelCase on the wire, snake_case in Python."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Account(WireModel):
    id: int
    name: str
    broker: str
    api_key: str
    api_secret: str
    account_number: Optional[str] = None
    refresh_token: Optional[str] = None
    percent_to_trade: Numeric = 0.5
    active: bool = True


class Order(WireModel):
    id: int
    account_id: int
    symbol: str
    side: OrderSide
    quantity: Quantity
    price: Numeric
    order_type: str
    time_in_force: str
    status: OrderStatus
    created_at: datetime


class Position(WireModel):
    id: int
    account_id: int
    symbol: str
    quantity: Quantity
    avg_price: Numeric
    pnl: Numeric


class Log(WireModel):
    id: int
    timestamp: datetime
    level: LogLevel
    message: str


class Setting(WireModel):
    id: int
    type: SettingType
    data: Any


class ServiceStatus(WireModel):
    id: int
    name: str
    status: str
    details: Optional[str] = None
    updated_at: datetime


class ProgramState(WireModel):
    id: int
    running: bool
    updated_at: datetime


class BandData(WireModel):
    id: int
    premium: Numeric
    upper_band: Numeric
    lower_band: Numeric
    m1_close: Numeric = None
    bollinger_upper_band: Numeric = None
    bollinger_lower_band: Numeric = None
    timestamp: datetime


class QuoteData(WireModel):
    id: int
    symbol: str
    price: Numeric
    change: Numeric
    timestamp: datetime
