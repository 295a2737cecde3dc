# trading_dashboard/schemas.py

from typing import Annotated, Any, ClassVar, FrozenSet, Optional

from pydantic import BaseModel, BeforeValidator, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from trading_dashboard.codec import parse_numeric
from trading_dashboard.models import LogLevel, OrderSide, OrderStatus, SettingType


def _numeric_or_raw(value: Any) -> Any:
    # Unparsable input is passed through so pydantic reports the field error
    number = parse_numeric(value)
    return value if number is None else number


def _quantity_or_raw(value: Any) -> Any:
    number = parse_numeric(value)
    if number is not None and number.is_integer():
        return int(number)
    return value


Price = Annotated[float, BeforeValidator(_numeric_or_raw)]
Quantity = Annotated[int, BeforeValidator(_quantity_or_raw)]
Fraction = Annotated[float, BeforeValidator(_numeric_or_raw), Field(ge=0, le=1)]


class InputModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PartialUpdate(InputModel):
    """
    Base for PUT bodies: every field may be omitted, but only `NULLABLE_FIELDS` may be sent as null.
    """

    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset()

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name not in cls.NULLABLE_FIELDS:
            raise ValueError("Field may not be null")
        return value


class AccountCreate(InputModel):
    name: str
    broker: str
    api_key: str
    api_secret: str
    account_number: Optional[str] = None
    refresh_token: Optional[str] = None
    percent_to_trade: Fraction = 0.5
    active: bool = True

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Acct1",
                "broker": "IB",
                "apiKey": "k",
                "apiSecret": "s",
                "percentToTrade": 0.5,
                "active": True
            }
        }


class AccountUpdate(PartialUpdate):
    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"account_number", "refresh_token"})

    name: Optional[str] = None
    broker: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    account_number: Optional[str] = None
    refresh_token: Optional[str] = None
    percent_to_trade: Optional[Fraction] = None
    active: Optional[bool] = None


class OrderCreate(InputModel):
    account_id: int
    symbol: str
    side: OrderSide
    quantity: Quantity
    price: Price
    order_type: str
    time_in_force: str
    status: OrderStatus

    class Config:
        json_schema_extra = {
            "example": {
                "accountId": 1,
                "symbol": "ES",
                "side": "Buy",
                "quantity": 1,
                "price": 4300,
                "orderType": "Limit",
                "timeInForce": "Day",
                "status": "Working"
            }
        }


class OrderUpdate(PartialUpdate):
    account_id: Optional[int] = None
    symbol: Optional[str] = None
    side: Optional[OrderSide] = None
    quantity: Optional[Quantity] = None
    price: Optional[Price] = None
    order_type: Optional[str] = None
    time_in_force: Optional[str] = None
    status: Optional[OrderStatus] = None


class PositionCreate(InputModel):
    account_id: int
    symbol: str
    quantity: Quantity
    avg_price: Price
    pnl: Price


class PositionUpdate(PartialUpdate):
    account_id: Optional[int] = None
    symbol: Optional[str] = None
    quantity: Optional[Quantity] = None
    avg_price: Optional[Price] = None
    pnl: Optional[Price] = None


class LogCreate(InputModel):
    level: LogLevel
    message: str

    class Config:
        json_schema_extra = {
            "example": {
                "level": "Info",
                "message": "Connected to market data feed"
            }
        }


class SettingCreate(InputModel):
    type: SettingType
    data: Any = Field(...)


class ServiceStatusUpdate(InputModel):
    status: str
    details: Optional[str] = None


class BandDataCreate(InputModel):
    premium: Price
    upper_band: Price
    lower_band: Price
    m1_close: Optional[Price] = None
    bollinger_upper_band: Optional[Price] = None
    bollinger_lower_band: Optional[Price] = None

    class Config:
        json_schema_extra = {
            "example": {
                "premium": 2.43,
                "upperBand": 4.62,
                "lowerBand": 1.24
            }
        }


class QuoteDataCreate(InputModel):
    symbol: str
    price: Price
    change: Price
