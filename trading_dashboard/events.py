# trading_dashboard/events.py

"""
Typed envelopes pushed over the trading channel.

Every server -> viewer frame is ``{"type": ..., "data": ...}``. The set of
types is closed: ``ServerEvent`` is a discriminated union over the classes
below, so a frame either decodes into exactly one of them or is rejected.
"""

import json
from typing import Annotated, Any, Dict, List, Literal, Union, get_args

from pydantic import BaseModel, Field, TypeAdapter

from trading_dashboard.models import (
    BandData,
    Log,
    Order,
    Position,
    ProgramState,
    QuoteData,
    ServiceStatus,
    SettingType,
    WireModel,
)


class DeletedRef(WireModel):
    id: int


class SettingPayload(WireModel):
    type: SettingType
    data: Any


class BandDataUpdated(WireModel):
    type: Literal["bandDataUpdated"] = "bandDataUpdated"
    data: BandData


class PositionsUpdated(WireModel):
    type: Literal["positionsUpdated"] = "positionsUpdated"
    data: List[Position]


class OrdersUpdated(WireModel):
    type: Literal["ordersUpdated"] = "ordersUpdated"
    data: List[Order]


class OrderAdded(WireModel):
    type: Literal["orderAdded"] = "orderAdded"
    data: Order


class OrderUpdated(WireModel):
    type: Literal["orderUpdated"] = "orderUpdated"
    data: Order


class OrderDeleted(WireModel):
    type: Literal["orderDeleted"] = "orderDeleted"
    data: DeletedRef


class ServiceStatusUpdated(WireModel):
    type: Literal["serviceStatusUpdated"] = "serviceStatusUpdated"
    data: List[ServiceStatus]


class LogAdded(WireModel):
    type: Literal["logAdded"] = "logAdded"
    data: Log


class LogsUpdated(WireModel):
    type: Literal["logsUpdated"] = "logsUpdated"
    data: List[Log]


class ProgramStateUpdated(WireModel):
    type: Literal["programStateUpdated"] = "programStateUpdated"
    data: ProgramState


class QuoteUpdated(WireModel):
    type: Literal["quoteUpdated"] = "quoteUpdated"
    data: QuoteData


class SettingUpdated(WireModel):
    type: Literal["settingUpdated"] = "settingUpdated"
    data: SettingPayload


ServerEvent = Annotated[
    Union[
        BandDataUpdated,
        PositionsUpdated,
        OrdersUpdated,
        OrderAdded,
        OrderUpdated,
        OrderDeleted,
        ServiceStatusUpdated,
        LogAdded,
        LogsUpdated,
        ProgramStateUpdated,
        QuoteUpdated,
        SettingUpdated,
    ],
    Field(discriminator="type"),
]

EVENT_TYPES = frozenset(
    cls.model_fields["type"].default
    for cls in get_args(get_args(ServerEvent)[0])
)

_server_event_adapter = TypeAdapter(ServerEvent)


# Viewer -> server. The only message the channel accepts.
TOGGLE_PROGRAM_STATE = "toggleProgramState"


class ToggleProgramState(BaseModel):
    type: Literal["toggleProgramState"] = TOGGLE_PROGRAM_STATE


def encode_event(event: WireModel) -> Dict[str, Any]:
    return event.to_wire()


def decode_event(frame: Union[str, bytes, Dict[str, Any]]) -> ServerEvent:
    """
    Decodes one frame into its event class.

    Raises:
        ValueError: malformed JSON.
        pydantic.ValidationError: unknown type or payload that does not match it.
    """
    if isinstance(frame, (str, bytes)):
        frame = json.loads(frame)
    return _server_event_adapter.validate_python(frame)
