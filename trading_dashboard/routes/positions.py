# trading_dashboard/routes/positions.py

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from logger import logger
from trading_dashboard.broadcaster import ConnectionManager
from trading_dashboard.deps import get_manager, get_store
from trading_dashboard.errors import ApiError, InternalError, NotFoundError
from trading_dashboard.events import PositionsUpdated
from trading_dashboard.payloads import parse_body
from trading_dashboard.schemas import PositionCreate, PositionUpdate
from trading_dashboard.store import TradingStore

router = APIRouter(
    prefix="/api/positions",
    tags=["positions"]
)

# Positions are display-only: every change re-broadcasts the whole list.


@router.get("")
async def get_positions(accountId: Optional[int] = None, store: TradingStore = Depends(get_store)):
    try:
        return [position.to_wire() for position in store.get_positions(accountId)]
    except Exception as e:
        logger.error(f"Error retrieving positions: {e}", exc_info=True)
        raise InternalError("Failed to retrieve positions")


@router.post("", status_code=201)
async def create_position(
    request: Request,
    store: TradingStore = Depends(get_store),
    manager: ConnectionManager = Depends(get_manager),
):
    try:
        position = await parse_body(request, PositionCreate, "Invalid position data")
        new_position = store.create_position(position)
        await manager.broadcast(PositionsUpdated(data=store.get_positions()))
        return new_position.to_wire()
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error creating position: {e}", exc_info=True)
        raise InternalError("Failed to create position")


@router.put("/{position_id}")
async def update_position(
    position_id: int,
    request: Request,
    store: TradingStore = Depends(get_store),
    manager: ConnectionManager = Depends(get_manager),
):
    try:
        changes = await parse_body(request, PositionUpdate, "Invalid position data")
        updated_position = store.update_position(position_id, changes.model_dump(exclude_unset=True))
        if updated_position is None:
            raise NotFoundError("Position not found")
        await manager.broadcast(PositionsUpdated(data=store.get_positions()))
        return updated_position.to_wire()
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error updating position #{position_id}: {e}", exc_info=True)
        raise InternalError("Failed to update position")


@router.delete("/{position_id}", status_code=204)
async def delete_position(
    position_id: int,
    store: TradingStore = Depends(get_store),
    manager: ConnectionManager = Depends(get_manager),
):
    try:
        if not store.delete_position(position_id):
            raise NotFoundError("Position not found")
        await manager.broadcast(PositionsUpdated(data=store.get_positions()))
        return Response(status_code=204)
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error deleting position #{position_id}: {e}", exc_info=True)
        raise InternalError("Failed to delete position")
