# trading_dashboard/routes/logs.py

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from logger import logger
from trading_dashboard.broadcaster import ConnectionManager
from trading_dashboard.deps import get_manager, get_store
from trading_dashboard.errors import ApiError, InternalError
from trading_dashboard.events import LogAdded
from trading_dashboard.payloads import parse_body
from trading_dashboard.schemas import LogCreate
from trading_dashboard.store import TradingStore

router = APIRouter(
    prefix="/api/logs",
    tags=["logs"]
)


@router.get("")
async def get_logs(limit: Optional[int] = Query(None, ge=1), store: TradingStore = Depends(get_store)):
    """
    Returns retained log entries, oldest first. Without `limit` the whole bounded history is returned.
    """
    try:
        return [log.to_wire() for log in store.get_logs(limit)]
    except Exception as e:
        logger.error(f"Error retrieving logs: {e}", exc_info=True)
        raise InternalError("Failed to retrieve logs")


@router.post("", status_code=201)
async def create_log(
    request: Request,
    store: TradingStore = Depends(get_store),
    manager: ConnectionManager = Depends(get_manager),
):
    try:
        log = await parse_body(request, LogCreate, "Invalid log data")
        new_log = store.create_log(log)
        await manager.broadcast(LogAdded(data=new_log))
        return new_log.to_wire()
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error creating log: {e}", exc_info=True)
        raise InternalError("Failed to create log")
