# trading_dashboard/routes/service_status.py

from fastapi import APIRouter, Depends, Request

from logger import logger
from trading_dashboard.broadcaster import ConnectionManager
from trading_dashboard.deps import get_manager, get_store
from trading_dashboard.errors import ApiError, InternalError
from trading_dashboard.events import ServiceStatusUpdated
from trading_dashboard.payloads import parse_body
from trading_dashboard.schemas import ServiceStatusUpdate
from trading_dashboard.store import TradingStore

router = APIRouter(
    prefix="/api/service-status",
    tags=["service-status"]
)


@router.get("")
async def get_service_statuses(store: TradingStore = Depends(get_store)):
    try:
        return [status.to_wire() for status in store.get_service_statuses()]
    except Exception as e:
        logger.error(f"Error retrieving service status: {e}", exc_info=True)
        raise InternalError("Failed to retrieve service status")


@router.put("/{name}")
async def update_service_status(
    name: str,
    request: Request,
    store: TradingStore = Depends(get_store),
    manager: ConnectionManager = Depends(get_manager),
):
    """
    Upserts the status row of one service and re-broadcasts the full list.
    """
    try:
        update = await parse_body(request, ServiceStatusUpdate, "Invalid service status data")
        status = store.update_service_status(name, update.status, update.details)
        logger.info(f"Service '{name}' is now {status.status}.")
        await manager.broadcast(ServiceStatusUpdated(data=store.get_service_statuses()))
        return status.to_wire()
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error updating service status {name}: {e}", exc_info=True)
        raise InternalError("Failed to update service status")
