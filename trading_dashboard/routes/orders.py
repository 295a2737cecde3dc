# trading_dashboard/routes/orders.py

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from logger import logger
from trading_dashboard.broadcaster import ConnectionManager
from trading_dashboard.deps import get_manager, get_store
from trading_dashboard.errors import ApiError, InternalError, NotFoundError
from trading_dashboard.events import DeletedRef, OrderAdded, OrderDeleted, OrderUpdated
from trading_dashboard.payloads import parse_body
from trading_dashboard.schemas import OrderCreate, OrderUpdate
from trading_dashboard.store import TradingStore

router = APIRouter(
    prefix="/api/orders",
    tags=["orders"]
)


@router.get("")
async def get_orders(accountId: Optional[int] = None, store: TradingStore = Depends(get_store)):
    """
    Lists orders, optionally only those of one account.
    """
    try:
        return [order.to_wire() for order in store.get_orders(accountId)]
    except Exception as e:
        logger.error(f"Error retrieving orders: {e}", exc_info=True)
        raise InternalError("Failed to retrieve orders")


@router.post("", status_code=201)
async def create_order(
    request: Request,
    store: TradingStore = Depends(get_store),
    manager: ConnectionManager = Depends(get_manager),
):
    """
    Records a manual order and pushes it to every viewer as `orderAdded`.
    """
    try:
        order = await parse_body(request, OrderCreate, "Invalid order data")
        new_order = store.create_order(order)
        logger.info(f"Received Order Data: #{new_order.id} {new_order.side} {new_order.quantity} {new_order.symbol}")
        await manager.broadcast(OrderAdded(data=new_order))
        return new_order.to_wire()
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error creating order: {e}", exc_info=True)
        raise InternalError("Failed to create order")


@router.put("/{order_id}")
async def update_order(
    order_id: int,
    request: Request,
    store: TradingStore = Depends(get_store),
    manager: ConnectionManager = Depends(get_manager),
):
    try:
        changes = await parse_body(request, OrderUpdate, "Invalid order data")
        updated_order = store.update_order(order_id, changes.model_dump(exclude_unset=True))
        if updated_order is None:
            logger.warning(f"Order #{order_id} not found.")
            raise NotFoundError("Order not found")
        await manager.broadcast(OrderUpdated(data=updated_order))
        return updated_order.to_wire()
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error updating order #{order_id}: {e}", exc_info=True)
        raise InternalError("Failed to update order")


@router.delete("/{order_id}", status_code=204)
async def delete_order(
    order_id: int,
    store: TradingStore = Depends(get_store),
    manager: ConnectionManager = Depends(get_manager),
):
    """
    Cancels (removes) an order. Unknown ids are a 404 and nothing is broadcast.
    """
    try:
        if not store.delete_order(order_id):
            logger.warning(f"Order #{order_id} not found.")
            raise NotFoundError("Order not found")
        await manager.broadcast(OrderDeleted(data=DeletedRef(id=order_id)))
        return Response(status_code=204)
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error deleting order #{order_id}: {e}", exc_info=True)
        raise InternalError("Failed to delete order")
