# trading_dashboard/routes/program_state.py

from fastapi import APIRouter, Depends

from logger import logger
from trading_dashboard.broadcaster import ConnectionManager
from trading_dashboard.deps import get_manager, get_snapshots, get_store
from trading_dashboard.errors import InternalError
from trading_dashboard.events import ProgramStateUpdated
from trading_dashboard.models import ProgramState
from trading_dashboard.persistence import SnapshotWriter
from trading_dashboard.store import TradingStore

router = APIRouter(
    prefix="/api/program-state",
    tags=["program-state"]
)


async def toggle_and_broadcast(store: TradingStore, manager: ConnectionManager, snapshots: SnapshotWriter) -> ProgramState:
    """
    Flips the program state, persists it and tells every viewer.

    Shared by the REST endpoint and the channel's legacy toggle message.
    """
    state = store.toggle_program_state()
    logger.info(f"Program {'started' if state.running else 'stopped'}.")
    snapshots.save_program_state(store)
    await manager.broadcast(ProgramStateUpdated(data=state))
    return state


@router.get("")
async def get_program_state(store: TradingStore = Depends(get_store)):
    try:
        return store.get_program_state().to_wire()
    except Exception as e:
        logger.error(f"Error retrieving program state: {e}", exc_info=True)
        raise InternalError("Failed to retrieve program state")


@router.post("/toggle")
async def toggle_program_state(
    store: TradingStore = Depends(get_store),
    manager: ConnectionManager = Depends(get_manager),
    snapshots: SnapshotWriter = Depends(get_snapshots),
):
    try:
        state = await toggle_and_broadcast(store, manager, snapshots)
        return state.to_wire()
    except Exception as e:
        logger.error(f"Error toggling program state: {e}", exc_info=True)
        raise InternalError("Failed to toggle program state")
