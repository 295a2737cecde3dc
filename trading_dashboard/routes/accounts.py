# trading_dashboard/routes/accounts.py

from fastapi import APIRouter, Depends, Request, Response

from logger import logger
from trading_dashboard.deps import get_snapshots, get_store
from trading_dashboard.errors import ApiError, InternalError, NotFoundError
from trading_dashboard.payloads import parse_body
from trading_dashboard.persistence import SnapshotWriter
from trading_dashboard.schemas import AccountCreate, AccountUpdate
from trading_dashboard.store import TradingStore

router = APIRouter(
    prefix="/api/accounts",
    tags=["accounts"]
)

# Account changes are persisted but not broadcast; viewers refresh accounts over REST.


@router.get("")
async def get_accounts(store: TradingStore = Depends(get_store)):
    """
    Lists all accounts in insertion order.
    """
    try:
        return [account.to_wire() for account in store.get_accounts()]
    except Exception as e:
        logger.error(f"Error retrieving accounts: {e}", exc_info=True)
        raise InternalError("Failed to retrieve accounts")


@router.post("", status_code=201)
async def create_account(
    request: Request,
    store: TradingStore = Depends(get_store),
    snapshots: SnapshotWriter = Depends(get_snapshots),
):
    """
    Creates an account and snapshots the account list to disk.
    """
    try:
        account = await parse_body(request, AccountCreate, "Invalid account data")
        new_account = store.create_account(account)
        logger.info(f"Account #{new_account.id} created ({new_account.name}, {new_account.broker}).")
        snapshots.save_accounts(store)
        return new_account.to_wire()
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error creating account: {e}", exc_info=True)
        raise InternalError("Failed to create account")


@router.put("/{account_id}")
async def update_account(
    account_id: int,
    request: Request,
    store: TradingStore = Depends(get_store),
    snapshots: SnapshotWriter = Depends(get_snapshots),
):
    """
    Applies a partial update to an account.
    """
    try:
        changes = await parse_body(request, AccountUpdate, "Invalid account data")
        updated_account = store.update_account(account_id, changes.model_dump(exclude_unset=True))
        if updated_account is None:
            logger.warning(f"Account #{account_id} not found.")
            raise NotFoundError("Account not found")
        snapshots.save_accounts(store)
        return updated_account.to_wire()
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error updating account #{account_id}: {e}", exc_info=True)
        raise InternalError("Failed to update account")


@router.delete("/{account_id}", status_code=204)
async def delete_account(
    account_id: int,
    store: TradingStore = Depends(get_store),
    snapshots: SnapshotWriter = Depends(get_snapshots),
):
    try:
        if not store.delete_account(account_id):
            logger.warning(f"Account #{account_id} not found.")
            raise NotFoundError("Account not found")
        logger.info(f"Account #{account_id} deleted.")
        snapshots.save_accounts(store)
        return Response(status_code=204)
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error deleting account #{account_id}: {e}", exc_info=True)
        raise InternalError("Failed to delete account")
