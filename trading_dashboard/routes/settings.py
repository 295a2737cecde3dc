# trading_dashboard/routes/settings.py

from fastapi import APIRouter, Depends, Request

from logger import logger
from trading_dashboard.broadcaster import ConnectionManager
from trading_dashboard.deps import get_manager, get_snapshots, get_store
from trading_dashboard.errors import ApiError, InternalError, NotFoundError, ValidationError
from trading_dashboard.events import SettingPayload, SettingUpdated
from trading_dashboard.payloads import read_json_body, validate_payload
from trading_dashboard.persistence import SnapshotWriter
from trading_dashboard.schemas import SettingCreate
from trading_dashboard.store import TradingStore

router = APIRouter(
    prefix="/api/settings",
    tags=["settings"]
)

SETTING_TYPES = ("global", "daily")


@router.get("/{setting_type}")
async def get_setting(setting_type: str, store: TradingStore = Depends(get_store)):
    """
    Returns the raw settings blob of one type.
    """
    try:
        setting = store.get_setting(setting_type)
        if setting is None:
            raise NotFoundError("Setting not found")
        return setting.data
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving setting {setting_type}: {e}", exc_info=True)
        raise InternalError("Failed to retrieve setting")


@router.post("/{setting_type}")
async def save_setting(
    setting_type: str,
    request: Request,
    store: TradingStore = Depends(get_store),
    manager: ConnectionManager = Depends(get_manager),
    snapshots: SnapshotWriter = Depends(get_snapshots),
):
    """
    Replaces the settings blob of one type. The request body is the blob itself.
    """
    try:
        if setting_type not in SETTING_TYPES:
            raise ValidationError("Invalid setting type", [
                {"loc": ["path", "type"], "msg": f"Setting type must be one of {', '.join(SETTING_TYPES)}", "type": "literal_error"}
            ])
        data = await read_json_body(request)
        payload = validate_payload(SettingCreate, {"type": setting_type, "data": data}, "Invalid setting data")
        setting = store.create_or_update_setting(payload.type, payload.data)
        logger.info(f"Setting '{setting_type}' saved.")
        snapshots.save_inputs(store)
        await manager.broadcast(SettingUpdated(data=SettingPayload(type=setting.type, data=setting.data)))
        return setting.data
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error saving setting {setting_type}: {e}", exc_info=True)
        raise InternalError("Failed to save setting")
