# trading_dashboard/routes/inputs.py

import json
import os
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from logger import logger
from trading_dashboard.config import Settings
from trading_dashboard.deps import get_settings
from trading_dashboard.errors import ApiError, InternalError, NotFoundError

router = APIRouter(
    prefix="/api",
    tags=["inputs"]
)

# Defaults for global fields the external inputs file may not carry
GLOBAL_DEFAULTS = {
    "initialMargin": ("InitialMargin", 5000),
    "maintenanceMargin": ("MaintenanceMargin", 4000),
    "contractSize": ("ContractSize", 50),
    "tickValue": ("TickValue", 12.5),
    "tradingHoursStart": ("TradingHoursStart", "09:30"),
    "tradingHoursEnd": ("TradingHoursEnd", "16:00"),
    "maxPositionSize": ("MaxPositionSize", 10),
    "maxDailyLoss": ("MaxDailyLoss", 1000),
    "targetProfit": ("TargetProfit", 2000),
}

GLOBAL_PASSTHROUGH = {
    "futureSymbol": "FutureSymbol",
    "marginRequirement": "MarginRequirement",
    "expirationDate": "ExpirationDate",
    "expirationTime": "ExpirationTime",
    "signalCalculationStartTime": "SignalCalculationStartTime",
    "tradingStartTime": "TradingStartTime",
    "globalEndTime": "GlobalEndTime",
}

DAILY_FIELDS = {
    "day": "DayOfWeek",
    "premiumThresholdIn": "PremiumThresholdIn",
    "premiumThresholdOut": "PremiumThresholdOut",
    "avgLength": "AVGLength",
    "upperBandDeviation": "UpperBandDeviation",
    "lowerBandDeviation": "LowerBandDeviation",
}


def transform_inputs(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Maps the external PascalCase inputs document onto the dashboard's settings shape.

    Args:
        raw (dict): Decoded inputs file.

    Returns:
        dict: {"globalSettings": {...}, "dailyParameters": [...]}
    """
    global_settings = {key: raw.get(source) for key, source in GLOBAL_PASSTHROUGH.items()}
    for key, (source, default) in GLOBAL_DEFAULTS.items():
        global_settings[key] = raw.get(source) or default

    daily_parameters: List[Dict[str, Any]] = [
        {key: param.get(source) for key, source in DAILY_FIELDS.items()}
        for param in raw.get("DailyParameters") or []
    ]
    return {"globalSettings": global_settings, "dailyParameters": daily_parameters}


@router.get("/inputs-from-file")
async def get_inputs_from_file(settings: Settings = Depends(get_settings)):
    """
    Imports global settings and daily parameters from the external inputs file.
    """
    path = settings.inputs_import_path
    try:
        if not path or not os.path.exists(path):
            logger.warning(f"Inputs JSON file not found at: {path}")
            raise NotFoundError("Inputs JSON data file not found.")
        with open(path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
        if not isinstance(raw, dict):
            raise ValueError("inputs document must be a JSON object")
        return transform_inputs(raw)
    except ApiError:
        raise
    except ValueError as e:
        logger.error(f"Error parsing inputs JSON file at {path}: {e}", exc_info=True)
        raise InternalError("Failed to parse inputs JSON data.")
    except Exception as e:
        logger.error(f"Error processing inputs JSON file at {path}: {e}", exc_info=True)
        raise InternalError("Failed to retrieve inputs from file due to an internal error.")
