# trading_dashboard/config.py

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv
from logger import logger

load_dotenv()

TRUTHY = {"1", "true", "yes", "on"}
FALSY = {"0", "false", "no", "off"}


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}: {raw!r}. Using default {default}.")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid number for {name}: {raw!r}. Using default {default}.")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in TRUTHY:
        return True
    if value in FALSY:
        return False
    logger.warning(f"Invalid boolean for {name}: {raw!r}. Using default {default}.")
    return default


@dataclass
class Settings:
    """Runtime configuration, read from the environment (and a .env file if present)."""

    config_folder: str = field(default_factory=lambda: os.path.join(os.getcwd(), "config"))
    host: str = "0.0.0.0"
    port: int = 8000
    simulate_updates: bool = True
    band_interval: float = 5.0
    quote_interval: float = 3.0
    log_interval: float = 7.0
    default_quote_symbol: str = "ES2023"
    history_limit: int = 1000
    snapshot_queue_size: int = 32
    snapshot_max_retries: int = 3
    inputs_import_path: Optional[str] = None
    ws_path: str = "/trading-ws"
    simulator_seed: Optional[int] = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            config_folder=os.getenv("CONFIG_FOLDER") or os.path.join(os.getcwd(), "config"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_int("PORT", 8000),
            simulate_updates=_env_bool("SIMULATE_UPDATES", True),
            band_interval=_env_float("BAND_INTERVAL", 5.0),
            quote_interval=_env_float("QUOTE_INTERVAL", 3.0),
            log_interval=_env_float("LOG_INTERVAL", 7.0),
            default_quote_symbol=os.getenv("DEFAULT_QUOTE_SYMBOL", "ES2023"),
            history_limit=_env_int("HISTORY_LIMIT", 1000),
            snapshot_queue_size=_env_int("SNAPSHOT_QUEUE_SIZE", 32),
            snapshot_max_retries=_env_int("SNAPSHOT_MAX_RETRIES", 3),
            inputs_import_path=os.getenv("INPUTS_IMPORT_PATH") or None,
            ws_path=os.getenv("WS_PATH", "/trading-ws"),
            simulator_seed=_env_int("SIMULATOR_SEED", None),
        )
