# logger.py

import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _level_from_env(default: int = logging.INFO) -> int:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "").strip().upper())
    return level if isinstance(level, int) else default


def build_logger(name: str = "trading_dashboard") -> logging.Logger:
    """
    Shared application logger: console always, plus a rotating file when LOG_FILE is set.
    """
    app_logger = logging.getLogger(name)
    app_logger.setLevel(_level_from_env())

    # Handlers are attached once even if the module is reloaded
    if app_logger.handlers:
        return app_logger

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    log_file = os.getenv("LOG_FILE")
    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
        file_handler.setFormatter(formatter)
        app_logger.addHandler(file_handler)

    return app_logger


logger = build_logger()
