# trading_dashboard/persistence.py

import asyncio
import json
import os
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from logger import logger
from trading_dashboard.schemas import AccountCreate
from trading_dashboard.store import TradingStore

ACCOUNTS_FILE = "accounts.json"
INPUTS_FILE = "inputs.json"
PROGRAM_STATE_FILE = "programState.json"

RETRY_DELAY = 0.5  # seconds, doubled after every failed attempt


def read_json_file(path: str) -> Optional[Any]:
    """
    Reads a JSON file.

    Returns:
        The decoded content, or None when the file is missing or unreadable.
    """
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, ValueError) as e:
        logger.error(f"Error reading from file {path}: {e}")
        return None


def write_json_file(path: str, payload: Any) -> None:
    """Overwrites `path` with the full payload through a temp file and rename."""
    tmp_path = f"{path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, default=str)
    os.replace(tmp_path, path)


def load_snapshots(store: TradingStore, folder: str) -> bool:
    """
    Seeds the store from the snapshot files in `folder`.

    Args:
        store (TradingStore): Store to seed.
        folder (str): Snapshot directory.

    Returns:
        bool: True if an accounts snapshot was found.
    """
    stored_accounts = read_json_file(os.path.join(folder, ACCOUNTS_FILE))
    if isinstance(stored_accounts, list):
        for raw in stored_accounts:
            try:
                store.create_account(AccountCreate.model_validate(raw))
            except PydanticValidationError as e:
                logger.error(f"Invalid account data in snapshot: {e}")
        logger.info(f"Restored {len(store.get_accounts())} account(s) from snapshot.")

    stored_inputs = read_json_file(os.path.join(folder, INPUTS_FILE))
    if isinstance(stored_inputs, dict):
        for setting_type in ("global", "daily"):
            if stored_inputs.get(setting_type) is not None:
                store.create_or_update_setting(setting_type, stored_inputs[setting_type])

    stored_state = read_json_file(os.path.join(folder, PROGRAM_STATE_FILE))
    if isinstance(stored_state, dict) and isinstance(stored_state.get("running"), bool):
        if store.get_program_state().running != stored_state["running"]:
            store.toggle_program_state()

    return isinstance(stored_accounts, list)


class SnapshotWriter:
    """
    Bounded write-behind queue for snapshot files.

    Request handlers call `submit` and return immediately; a single worker task
    writes files off the event loop. Pending writes to the same file are
    coalesced so only the newest payload is written. A failed write is retried
    with exponential delay, then dropped with an error log.
    """

    def __init__(self, folder: str, max_size: int = 32, max_retries: int = 3, retry_delay: float = RETRY_DELAY):
        self.folder = folder
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_size)
        self._pending: Dict[str, Any] = {}
        self._task: Optional[asyncio.Task] = None

    def submit(self, filename: str, payload: Any) -> bool:
        """
        Schedules `payload` to be written to `filename`.

        Returns:
            bool: False if the queue is full and the write was dropped.
        """
        if filename in self._pending:
            self._pending[filename] = payload
            return True
        try:
            self._queue.put_nowait(filename)
        except asyncio.QueueFull:
            logger.warning(f"Snapshot queue full. Dropping write to {filename}.")
            return False
        self._pending[filename] = payload
        return True

    def save_accounts(self, store: TradingStore) -> bool:
        return self.submit(ACCOUNTS_FILE, [account.to_wire() for account in store.get_accounts()])

    def save_inputs(self, store: TradingStore) -> bool:
        return self.submit(INPUTS_FILE, store.get_all_settings())

    def save_program_state(self, store: TradingStore) -> bool:
        return self.submit(PROGRAM_STATE_FILE, {"running": store.get_program_state().running})

    def start(self) -> None:
        os.makedirs(self.folder, exist_ok=True)
        if self._task is None:
            self._task = asyncio.create_task(self._run())
            logger.info(f"Snapshot writer started for {self.folder}.")

    async def flush(self) -> None:
        await self._queue.join()

    async def stop(self) -> None:
        if self._task is None:
            return
        await self.flush()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Snapshot writer stopped.")

    async def _run(self) -> None:
        while True:
            filename = await self._queue.get()
            try:
                payload = self._pending.pop(filename)
                await self._write_with_retry(filename, payload)
            finally:
                self._queue.task_done()

    async def _write_with_retry(self, filename: str, payload: Any) -> bool:
        path = os.path.join(self.folder, filename)
        for attempt in range(1, self.max_retries + 1):
            try:
                await asyncio.to_thread(write_json_file, path, payload)
                logger.debug(f"Snapshot written to {path}.")
                return True
            except (OSError, TypeError, ValueError) as e:
                logger.warning(f"Error saving to file {path} (attempt {attempt}/{self.max_retries}): {e}")
                if attempt < self.max_retries:
                    await asyncio.sleep(self.retry_delay * 2 ** (attempt - 1))
        logger.error(f"Giving up on snapshot {path} after {self.max_retries} attempts.")
        return False
