import asyncio
import json
import os

from fastapi.testclient import TestClient

from trading_dashboard.main import create_app
from trading_dashboard.persistence import (
    ACCOUNTS_FILE,
    INPUTS_FILE,
    PROGRAM_STATE_FILE,
    SnapshotWriter,
    load_snapshots,
)
from trading_dashboard.store import TradingStore

ACCOUNT_PAYLOAD = {"name": "Acct1", "broker": "IB", "apiKey": "k", "apiSecret": "s", "active": True}


def read(folder, filename):
    with open(os.path.join(folder, filename), encoding="utf-8") as fh:
        return json.load(fh)


class TestSnapshotFiles:
    def test_mutations_are_snapshotted(self, app, settings):
        with TestClient(app) as client:
            client.post("/api/accounts", json=ACCOUNT_PAYLOAD)
            client.post("/api/settings/daily", json=[{"day": "Monday"}])
            client.post("/api/program-state/toggle")

        accounts = read(settings.config_folder, ACCOUNTS_FILE)
        assert [account["name"] for account in accounts] == ["Account 1", "Account 2", "Acct1"]
        assert read(settings.config_folder, INPUTS_FILE) == {"global": None, "daily": [{"day": "Monday"}]}
        assert read(settings.config_folder, PROGRAM_STATE_FILE) == {"running": True}

    def test_restart_restores_snapshots(self, app, settings):
        with TestClient(app) as client:
            account_id = client.post("/api/accounts", json=ACCOUNT_PAYLOAD).json()["id"]
            client.delete("/api/accounts/1")
            client.put(f"/api/accounts/{account_id}", json={"percentToTrade": 0.75})
            client.post("/api/settings/global", json={"futureSymbol": "ES"})
            client.post("/api/program-state/toggle")

        restarted = create_app(settings)
        with TestClient(restarted) as client:
            accounts = client.get("/api/accounts").json()
            assert [account["name"] for account in accounts] == ["Account 2", "Acct1"]
            assert accounts[1]["percentToTrade"] == 0.75
            assert client.get("/api/settings/global").json() == {"futureSymbol": "ES"}
            assert client.get("/api/program-state").json()["running"] is True


class TestLoadSnapshots:
    def test_invalid_rows_are_skipped(self, tmp_path):
        with open(tmp_path / ACCOUNTS_FILE, "w", encoding="utf-8") as fh:
            json.dump([ACCOUNT_PAYLOAD, {"name": "broken"}], fh)

        store = TradingStore()
        assert load_snapshots(store, str(tmp_path)) is True
        assert [account.name for account in store.get_accounts()] == ["Acct1"]

    def test_unreadable_files_are_ignored(self, tmp_path):
        (tmp_path / INPUTS_FILE).write_text("{oops", encoding="utf-8")

        store = TradingStore()
        assert load_snapshots(store, str(tmp_path)) is False
        assert store.get_setting("global") is None
        assert store.get_program_state().running is False


class TestSnapshotWriter:
    def test_pending_writes_are_coalesced(self, tmp_path):
        folder = str(tmp_path / "snapshots")

        async def scenario():
            writer = SnapshotWriter(folder, max_size=4, retry_delay=0)
            writer.submit(PROGRAM_STATE_FILE, {"running": True})
            writer.submit(PROGRAM_STATE_FILE, {"running": False})
            writer.start()
            await writer.stop()

        asyncio.run(scenario())
        assert read(folder, PROGRAM_STATE_FILE) == {"running": False}

    def test_full_queue_drops_new_files(self, tmp_path):
        writer = SnapshotWriter(str(tmp_path), max_size=1)

        assert writer.submit(ACCOUNTS_FILE, []) is True
        assert writer.submit(ACCOUNTS_FILE, [{"name": "x"}]) is True
        assert writer.submit(INPUTS_FILE, {}) is False

    def test_failed_writes_are_retried_then_dropped(self, tmp_path):
        folder = str(tmp_path / "snapshots")

        async def scenario():
            writer = SnapshotWriter(folder, max_retries=2, retry_delay=0)
            writer.start()
            # A directory in the file's place makes every write fail
            os.mkdir(os.path.join(folder, ACCOUNTS_FILE))
            writer.submit(ACCOUNTS_FILE, [])
            writer.submit(PROGRAM_STATE_FILE, {"running": True})
            await writer.stop()

        asyncio.run(scenario())
        assert os.path.isdir(os.path.join(folder, ACCOUNTS_FILE))
        assert read(folder, PROGRAM_STATE_FILE) == {"running": True}
