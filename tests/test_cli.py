"""Tests for the reconcile CLI command."""

import json

import pytest

from headerbridge import cli
from headerbridge.config import settings
from headerbridge.store import DatasetStore, SQLiteStateStorage


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Point the default state database at a temporary file."""
    path = tmp_path / "state.db"
    monkeypatch.setattr(settings, "database_path", path)
    monkeypatch.setattr(settings, "assist_provider", "heuristic")
    return path


@pytest.fixture
def record_files(tmp_path, messy_clients, canonical_workers, canonical_tasks):
    paths = []
    for name, records in (
        ("clients", messy_clients),
        ("workers", canonical_workers),
        ("tasks", canonical_tasks),
    ):
        path = tmp_path / f"{name}.json"
        path.write_text(json.dumps(records), encoding="utf-8")
        paths.append(path)
    return paths


async def _persisted_state(db_path):
    store = DatasetStore(SQLiteStateStorage(db_path))
    await store.initialize()
    try:
        return store.state
    finally:
        await store.close()


class TestRunReconcile:
    """Test the reconcile command."""

    @pytest.mark.asyncio
    async def test_preview_leaves_persisted_dataset_untouched(
        self, db_path, record_files, canonical_workers, canonical_tasks
    ):
        store = DatasetStore(SQLiteStateStorage(db_path))
        await store.initialize()
        await store.apply_modification(
            clients=[{"ClientID": "C9", "ClientName": "Initech"}],
            workers=canonical_workers,
            tasks=canonical_tasks,
        )
        await store.close()

        code = await cli.run_reconcile(*record_files, commit=False)

        assert code == 1
        state = await _persisted_state(db_path)
        assert state.clients[0]["ClientID"] == "C9"

    @pytest.mark.asyncio
    async def test_commit_persists_rewritten_records(self, db_path, record_files, capsys):
        code = await cli.run_reconcile(*record_files, commit=True)

        assert code == 0
        assert "Committed" in capsys.readouterr().out
        state = await _persisted_state(db_path)
        assert state.clients[0]["ClientID"] == "C1"
        assert state.clients[0]["PriorityLevel"] == 3

    @pytest.mark.asyncio
    async def test_unreadable_file_returns_2(self, db_path, record_files, tmp_path, capsys):
        broken = tmp_path / "broken.json"
        broken.write_text("{not json", encoding="utf-8")

        code = await cli.run_reconcile(broken, *record_files[1:], commit=False)

        assert code == 2
        assert "Error" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_not_an_array_returns_2(self, db_path, record_files, tmp_path):
        wrong = tmp_path / "wrong.json"
        wrong.write_text('{"ClientID": "C1"}', encoding="utf-8")

        assert await cli.run_reconcile(wrong, *record_files[1:], commit=False) == 2

    @pytest.mark.asyncio
    async def test_missing_file_returns_2(self, db_path, record_files, tmp_path):
        missing = tmp_path / "missing.json"

        assert await cli.run_reconcile(missing, *record_files[1:], commit=False) == 2

    @pytest.mark.asyncio
    async def test_empty_collection_returns_2(self, db_path, record_files, tmp_path):
        empty = tmp_path / "empty.json"
        empty.write_text("[]", encoding="utf-8")

        assert await cli.run_reconcile(*record_files[:2], empty, commit=False) == 2
