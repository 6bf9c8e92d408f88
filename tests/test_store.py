"""Tests for the key-value store, Mongo connection lifecycle and startup fallback."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from nutrimind import main
from nutrimind.db import init as db_init
from nutrimind.db.store import MemoryKVStore


def _fake_client(ping):
    client = MagicMock()
    db = MagicMock()
    db.command = ping
    client.__getitem__.return_value = db
    return client, db


@pytest.mark.asyncio
async def test_json_round_trip_and_broken_json_falls_back():
    store = MemoryKVStore()
    await store.set_json("u1", "history", [{"date": "2026-10-19", "kcal": 500}])
    assert await store.get_json("u1", "history") == [{"date": "2026-10-19", "kcal": 500}]

    await store.set_raw("u1", "baseline", "{not json")
    assert await store.get_json("u1", "baseline", default={}) == {}
    assert await store.get_json("u2", "history", default=[]) == []


@pytest.mark.asyncio
async def test_failed_ping_closes_client_and_keeps_db_unset():
    client, _ = _fake_client(AsyncMock(side_effect=ConnectionError("refused")))

    with patch.object(db_init, "AsyncIOMotorClient", MagicMock(return_value=client)):
        with pytest.raises(ConnectionError):
            await db_init.init_db()

    client.close.assert_called_once()
    with pytest.raises(RuntimeError):
        db_init.get_db()


@pytest.mark.asyncio
async def test_retry_after_failed_ping_connects_again():
    bad, _ = _fake_client(AsyncMock(side_effect=ConnectionError("refused")))
    good, good_db = _fake_client(AsyncMock(return_value={"ok": 1}))

    with patch.object(db_init, "AsyncIOMotorClient", MagicMock(side_effect=[bad, good])):
        with pytest.raises(ConnectionError):
            await db_init.init_db()
        assert await db_init.init_db() is good_db

    try:
        assert db_init.get_db() is good_db
    finally:
        await db_init.close_db()
    good.close.assert_called_once()


@pytest.mark.asyncio
async def test_health_reports_memory_when_mongo_never_connects(monkeypatch):
    monkeypatch.setattr(main.settings, "STORAGE_BACKEND", "mongo")
    monkeypatch.setattr(main.app.state, "store", MemoryKVStore())

    with patch.object(main, "init_db", AsyncMock(side_effect=ConnectionError("refused"))), \
            patch.object(main, "sleep", AsyncMock()):
        await main.on_startup()

    assert isinstance(main.app.state.store, MemoryKVStore)
    body = await main.health()
    assert body == {"ok": True, "status": "ok", "store": "memory"}
