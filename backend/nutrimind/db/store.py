# 키-값 저장소 포트 (브라우저 localStorage 대체)
# 익명 사용자(anon_id)별로 key → JSON 문자열 저장. 마지막 쓰기 우선, 락 없음
# memory: 기본값, 재시작 시 초기화 / mongo: motor 컬렉션 kv_store

from __future__ import annotations
import json
from datetime import datetime
from typing import Any, Dict, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

# 저장 키
BASELINE_KEY = "baseline"
HISTORY_KEY = "history"
WEIGHT_HISTORY_KEY = "weight_history"
TODAY_SUMMARY_KEY = "today_summary"

KV_COLLECTION = "kv_store"

class KeyValueStore:
    name = "unknown"

    async def get_raw(self, anon_id: str, key: str) -> str | None:
        raise NotImplementedError

    async def set_raw(self, anon_id: str, key: str, raw: str) -> None:
        raise NotImplementedError

    async def ping(self) -> None:
        return None

    async def get_json(self, anon_id: str, key: str, default: Any = None) -> Any:
        # 깨진 JSON은 없는 값 취급
        raw = await self.get_raw(anon_id, key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return default

    async def set_json(self, anon_id: str, key: str, value: Any) -> None:
        await self.set_raw(anon_id, key, json.dumps(value, ensure_ascii=False))

class MemoryKVStore(KeyValueStore):
    name = "memory"

    def __init__(self) -> None:
        self._data: Dict[Tuple[str, str], str] = {}

    async def get_raw(self, anon_id, key):
        return self._data.get((anon_id, key))

    async def set_raw(self, anon_id, key, raw):
        self._data[(anon_id, key)] = raw

class MongoKVStore(KeyValueStore):
    name = "mongo"

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.db = db

    async def get_raw(self, anon_id, key):
        doc = await self.db[KV_COLLECTION].find_one({"anon_id": anon_id, "key": key})
        return doc.get("value") if doc else None

    async def set_raw(self, anon_id, key, raw):
        await self.db[KV_COLLECTION].update_one(
            {"anon_id": anon_id, "key": key},
            {
                "$set": {"value": raw, "updated_at": datetime.utcnow()},
                "$setOnInsert": {"created_at": datetime.utcnow()},
            },
            upsert=True,
        )

    async def ping(self) -> None:
        await self.db.command("ping")
