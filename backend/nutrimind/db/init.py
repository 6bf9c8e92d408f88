# nutrimind/db/init.py
# motor 클라이언트 수명 관리 (STORAGE_BACKEND=mongo 일 때만 startup/shutdown에서 호출)
# - ping 통과한 연결만 전역에 보관, 실패한 클라이언트는 닫고 예외 전달 → 재시도 루프가 새로 연결

from __future__ import annotations
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from nutrimind.core.config import settings

log = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None

async def init_db(uri: str | None = None, name: str | None = None) -> AsyncIOMotorDatabase:
    global _client, _db
    if _db is not None:
        return _db

    client = AsyncIOMotorClient(
        uri or settings.MONGO_URI,
        serverSelectionTimeoutMS=settings.MONGO_TIMEOUT_MS,
    )
    db = client[name or settings.MONGO_DB]
    try:
        await db.command("ping")
    except Exception:
        client.close()
        raise

    _client, _db = client, db
    log.info("mongo connected (db=%s)", name or settings.MONGO_DB)
    return db

def get_db() -> AsyncIOMotorDatabase:
    if _db is None:
        raise RuntimeError("MongoDB is not initialized yet.")
    return _db

async def close_db() -> None:
    global _client, _db
    client, _client, _db = _client, None, None
    if client is not None:
        client.close()
