# 컬렉션 인덱스 생성
# 앱 스타트업에서 mongo 백엔드일 때 한 번 ensure_indexes()를 await로 호출한다.

from nutrimind.db.init import get_db
from nutrimind.db.store import KV_COLLECTION

async def ensure_indexes():
    db = get_db()

    # 익명 사용자별 key 하나당 문서 하나
    await db[KV_COLLECTION].create_index([("anon_id", 1), ("key", 1)], unique=True)
    await db[KV_COLLECTION].create_index([("updated_at", -1)])
