# 코치 대화 세션 저장소
# 세션 id(쿠키) → 최근 대화 메시지 목록. 기본 구현은 프로세스 메모리(재시작 시 소실)
# 같은 세션의 동시 요청은 lock()으로 한 턴씩 직렬화

from __future__ import annotations
import asyncio
from collections import defaultdict
from typing import Dict, List

from nutrimind.db.models.schemas import ChatMessage

class SessionStore:
    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def lock(self, session_id: str) -> asyncio.Lock:
        return self._locks[session_id]

    async def get(self, session_id: str) -> List[ChatMessage]:
        raise NotImplementedError

    async def append(self, session_id: str, message: ChatMessage, limit: int) -> List[ChatMessage]:
        # 추가 후 최근 limit개만 남긴 목록 반환
        raise NotImplementedError

class MemorySessionStore(SessionStore):
    def __init__(self) -> None:
        super().__init__()
        self._sessions: Dict[str, List[ChatMessage]] = {}

    async def get(self, session_id):
        return list(self._sessions.get(session_id, []))

    async def append(self, session_id, message, limit):
        history = self._sessions.setdefault(session_id, [])
        history.append(message)
        if len(history) > limit:
            del history[: len(history) - limit]
        return list(history)
