# 공용 의존성/헬퍼 (익명 쿠키 발급, 저장소/세션/생성기 주입)
import uuid
from typing import Callable

from fastapi import Request, Response

from nutrimind.db.sessions import SessionStore
from nutrimind.db.store import KeyValueStore
from nutrimind.services.llm_openai import TextGenerator, build_generator

COOKIE = "anon_id"
MAX_AGE = 60 * 60 * 24 * 365 * 2  # 2년

SESSION_COOKIE = "nutrimind_session"
SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7일

def get_or_set_anon_id(request: Request, response: Response) -> str:
    # 쿠키 없으면 발급, 있으면 그대로 사용
    v = request.cookies.get(COOKIE)
    if not v:
        v = uuid.uuid4().hex
        response.set_cookie(COOKIE, v, max_age=MAX_AGE, httponly=True, samesite="lax")
    return v

def get_or_set_session_id(request: Request, response: Response) -> str:
    # 코치 대화 세션용 쿠키 (첫 채팅 요청에서 발급)
    v = request.cookies.get(SESSION_COOKIE)
    if not v:
        v = uuid.uuid4().hex
        response.set_cookie(SESSION_COOKIE, v, max_age=SESSION_MAX_AGE, path="/", samesite="lax")
    return v

def get_store(request: Request) -> KeyValueStore:
    # 프로필/로그 저장소는 앱 시작 시 app.state에 주입됨
    return request.app.state.store

def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions

def get_generator() -> Callable[[], TextGenerator]:
    # 생성기 대신 만드는 함수를 넘김. 라우터는 입력 검증(400) 후에 호출하고,
    # 키 없으면 그때 GeneratorNotReady → main의 예외 핸들러가 500으로 변환
    return build_generator
