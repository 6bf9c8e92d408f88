# nutrimind/main.py
# FastAPI 앱 초기화 및 라우터 설정
# 라우터는 각 기능별로 분리하여 관리

from __future__ import annotations

import logging
from asyncio import sleep
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nutrimind.api.routes_baseline import router as baseline_router    # 베이스라인/타깃
from nutrimind.api.routes_coach import router as coach_router          # 코치 채팅
from nutrimind.api.routes_dashboard import router as dashboard_router  # 점수/추이
from nutrimind.api.routes_log import router as log_router              # 식단/수분/체중 로그
from nutrimind.api.routes_meal import router as meal_router            # 매크로 추정
from nutrimind.api.routes_news import router as news_router            # 딜/뉴스
from nutrimind.core.config import settings
from nutrimind.db.init import close_db, init_db
from nutrimind.db.indexes import ensure_indexes
from nutrimind.db.sessions import MemorySessionStore
from nutrimind.db.store import MemoryKVStore, MongoKVStore
from nutrimind.services.llm_openai import GeneratorNotReady

log = logging.getLogger(__name__)

app = FastAPI(title="NutriMind - API", version="0.1.0")

# 기본은 메모리 저장소 (mongo면 startup에서 교체)
app.state.store = MemoryKVStore()
app.state.sessions = MemorySessionStore()

# CORS: 프론트 localhost:3000 허용 + 쿠키 전달
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 에러는 전부 {ok: false, message} 로 (프론트는 ok로 분기)
@app.exception_handler(GeneratorNotReady)
async def on_generator_not_ready(request: Request, exc: GeneratorNotReady):
    # 키 부재 여부 등 상세는 노출하지 않음
    return JSONResponse({"ok": False, "message": "Server misconfigured."}, status_code=500)

@app.exception_handler(RequestValidationError)
async def on_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse({"ok": False, "message": "Invalid request body."}, status_code=400)

@app.exception_handler(Exception)
async def on_unhandled(request: Request, exc: Exception):
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"ok": False, "message": "Server error. Please try again in a moment."},
        status_code=500,
    )

# 앱 시작/종료 이벤트 핸들러
@app.on_event("startup")
async def on_startup() -> None:
    if settings.STORAGE_BACKEND != "mongo":
        print("[startup] memory store ready")
        return

    # 1) DB 먼저 붙는다 (최대 20회, 1초 간격)
    db = None
    for i in range(20):
        try:
            db = await init_db()
            print("[startup] db ready")
            break
        except Exception as e:
            print(f"[startup] db init retry {i+1}: {e}")
            await sleep(1.0)
    if db is None:
        print("[startup] db init failed after retries, staying on memory store")
        return

    # 2) 인덱스 보장
    try:
        await ensure_indexes()
        print("[startup] indexes ensured")
    except Exception as e:
        print(f"[startup] ensure_indexes failed: {e}")

    app.state.store = MongoKVStore(db)

@app.on_event("shutdown")
async def on_shutdown() -> None:
    # 몽고db 커넥션 정리
    await close_db()

@app.get("/")
async def root():
    return {"ok": True, "status": "ok"}

@app.get("/health")
async def health():
    # 헬스체크 + 저장소 ping. store는 설정값이 아니라 실제 붙어 있는 저장소 (mongo 실패 시 memory)
    ok = {"ok": True, "status": "ok", "store": app.state.store.name}
    try:
        await app.state.store.ping()
    except Exception as e:
        log.warning("store ping failed: %s", e)
        ok["ok"] = False
        ok["store"] = "error"
    return ok

# 라우터 prefix는 각 파일 내에서 정의함 , 중복 prefix 금지
app.include_router(baseline_router)
app.include_router(log_router)
app.include_router(dashboard_router)
app.include_router(meal_router)
app.include_router(coach_router)
app.include_router(news_router)
