# nutrimind/api/routes_coach.py
# 코치 채팅: 세션 대화(/api) + 단발 코칭(/coach/api)

from __future__ import annotations
import logging
from typing import Callable

from fastapi import APIRouter, Depends, Response

from nutrimind.core.deps import get_generator, get_or_set_session_id, get_sessions
from nutrimind.db.models.schemas import ChatIn, QuickCoachIn
from nutrimind.db.sessions import SessionStore
from nutrimind.services.coach import coach_turn, quick_coach
from nutrimind.services.llm_openai import UPSTREAM_ERRORS, TextGenerator

log = logging.getLogger(__name__)

router = APIRouter(tags=["coach"])

TRY_AGAIN = "NutriMind server error. Please try again in a moment."

@router.get("/api")
async def coach_health():
    return {"ok": True, "message": "NutriMind backend is online ✅"}

@router.post("/api")
async def chat(
    payload: ChatIn,
    response: Response,
    make_generator: Callable[[], TextGenerator] = Depends(get_generator),
    sessions: SessionStore = Depends(get_sessions),
    session_id: str = Depends(get_or_set_session_id),
):
    """세션 쿠키 기준으로 대화를 이어감 (최근 40개 메시지)"""
    message = (payload.message or "").strip()
    if not message:
        response.status_code = 400
        return {"ok": False, "message": "Missing 'message' (string) in request body."}

    last7 = payload.last7Days or payload.history
    generator = make_generator()
    try:
        reply = await coach_turn(
            sessions, session_id, message, generator,
            baseline=payload.baseline, last7=last7,
        )
    except UPSTREAM_ERRORS as e:
        log.warning("coach chat failed: %s", type(e).__name__)
        return {"ok": False, "message": TRY_AGAIN}

    return {"ok": True, "reply": reply}

@router.get("/coach/api")
async def quick_coach_health():
    return {"ok": True, "message": "Coach API alive ✅"}

@router.post("/coach/api")
async def quick_chat(
    payload: QuickCoachIn,
    response: Response,
    make_generator: Callable[[], TextGenerator] = Depends(get_generator),
):
    """세션 없이 베이스라인/오늘/최근 7일 JSON만으로 답변"""
    message = (payload.message or "").strip()
    if not message:
        response.status_code = 400
        return {"ok": False, "message": "Ask me something about training, food, or recovery."}

    generator = make_generator()
    try:
        reply = await quick_coach(
            generator, message,
            baseline=payload.baseline, today=payload.today, history=payload.history,
        )
    except UPSTREAM_ERRORS as e:
        log.warning("quick coach failed: %s", type(e).__name__)
        return {"ok": False, "message": "NutriMind crashed for a moment. Try again — I’ll be ready."}

    return {"ok": True, "message": reply}
