# 코치 프롬프트 조립 + 대화 한 턴 처리
# 프로필/최근 로그를 시스템 프롬프트에 끼워 넣고, 세션 대화와 함께 생성기로 보냄

from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional

from nutrimind.core.config import settings
from nutrimind.db.models.schemas import ChatMessage
from nutrimind.db.sessions import SessionStore
from nutrimind.services.llm_openai import TextGenerator

log = logging.getLogger(__name__)

HISTORY_LIMIT = 40
RECENT_DAYS = 7
EMPTY_REPLY = (
    "I understood your question, but I couldn't format my answer correctly. "
    "Try asking again a bit differently."
)
REPEAT_NOTE = (
    "\n\n(Adjusting the plan so I’m not just repeating myself. "
    "Want to attack this from another angle?)"
)

BASE_SYSTEM_PROMPT = """
You are NutriMind, an elite AI coach for nutrition, training, and lifestyle.

You help:
- Athletes of every sport (track, football, soccer, basketball, etc.)
- Lifters (strength, hypertrophy, power)
- Parents with busy schedules
- Students with limited time and money
- Anyone trying to build muscle, lose fat, perform better, or feel healthier.

Core rules:
- Be hype, positive, and real – like a smart, locked-in coach.
- Keep answers SHORT and punchy: usually 4–8 short sentences or a few bullet points.
- Give SPECIFIC, realistic advice (foods, portions, times, examples).
- Ask ONE smart follow-up at the end of most replies, unless the user says "no questions".
- Never repeat the same answer word-for-word.
- Remember the user’s sport, schedule, food preferences, and constraints within the session.
- If something sounds medical (injury, disease, meds, eating disorder), tell them politely to talk to a professional.

Nutrition knowledge (use flexibly, not as a script):
- Protein: about 0.7–1.0 g per lb of bodyweight per day.
- Spread protein across meals.
- Carbs near training (rice, oats, pasta, potatoes, fruit, bread, etc).
- Healthy fats (avocado, eggs, nuts, olive oil, fatty fish).
- Hydration: at least 2–3 L/day baseline, more on hot or hard training days.
- Pre-workout: easy-to-digest carbs + a little protein, low fat.
- Post-workout: solid protein + carbs within a few hours.
- Off days: still get protein, slightly fewer carbs.

Training knowledge:
- Speed / sprinting: acceleration, max-velocity, short hill sprints, plyometrics, full recoveries.
- Strength: progressive overload, good technique, rest days.
- Conditioning: intervals, tempo runs, zone 2.
- Recovery: sleep, deload weeks, mobility, stress management.

Tone:
- Motivating, encouraging, a little playful, but never cringe.
- Short paragraphs, bullets when helpful, no giant text walls.
"""

QUICK_COACH_PROMPT = """
You are NutriMind — a clean, simple, VERY smart performance coach.

RULES:
- Keep answers short, readable, and friendly.
- 2–4 paragraphs max or clean bullet points.
- Give real examples: food amounts, timing, simple student meals.
- Use the baseline + last 7 days quietly (DO NOT repeat them).
- No emojis. No giant paragraphs.
- If anything sounds medical, tell them to talk to a professional.

Use the JSON below privately to guide your answer:

{context}
"""

def _or(v: Any, fallback: str) -> Any:
    # 빈 문자열/0/None 은 fallback
    return v if v else fallback

def _profile_block(baseline: Dict[str, Any]) -> str:
    b = baseline
    return f"""
User profile (baseline):
- Name: {_or(b.get("name"), "Unknown")}
- Identity: {_or(b.get("role"), "Unknown")}
- Sport / lane: {_or(b.get("sport") or b.get("mainSport"), "Unknown")}
- Position / event: {_or(b.get("position"), "Unknown")}
- Main 3–6 month goal: {_or(b.get("mainGoal"), "Unknown")}
- Body data: {_or(b.get("bodyweight"), "?")} lb, {_or(b.get("height"), "?")} cm
- Training load: {_or(b.get("trainingDaysPerWeek") or b.get("trainingDays"), "?")} days/week
- Food budget mood: {_or(b.get("foodBudget"), "Unknown")}
- Target calories: {_or(b.get("estimatedCalories") or b.get("calorieTarget"), "Unknown")} kcal/day
- Protein target: {_or(b.get("proteinTargetMin") or b.get("proteinLow"), "?")}–{_or(b.get("proteinTargetMax") or b.get("proteinHigh"), "?")} g/day
- Constraints / realities NutriMind must respect: {_or(b.get("constraints"), "None specified")}

Use this baseline quietly in every answer. Do NOT repeat it every time,
but use it to make the coaching feel personal and realistic.
"""

def _log_block(last7: List[Dict[str, Any]]) -> str:
    lines = "\n".join(
        f"- {d.get('label') or f'Day {i + 1}'}: {d.get('kcal') or 0} kcal, {d.get('protein') or 0} g protein"
        for i, d in enumerate(last7[-RECENT_DAYS:])
    )
    return f"""
Recent log (last days, approximate):
{lines}

Use this to comment on consistency, heavy / light days, and trends.
If they are clearly under-eating protein or always way over calories,
coach them gently and give a simple plan.
"""

def build_system_prompt(
    baseline: Optional[Dict[str, Any]] = None,
    last7: Optional[List[Dict[str, Any]]] = None,
) -> str:
    extra = ""
    if baseline:
        extra += _profile_block(baseline)
    if last7:
        extra += _log_block([d for d in last7 if isinstance(d, dict)])
    return BASE_SYSTEM_PROMPT + extra

def build_context_prompt(
    baseline: Optional[Dict[str, Any]] = None,
    today: Optional[Dict[str, Any]] = None,
    history: Optional[List[Dict[str, Any]]] = None,
) -> str:
    context = {
        "baseline": baseline or {},
        "today": today or {},
        "last7Days": history if isinstance(history, list) else [],
    }
    return QUICK_COACH_PROMPT.format(context=json.dumps(context, indent=2, ensure_ascii=False))

def dedupe_reply(reply: str, transcript: List[ChatMessage]) -> str:
    # 직전 assistant 답과 글자까지 같으면 안내 문구 덧붙임 (재요청 안 함)
    last = next((m for m in reversed(transcript) if m.role == "assistant"), None)
    if last is not None and last.content == reply:
        return reply + REPEAT_NOTE
    return reply

async def coach_turn(
    sessions: SessionStore,
    session_id: str,
    message: str,
    generator: TextGenerator,
    baseline: Optional[Dict[str, Any]] = None,
    last7: Optional[List[Dict[str, Any]]] = None,
) -> str:
    """
    대화 한 턴
    1) user 메시지 추가 (최근 40개만 유지)
    2) 시스템 프롬프트 + 대화 → 생성기
    3) 중복 답변 처리 후 assistant 메시지 추가
    생성기 예외는 그대로 올려보냄 (라우터가 envelope으로 변환)
    """
    async with sessions.lock(session_id):
        transcript = await sessions.append(
            session_id, ChatMessage(role="user", content=message), limit=HISTORY_LIMIT
        )

        messages = [{"role": "system", "content": build_system_prompt(baseline, last7)}]
        messages += [m.model_dump() for m in transcript]

        reply = await generator.generate(messages, model=settings.OPENAI_CHAT_MODEL, max_tokens=350)
        reply = dedupe_reply(reply or EMPTY_REPLY, transcript)

        await sessions.append(
            session_id, ChatMessage(role="assistant", content=reply), limit=HISTORY_LIMIT
        )
    log.info("coach turn done (session=%s, transcript=%d)", session_id[:8], len(transcript) + 1)
    return reply

async def quick_coach(
    generator: TextGenerator,
    message: str,
    baseline: Optional[Dict[str, Any]] = None,
    today: Optional[Dict[str, Any]] = None,
    history: Optional[List[Dict[str, Any]]] = None,
) -> str:
    # 세션 없는 단발 코칭
    reply = await generator.generate(
        [
            {"role": "system", "content": build_context_prompt(baseline, today, history)},
            {"role": "user", "content": message},
        ],
        model=settings.OPENAI_QUICK_MODEL,
        temperature=0.65,
    )
    return reply or "My mind blanked for a second — ask again."
