# nutrimind/api/routes_log.py
# 하루 로그(식단/수분) + 체중 기록
# 잘못된 입력은 400 + {ok: false, message}, 저장소는 건드리지 않음

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from nutrimind.core.deps import get_or_set_anon_id, get_store
from nutrimind.db.models.schemas import Meal, MealIn, WaterIn, WeightIn
from nutrimind.db.store import KeyValueStore
from nutrimind.services.daily_log import add_meal, add_water, find_day, log_weight, weight_trend
from nutrimind.services.profile import (
    load_baseline,
    load_history,
    load_weights,
    log_targets,
    save_history,
    save_today_summary,
    save_weights,
    today_summary,
)
from nutrimind.services.scores import calorie_zone, today_rings
from nutrimind.services.utils import non_negative, to_number, today_key
from nutrimind.services.water import parse_water_oz

router = APIRouter(prefix="/log", tags=["log"])

WATER_HELP = "I couldn’t find an amount of water. Try “2 cups of water” or “16 oz bottle”."

async def _today_payload(store: KeyValueStore, anon_id: str) -> dict:
    baseline = await load_baseline(store, anon_id)
    targets = log_targets(baseline)
    history = await load_history(store, anon_id)
    day = today_key()
    entry = find_day(history, day)
    rings = today_rings(entry, targets.calorieTarget, targets.proteinTarget, targets.hydrationTarget)
    return {
        "ok": True,
        "date": day,
        "today": entry.model_dump() if entry else None,
        "targets": targets.model_dump(),
        "rings": rings.model_dump(),
        "zone": calorie_zone(entry.kcal if entry else 0, targets.calorieTarget).model_dump(),
        "summary": today_summary(entry, targets, day),
    }

async def _sync_summary(store: KeyValueStore, anon_id: str, history) -> None:
    targets = log_targets(await load_baseline(store, anon_id))
    day = today_key()
    await save_today_summary(store, anon_id, today_summary(find_day(history, day), targets, day))

@router.get("/today")
async def get_today(
    anon_id: str = Depends(get_or_set_anon_id),
    store: KeyValueStore = Depends(get_store),
):
    return await _today_payload(store, anon_id)

@router.get("/history")
async def get_history(
    anon_id: str = Depends(get_or_set_anon_id),
    store: KeyValueStore = Depends(get_store),
):
    history = await load_history(store, anon_id)
    return {"ok": True, "history": [d.model_dump() for d in history]}

@router.post("/meal")
async def post_meal(
    payload: MealIn,
    response: Response,
    anon_id: str = Depends(get_or_set_anon_id),
    store: KeyValueStore = Depends(get_store),
):
    """끼니 추가: 매크로가 전부 0이면 거절"""
    meal = Meal(
        description=(payload.description or "").strip() or "Meal",
        kcal=non_negative(payload.kcal),
        protein=non_negative(payload.protein),
        carbs=non_negative(payload.carbs),
        fats=non_negative(payload.fats),
    )
    if not (meal.kcal or meal.protein or meal.carbs or meal.fats):
        response.status_code = 400
        return {"ok": False, "message": "Add at least one number (kcal, protein, carbs, or fats)."}

    history = add_meal(await load_history(store, anon_id), today_key(), meal)
    await save_history(store, anon_id, history)
    await _sync_summary(store, anon_id, history)
    return await _today_payload(store, anon_id)

@router.post("/water")
async def post_water(
    payload: WaterIn,
    response: Response,
    anon_id: str = Depends(get_or_set_anon_id),
    store: KeyValueStore = Depends(get_store),
):
    """자유 입력 물 섭취량 → oz 파싱 후 오늘 합계에 더함"""
    text = (payload.text or "").strip()
    oz = parse_water_oz(text) if text else None
    if not oz or oz <= 0:
        response.status_code = 400
        return {"ok": False, "message": WATER_HELP}

    history = add_water(await load_history(store, anon_id), today_key(), oz)
    await save_history(store, anon_id, history)
    await _sync_summary(store, anon_id, history)
    body = await _today_payload(store, anon_id)
    body["addedOz"] = oz
    return body

@router.get("/weight")
async def get_weight(
    anon_id: str = Depends(get_or_set_anon_id),
    store: KeyValueStore = Depends(get_store),
):
    weights = await load_weights(store, anon_id)
    trend = weight_trend(weights)
    return {
        "ok": True,
        "history": [w.model_dump() for w in weights],
        "trend": trend.model_dump() if trend else None,
    }

@router.post("/weight")
async def post_weight(
    payload: WeightIn,
    response: Response,
    anon_id: str = Depends(get_or_set_anon_id),
    store: KeyValueStore = Depends(get_store),
):
    """오늘 체중 기록 (같은 날 재입력은 덮어씀, 최근 60개)"""
    w = to_number(payload.weight)
    if w <= 0:
        response.status_code = 400
        return {"ok": False, "message": "Enter your weight as a positive number."}

    weights = log_weight(await load_weights(store, anon_id), today_key(), w)
    await save_weights(store, anon_id, weights)
    trend = weight_trend(weights)
    return {
        "ok": True,
        "history": [x.model_dump() for x in weights],
        "trend": trend.model_dump() if trend else None,
    }
