# 저장소에서 베이스라인/로그 읽기 + 화면용 타깃 정리
# 타깃은 저장하지 않고 매번 원본 입력으로 다시 계산

from __future__ import annotations
import logging
from typing import List, Optional

from pydantic import BaseModel, ValidationError

from nutrimind.db.models.schemas import Baseline, DayEntry, Targets, WeightEntry
from nutrimind.db.store import (
    BASELINE_KEY,
    HISTORY_KEY,
    TODAY_SUMMARY_KEY,
    WEIGHT_HISTORY_KEY,
    KeyValueStore,
)
from nutrimind.services.targets import compute_targets, hydration_target_or_default
from nutrimind.services.utils import today_key

log = logging.getLogger(__name__)

# 베이스라인 없을 때 로그/대시보드 기본 타깃
DEFAULT_CALORIE_TARGET = 2200
DEFAULT_PROTEIN_TARGET = 130

class LogTargets(BaseModel):
    calorieTarget: int
    proteinTarget: int
    hydrationTarget: int

async def load_baseline(store: KeyValueStore, anon_id: str) -> Optional[Baseline]:
    raw = await store.get_json(anon_id, BASELINE_KEY)
    if not isinstance(raw, dict):
        return None
    try:
        return Baseline.model_validate(raw)
    except ValidationError:
        log.warning("stored baseline is invalid; ignoring (anon=%s)", anon_id[:8])
        return None

def baseline_targets(baseline: Optional[Baseline]) -> Targets:
    if baseline is None:
        return Targets()
    return compute_targets(baseline.bodyweight, baseline.trainingDays)

def log_targets(baseline: Optional[Baseline]) -> LogTargets:
    t = baseline_targets(baseline)
    return LogTargets(
        calorieTarget=t.calorieTarget or DEFAULT_CALORIE_TARGET,
        proteinTarget=t.proteinTarget or DEFAULT_PROTEIN_TARGET,
        hydrationTarget=hydration_target_or_default(t),
    )

async def load_history(store: KeyValueStore, anon_id: str) -> List[DayEntry]:
    raw = await store.get_json(anon_id, HISTORY_KEY, [])
    out: List[DayEntry] = []
    for d in raw if isinstance(raw, list) else []:
        try:
            out.append(DayEntry.model_validate(d))
        except ValidationError:
            continue
    return sorted(out, key=lambda d: d.date)

async def save_history(store: KeyValueStore, anon_id: str, history: List[DayEntry]) -> None:
    await store.set_json(anon_id, HISTORY_KEY, [d.model_dump() for d in history])

async def load_weights(store: KeyValueStore, anon_id: str) -> List[WeightEntry]:
    raw = await store.get_json(anon_id, WEIGHT_HISTORY_KEY, [])
    out: List[WeightEntry] = []
    for w in raw if isinstance(raw, list) else []:
        try:
            out.append(WeightEntry.model_validate(w))
        except ValidationError:
            continue
    return sorted(out, key=lambda w: w.date)

async def save_weights(store: KeyValueStore, anon_id: str, weights: List[WeightEntry]) -> None:
    await store.set_json(anon_id, WEIGHT_HISTORY_KEY, [w.model_dump() for w in weights])

def today_summary(entry: Optional[DayEntry], targets: LogTargets, day: Optional[str] = None) -> dict:
    # 대시보드가 읽는 오늘 요약
    return {
        "date": day or today_key(),
        "calories": entry.kcal if entry else 0,
        "protein_g": entry.protein if entry else 0,
        "targetCalories": targets.calorieTarget,
        "targetProtein_g": targets.proteinTarget,
        "hydrationOz": entry.hydrationOz if entry else 0,
        "hydrationTargetOz": targets.hydrationTarget,
    }

async def save_today_summary(store: KeyValueStore, anon_id: str, summary: dict) -> None:
    await store.set_json(anon_id, TODAY_SUMMARY_KEY, summary)

async def load_today_summary(store: KeyValueStore, anon_id: str) -> Optional[dict]:
    raw = await store.get_json(anon_id, TODAY_SUMMARY_KEY)
    # 날짜 지난 요약은 무시
    if isinstance(raw, dict) and raw.get("date") == today_key():
        return raw
    return None
