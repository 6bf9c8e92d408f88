# 하루 식단/수분/체중 로그 조작
# - 날짜당 1개, 날짜 오름차순, 최근 7일만 유지 (체중은 60개)
# - 저장소 읽기/쓰기는 라우터 몫, 여기선 리스트만 다룸

from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel

from nutrimind.db.models.schemas import DayEntry, Meal, WeightEntry

HISTORY_DAYS = 7
WEIGHT_HISTORY_MAX = 60

def _upsert_day(history: List[DayEntry], day: str) -> tuple[List[DayEntry], DayEntry]:
    entries = [d.model_copy(deep=True) for d in history]
    entry = next((d for d in entries if d.date == day), None)
    if entry is None:
        entry = DayEntry(date=day)
        entries.append(entry)
    return entries, entry

def _trim(history: List[DayEntry]) -> List[DayEntry]:
    history = sorted(history, key=lambda d: d.date)
    return history[-HISTORY_DAYS:]

def add_meal(history: List[DayEntry], day: str, meal: Meal) -> List[DayEntry]:
    # 끼니 매크로를 그날 합계에 더함
    entries, entry = _upsert_day(history, day)
    entry.kcal += meal.kcal
    entry.protein += meal.protein
    entry.carbs += meal.carbs
    entry.fats += meal.fats
    entry.meals.append(meal)
    return _trim(entries)

def add_water(history: List[DayEntry], day: str, oz: float) -> List[DayEntry]:
    entries, entry = _upsert_day(history, day)
    entry.hydrationOz += oz
    return _trim(entries)

def find_day(history: List[DayEntry], day: str) -> Optional[DayEntry]:
    return next((d for d in history if d.date == day), None)

def log_weight(history: List[WeightEntry], day: str, weight: float) -> List[WeightEntry]:
    # 같은 날 재입력은 덮어쓰기
    entries = [w for w in history if w.date != day]
    entries.append(WeightEntry(date=day, weight=weight))
    entries.sort(key=lambda w: w.date)
    return entries[-WEIGHT_HISTORY_MAX:]

class WeightTrend(BaseModel):
    start: float
    latest: float
    min: float
    max: float
    change: float
    changePerEntry: float
    direction: str  # down | up | flat

def weight_trend(history: List[WeightEntry]) -> Optional[WeightTrend]:
    if not history:
        return None
    ordered = sorted(history, key=lambda w: w.date)
    weights = [w.weight for w in ordered]
    change = weights[-1] - weights[0]
    per_entry = change / (len(weights) - 1) if len(weights) > 1 else 0.0
    direction = "down" if change < 0 else "up" if change > 0 else "flat"
    return WeightTrend(
        start=weights[0],
        latest=weights[-1],
        min=min(weights),
        max=max(weights),
        change=change,
        changePerEntry=per_entry,
        direction=direction,
    )
