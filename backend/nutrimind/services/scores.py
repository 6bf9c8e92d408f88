# 대시보드 점수/링 계산: 최근 7일 로그 기준
# 동기부여용 수치라 에러 상태 없음. 타깃 0이면 해당 항목 기여 0

from __future__ import annotations
from datetime import date
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from nutrimind.db.models.schemas import DayEntry
from nutrimind.services.utils import clamp, today_key

WINDOW_DAYS = 7
HYDRATION_SCORE_BASE_OZ = 80  # 개인 수분 타깃과 별개의 고정 기준
ON_PLAN_LOW, ON_PLAN_HIGH = 80, 115
DAY_PCT_CAP = 140
RING_CAP = 150

class Scores(BaseModel):
    hydrationScore: float = 0
    consistencyScore: float = 0
    recoveryScore: float = 0

class TodayRings(BaseModel):
    kcalPct: float = 0
    proteinPct: float = 0
    hydrationPct: float = 0

class CalorieZone(BaseModel):
    label: str
    color: str
    pct: float

class WeeklyTrend(BaseModel):
    days: List[Dict[str, float | str]]
    avgPct: float
    grade: str
    text: str

def last_window(history: Iterable[DayEntry], days: int = WINDOW_DAYS) -> List[DayEntry]:
    return sorted(history, key=lambda d: d.date)[-days:]

def _pct(actual: float, target: float) -> float:
    return actual / target * 100 if target > 0 else 0.0

def compute_scores(
    history: Iterable[DayEntry],
    calorie_target: float,
    protein_target: float,
    today: Optional[date] = None,
) -> Scores:
    last7 = last_window(history)
    if not last7:
        return Scores()

    key = today_key(today)
    today_entry = next((d for d in last7 if d.date == key), None)
    water_today = today_entry.hydrationOz if today_entry else 0
    hydration = clamp(water_today / HYDRATION_SCORE_BASE_OZ * 100, 0, 130)

    # 칼로리 80~115% 구간에 든 날 / 데이터가 있는 날
    days_with_data = sum(1 for d in last7 if d.has_data)
    on_plan = 0
    for d in last7:
        if d.kcal > 0 and calorie_target > 0:
            if ON_PLAN_LOW <= _pct(d.kcal, calorie_target) <= ON_PLAN_HIGH:
                on_plan += 1
    consistency = clamp(on_plan / days_with_data * 100, 0, 100) if days_with_data else 0.0

    # 칼로리/단백질 평균은 각각 기여한 날 수로 나눔
    cal_sum, cal_days = 0.0, 0
    prot_sum, prot_days = 0.0, 0
    for d in last7:
        if d.kcal > 0 and calorie_target > 0:
            cal_sum += clamp(_pct(d.kcal, calorie_target), 0, DAY_PCT_CAP)
            cal_days += 1
        if d.protein > 0 and protein_target > 0:
            prot_sum += clamp(_pct(d.protein, protein_target), 0, DAY_PCT_CAP)
            prot_days += 1
    avg_cal = cal_sum / cal_days if cal_days else 0.0
    avg_prot = prot_sum / prot_days if prot_days else 0.0

    base_recovery = avg_cal * 0.45 + avg_prot * 0.35
    recovery = clamp(base_recovery * 0.6 + hydration * 0.4, 0, 120)

    return Scores(hydrationScore=hydration, consistencyScore=consistency, recoveryScore=recovery)

def today_rings(entry: Optional[DayEntry], calorie_target: float, protein_target: float, hydration_target: float) -> TodayRings:
    if entry is None:
        return TodayRings()
    return TodayRings(
        kcalPct=min(RING_CAP, _pct(entry.kcal, calorie_target)),
        proteinPct=min(RING_CAP, _pct(entry.protein, protein_target)),
        hydrationPct=min(RING_CAP, _pct(entry.hydrationOz, hydration_target)),
    )

def calorie_zone(kcal: float, calorie_target: float) -> CalorieZone:
    pct = _pct(kcal, calorie_target)
    if pct == 0:
        return CalorieZone(label="No data yet", color="#e5e7eb", pct=5)
    if pct < 60:
        return CalorieZone(label="Red zone – under-fueled", color="#f87171", pct=pct)
    if pct < 80:
        return CalorieZone(label="Yellow – a bit light", color="#facc15", pct=pct)
    if pct <= 110:
        return CalorieZone(label="Green – right in the pocket", color="#22c55e", pct=pct)
    if pct <= 130:
        return CalorieZone(label="Yellow – heavy but ok", color="#facc15", pct=pct)
    return CalorieZone(label="Red – way over target", color="#fb923c", pct=min(pct, RING_CAP))

def weekly_trend(history: Iterable[DayEntry], calorie_target: float) -> Optional[WeeklyTrend]:
    last7 = last_window(history)
    if not last7 or calorie_target <= 0:
        return None

    pcts = [_pct(d.kcal, calorie_target) for d in last7]
    avg = sum(pcts) / len(pcts)

    if 90 <= avg <= 110:
        grade, text = "Green", "You’re fueling really consistently. Nice work."
    elif 75 <= avg < 90:
        grade, text = "Almost", "Close to target. One or two days were low."
    elif 110 < avg <= 130:
        grade, text = "High", "Slightly over target. Fine on heavy training weeks."
    else:
        grade, text = "Off", "Fuel is way off target. Let’s tighten it up."

    return WeeklyTrend(
        days=[{"date": d.date, "pct": p} for d, p in zip(last7, pcts)],
        avgPct=avg,
        grade=grade,
        text=text,
    )

# 점수 카드 문구
def recovery_text(score: float) -> str:
    if score >= 90:
        return "Great recovery – your fuel and hydration look on point."
    if score >= 70:
        return "Recovery looks decent. Keep food quality high and keep hydrating."
    if score >= 40:
        return "Recovery is a bit mid. Try to hit your calories, protein, and water 5+ days this week."
    return "Recovery is low. Focus on eating enough, getting protein, and drinking water today."

def hydration_text(score: float) -> str:
    if score >= 90:
        return "Hydration is strong today. Keep a bottle near you and you’re set."
    if score >= 70:
        return "Pretty solid – 1 more bottle gets you in a great spot."
    if score >= 40:
        return "You’re part-way there. Sip through the afternoon instead of chugging at night."
    return "Very low so far. Make water the first thing you drink at your next meal."

def consistency_text(score: float) -> str:
    if score >= 80:
        return "Nice. You’re eating like your plan most of the week."
    if score >= 55:
        return "Some good days, some low days. Aim for 1 more on-plan day this week."
    if score >= 30:
        return "Fuel is pretty up-and-down. Try to make breakfast or lunch more consistent."
    return "Barely any on-plan days yet – totally okay, this just shows where to start."
