# nutrimind/api/routes_dashboard.py
# 대시보드: 최근 7일 점수, 주간 추이, 체중 추이, 오늘 요약

from __future__ import annotations

from fastapi import APIRouter, Depends

from nutrimind.core.deps import get_or_set_anon_id, get_store
from nutrimind.db.store import KeyValueStore
from nutrimind.services.daily_log import find_day, weight_trend
from nutrimind.services.profile import (
    load_baseline,
    load_history,
    load_today_summary,
    load_weights,
    log_targets,
    today_summary,
)
from nutrimind.services.scores import (
    compute_scores,
    consistency_text,
    hydration_text,
    recovery_text,
    weekly_trend,
)
from nutrimind.services.utils import today_key

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

@router.get("")
async def get_dashboard(
    anon_id: str = Depends(get_or_set_anon_id),
    store: KeyValueStore = Depends(get_store),
):
    baseline = await load_baseline(store, anon_id)
    targets = log_targets(baseline)
    history = await load_history(store, anon_id)

    scores = compute_scores(history, targets.calorieTarget, targets.proteinTarget)
    trend = weekly_trend(history, targets.calorieTarget)
    weights = weight_trend(await load_weights(store, anon_id))

    # 요약이 없거나 날짜가 지났으면 로그에서 다시 만듦
    summary = await load_today_summary(store, anon_id)
    if summary is None:
        summary = today_summary(find_day(history, today_key()), targets)

    first_name = (baseline.name.split(" ")[0] if baseline and baseline.name else "") or "friend"

    return {
        "ok": True,
        "name": first_name,
        "targets": targets.model_dump(),
        "today": summary,
        "scores": scores.model_dump(),
        "descriptions": {
            "recovery": recovery_text(scores.recoveryScore),
            "hydration": hydration_text(scores.hydrationScore),
            "consistency": consistency_text(scores.consistencyScore),
        },
        "weeklyTrend": trend.model_dump() if trend else None,
        "weightTrend": weights.model_dump() if weights else None,
    }
