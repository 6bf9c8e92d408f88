# nutrimind/api/routes_baseline.py
# 사용자 베이스라인(프로필) 저장/조회 + 파생 타깃

from __future__ import annotations
from typing import Any, Dict, Optional
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from nutrimind.core.deps import get_or_set_anon_id, get_store
from nutrimind.db.models.schemas import Baseline, BaselineIn, Targets
from nutrimind.db.store import BASELINE_KEY, KeyValueStore
from nutrimind.services.profile import baseline_targets, load_baseline
from nutrimind.services.targets import hydration_target_or_default

router = APIRouter(prefix="/baseline", tags=["baseline"])

class BaselineResponse(BaseModel):
    ok: bool
    anonId: str
    baseline: Optional[Dict[str, Any]] = None
    targets: Targets
    hydrationTargetOz: int
    needsInput: bool

def _response(anon_id: str, baseline: Optional[Baseline]) -> BaselineResponse:
    targets = baseline_targets(baseline)
    return BaselineResponse(
        ok=True,
        anonId=anon_id,
        baseline=baseline.model_dump() if baseline else None,
        targets=targets,
        hydrationTargetOz=hydration_target_or_default(targets),
        # 체중 없으면 화면은 숫자 대신 "입력 필요"
        needsInput=targets.calorieTarget == 0,
    )

@router.get("", response_model=BaselineResponse)
async def get_baseline(
    anon_id: str = Depends(get_or_set_anon_id),
    store: KeyValueStore = Depends(get_store),
):
    """저장된 베이스라인 조회 (타깃은 매번 재계산)"""
    baseline = await load_baseline(store, anon_id)
    return _response(anon_id, baseline)

@router.post("", response_model=BaselineResponse)
async def save_baseline(
    payload: BaselineIn,
    anon_id: str = Depends(get_or_set_anon_id),
    store: KeyValueStore = Depends(get_store),
):
    """베이스라인 저장 (현재 스냅샷 하나만, 편집 이력 없음)"""
    baseline = Baseline(**payload.model_dump(), savedAt=datetime.utcnow().isoformat())
    await store.set_json(anon_id, BASELINE_KEY, baseline.model_dump())
    return _response(anon_id, baseline)
