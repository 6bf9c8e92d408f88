# 칼로리/단백질/수분 타깃 계산
# 체중(lb)과 주당 훈련일수만으로 결정되는 순수 함수

from __future__ import annotations
from typing import Any

from nutrimind.db.models.schemas import Targets
from nutrimind.services.utils import non_negative, round_half_up

PROTEIN_LOW_PER_LB = 0.7
PROTEIN_HIGH_PER_LB = 1.0
KCAL_PER_LB = 14
HIGH_LOAD_FACTOR = 1.1   # 주 5일 이상
LIGHT_LOAD_FACTOR = 0.9  # 주 1~2일
HYDRATION_OZ_PER_LB = 0.5
DEFAULT_HYDRATION_OZ = 80

def calorie_target(bodyweight: float, training_days: float) -> int:
    base = bodyweight * KCAL_PER_LB
    if training_days >= 5:
        return round_half_up(base * HIGH_LOAD_FACTOR)
    # 0일(미입력)은 보정 없음
    if 0 < training_days <= 2:
        return round_half_up(base * LIGHT_LOAD_FACTOR)
    return round_half_up(base)

def compute_targets(bodyweight: Any, training_days: Any = 0) -> Targets:
    """
    체중/훈련일수 → Targets
    - 체중이 0 이하/없음/숫자 아님 → 전부 0 (화면은 "입력 필요" 표시)
    - 음수/숫자 아닌 값은 0으로 처리
    """
    bw = non_negative(bodyweight)
    days = non_negative(training_days)
    if bw <= 0:
        return Targets()

    low = round_half_up(bw * PROTEIN_LOW_PER_LB)
    high = round_half_up(bw * PROTEIN_HIGH_PER_LB)
    return Targets(
        proteinLow=low,
        proteinHigh=high,
        proteinTarget=round_half_up((low + high) / 2),
        calorieTarget=calorie_target(bw, days),
        hydrationTarget=round_half_up(bw * HYDRATION_OZ_PER_LB),
    )

def hydration_target_or_default(targets: Targets) -> int:
    # 체중 모르면 80oz 고정
    return targets.hydrationTarget or DEFAULT_HYDRATION_OZ
