# nutrimind/services/utils.py
# 숫자 정리/반올림/날짜 키 유틸
# - 폼/LLM에서 들어오는 값은 문자열·None·NaN이 섞여 있음 → 전부 0으로 수렴
# - 반올림은 half-up (브라우저 Math.round와 같은 값이 나와야 함)

from __future__ import annotations
import math
import re
from datetime import date
from typing import Any

_FENCE_OPEN = re.compile(r"```json", re.IGNORECASE)

def to_number(v: Any) -> float:
    # 숫자로 못 바꾸거나 NaN/inf면 0
    if v is None or isinstance(v, bool):
        return 0.0
    try:
        n = float(str(v).strip()) if isinstance(v, str) else float(v)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(n):
        return 0.0
    return n

def non_negative(v: Any) -> float:
    n = to_number(v)
    return n if n > 0 else 0.0

def round_half_up(x: float) -> int:
    # round(108.5) == 108 (banker's) 대신 109
    return int(math.floor(x + 0.5))

def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(x, hi))

def today_key(d: date | None = None) -> str:
    # YYYY-MM-DD
    return (d or date.today()).isoformat()

def strip_code_fence(text: str) -> str:
    # ```json ... ``` 래퍼 제거 (모델이 가끔 붙임)
    raw = (text or "").strip()
    if raw.startswith("```"):
        raw = _FENCE_OPEN.sub("", raw, count=1).replace("```", "").strip()
    return raw
