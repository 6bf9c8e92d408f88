# 물 섭취 텍스트 → oz
# "2 cups and 8 oz" 처럼 단위가 여러 개면 전부 합산
# 단위 카테고리마다 전체 문자열을 따로 스캔 (finditer, 겹침 없음)

from __future__ import annotations
import re
from typing import List, Optional, Tuple

from nutrimind.services.utils import round_half_up

_NUM = r"(\d+(?:\.\d+)?)"

# (패턴, oz 환산 계수): 긴 단위를 앞에 둬야 "glasses"가 "glass"로 잘리지 않음
UNIT_PATTERNS: List[Tuple[re.Pattern, float]] = [
    (re.compile(_NUM + r"\s*(?:cups|cup|c|glasses|glass)\b"), 8.0),
    (re.compile(_NUM + r"\s*(?:ounces|ounce|oz)\b"), 1.0),
    (re.compile(_NUM + r"\s*(?:milliliters|milliliter|ml)\b"), 0.033814),
    (re.compile(_NUM + r"\s*(?:bottles|bottle|btl)\b"), 16.0),
]
_BARE_NUMBER = re.compile(_NUM)
CUP_OZ = 8.0

def parse_water_oz(text: Optional[str]) -> Optional[int]:
    """
    자유 입력 → 총 oz(정수, half-up 반올림)
    - 단위 없는 숫자만 있으면 첫 숫자를 컵으로 간주
    - 숫자가 하나도 없으면 None (호출부는 합계를 건드리면 안 됨)
    """
    t = (text or "").lower()
    total = 0.0
    matched_unit = False

    for pattern, factor in UNIT_PATTERNS:
        for m in pattern.finditer(t):
            matched_unit = True
            total += float(m.group(1)) * factor

    if not matched_unit:
        m = _BARE_NUMBER.search(t)
        if not m:
            return None
        total = float(m.group(1)) * CUP_OZ

    return round_half_up(total)
