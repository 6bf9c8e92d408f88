# nutrimind/db/models/schemas.py
# Pydantic 모델 정의
# BaselineIn: 베이스라인 폼 입력 (유연 필드, 전부 optional)
# DayEntry/WeightEntry: 로그 저장 문서
# *In: 라우트 요청 바디
from __future__ import annotations
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from nutrimind.services.utils import non_negative

# # 베이스라인(프로필): 프론트 폼 대응 (camelCase 그대로)
class BaselineIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # 기본 정보
    name: str = ""
    role: str = ""
    sport: str = Field(default="", alias="mainSport")
    position: str = ""

    # 목표
    mainGoal: str = ""
    goalWindow: str = "3 MONTHS"

    # 신체/훈련 (폼은 문자열로 보냄 → 숫자로 정리)
    bodyweight: float = 0
    height: float = 0
    trainingDays: float = 0
    foodBudget: str = "FLEXIBLE"

    # 제약/선호
    constraints: str = ""
    favoriteFoods: str = ""
    culturalBackground: str = ""
    timeWindows: str = ""
    injuries: str = ""

    @field_validator("bodyweight", "height", "trainingDays", mode="before")
    @classmethod
    def _v_number(cls, v):
        return non_negative(v)

    @field_validator(
        "name", "role", "sport", "position", "mainGoal", "goalWindow", "foodBudget",
        "constraints", "favoriteFoods", "culturalBackground", "timeWindows", "injuries",
        mode="before",
    )
    @classmethod
    def _v_text(cls, v):
        return "" if v is None else str(v).strip()

# # 저장 문서 (편집 이력 없이 현재 스냅샷 하나)
class Baseline(BaselineIn):
    savedAt: Optional[str] = None

class Targets(BaseModel):
    proteinLow: int = 0
    proteinHigh: int = 0
    proteinTarget: int = 0
    calorieTarget: int = 0
    hydrationTarget: int = 0

class Meal(BaseModel):
    description: str = "Meal"
    kcal: float = 0
    protein: float = 0
    carbs: float = 0
    fats: float = 0

# # 하루 로그 (날짜당 1개, 최근 7일)
class DayEntry(BaseModel):
    date: str
    kcal: float = 0
    protein: float = 0
    carbs: float = 0
    fats: float = 0
    hydrationOz: float = 0
    meals: List[Meal] = Field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return self.kcal > 0 or self.protein > 0 or self.hydrationOz > 0

class WeightEntry(BaseModel):
    date: str
    weight: float

class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str

class Article(BaseModel):
    title: str
    url: str
    source: str = "Health news"

class MacroEstimate(BaseModel):
    kcal: float = 0
    protein_g: float = 0
    carbs_g: float = 0
    fats_g: float = 0

# # 요청 바디
class MealIn(BaseModel):
    description: Optional[str] = None
    kcal: Any = 0
    protein: Any = 0
    carbs: Any = 0
    fats: Any = 0

class MealTextIn(BaseModel):
    description: Optional[str] = None

class WaterIn(BaseModel):
    text: Optional[str] = None

class WeightIn(BaseModel):
    weight: Any = None

class ChatIn(BaseModel):
    message: Optional[str] = None
    baseline: Optional[Dict[str, Any]] = None
    last7Days: Optional[List[Dict[str, Any]]] = None
    history: Optional[List[Dict[str, Any]]] = None  # 구버전 프론트 호환

class QuickCoachIn(BaseModel):
    message: Optional[str] = None
    baseline: Optional[Dict[str, Any]] = None
    today: Optional[Dict[str, Any]] = None
    history: Optional[List[Dict[str, Any]]] = None
