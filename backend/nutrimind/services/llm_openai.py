# nutrimind/services/llm_openai.py
# OpenAI 텍스트 생성 어댑터 + 끼니 매크로 추정
# - Chat Completions만 사용, 재시도 없음(max_retries=0), 타임아웃 고정
# - JSON 파싱은 최대한 안전하게 (코드펜스 제거, 숫자 아니면 0)

from __future__ import annotations
import asyncio
import base64
import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from openai import AsyncOpenAI, OpenAIError

from nutrimind.core.config import settings
from nutrimind.db.models.schemas import MacroEstimate
from nutrimind.services.utils import strip_code_fence, to_number

log = logging.getLogger(__name__)

# 라우터가 잡아서 {ok: false} 로 바꾸는 외부 호출 실패 (타임아웃 포함)
UPSTREAM_ERRORS = (OpenAIError, httpx.HTTPError, asyncio.TimeoutError)


class GeneratorNotReady(Exception):
    # 서버 설정 미완(키 없음)
    pass


class TextGenerator:
    """프롬프트/메시지 → 텍스트 한 덩어리. 테스트에선 가짜 구현으로 교체"""

    async def generate(
        self,
        messages: List[Dict[str, Any]],
        *,
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        raise NotImplementedError


class OpenAIGenerator(TextGenerator):
    def __init__(self, client: AsyncOpenAI):
        self.client = client

    async def generate(self, messages, *, model, temperature=None, max_tokens=None) -> str:
        kwargs: Dict[str, Any] = {"model": model, "messages": messages}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        chat = await self.client.chat.completions.create(**kwargs)
        text = chat.choices[0].message.content if chat and chat.choices else ""
        return (text or "").strip()


def build_generator() -> TextGenerator:
    api_key = settings.OPENAI_API_KEY
    if not api_key:
        log.error("OPENAI_API_KEY is not set")
        raise GeneratorNotReady("OPENAI_API_KEY not set")
    client = AsyncOpenAI(api_key=api_key, timeout=settings.AI_TIMEOUT_SECONDS, max_retries=0)
    return OpenAIGenerator(client)


def _b64(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")


MEAL_TEXT_PROMPT = """
You estimate calories, protein, carbs, and fats from meal descriptions.

Return ONLY JSON:

{
  "kcal": <number>,
  "protein_g": <number>,
  "carbs_g": <number>,
  "fats_g": <number>
}

Rules:
- Use realistic nutrition values.
- For restaurants (In-N-Out, Chipotle, McDonalds) estimate typical items.
- If multiple foods are listed, add them.
- Aim slightly higher on calories.
- NO explanations. ONLY raw JSON.
"""

MEAL_PHOTO_PROMPT = """
You estimate calories, protein, carbs, and fats from FOOD PHOTOS.

Return ONLY JSON:

{
  "kcal": <number>,
  "protein_g": <number>,
  "carbs_g": <number>,
  "fats_g": <number>
}

Rules:
- Identify the meal visually (burger, fries, bowl, pizza, etc).
- Pay attention to portion size (small/medium/large).
- If it looks like a known fast food item, use typical macros for that item.
- Use the midpoint of common calorie ranges (aim slightly HIGH rather than low).
- No explanations. No notes. No backticks. ONLY raw JSON.
"""


def parse_macros(text: str) -> Optional[MacroEstimate]:
    """
    모델 응답 → MacroEstimate
    - ```json 펜스 제거 후 파싱
    - 필드 없음/숫자 아님/NaN → 0
    - JSON 객체가 아니면 None (라우터가 "could not estimate"로 응답)
    """
    raw = strip_code_fence(text)
    try:
        obj = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        log.warning("Macro estimate returned non-JSON content; ignoring")
        return None
    if not isinstance(obj, dict):
        return None

    return MacroEstimate(
        kcal=to_number(obj.get("kcal")),
        protein_g=to_number(obj.get("protein_g")),
        carbs_g=to_number(obj.get("carbs_g")),
        fats_g=to_number(obj.get("fats_g")),
    )


async def estimate_meal_text(generator: TextGenerator, description: str) -> Optional[MacroEstimate]:
    text = await generator.generate(
        [
            {"role": "system", "content": MEAL_TEXT_PROMPT},
            {"role": "user", "content": description},
        ],
        model=settings.OPENAI_MEAL_MODEL,
        temperature=0,
    )
    return parse_macros(text)


async def estimate_meal_photo(
    generator: TextGenerator,
    image: bytes,
    content_type: str = "image/jpeg",
) -> Optional[MacroEstimate]:
    # 이미지는 data URL로 전달
    content: List[Dict[str, Any]] = [
        {"type": "image_url", "image_url": {"url": f"data:{content_type};base64,{_b64(image)}"}},
        {"type": "text", "text": "Estimate this meal."},
    ]
    text = await generator.generate(
        [
            {"role": "system", "content": MEAL_PHOTO_PROMPT},
            {"role": "user", "content": content},
        ],
        model=settings.OPENAI_VISION_MODEL,
        temperature=0,
        max_tokens=150,
    )
    return parse_macros(text)
