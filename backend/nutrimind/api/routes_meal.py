# nutrimind/api/routes_meal.py
# 끼니 매크로 추정: 텍스트 설명 / 사진 업로드
# 외부 호출 실패나 JSON 깨짐은 200 + ok:false (프론트는 status 대신 ok로 분기)

from __future__ import annotations
import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, File, Response, UploadFile

from nutrimind.core.config import settings
from nutrimind.core.deps import get_generator
from nutrimind.db.models.schemas import MealTextIn
from nutrimind.services.llm_openai import (
    UPSTREAM_ERRORS,
    TextGenerator,
    estimate_meal_photo,
    estimate_meal_text,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["meal"])

@router.post("/meal")
async def estimate_from_text(
    payload: MealTextIn,
    response: Response,
    make_generator: Callable[[], TextGenerator] = Depends(get_generator),
):
    """식사 설명 → kcal/protein_g/carbs_g/fats_g"""
    description = (payload.description or "").strip()
    if len(description) < 2:
        response.status_code = 400
        return {
            "ok": False,
            "message": "Please describe your meal like 'Chipotle bowl, chicken, rice, cheese'.",
        }

    generator = make_generator()
    try:
        macros = await estimate_meal_text(generator, description)
    except UPSTREAM_ERRORS as e:
        log.warning("meal estimate failed: %s", type(e).__name__)
        return {"ok": False, "message": "Couldn't reach the estimator. Please try again."}

    if macros is None:
        return {"ok": False, "message": "Could not estimate macros for this meal."}
    return {"ok": True, **macros.model_dump()}

@router.post("/meal-photo")
async def estimate_from_photo(
    response: Response,
    file: Optional[UploadFile] = File(None),
    make_generator: Callable[[], TextGenerator] = Depends(get_generator),
):
    """음식 사진 → 매크로 (multipart 필드명 file)"""
    if file is None:
        response.status_code = 400
        return {"ok": False, "message": "No photo received."}

    # 파일 타입 검증
    if file.content_type and not file.content_type.startswith("image/"):
        response.status_code = 400
        return {"ok": False, "message": "Please upload an image file."}

    image_bytes = await file.read()
    if not image_bytes:
        response.status_code = 400
        return {"ok": False, "message": "No photo received."}
    if len(image_bytes) > settings.MAX_PHOTO_BYTES:
        response.status_code = 400
        return {"ok": False, "message": "Photo is too large. Please keep it under 10MB."}

    generator = make_generator()
    try:
        macros = await estimate_meal_photo(generator, image_bytes, file.content_type or "image/jpeg")
    except UPSTREAM_ERRORS as e:
        log.warning("meal photo estimate failed: %s", type(e).__name__)
        return {"ok": False, "message": "Couldn't reach the estimator. Please try again."}

    if macros is None:
        return {"ok": False, "message": "Could not read macros from this photo. Try a clearer shot."}
    return {"ok": True, **macros.model_dump()}
