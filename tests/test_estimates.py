"""Tests for macro estimation parsing and the OpenAI adapter seams."""

import pytest

from nutrimind.services import llm_openai
from nutrimind.services.llm_openai import (
    GeneratorNotReady,
    build_generator,
    estimate_meal_photo,
    estimate_meal_text,
    parse_macros,
)
from nutrimind.services.utils import strip_code_fence, to_number

from conftest import FakeGenerator


def test_strip_code_fence():
    assert strip_code_fence('```json\n{"kcal": 1}\n```') == '{"kcal": 1}'
    assert strip_code_fence('```JSON{"kcal": 1}```') == '{"kcal": 1}'
    assert strip_code_fence('  {"kcal": 1} ') == '{"kcal": 1}'


def test_parse_plain_json():
    m = parse_macros('{"kcal": 650, "protein_g": 42, "carbs_g": 70, "fats_g": 18}')
    assert (m.kcal, m.protein_g, m.carbs_g, m.fats_g) == (650, 42, 70, 18)


def test_parse_fenced_json_with_string_numbers():
    m = parse_macros('```json\n{"kcal": "720", "protein_g": "35.5"}\n```')
    assert m.kcal == 720
    assert m.protein_g == 35.5
    assert m.carbs_g == 0
    assert m.fats_g == 0


def test_non_numeric_fields_default_to_zero():
    m = parse_macros('{"kcal": "lots", "protein_g": null, "carbs_g": NaN, "fats_g": [1]}')
    assert (m.kcal, m.protein_g, m.carbs_g, m.fats_g) == (0, 0, 0, 0)


@pytest.mark.parametrize("text", ["", "about 600 calories", "[1, 2]", "```json\n{oops\n```"])
def test_unparseable_output_returns_none(text):
    assert parse_macros(text) is None


def test_to_number():
    assert to_number("12") == 12
    assert to_number(float("nan")) == 0
    assert to_number(float("inf")) == 0
    assert to_number(True) == 0
    assert to_number({"a": 1}) == 0


@pytest.mark.asyncio
async def test_estimate_meal_text_sends_description():
    gen = FakeGenerator(replies=['{"kcal": 900, "protein_g": 50, "carbs_g": 90, "fats_g": 30}'])
    m = await estimate_meal_text(gen, "Chipotle bowl, chicken, rice")

    assert m.kcal == 900
    call = gen.calls[0]
    assert call["temperature"] == 0
    assert call["messages"][0]["role"] == "system"
    assert call["messages"][1] == {"role": "user", "content": "Chipotle bowl, chicken, rice"}


@pytest.mark.asyncio
async def test_estimate_meal_photo_uses_data_url():
    gen = FakeGenerator(replies=['{"kcal": 500}'])
    m = await estimate_meal_photo(gen, b"\x89PNG", "image/png")

    assert m.kcal == 500
    content = gen.calls[0]["messages"][1]["content"]
    assert content[0]["image_url"]["url"].startswith("data:image/png;base64,")
    assert gen.calls[0]["max_tokens"] == 150


def test_build_generator_requires_key(monkeypatch):
    monkeypatch.setattr(llm_openai.settings, "OPENAI_API_KEY", None)
    with pytest.raises(GeneratorNotReady):
        build_generator()
