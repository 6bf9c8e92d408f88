"""Tests for the coach prompt builder and chat turns."""

import json

import pytest

from nutrimind.db.sessions import MemorySessionStore
from nutrimind.services.coach import (
    BASE_SYSTEM_PROMPT,
    EMPTY_REPLY,
    HISTORY_LIMIT,
    REPEAT_NOTE,
    build_context_prompt,
    build_system_prompt,
    coach_turn,
    quick_coach,
)

from conftest import FakeGenerator


def test_prompt_without_context_is_the_base_prompt():
    assert build_system_prompt() == BASE_SYSTEM_PROMPT
    assert build_system_prompt({}, []) == BASE_SYSTEM_PROMPT


def test_prompt_includes_profile_with_placeholders():
    prompt = build_system_prompt({"name": "Sam", "sport": "track", "bodyweight": 155})

    assert "- Name: Sam" in prompt
    assert "- Sport / lane: track" in prompt
    assert "- Body data: 155 lb, ? cm" in prompt
    assert "- Identity: Unknown" in prompt
    assert "None specified" in prompt


def test_prompt_includes_last_seven_days():
    days = [{"kcal": 1000 + i, "protein": 100} for i in range(9)]
    days[-1]["label"] = "Today"
    prompt = build_system_prompt(None, days)

    assert "Recent log" in prompt
    assert "- Day 1: 1002 kcal, 100 g protein" in prompt
    assert "- Today: 1008 kcal" in prompt
    assert "1001 kcal" not in prompt


def test_context_prompt_embeds_json():
    prompt = build_context_prompt({"name": "Sam"}, None, [{"kcal": 1}])
    body = prompt.split("guide your answer:", 1)[1]
    assert json.loads(body) == {"baseline": {"name": "Sam"}, "today": {}, "last7Days": [{"kcal": 1}]}


@pytest.mark.asyncio
async def test_turn_sends_system_prompt_and_transcript():
    sessions = MemorySessionStore()
    gen = FakeGenerator(replies=["Eat more rice.", "Drink water."])

    await coach_turn(sessions, "s1", "What should I eat?", gen)
    reply = await coach_turn(sessions, "s1", "And hydration?", gen)

    assert reply == "Drink water."
    sent = gen.calls[1]["messages"]
    assert sent[0]["role"] == "system"
    assert [m["role"] for m in sent[1:]] == ["user", "assistant", "user"]
    assert gen.calls[1]["max_tokens"] == 350
    assert len(await sessions.get("s1")) == 4


@pytest.mark.asyncio
async def test_identical_reply_gets_disclaimer():
    sessions = MemorySessionStore()
    gen = FakeGenerator(replies=["Same answer.", "Same answer."])

    await coach_turn(sessions, "s1", "q1", gen)
    reply = await coach_turn(sessions, "s1", "q2", gen)

    assert reply == "Same answer." + REPEAT_NOTE
    assert len(gen.calls) == 2


@pytest.mark.asyncio
async def test_empty_reply_falls_back():
    gen = FakeGenerator(replies=[""])
    assert await coach_turn(MemorySessionStore(), "s1", "hi", gen) == EMPTY_REPLY


@pytest.mark.asyncio
async def test_transcript_is_bounded():
    sessions = MemorySessionStore()
    gen = FakeGenerator(replies=[f"reply {i}" for i in range(30)])

    for i in range(30):
        await coach_turn(sessions, "s1", f"question {i}", gen)

    transcript = await sessions.get("s1")
    assert len(transcript) == HISTORY_LIMIT
    assert transcript[-1].content == "reply 29"
    # system + at most 40 transcript messages
    assert len(gen.calls[-1]["messages"]) <= HISTORY_LIMIT + 1


@pytest.mark.asyncio
async def test_sessions_are_isolated():
    sessions = MemorySessionStore()
    gen = FakeGenerator(replies=["a", "b"])
    await coach_turn(sessions, "s1", "hi", gen)
    await coach_turn(sessions, "s2", "hi", gen)
    assert len(await sessions.get("s1")) == 2
    assert len(await sessions.get("s2")) == 2


@pytest.mark.asyncio
async def test_quick_coach_is_stateless():
    gen = FakeGenerator(replies=["Try oats."])
    assert await quick_coach(gen, "breakfast?", baseline={"name": "Sam"}) == "Try oats."
    assert gen.calls[0]["temperature"] == 0.65
    assert len(gen.calls[0]["messages"]) == 2
