"""Tests for AI-backed task generation and its rule-based fallback."""
from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from weekplan.core.config import Settings
from weekplan.core.errors import PlanInputError
from weekplan.services import task_generation
from weekplan.services.task_generation import (
    LLMTaskGenerator,
    build_llm_generator,
    generate_tasks,
    parse_suggestions,
    suggestions_to_tasks,
)
from weekplan.services.weekly_planner import build_default_profile


class _FakeCompletions:
    def __init__(self, content: str | None = None, error: Exception | None = None):
        self.content = content
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _fake_generator(content: str | None = None, error: Exception | None = None) -> LLMTaskGenerator:
    completions = _FakeCompletions(content, error)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return LLMTaskGenerator(client, "gpt-test")


def _suggestion(**overrides) -> dict:
    payload = {
        "title": "Read chapter",
        "description": "Chapter 1",
        "estimated_minutes": 40,
        "difficulty": "easy",
        "goal_index": 0,
        "day_index": 0,
        "start_time": "18:00",
    }
    payload.update(overrides)
    return payload


def test_parse_suggestions_drops_invalid_entries() -> None:
    payload = {"tasks": [_suggestion(), _suggestion(title=""), _suggestion(start_time="25:00"), "junk"]}

    suggestions = parse_suggestions(payload)

    assert [item.title for item in suggestions] == ["Read chapter"]


def test_parse_suggestions_caps_and_tolerates_shapes() -> None:
    assert len(parse_suggestions({"tasks": [_suggestion() for _ in range(40)]})) == 30
    assert parse_suggestions({"tasks": "nope"}) == []
    assert len(parse_suggestions([_suggestion()])) == 1


def test_suggestions_to_tasks_maps_goals_and_sorts(make_goal, today, ids) -> None:
    goals = [make_goal("g1"), make_goal("g2", category="Fitness")]
    suggestions = parse_suggestions(
        [
            _suggestion(title="late", day_index=1, start_time="20:00", goal_index=1),
            _suggestion(title="early", day_index=1, start_time="07:00", goal_index=9),
            _suggestion(title="today", day_index=0),
        ]
    )

    tasks = suggestions_to_tasks(suggestions, goals, today=today, id_factory=ids)

    assert [task.title for task in tasks] == ["today", "early", "late"]
    assert [task.goal_id for task in tasks] == ["g1", "g1", "g2"]
    assert tasks[1].scheduled_date.isoformat() == "2025-01-07"
    assert all(task.status == "pending" for task in tasks)


def test_generate_tasks_requires_goals() -> None:
    with pytest.raises(PlanInputError):
        generate_tasks([], build_default_profile())


def test_generate_tasks_uses_rules_without_ai(make_goal, today, now, ids) -> None:
    result = generate_tasks([make_goal()], build_default_profile(), today=today, now=now, id_factory=ids)

    assert result.ai_powered is False
    assert len(result.tasks) == 20


def test_generate_tasks_uses_llm_when_available(make_goal, today, now, ids) -> None:
    generator = _fake_generator(json.dumps({"tasks": [_suggestion(), _suggestion(day_index=2)]}))

    result = generate_tasks(
        [make_goal()],
        build_default_profile(),
        use_ai=True,
        today=today,
        now=now,
        id_factory=ids,
        llm_generator=generator,
    )

    assert result.ai_powered is True
    assert [task.day_index for task in result.tasks] == [0, 2]
    assert [step.phase for step in result.reasoning_trail] == ["understand", "execute", "update"]
    call = generator.client.chat.completions.calls[0]
    assert call["model"] == "gpt-test"
    assert call["response_format"] == {"type": "json_object"}


@pytest.mark.parametrize(
    "generator",
    [
        _fake_generator(error=RuntimeError("timeout")),
        _fake_generator("not json"),
        _fake_generator(json.dumps({"tasks": []})),
    ],
    ids=["error", "malformed", "empty"],
)
def test_generate_tasks_falls_back_to_rules(make_goal, today, now, ids, generator) -> None:
    result = generate_tasks(
        [make_goal()],
        build_default_profile(),
        use_ai=True,
        today=today,
        now=now,
        id_factory=ids,
        llm_generator=generator,
    )

    assert result.ai_powered is False
    assert len(result.tasks) == 20


def test_generate_tasks_without_api_key_uses_rules(monkeypatch, make_goal, today, now, ids) -> None:
    monkeypatch.setattr(task_generation.settings, "openai_api_key", None)

    result = generate_tasks([make_goal()], build_default_profile(), use_ai=True, today=today, now=now, id_factory=ids)

    assert result.ai_powered is False


def test_build_llm_generator_needs_key() -> None:
    assert build_llm_generator(Settings(_env_file=None, openai_api_key=None)) is None

    generator = build_llm_generator(Settings(_env_file=None, openai_api_key="sk-test", openai_model="gpt-mini"))

    assert generator is not None
    assert generator.model == "gpt-mini"
