"""Registry-backed question generator with a static-pool fallback."""
from __future__ import annotations

import logging
from typing import Any, List, Sequence
from uuid import uuid4

from pydantic import BaseModel, Field

from agents import fallback
from agents.types import Question, StructuredProfile, StructuredRole
from config.policy import Difficulty
from config.registry import QUESTION_KEY, get_model

logger = logging.getLogger(__name__)


class QuestionDraft(BaseModel):
    """Question content as produced by the generator model."""

    text: str = Field(min_length=1)
    target_skill: str = Field(min_length=1)
    expected_keywords: List[str] = Field(default_factory=list)


def _from_draft(raw: Any, difficulty: Difficulty) -> Question:
    draft = QuestionDraft.model_validate(raw.model_dump() if hasattr(raw, "model_dump") else raw)
    return Question(
        id=uuid4().hex,
        text=draft.text.strip(),
        target_skill=draft.target_skill.strip(),
        difficulty=difficulty,
        expected_keywords=tuple(draft.expected_keywords),
    )


def generate_question(
    role: StructuredRole,
    profile: StructuredProfile,
    difficulty: Difficulty,
    asked_texts: Sequence[str] = (),
) -> Question:
    """Ask the bound model for one new question at ``difficulty``.

    A repeated question text counts as a failure, as does any model error;
    both fall back to the static pool.
    """

    try:
        llm = get_model(QUESTION_KEY)
        raw = llm(
            inputs={
                "role_title": role.role_title,
                "complexity_level": role.complexity_level,
                "primary_skills": list(role.primary_skills),
                "secondary_skills": list(role.secondary_skills),
                "candidate_skills": [skill.name for skill in profile.skills],
                "experience_years": profile.experience_years,
                "difficulty": difficulty.value,
                "asked_questions": list(asked_texts),
            },
        )
        question = _from_draft(raw, difficulty)
        if question.text in asked_texts:
            raise ValueError("generator repeated an earlier question")
        return question
    except Exception as exc:  # noqa: BLE001
        logger.warning("Question generation failed, using fallback pool: %s", exc)
        return fallback.fallback_question(difficulty, asked_texts)


__all__ = ["QuestionDraft", "generate_question", "QUESTION_KEY"]
