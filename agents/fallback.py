"""Deterministic stand-ins used when the external content services fail."""
from __future__ import annotations

import random
from typing import Iterable, List, Optional, Sequence
from uuid import uuid4

from pydantic import BaseModel, ConfigDict

from agents.types import Question, RawEvaluation, Skill, StructuredProfile, StructuredRole
from config.policy import Difficulty, PolicyConfig


class PoolQuestion(BaseModel):
    """Static question content; difficulty is stamped on when it is asked."""

    model_config = ConfigDict(frozen=True)

    text: str
    target_skill: str
    keywords: tuple[str, ...]


QUESTION_POOL: tuple[PoolQuestion, ...] = (
    PoolQuestion(
        text="Explain the virtual DOM in React and its performance benefits.",
        target_skill="React",
        keywords=("diffing", "reconciliation", "memory", "batching"),
    ),
    PoolQuestion(
        text="What are the differences between LocalStorage, SessionStorage, and Cookies?",
        target_skill="Web Storage",
        keywords=("expiration", "server", "capacity", "persistent"),
    ),
    PoolQuestion(
        text="Explain how closures work in JavaScript and provide a use case.",
        target_skill="JavaScript",
        keywords=("scope", "function", "lexical", "memory"),
    ),
    PoolQuestion(
        text="Describe the CSS Box Model.",
        target_skill="CSS",
        keywords=("margin", "border", "padding", "content"),
    ),
    PoolQuestion(
        text="How do you handle asynchronous operations in Node.js?",
        target_skill="Node.js",
        keywords=("promise", "async", "await", "callback"),
    ),
)


def keyword_hits(answer: str, keywords: Iterable[str]) -> List[str]:
    """Expected keywords present in ``answer`` as case-insensitive substrings."""

    lowered = answer.lower()
    return [kw for kw in keywords if kw.lower() in lowered]


def heuristic_score(question: Question, answer: str, policy: PolicyConfig) -> float:
    rules = policy.fallback
    score = rules.base_score + len(keyword_hits(answer, question.expected_keywords)) * rules.keyword_match_value
    if len(answer) >= rules.length_threshold_chars:
        score += rules.length_bonus
    return min(score, rules.max_score)


def evaluate(question: Question, answer: str, policy: PolicyConfig) -> RawEvaluation:
    """Score an answer from keyword coverage and length alone.

    Accuracy carries the heuristic score; the other dimensions use fixed
    mappings. The result is always flagged ``is_fallback``.
    """

    hits = keyword_hits(answer, question.expected_keywords)
    is_short = len(answer) < policy.fallback.length_threshold_chars
    score = heuristic_score(question, answer, policy)

    feedback = "[Deterministic Evaluation] Score calculated based on length and keyword coverage. "
    if hits:
        feedback += f"Identified {len(hits)} relevant concepts. "
    else:
        feedback += "Answer lacked specific expected technical terminology. "
    if is_short:
        feedback += "Response was brief."

    return RawEvaluation(
        accuracy=min(10.0, score),
        clarity=6.0,
        depth=3.0 if is_short else 6.0,
        relevance=8.0 if hits else 4.0,
        feedback=feedback.strip(),
        is_fallback=True,
    )


def fallback_question(
    difficulty: Difficulty,
    asked_texts: Sequence[str] = (),
    rng: Optional[random.Random] = None,
) -> Question:
    """Pick a pool question, preferring ones not asked yet."""

    chooser = rng or random
    asked = set(asked_texts)
    candidates = [entry for entry in QUESTION_POOL if entry.text not in asked] or list(QUESTION_POOL)
    entry = chooser.choice(candidates)
    return Question(
        id=uuid4().hex,
        text=entry.text,
        target_skill=entry.target_skill,
        difficulty=difficulty,
        expected_keywords=entry.keywords,
    )


def mock_profile(text: str = "") -> StructuredProfile:
    return StructuredProfile(
        candidate_name="Candidate (Fallback Parsing)",
        experience_years=3,
        primary_role="Developer",
        skills=(
            Skill(name="React", level="Mid"),
            Skill(name="TypeScript", level="Mid"),
            Skill(name="JavaScript", level="Senior"),
        ),
    )


def mock_role(text: str = "") -> StructuredRole:
    return StructuredRole(
        role_title="Software Engineer (Fallback Parsing)",
        complexity_level="Mid",
        primary_skills=("React", "TypeScript", "Node.js"),
        secondary_skills=("AWS", "Testing"),
        description=text,
    )


__all__ = [
    "PoolQuestion",
    "QUESTION_POOL",
    "evaluate",
    "fallback_question",
    "heuristic_score",
    "keyword_hits",
    "mock_profile",
    "mock_role",
]
