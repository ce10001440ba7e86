"""Registry-backed answer evaluator with a deterministic fallback."""
from __future__ import annotations

import logging
from typing import Any, Optional

from agents import fallback
from agents.types import Question, RawEvaluation
from config.policy import PolicyConfig, get_policy
from config.registry import EVAL_KEY, get_model

logger = logging.getLogger(__name__)


def _clamp(value: Any) -> float:
    return max(0.0, min(10.0, float(value)))


def _coerce(raw: Any) -> RawEvaluation:
    data = raw.model_dump() if hasattr(raw, "model_dump") else dict(raw)
    for key in ("accuracy", "depth", "clarity", "relevance"):
        data[key] = _clamp(data[key])
    data["feedback"] = str(data.get("feedback") or "")[:500]
    data["is_fallback"] = bool(data.get("is_fallback", False))
    return RawEvaluation.model_validate(data)


def evaluate_answer(
    question: Question, answer: str, *, policy: Optional[PolicyConfig] = None
) -> RawEvaluation:
    """Evaluate one answer on the four rubric dimensions (0-10 each).

    Any failure of the bound model, including an unbound key or output that
    does not fit the schema, degrades to the keyword/length heuristic and the
    result is flagged ``is_fallback``.
    """

    policy = policy or get_policy()
    try:
        llm = get_model(EVAL_KEY)
        raw = llm(
            inputs={
                "question_text": question.text,
                "target_skill": question.target_skill,
                "difficulty": question.difficulty.value,
                "expected_keywords": list(question.expected_keywords),
                "candidate_answer": answer,
                "dimensions": policy.scoring.weights.model_dump(),
            },
        )
        return _coerce(raw)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Answer evaluation failed, using heuristic: %s", exc)
        return fallback.evaluate(question, answer, policy)


__all__ = ["evaluate_answer", "EVAL_KEY"]
