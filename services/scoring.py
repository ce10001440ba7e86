"""Scoring and difficulty adaptation kernel.

Pure functions over explicit inputs. Nothing here reads session history or
mutates anything, so each rule can be checked without building a session.
"""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence, Tuple

from agents.types import EvaluationCriteria, GapType, SkillGap
from config.policy import Difficulty, PolicyConfig


def round_half_up(value: float, places: int) -> float:
    """Round half away from zero at ``places`` decimals."""

    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def calculate_score(criteria: EvaluationCriteria, policy: PolicyConfig) -> float:
    """Weighted sum of the four rubric dimensions, at 2 decimals."""

    weights = policy.scoring.weights
    score = (
        criteria.accuracy * weights.accuracy
        + criteria.depth * weights.depth
        + criteria.clarity * weights.clarity
        + criteria.relevance * weights.relevance
    )
    return round_half_up(score, 2)


def calculate_time_penalty(seconds: float, policy: PolicyConfig) -> Tuple[float, bool]:
    """Return ``(penalty, is_violation)`` for an answer taking ``seconds``."""

    timing = policy.timing
    if seconds <= timing.penalty_start_sec:
        return 0.0, False
    steps = math.ceil((seconds - timing.penalty_start_sec) / timing.penalty_step_sec)
    penalty = round_half_up(steps * timing.penalty_per_step, 1)
    return penalty, penalty > 0


def skill_gap_penalty(
    target_skill: str, gaps: Iterable[SkillGap], policy: PolicyConfig
) -> Tuple[float, Optional[GapType]]:
    """Penalty for a question that targets a skill missing from the resume."""

    wanted = target_skill.lower()
    for gap in gaps:
        if gap.skill.lower() != wanted:
            continue
        if gap.type == "PRIMARY":
            return policy.skill_gaps.primary_missing, "PRIMARY"
        return policy.skill_gaps.secondary_missing, "SECONDARY"
    return 0.0, None


def final_score(base: float, time_penalty: float, gap_penalty: float) -> float:
    return max(0.0, round_half_up(base - time_penalty - gap_penalty, 2))


def next_difficulty(
    current: Difficulty,
    score: float,
    ceiling: Optional[Difficulty],
    policy: PolicyConfig,
) -> Difficulty:
    """Escalate on strong answers, downgrade on weak ones, never above ``ceiling``."""

    if score >= policy.scoring.strong_score:
        proposed = current.step(1)
    elif score <= policy.scoring.weak_score:
        proposed = current.step(-1)
    else:
        proposed = current

    if ceiling is not None and proposed.rank > ceiling.rank:
        return ceiling
    return proposed


def strike_delta(score: float, policy: PolicyConfig) -> int:
    """Strikes charged for one answer; zero means the answer was not weak."""

    if score <= policy.scoring.critical_fail_score:
        return policy.termination.critical_fail_strikes
    if score <= policy.scoring.weak_score:
        return 1
    return 0


def is_critical_failure(score: float, policy: PolicyConfig) -> bool:
    return score <= policy.scoring.critical_fail_score


def initial_difficulty(complexity_level: Optional[str], policy: PolicyConfig) -> Difficulty:
    return policy.difficulty.initial.get(complexity_level or "", policy.difficulty.default)


def average_score(history: Sequence[float]) -> float:
    if not history:
        return 0.0
    return round_half_up(sum(history) / len(history), 2)


__all__ = [
    "average_score",
    "calculate_score",
    "calculate_time_penalty",
    "final_score",
    "initial_difficulty",
    "is_critical_failure",
    "next_difficulty",
    "round_half_up",
    "skill_gap_penalty",
    "strike_delta",
]
