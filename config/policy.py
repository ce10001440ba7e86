"""Interview policy rulebook.

Every weight, threshold and limit the engine applies lives here. The scoring
kernel and the session controller read these values and never hard-code their
own. Defaults are compiled in; a YAML file named by ``POLICY_PATH`` may override
any subset of them.
"""
from __future__ import annotations

import os
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .settings import settings


class Difficulty(str, Enum):
    """Question difficulty, totally ordered Easy < Medium < Hard."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @property
    def rank(self) -> int:
        return _DIFFICULTY_ORDER.index(self)

    def step(self, delta: int) -> "Difficulty":
        """Move ``delta`` levels, saturating at both ends."""

        index = min(max(self.rank + delta, 0), len(_DIFFICULTY_ORDER) - 1)
        return _DIFFICULTY_ORDER[index]


_DIFFICULTY_ORDER = (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD)


class PolicyConfigError(ValueError):
    """Raised when a policy file cannot be read or validated."""


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class DimensionWeights(_Section):
    accuracy: float = Field(default=0.40, ge=0.0, le=1.0)
    depth: float = Field(default=0.30, ge=0.0, le=1.0)
    clarity: float = Field(default=0.15, ge=0.0, le=1.0)
    relevance: float = Field(default=0.15, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _sum_to_one(self) -> "DimensionWeights":
        total = self.accuracy + self.depth + self.clarity + self.relevance
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"dimension weights must sum to 1.0, got {total:.4f}")
        return self


class ScoringPolicy(_Section):
    weights: DimensionWeights = Field(default_factory=DimensionWeights)
    strong_score: float = 8.0
    weak_score: float = 4.5
    critical_fail_score: float = 2.0
    passing_threshold: float = 6.0

    @model_validator(mode="after")
    def _ordered_thresholds(self) -> "ScoringPolicy":
        if not self.critical_fail_score <= self.weak_score < self.strong_score:
            raise ValueError("expected critical_fail_score <= weak_score < strong_score")
        return self


class FallbackScoringPolicy(_Section):
    keyword_match_value: float = Field(default=2.0, ge=0.0)
    length_threshold_chars: int = Field(default=50, ge=0)
    length_bonus: float = Field(default=1.0, ge=0.0)
    base_score: float = Field(default=4.0, ge=0.0)
    # Heuristic scores stay below a perfect 10.
    max_score: float = Field(default=8.5, ge=0.0, lt=10.0)


class TimingPolicy(_Section):
    limit_sec: float = Field(default=60, gt=0)
    penalty_start_sec: float = Field(default=60, ge=0)
    penalty_step_sec: float = Field(default=5, gt=0)
    penalty_per_step: float = Field(default=0.5, ge=0)
    max_violations_allowed: int = Field(default=2, ge=0)
    min_answer_time_ms: float = Field(default=2000, ge=0)


class CeilingPolicy(_Section):
    critical_gap_match_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    cap_level: Difficulty = Difficulty.MEDIUM


class DifficultyPolicy(_Section):
    initial: Dict[str, Difficulty] = Field(
        default_factory=lambda: {
            "Senior": Difficulty.MEDIUM,
            "Mid": Difficulty.EASY,
            "Junior": Difficulty.EASY,
        }
    )
    default: Difficulty = Difficulty.EASY
    ceiling: CeilingPolicy = Field(default_factory=CeilingPolicy)


class SkillGapPolicy(_Section):
    primary_missing: float = Field(default=1.5, ge=0.0)
    secondary_missing: float = Field(default=0.5, ge=0.0)


class TerminationPolicy(_Section):
    max_questions: int = Field(default=5, ge=1)
    strike_limit: int = Field(default=3, ge=1)
    critical_fail_strikes: int = Field(default=2, ge=1)


class EdgeCasePolicy(_Section):
    empty_answer_score: float = Field(default=0, ge=0, le=10)
    spam_answer_score: float = Field(default=0, ge=0, le=10)


class PolicyConfig(_Section):
    """Immutable rulebook shared by every session in the process."""

    scoring: ScoringPolicy = Field(default_factory=ScoringPolicy)
    fallback: FallbackScoringPolicy = Field(default_factory=FallbackScoringPolicy)
    timing: TimingPolicy = Field(default_factory=TimingPolicy)
    difficulty: DifficultyPolicy = Field(default_factory=DifficultyPolicy)
    skill_gaps: SkillGapPolicy = Field(default_factory=SkillGapPolicy)
    termination: TerminationPolicy = Field(default_factory=TerminationPolicy)
    edge_cases: EdgeCasePolicy = Field(default_factory=EdgeCasePolicy)


def _load_yaml(path: str) -> Any:
    import yaml

    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def build_policy(overrides: Optional[Mapping[str, Any]] = None) -> PolicyConfig:
    """Validate ``overrides`` on top of the compiled-in defaults."""

    try:
        return PolicyConfig.model_validate(dict(overrides or {}))
    except ValidationError as exc:
        raise PolicyConfigError(str(exc)) from exc


def load_policy(path: Optional[str] = None) -> PolicyConfig:
    """Read a policy YAML file; no path means the defaults."""

    if not path:
        return PolicyConfig()
    if not os.path.exists(path):
        raise PolicyConfigError(f"policy file not found: {path}")
    data = _load_yaml(path)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PolicyConfigError(f"policy file must contain a mapping: {path}")
    return build_policy(data)


_policy: Optional[PolicyConfig] = None


def get_policy() -> PolicyConfig:
    """Return the process-wide policy, loading it on first use."""

    global _policy
    if _policy is None:
        _policy = load_policy(settings.POLICY_PATH)
    return _policy


def reset_policy_cache() -> None:
    global _policy
    _policy = None


__all__ = [
    "CeilingPolicy",
    "Difficulty",
    "DifficultyPolicy",
    "DimensionWeights",
    "EdgeCasePolicy",
    "FallbackScoringPolicy",
    "PolicyConfig",
    "PolicyConfigError",
    "ScoringPolicy",
    "SkillGapPolicy",
    "TerminationPolicy",
    "TimingPolicy",
    "build_policy",
    "get_policy",
    "load_policy",
    "reset_policy_cache",
]
