"""Shared type definitions for the interview engine."""
from datetime import datetime
from enum import Enum
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from config.policy import Difficulty, PolicyConfig

SeniorityLevel = Literal["Junior", "Mid", "Senior"]
GapType = Literal["PRIMARY", "SECONDARY"]
EvaluationMode = Literal["LLM", "FALLBACK_RULE_BASED"]


class SessionStatus(str, Enum):
    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    GENERATING = "GENERATING"
    INTERVIEWING = "INTERVIEWING"
    EVALUATING = "EVALUATING"
    COMPLETED = "COMPLETED"
    TERMINATED = "TERMINATED"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.TERMINATED)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Skill(_Frozen):
    name: str
    level: SeniorityLevel = "Mid"


class StructuredProfile(_Frozen):
    candidate_name: str
    skills: Tuple[Skill, ...] = ()
    experience_years: float = Field(default=0, ge=0)
    primary_role: str = ""


class StructuredRole(_Frozen):
    role_title: str
    primary_skills: Tuple[str, ...] = ()
    secondary_skills: Tuple[str, ...] = ()
    complexity_level: SeniorityLevel = "Mid"
    description: str = ""


class Question(_Frozen):
    id: str
    text: str
    target_skill: str
    difficulty: Difficulty
    expected_keywords: Tuple[str, ...] = ()


class EvaluationCriteria(_Frozen):
    accuracy: float = Field(ge=0.0, le=10.0)
    depth: float = Field(ge=0.0, le=10.0)
    clarity: float = Field(ge=0.0, le=10.0)
    relevance: float = Field(ge=0.0, le=10.0)


class RawEvaluation(EvaluationCriteria):
    """What an evaluator returns for one answer."""

    feedback: str = ""
    is_fallback: bool = False


class AnswerEvaluation(RawEvaluation):
    base_score: float
    time_penalty: float
    skill_gap_penalty: float
    final_score: float
    time_taken_seconds: float


class SkillGap(_Frozen):
    skill: str
    type: GapType


class SkillGapReport(_Frozen):
    gaps: Tuple[SkillGap, ...] = ()
    primary_required: int = 0
    primary_missing: int = 0
    critical_match_ratio: float = 1.0
    difficulty_ceiling: Optional[Difficulty] = None


class Turn(_Frozen):
    question: Question
    answer: str
    evaluation: AnswerEvaluation
    difficulty_before: Difficulty
    difficulty_after: Difficulty
    timestamp: datetime
    critical_failure: bool


class AuditEntry(_Frozen):
    at: datetime
    tag: str
    message: str

    def __str__(self) -> str:
        return f"[{self.at:%H:%M:%S}] [{self.tag}] {self.message}"


class SessionState(_Frozen):
    """Read-only snapshot of one session; replaced wholesale on every change."""

    session_id: str
    status: SessionStatus = SessionStatus.IDLE
    current_difficulty: Difficulty = Difficulty.EASY
    evaluation_mode: EvaluationMode = "LLM"
    active_question: Optional[Question] = None
    turns: Tuple[Turn, ...] = ()
    score_history: Tuple[float, ...] = ()
    consecutive_weak_answers: int = 0
    time_violations: int = 0
    skill_gaps: Tuple[SkillGap, ...] = ()
    difficulty_ceiling: Optional[Difficulty] = None
    analysis_complete: bool = False
    termination_reason: Optional[str] = None
    audit_log: Tuple[AuditEntry, ...] = ()
    policy: PolicyConfig = Field(default_factory=PolicyConfig)


class SessionSummary(_Frozen):
    session_id: str
    status: SessionStatus
    turns_answered: int
    average_score: float
    passed: bool
    termination_reason: Optional[str] = None
    evaluation_mode: EvaluationMode = "LLM"


__all__ = [
    "AnswerEvaluation",
    "AuditEntry",
    "Difficulty",
    "EvaluationCriteria",
    "EvaluationMode",
    "GapType",
    "Question",
    "RawEvaluation",
    "SessionState",
    "SessionStatus",
    "SessionSummary",
    "SeniorityLevel",
    "Skill",
    "SkillGap",
    "SkillGapReport",
    "StructuredProfile",
    "StructuredRole",
    "Turn",
]
