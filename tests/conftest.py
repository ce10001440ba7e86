import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from agents.types import Question, RawEvaluation, Skill, StructuredProfile, StructuredRole
from config.policy import Difficulty, PolicyConfig, reset_policy_cache
from config.registry import clear_models
from interview_session import InterviewSession


@pytest.fixture(autouse=True)
def isolated_registry():
    clear_models()
    reset_policy_cache()
    try:
        yield
    finally:
        clear_models()
        reset_policy_cache()


@pytest.fixture
def policy():
    return PolicyConfig()


@pytest.fixture
def profile():
    return StructuredProfile(
        candidate_name="Alex Chen",
        experience_years=3,
        primary_role="Frontend Developer",
        skills=(
            Skill(name="React", level="Mid"),
            Skill(name="TypeScript", level="Mid"),
            Skill(name="Node.js", level="Junior"),
            Skill(name="CSS", level="Senior"),
        ),
    )


@pytest.fixture
def role():
    return StructuredRole(
        role_title="Frontend Engineer",
        complexity_level="Mid",
        primary_skills=("React", "TypeScript", "Node.js"),
        secondary_skills=("AWS",),
    )


def make_question(skill="React", difficulty=Difficulty.EASY, keywords=("diffing", "reconciliation")):
    return Question(
        id=f"q-{skill}",
        text=f"Tell me about {skill}.",
        target_skill=skill,
        difficulty=difficulty,
        expected_keywords=tuple(keywords),
    )


class ScriptedEvaluator:
    """Evaluator double returning queued criteria; each entry is one score for all four dimensions."""

    def __init__(self, scores=(), is_fallback=False):
        self.scores = list(scores)
        self.is_fallback = is_fallback
        self.calls = []

    def __call__(self, question, answer):
        self.calls.append((question, answer))
        score = self.scores.pop(0) if self.scores else 7.0
        return RawEvaluation(
            accuracy=score,
            depth=score,
            clarity=score,
            relevance=score,
            feedback="scripted",
            is_fallback=self.is_fallback,
        )


@pytest.fixture
def ready_session(role, profile, policy):
    """Build a session already analyzed and parked in ready IDLE."""

    def _build(evaluator=None, role_override=None, profile_override=None, **kwargs):
        session = InterviewSession(policy=kwargs.pop("policy", policy), evaluator=evaluator or ScriptedEvaluator(), **kwargs)
        session.start_analysis()
        session.initialize_session(role_override or role, profile_override or profile)
        return session

    return _build


LONG_ANSWER = "A reasonably detailed answer that explains the idea with an example."


def answer_turn(session, skill="React", seconds=30.0, text=LONG_ANSWER):
    """Present a question for ``skill`` if needed and submit ``text``."""

    question = make_question(skill, session.state.current_difficulty)
    if session.state.analysis_complete and session.state.status.value == "IDLE":
        session.start_interview(question)
    else:
        session.present_question(question)
    return session.submit_answer(text, seconds)
