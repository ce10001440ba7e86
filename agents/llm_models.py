"""Bind LLM-backed content services into the model registry."""
from __future__ import annotations

import json
from pathlib import Path
from textwrap import dedent
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, Field

from agents.question_generator import QuestionDraft
from agents.types import StructuredProfile, StructuredRole
from config.registry import EVAL_KEY, PROFILE_PARSER_KEY, QUESTION_KEY, ROLE_PARSER_KEY, bind_model
from config.routes import LlmRoute, load_app_registry
from llm_gateway import HttpClient, call

PROFILE_TARGET = "jd_analysis.parse_profile"
ROLE_TARGET = "jd_analysis.parse_role"
QUESTION_TARGET = "agents.generate_question"
EVAL_TARGET = "agents.evaluate_answer"


class EvaluationDraft(BaseModel):
    """Rubric scores as returned by the evaluator model."""

    accuracy: float = Field(ge=0.0, le=10.0)
    depth: float = Field(ge=0.0, le=10.0)
    clarity: float = Field(ge=0.0, le=10.0)
    relevance: float = Field(ge=0.0, le=10.0)
    feedback: str


def _profile_task(inputs: Dict[str, Any]) -> str:
    return dedent(
        f"""
        Analyze this resume text and extract structured data.
        Return candidate_name, experience_years (number), primary_role and skills,
        where each skill has a name and a level of Junior, Mid or Senior.

        Resume:
        {inputs["text"]}
        """
    ).strip()


def _role_task(inputs: Dict[str, Any]) -> str:
    return dedent(
        f"""
        Analyze this job description and extract structured data.
        Return role_title, complexity_level (Junior, Mid or Senior), primary_skills
        (critical, non-negotiable core skills) and secondary_skills (nice-to-have,
        bonus or peripheral skills). Set description to an empty string.

        Job description:
        {inputs["text"]}
        """
    ).strip()


def _question_task(inputs: Dict[str, Any]) -> str:
    asked: List[str] = inputs.get("asked_questions") or []
    return dedent(
        f"""
        Context: technical interview.
        Role: {inputs["role_title"]} ({inputs["complexity_level"]}).
        Candidate: {inputs["experience_years"]} years of experience.
        Current difficulty: {inputs["difficulty"]}.

        Primary skills (critical): {", ".join(inputs["primary_skills"])}.
        Secondary skills: {", ".join(inputs["secondary_skills"])}.
        Candidate skills: {", ".join(inputs["candidate_skills"])}.
        Previous questions: {" | ".join(asked) or "(none)"}.

        Generate a single technical interview question that does not repeat a previous one.
        - Focus on primary skills unless they are already covered.
        - Easy: basic definitions. Medium: application and trade-offs. Hard: internals and system design.
        Return text, target_skill (one of the listed skills) and expected_keywords.
        """
    ).strip()


def _evaluation_task(inputs: Dict[str, Any]) -> str:
    weights = inputs["dimensions"]
    return dedent(
        f"""
        You are a strict technical interviewer.
        Question: "{inputs["question_text"]}"
        Target skill: {inputs["target_skill"]}
        Difficulty: {inputs["difficulty"]}
        Expected keywords: {", ".join(inputs["expected_keywords"])}

        Candidate answer: "{inputs["candidate_answer"]}"

        Evaluate strictly, each dimension from 0 to 10:
        1. accuracy ({weights["accuracy"]}): is it factually correct?
        2. depth ({weights["depth"]}): is the depth appropriate for the difficulty?
        3. clarity ({weights["clarity"]}): is it structured?
        4. relevance ({weights["relevance"]}): does it answer the prompt?
        Give 0 to nonsense, empty or completely wrong answers. Provide constructive feedback.
        """
    ).strip()


_TARGETS: Dict[str, tuple[str, Type[BaseModel], Callable[[Dict[str, Any]], str]]] = {
    PROFILE_TARGET: (PROFILE_PARSER_KEY, StructuredProfile, _profile_task),
    ROLE_TARGET: (ROLE_PARSER_KEY, StructuredRole, _role_task),
    QUESTION_TARGET: (QUESTION_KEY, QuestionDraft, _question_task),
    EVAL_TARGET: (EVAL_KEY, EvaluationDraft, _evaluation_task),
}


def _route_model(
    route: LlmRoute,
    schema: Type[BaseModel],
    build_task: Callable[[Dict[str, Any]], str],
    client: Optional[HttpClient],
) -> Callable[..., BaseModel]:
    def _invoke(*, inputs: Dict[str, Any], **_: Any) -> BaseModel:
        return call(build_task(inputs), schema, cfg=route, client=client)

    return _invoke


def bind_llm_models(config_path: Path, *, client: Optional[HttpClient] = None) -> List[str]:
    """Bind every content service to its configured route; returns bound keys."""

    registry = load_app_registry(config_path, {target: entry[1] for target, entry in _TARGETS.items()})
    bound: List[str] = []
    for target, (key, schema, build_task) in _TARGETS.items():
        route, _ = registry[target]
        bind_model(key, _route_model(route, schema, build_task, client))
        bound.append(key)
    return bound


def describe_targets() -> str:
    """JSON skeleton of the registry section an LLM config file needs."""

    return json.dumps({"registry": {target: "<route-id>" for target in _TARGETS}}, indent=2)


__all__ = [
    "EVAL_TARGET",
    "EvaluationDraft",
    "PROFILE_TARGET",
    "QUESTION_TARGET",
    "ROLE_TARGET",
    "bind_llm_models",
    "describe_targets",
]
