"""Run a scripted interview session from the terminal.

The script is a YAML file with ``resume`` and ``job_description`` texts and a
list of ``answers`` (each ``text`` plus ``seconds``). Without an LLM config the
session runs entirely on the deterministic fallbacks.
"""
from __future__ import annotations

import argparse
import random
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from agents.llm_models import bind_llm_models
from agents.types import SessionStatus, SessionSummary
from config.policy import load_policy
from config.settings import settings
from interview_session.interview_session import InterviewSession
from jd_analysis import parse_profile, parse_role


def load_script(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"script must be a mapping: {path}")
    answers = data.get("answers") or []
    if not isinstance(answers, list):
        raise ValueError("script 'answers' must be a list")
    return data


def run_script(script: Dict[str, Any], session: InterviewSession) -> SessionSummary:
    """Drive ``session`` through the scripted answers until it stops."""

    profile = parse_profile(str(script.get("resume", "")))
    role = parse_role(str(script.get("job_description", "")))

    session.start_analysis()
    session.initialize_session(role, profile)
    session.begin_interview(role, profile)

    answers: List[Dict[str, Any]] = list(script.get("answers") or [])
    for entry in answers:
        if session.state.status != SessionStatus.INTERVIEWING:
            break
        session.submit_answer(str(entry.get("text", "")), float(entry.get("seconds", 0)))
        if session.state.status == SessionStatus.GENERATING:
            session.next_question(role, profile)
    return session.summary()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run a scripted interview session")
    parser.add_argument("script", type=Path, help="YAML script with resume, job_description and answers")
    parser.add_argument("--policy", default=settings.POLICY_PATH, help="Policy YAML overriding the defaults")
    parser.add_argument("--llm-config", default=settings.LLM_CONFIG_PATH, help="JSON LLM route config")
    parser.add_argument("--seed", type=int, help="Seed for fallback question selection")
    parser.add_argument("--quiet", action="store_true", help="Print only the summary")
    args = parser.parse_args(argv)

    if args.seed is not None:
        random.seed(args.seed)
    if args.llm_config:
        bind_llm_models(Path(args.llm_config))

    session = InterviewSession(policy=load_policy(args.policy))
    summary = run_script(load_script(args.script), session)

    if not args.quiet:
        for entry in session.state.audit_log:
            print(entry)
    print(summary.model_dump_json(indent=2))
    return 0 if summary.status == SessionStatus.COMPLETED else 1


if __name__ == "__main__":
    raise SystemExit(main())
