from __future__ import annotations  # Resume vs role skill-gap analysis

from typing import Iterable, List, Set

from agents.types import SkillGap, SkillGapReport, StructuredProfile, StructuredRole
from config.policy import PolicyConfig


def _normalize(skill: str) -> str:  # Comparison key for skill names
    return skill.strip().lower()


def _missing(required: Iterable[str], have: Set[str]) -> List[str]:
    return [skill for skill in required if _normalize(skill) not in have]


def analyze_skill_gaps(
    role: StructuredRole, profile: StructuredProfile, policy: PolicyConfig
) -> SkillGapReport:  # Compare declared skills against role requirements
    have = {_normalize(skill.name) for skill in profile.skills}
    primary_missing = _missing(role.primary_skills, have)
    secondary_missing = _missing(role.secondary_skills, have)

    gaps = [SkillGap(skill=skill, type="PRIMARY") for skill in primary_missing]
    gaps.extend(SkillGap(skill=skill, type="SECONDARY") for skill in secondary_missing)

    primary_required = len(role.primary_skills)
    if primary_required:
        ratio = (primary_required - len(primary_missing)) / primary_required
    else:
        ratio = 1.0

    ceiling_policy = policy.difficulty.ceiling
    ceiling = ceiling_policy.cap_level if ratio < ceiling_policy.critical_gap_match_threshold else None
    return SkillGapReport(
        gaps=tuple(gaps),
        primary_required=primary_required,
        primary_missing=len(primary_missing),
        critical_match_ratio=ratio,
        difficulty_ceiling=ceiling,
    )


__all__ = ["analyze_skill_gaps"]
