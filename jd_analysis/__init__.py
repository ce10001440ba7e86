from __future__ import annotations  # Re-export jd_analysis public API

from .jd_analysis import parse_profile, parse_role  # noqa: F401
from .skill_gaps import analyze_skill_gaps  # noqa: F401

__all__ = [
    "analyze_skill_gaps",
    "parse_profile",
    "parse_role",
]
