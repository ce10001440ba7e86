from agents.types import Skill, StructuredProfile, StructuredRole
from config.policy import Difficulty, build_policy
from jd_analysis import analyze_skill_gaps


def _profile(*names):
    return StructuredProfile(candidate_name="c", skills=tuple(Skill(name=name) for name in names))


def _role(primary, secondary=()):
    return StructuredRole(role_title="r", primary_skills=tuple(primary), secondary_skills=tuple(secondary))


def test_gaps_tagged_primary_and_secondary(policy):
    role = _role(["React", "TypeScript", "System Design", "GraphQL"], ["Performance Optimization", "AWS", "CI/CD"])
    profile = _profile("React", "TypeScript", "Node.js", "CSS", "Web Performance")

    report = analyze_skill_gaps(role, profile, policy)

    assert [(gap.skill, gap.type) for gap in report.gaps] == [
        ("System Design", "PRIMARY"),
        ("GraphQL", "PRIMARY"),
        ("Performance Optimization", "SECONDARY"),
        ("AWS", "SECONDARY"),
        ("CI/CD", "SECONDARY"),
    ]
    assert report.primary_missing == 2
    assert report.critical_match_ratio == 0.5
    assert report.difficulty_ceiling == Difficulty.MEDIUM


def test_matching_is_trimmed_and_case_insensitive(policy):
    report = analyze_skill_gaps(_role([" react ", "TYPESCRIPT"]), _profile("React", "typescript "), policy)
    assert report.gaps == ()
    assert report.critical_match_ratio == 1.0
    assert report.difficulty_ceiling is None


def test_no_primary_requirements_means_full_match(policy):
    report = analyze_skill_gaps(_role([], ["AWS"]), _profile(), policy)
    assert report.critical_match_ratio == 1.0
    assert report.difficulty_ceiling is None
    assert [gap.type for gap in report.gaps] == ["SECONDARY"]


def test_ratio_at_threshold_does_not_cap(policy):
    # 3 of 5 primary skills = 0.6, which is not below the 0.6 threshold.
    role = _role(["A", "B", "C", "D", "E"])
    report = analyze_skill_gaps(role, _profile("A", "B", "C"), policy)
    assert report.critical_match_ratio == 0.6
    assert report.difficulty_ceiling is None


def test_cap_level_comes_from_policy():
    policy = build_policy({"difficulty": {"ceiling": {"cap_level": "Easy", "critical_gap_match_threshold": 0.9}}})
    report = analyze_skill_gaps(_role(["A", "B"]), _profile("A"), policy)
    assert report.difficulty_ceiling == Difficulty.EASY
