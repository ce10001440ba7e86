import pytest

from agents.types import EvaluationCriteria, SkillGap
from config.policy import Difficulty, build_policy
from services import scoring


def _criteria(accuracy, depth, clarity, relevance):
    return EvaluationCriteria(accuracy=accuracy, depth=depth, clarity=clarity, relevance=relevance)


def test_perfect_criteria_score_ten(policy):
    assert scoring.calculate_score(_criteria(10, 10, 10, 10), policy) == 10.0


def test_weighted_score_rounds_to_two_places(policy):
    # 0.4*7 + 0.3*5 + 0.15*9 + 0.15*3 = 6.1
    assert scoring.calculate_score(_criteria(7, 5, 9, 3), policy) == 6.1
    assert scoring.calculate_score(_criteria(3.33, 3.33, 3.33, 3.33), policy) == 3.33


def test_round_half_up():
    assert scoring.round_half_up(2.675, 2) == 2.68
    assert scoring.round_half_up(0.25, 1) == 0.3
    assert scoring.round_half_up(1.0, 1) == 1.0


@pytest.mark.parametrize(
    "seconds,penalty,violation",
    [
        (0, 0.0, False),
        (59.9, 0.0, False),
        (60, 0.0, False),
        (65, 0.5, True),
        (66, 1.0, True),
        (70, 1.0, True),
        (71, 1.5, True),
    ],
)
def test_time_penalty(policy, seconds, penalty, violation):
    assert scoring.calculate_time_penalty(seconds, policy) == (penalty, violation)


def test_skill_gap_penalty_lookup(policy):
    gaps = (SkillGap(skill="GraphQL", type="PRIMARY"), SkillGap(skill="AWS", type="SECONDARY"))
    assert scoring.skill_gap_penalty("graphql", gaps, policy) == (1.5, "PRIMARY")
    assert scoring.skill_gap_penalty("AWS", gaps, policy) == (0.5, "SECONDARY")
    assert scoring.skill_gap_penalty("React", gaps, policy) == (0.0, None)


def test_final_score_never_negative():
    assert scoring.final_score(1.0, 1.5, 1.5) == 0.0
    assert scoring.final_score(9.5, 0.5, 0.0) == 9.0


@pytest.mark.parametrize(
    "current,score,expected",
    [
        (Difficulty.EASY, 8.0, Difficulty.MEDIUM),
        (Difficulty.MEDIUM, 9.0, Difficulty.HARD),
        (Difficulty.HARD, 10.0, Difficulty.HARD),
        (Difficulty.HARD, 4.5, Difficulty.MEDIUM),
        (Difficulty.EASY, 0.0, Difficulty.EASY),
        (Difficulty.MEDIUM, 6.0, Difficulty.MEDIUM),
    ],
)
def test_next_difficulty(policy, current, score, expected):
    assert scoring.next_difficulty(current, score, None, policy) == expected


def test_ceiling_is_a_hard_upper_bound(policy):
    assert scoring.next_difficulty(Difficulty.MEDIUM, 9.5, Difficulty.MEDIUM, policy) == Difficulty.MEDIUM
    assert scoring.next_difficulty(Difficulty.HARD, 6.0, Difficulty.MEDIUM, policy) == Difficulty.MEDIUM
    assert scoring.next_difficulty(Difficulty.EASY, 9.5, Difficulty.MEDIUM, policy) == Difficulty.MEDIUM


def test_strike_delta(policy):
    assert scoring.strike_delta(2.0, policy) == 2
    assert scoring.strike_delta(0.0, policy) == 2
    assert scoring.strike_delta(4.5, policy) == 1
    assert scoring.strike_delta(4.51, policy) == 0


def test_initial_difficulty_mapping(policy):
    assert scoring.initial_difficulty("Senior", policy) == Difficulty.MEDIUM
    assert scoring.initial_difficulty("Mid", policy) == Difficulty.EASY
    assert scoring.initial_difficulty("Junior", policy) == Difficulty.EASY
    assert scoring.initial_difficulty("Principal", policy) == Difficulty.EASY
    assert scoring.initial_difficulty(None, policy) == Difficulty.EASY


def test_custom_policy_changes_penalties():
    policy = build_policy({"timing": {"penalty_step_sec": 10, "penalty_per_step": 1.0}})
    assert scoring.calculate_time_penalty(65, policy) == (1.0, True)
    assert scoring.calculate_time_penalty(71, policy) == (2.0, True)


def test_average_score():
    assert scoring.average_score([]) == 0.0
    assert scoring.average_score([7.0, 8.0, 6.5]) == 7.17
