import pytest

from config.policy import (
    Difficulty,
    PolicyConfig,
    PolicyConfigError,
    build_policy,
    get_policy,
    load_policy,
)
from config.settings import settings


def test_default_weights_sum_to_one():
    weights = PolicyConfig().scoring.weights
    assert weights.accuracy + weights.depth + weights.clarity + weights.relevance == pytest.approx(1.0)
    assert (weights.accuracy, weights.depth, weights.clarity, weights.relevance) == (0.40, 0.30, 0.15, 0.15)


def test_default_thresholds_and_limits():
    policy = PolicyConfig()
    assert policy.scoring.strong_score == 8.0
    assert policy.scoring.weak_score == 4.5
    assert policy.scoring.critical_fail_score == 2.0
    assert policy.timing.max_violations_allowed == 2
    assert policy.termination.max_questions == 5
    assert policy.difficulty.initial["Senior"] == Difficulty.MEDIUM
    assert policy.fallback.max_score < 10


def test_policy_is_immutable():
    policy = PolicyConfig()
    with pytest.raises(Exception):
        policy.termination.max_questions = 10  # type: ignore[misc]


def test_weights_not_summing_to_one_are_rejected():
    with pytest.raises(PolicyConfigError):
        build_policy({"scoring": {"weights": {"accuracy": 0.5}}})


def test_fallback_cap_must_stay_below_ten():
    with pytest.raises(PolicyConfigError):
        build_policy({"fallback": {"max_score": 10}})


def test_partial_yaml_override(tmp_path):
    path = tmp_path / "policy.yaml"
    path.write_text("termination:\n  max_questions: 8\ntiming:\n  penalty_per_step: 1.0\n", encoding="utf-8")
    policy = load_policy(str(path))
    assert policy.termination.max_questions == 8
    assert policy.timing.penalty_per_step == 1.0
    assert policy.termination.strike_limit == 3


def test_missing_or_malformed_policy_file(tmp_path):
    with pytest.raises(PolicyConfigError):
        load_policy(str(tmp_path / "absent.yaml"))
    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(PolicyConfigError):
        load_policy(str(bad))


def test_get_policy_is_cached(monkeypatch, tmp_path):
    path = tmp_path / "policy.yaml"
    path.write_text("termination:\n  strike_limit: 4\n", encoding="utf-8")
    monkeypatch.setattr(settings, "POLICY_PATH", str(path), raising=False)
    first = get_policy()
    path.write_text("termination:\n  strike_limit: 9\n", encoding="utf-8")
    assert get_policy() is first
    assert first.termination.strike_limit == 4


def test_difficulty_order_and_saturation():
    assert Difficulty.EASY.rank < Difficulty.MEDIUM.rank < Difficulty.HARD.rank
    assert Difficulty.HARD.step(1) == Difficulty.HARD
    assert Difficulty.EASY.step(-1) == Difficulty.EASY
    assert Difficulty.EASY.step(1) == Difficulty.MEDIUM


def test_example_policy_file_matches_defaults():
    from pathlib import Path

    example = Path(__file__).resolve().parents[2] / "config" / "policy.example.yaml"
    assert load_policy(str(example)) == PolicyConfig()


def test_edge_case_section_only_holds_applied_scores():
    assert set(type(PolicyConfig().edge_cases).model_fields) == {"empty_answer_score", "spam_answer_score"}
    with pytest.raises(PolicyConfigError):
        build_policy({"edge_cases": {"irrelevant_answer_score": 0}})
