import random

from agents import fallback
from config.policy import Difficulty
from conftest import make_question

KEYWORDS = ("diffing", "reconciliation", "memory", "batching")


def test_no_hits_short_answer(policy):
    question = make_question(keywords=KEYWORDS)
    result = fallback.evaluate(question, "It is fast.", policy)
    assert result.is_fallback is True
    assert result.accuracy == 4.0
    assert result.depth == 3.0
    assert result.clarity == 6.0
    assert result.relevance == 4.0
    assert "lacked specific expected technical terminology" in result.feedback
    assert result.feedback.endswith("Response was brief.")


def test_keyword_hits_are_case_insensitive_substrings(policy):
    question = make_question(keywords=KEYWORDS)
    answer = "DIFFING the tree keeps the rendering work small and cheap."
    assert fallback.keyword_hits(answer, KEYWORDS) == ["diffing"]
    assert len(answer) >= 50
    # base 4 + 1 hit * 2 + length bonus 1
    assert fallback.heuristic_score(question, answer, policy) == 7.0
    assert fallback.heuristic_score(question, "diffing", policy) == 6.0


def test_heuristic_is_capped_below_ten(policy):
    question = make_question(keywords=KEYWORDS)
    answer = "diffing reconciliation memory batching " * 3
    result = fallback.evaluate(question, answer, policy)
    assert result.accuracy == policy.fallback.max_score
    assert result.accuracy < 10
    assert result.depth == 6.0
    assert result.relevance == 8.0
    assert "Identified 4 relevant concepts" in result.feedback


def test_fallback_question_prefers_unasked():
    asked = [entry.text for entry in fallback.QUESTION_POOL[:-1]]
    question = fallback.fallback_question(Difficulty.HARD, asked, rng=random.Random(7))
    assert question.text == fallback.QUESTION_POOL[-1].text
    assert question.difficulty == Difficulty.HARD
    assert question.expected_keywords == fallback.QUESTION_POOL[-1].keywords


def test_fallback_question_reuses_pool_when_exhausted():
    asked = [entry.text for entry in fallback.QUESTION_POOL]
    question = fallback.fallback_question(Difficulty.EASY, asked, rng=random.Random(1))
    assert question.text in asked


def test_mock_records():
    assert fallback.mock_role("jd text").description == "jd text"
    assert fallback.mock_role().complexity_level == "Mid"
    assert {skill.name for skill in fallback.mock_profile().skills} == {"React", "TypeScript", "JavaScript"}
