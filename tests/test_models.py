"""Tests for data model classes."""
from dataclasses import FrozenInstanceError

import pytest

from algo_tutor.errors import TutorError, UnknownProblemError
from algo_tutor.models import Difficulty, Mode, Problem, Recommendation, Skill, Variant


def test_difficulty_rank_orders_easy_first():
    assert [d.rank for d in (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD)] == [1, 2, 3]
    assert Difficulty("Medium") is Difficulty.MEDIUM


def test_skill_defaults():
    s = Skill(id=1, name="Arrays")
    assert s.prerequisites == frozenset()


def test_skill_is_hashable():
    assert len({Skill(1, "A"), Skill(1, "A")}) == 1


def test_problem_is_immutable():
    p = Problem(id=1, title="Two Sum", url="", difficulty=Difficulty.EASY, skill_id=1)
    assert p.alternatives == ()
    with pytest.raises(FrozenInstanceError):
        p.title = "Three Sum"


def test_recommendation_prefers_variant_title_and_url():
    variant = Variant(id=1512, title="Number of Good Pairs", url="https://example.com/1512",
                      difficulty=Difficulty.EASY)
    problem = Problem(id=1, title="Two Sum", url="https://example.com/1",
                      difficulty=Difficulty.EASY, skill_id=1, alternatives=(variant,))
    assert Recommendation(problem, Mode.REVIEW).title == "Two Sum"
    rec = Recommendation(problem, Mode.REVIEW, variant)
    assert rec.title == "Number of Good Pairs"
    assert rec.url == "https://example.com/1512"


def test_unknown_problem_error_message():
    err = UnknownProblemError(42)
    assert isinstance(err, TutorError)
    assert err.problem_id == 42
    assert "42" in str(err)
