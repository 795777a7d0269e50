from datetime import datetime, timedelta, timezone

from algo_tutor.catalog import parse_catalog
from algo_tutor.config import Tuning
from algo_tutor.mastery import all_mastery
from algo_tutor.models import Mode, Outcome, ReviewState
from algo_tutor.selector import cram_candidates, discovery_candidates, review_candidates, select

NOW = datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc)
TUNING = Tuning()


def state(problem_id, due_in_days, ease=2.5, repetitions=1):
    due = NOW + timedelta(days=due_in_days)
    return ReviewState(
        problem_id=problem_id, repetitions=repetitions, interval=4, ease_factor=ease,
        last_outcome=Outcome.CLEAN, last_reviewed=due - timedelta(days=4), due=due,
    )


def pick(catalog, states, now=NOW):
    mastery = all_mastery(catalog, states, TUNING)
    unlocked = catalog.graph.unlocked_skills(mastery, TUNING.unlock_threshold)
    return select(catalog, states, mastery, unlocked, now)


def test_review_picks_most_overdue(small_catalog):
    states = {11: state(11, -1), 20: state(20, -3), 10: state(10, 2)}
    result = pick(small_catalog, states)
    assert result.mode is Mode.REVIEW
    assert result.problem.id == 20


def test_review_ties_broken_by_lowest_ease(small_catalog):
    states = {11: state(11, -1, ease=2.5), 20: state(20, -1, ease=1.9)}
    assert pick(small_catalog, states).problem.id == 20


def test_review_due_exactly_now_counts(small_catalog):
    states = {11: state(11, 0)}
    assert pick(small_catalog, states).mode is Mode.REVIEW


def test_reviews_outrank_discovery(small_catalog):
    states = {12: state(12, -1, repetitions=0)}
    result = pick(small_catalog, states)
    assert result.mode is Mode.REVIEW
    assert result.problem.id == 12


def test_discovery_prefers_easiest_in_least_mastered_skill(small_catalog):
    # Arrays has some mastery, Strings none, so Strings comes first.
    states = {11: state(11, 5, repetitions=3)}
    result = pick(small_catalog, states)
    assert result.mode is Mode.DISCOVERY
    assert result.problem.id == 20


def test_discovery_orders_by_difficulty_within_skill(small_catalog):
    result = pick(small_catalog, {})
    assert result.mode is Mode.DISCOVERY
    # Arrays and Strings tie at zero mastery; Arrays is first in the catalog.
    assert result.problem.id == 11
    order = [r.problem.id for r in discovery_candidates(
        small_catalog, {}, all_mastery(small_catalog, {}, TUNING), {1, 2})]
    assert order == [11, 10, 12, 20]


def test_discovery_skips_locked_skills(small_catalog):
    states = {pid: state(pid, 5) for pid in (10, 11, 12, 20)}
    result = pick(small_catalog, states)
    # Graphs is still locked, so the only option is cramming.
    assert result.mode is Mode.CRAM
    assert result.problem.skill_id != 3


def test_cram_targets_weakest_skill_soonest_due(small_catalog):
    states = {
        10: state(10, 3, repetitions=3),
        11: state(11, 2, repetitions=3),
        12: state(12, 1, repetitions=3),
        20: state(20, 6, repetitions=1),
        30: state(30, 1, repetitions=1),
    }
    # Strings sits at 1/3, so Graphs stays locked.
    result = pick(small_catalog, states)
    assert result.mode is Mode.CRAM
    assert result.problem.id == 20


def test_cram_prefers_soonest_due_within_skill(small_catalog):
    states = {
        10: state(10, 3),
        11: state(11, 2),
        12: state(12, 1),
        20: state(20, 5, repetitions=3),
    }
    result = pick(small_catalog, states)
    assert result.mode is Mode.CRAM
    assert result.problem.id == 12


def test_none_when_no_unlocked_skill_has_problems():
    catalog = parse_catalog({"skills": [{"name": "Empty"}], "problems": []})
    assert pick(catalog, {}) is None


def test_empty_catalog_returns_none():
    catalog = parse_catalog({"skills": [], "problems": []})
    assert pick(catalog, {}) is None


def test_select_is_repeatable(small_catalog):
    states = {11: state(11, -1), 20: state(20, 3)}
    assert pick(small_catalog, states) == pick(small_catalog, states)


def test_review_rotates_through_alternatives(small_catalog):
    first = next(review_candidates(small_catalog, {12: state(12, -1, repetitions=1)}, NOW))
    assert first.variant is not None
    assert first.variant.id == 112
    assert first.title == "Arrays hard variant"
    second = next(review_candidates(small_catalog, {12: state(12, -1, repetitions=2)}, NOW))
    assert second.variant is None
    assert second.title == "Arrays hard"


def test_cram_yields_nothing_without_attempts(small_catalog):
    gen = cram_candidates(small_catalog, {}, {}, {1, 2})
    assert next(gen, None) is None
