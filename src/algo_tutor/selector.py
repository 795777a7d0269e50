"""Next-problem selection.

Three side-effect-free candidate tiers evaluated lazily in priority order:

1. Review    - due review states, most overdue first
2. Discovery - unattempted problems in unlocked skills
3. Cram      - attempted problems in the weakest unlocked skill
"""
from datetime import datetime
from typing import Iterator, Mapping, Optional

from loguru import logger

from algo_tutor.catalog import Catalog
from algo_tutor.models import Mode, Problem, Recommendation, ReviewState


def review_candidates(
    catalog: Catalog,
    states: Mapping[int, ReviewState],
    now: datetime,
) -> Iterator[Recommendation]:
    due = [s for s in states.values() if s.due <= now]
    # Oldest due date first, weakest retention breaks ties.
    due.sort(key=lambda s: (s.due, s.ease_factor, catalog.position(s.problem_id)))
    for state in due:
        problem = catalog.problems[state.problem_id]
        yield Recommendation(problem, Mode.REVIEW, _rotate_variant(problem, state))


def _rotate_variant(problem: Problem, state: ReviewState):
    if not problem.alternatives:
        return None
    slot = state.repetitions % (len(problem.alternatives) + 1)
    return None if slot == 0 else problem.alternatives[slot - 1]


def _weakest_first(catalog: Catalog, skill_ids, mastery: Mapping[int, float]) -> list[int]:
    return sorted(skill_ids, key=lambda sid: (mastery.get(sid, 0.0), catalog.skill_position(sid)))


def discovery_candidates(
    catalog: Catalog,
    states: Mapping[int, ReviewState],
    mastery: Mapping[int, float],
    unlocked: set,
) -> Iterator[Recommendation]:
    for skill_id in _weakest_first(catalog, unlocked, mastery):
        fresh = [p for p in catalog.problems_for_skill(skill_id) if p.id not in states]
        fresh.sort(key=lambda p: (p.difficulty.rank, catalog.position(p.id)))
        for problem in fresh:
            yield Recommendation(problem, Mode.DISCOVERY)


def cram_candidates(
    catalog: Catalog,
    states: Mapping[int, ReviewState],
    mastery: Mapping[int, float],
    unlocked: set,
) -> Iterator[Recommendation]:
    for skill_id in _weakest_first(catalog, unlocked, mastery):
        seen = [p for p in catalog.problems_for_skill(skill_id) if p.id in states]
        seen.sort(key=lambda p: (states[p.id].due, states[p.id].ease_factor, catalog.position(p.id)))
        for problem in seen:
            yield Recommendation(problem, Mode.CRAM)


def select(
    catalog: Catalog,
    states: Mapping[int, ReviewState],
    mastery: Mapping[int, float],
    unlocked: set,
    now: datetime,
) -> Optional[Recommendation]:
    """Pick the single best problem to attempt next, or None if nothing is reachable."""
    tiers = (
        lambda: review_candidates(catalog, states, now),
        lambda: discovery_candidates(catalog, states, mastery, unlocked),
        lambda: cram_candidates(catalog, states, mastery, unlocked),
    )
    for tier in tiers:
        pick = next(tier(), None)
        if pick is not None:
            if pick.mode is Mode.CRAM:
                logger.warning("No reviews or new problems left. Entering cram mode: {}", pick.problem.title)
            else:
                logger.info("Serving {}: {} (ID: {})", pick.mode.value, pick.title, pick.problem.id)
            return pick
    logger.info("No problems available.")
    return None
