"""Per-skill mastery derived from the review states of a skill's problems."""
from typing import Mapping, Optional

from algo_tutor.catalog import Catalog
from algo_tutor.config import Tuning
from algo_tutor.models import ReviewState


def problem_contribution(state: Optional[ReviewState], tuning: Tuning) -> float:
    """Normalized contribution of one problem, in [0, 1].

    Unattempted problems and problems whose repetitions were reset contribute
    nothing. Otherwise the contribution grows with repetitions (saturating at
    the stabilization count) and with ease (saturating at the ease baseline),
    so it never decreases when either of them grows.
    """
    if state is None or state.repetitions == 0:
        return 0.0
    reps = min(state.repetitions, tuning.stabilization_count) / tuning.stabilization_count
    span = tuning.ease_baseline - tuning.ease_min
    ease_norm = min(1.0, max(0.0, (state.ease_factor - tuning.ease_min) / span))
    floor = tuning.ease_floor_weight
    return reps * (floor + (1 - floor) * ease_norm)


def skill_mastery(
    skill_id: int,
    catalog: Catalog,
    states: Mapping[int, ReviewState],
    tuning: Tuning,
) -> float:
    """Difficulty-weighted average contribution over the skill's problems."""
    problems = catalog.problems_for_skill(skill_id)
    if not problems:
        return 0.0
    total_weight = 0.0
    score = 0.0
    for problem in problems:
        weight = tuning.weight_for(problem.difficulty)
        total_weight += weight
        score += weight * problem_contribution(states.get(problem.id), tuning)
    return min(1.0, max(0.0, score / total_weight))


def all_mastery(catalog: Catalog, states: Mapping[int, ReviewState], tuning: Tuning) -> dict[int, float]:
    return {s.id: skill_mastery(s.id, catalog, states, tuning) for s in catalog.skills}
