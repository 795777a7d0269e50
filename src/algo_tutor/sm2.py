"""Modified SM-2 spaced repetition: Grit/Clean for first solves, Struggle/Speed for reviews."""
import math
from datetime import timedelta
from typing import Iterable, Optional

from loguru import logger

from algo_tutor.catalog import Catalog
from algo_tutor.config import Tuning
from algo_tutor.errors import InvalidAttemptError, UnknownProblemError
from algo_tutor.models import Attempt, Difficulty, Outcome, Phase, ReviewState


def validate_attempt(time_spent_seconds, solved, viewed_hint) -> None:
    """Reject malformed attempt input instead of coercing it."""
    if isinstance(time_spent_seconds, bool) or not isinstance(time_spent_seconds, (int, float)):
        raise InvalidAttemptError(f"time_spent_seconds must be a number, got {time_spent_seconds!r}")
    if math.isnan(time_spent_seconds) or math.isinf(time_spent_seconds):
        raise InvalidAttemptError("time_spent_seconds must be finite")
    if time_spent_seconds < 0:
        raise InvalidAttemptError(f"time_spent_seconds must be >= 0, got {time_spent_seconds}")
    if not isinstance(solved, bool):
        raise InvalidAttemptError(f"solved must be a bool, got {solved!r}")
    if not isinstance(viewed_hint, bool):
        raise InvalidAttemptError(f"viewed_hint must be a bool, got {viewed_hint!r}")


def is_slow(time_spent_seconds: float, difficulty: Difficulty, tuning: Tuning) -> bool:
    return time_spent_seconds >= tuning.baseline_for(difficulty) * tuning.slow_ratio


def classify_outcome(
    solved: bool,
    viewed_hint: bool,
    time_spent_seconds: float,
    difficulty: Difficulty,
    state: Optional[ReviewState],
    tuning: Tuning,
) -> Outcome:
    """Classify an attempt.

    A success is a "first" success when the problem has no review state yet
    or its repetition count was reset to zero.
    """
    if not solved or viewed_hint:
        return Outcome.RESET
    first = state is None or state.repetitions == 0
    slow = is_slow(time_spent_seconds, difficulty, tuning)
    if first:
        return Outcome.GRIT if slow else Outcome.CLEAN
    return Outcome.STRUGGLE if slow else Outcome.SPEED


def sm2_update(
    outcome: Outcome,
    repetitions: int,
    ease_factor: float,
    interval: int,
    tuning: Tuning,
) -> dict:
    """Calculate next review parameters for a classified outcome.

    Args:
        outcome: Classification of the attempt
        repetitions: Number of consecutive successful reviews
        ease_factor: Current ease factor
        interval: Current interval in days
        tuning: Scheduler parameters

    Returns:
        Dict with updated interval, repetitions, ease_factor.
    """
    if outcome is Outcome.RESET:
        new_ef = max(tuning.ease_min, ease_factor - tuning.reset_ease_penalty)
        new_interval = tuning.reset_interval
        new_repetitions = 0
    elif outcome is Outcome.GRIT:
        new_ef = ease_factor
        new_interval = tuning.grit_interval
        new_repetitions = 1
    elif outcome is Outcome.CLEAN:
        new_ef = ease_factor
        new_interval = tuning.clean_interval
        new_repetitions = 1
    elif outcome is Outcome.STRUGGLE:
        new_ef = max(tuning.ease_min, ease_factor - tuning.struggle_ease_penalty)
        new_interval = max(1, min(interval - 1, math.floor(interval * tuning.shrink_factor)))
        new_repetitions = repetitions + 1
    else:
        new_ef = min(tuning.ease_max, ease_factor + tuning.speed_ease_bonus)
        # max_interval limits factor growth only; Speed always adds at least a day
        grown = min(tuning.max_interval, math.ceil(interval * tuning.growth_factor))
        new_interval = max(interval + 1, grown)
        new_repetitions = repetitions + 1

    return {
        "interval": new_interval,
        "repetitions": new_repetitions,
        "ease_factor": round(new_ef, 2),
    }


def apply_attempt(
    state: Optional[ReviewState],
    attempt: Attempt,
    difficulty: Difficulty,
    tuning: Tuning,
) -> ReviewState:
    """Return the review state that results from an attempt; never mutates."""
    outcome = classify_outcome(
        attempt.solved, attempt.viewed_hint, attempt.time_spent_seconds,
        difficulty, state, tuning,
    )
    if state is None:
        repetitions, ease, interval = 0, tuning.default_ease, 0
    else:
        repetitions, ease, interval = state.repetitions, state.ease_factor, state.interval
    logger.debug(
        "[SM-2 input] problem={} outcome={} time={}s reps={} ease={} interval={}d",
        attempt.problem_id, outcome.value, attempt.time_spent_seconds, repetitions, ease, interval,
    )

    updated = sm2_update(outcome, repetitions, ease, interval, tuning)
    new_state = ReviewState(
        problem_id=attempt.problem_id,
        repetitions=updated["repetitions"],
        interval=updated["interval"],
        ease_factor=updated["ease_factor"],
        last_outcome=outcome,
        last_reviewed=attempt.timestamp,
        due=attempt.timestamp + timedelta(days=updated["interval"]),
    )
    logger.info(
        "[SM-2 result] problem {}: {} ease {:.2f} -> {:.2f}, interval {}d -> {}d",
        attempt.problem_id, outcome.value, ease, new_state.ease_factor, interval, new_state.interval,
    )
    return new_state


def phase_of(state: Optional[ReviewState]) -> Phase:
    return Phase.NEW if state is None else state.phase


def difficulty_for(attempt: Attempt, catalog: Catalog) -> Difficulty:
    """Time baselines follow the statement actually attempted."""
    problem_id = attempt.variant_id if attempt.variant_id is not None else attempt.problem_id
    if problem_id not in catalog:
        raise UnknownProblemError(problem_id)
    parent, variant = catalog.resolve(problem_id)
    return variant.difficulty if variant else parent.difficulty


def replay(
    attempts: Iterable[Attempt],
    catalog: Catalog,
    tuning: Tuning,
) -> dict[int, ReviewState]:
    """Fold an attempt log, in order, into review states keyed by problem id.

    Attempts must already be credited to parent problems.
    """
    states: dict[int, ReviewState] = {}
    for attempt in attempts:
        if attempt.problem_id not in catalog.problems:
            raise UnknownProblemError(attempt.problem_id)
        difficulty = difficulty_for(attempt, catalog)
        states[attempt.problem_id] = apply_attempt(
            states.get(attempt.problem_id), attempt, difficulty, tuning,
        )
    return states
