"""Tutor facade: the operations the presentation layer calls."""
from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from algo_tutor.catalog import Catalog
from algo_tutor.config import Tuning
from algo_tutor.db import MemoryStore
from algo_tutor.errors import UnknownProblemError
from algo_tutor.mastery import all_mastery, skill_mastery
from algo_tutor.models import Attempt, AttemptResult, Problem, Recommendation, ReviewState, Skill
from algo_tutor.selector import select
from algo_tutor.sm2 import apply_attempt, replay, validate_attempt


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Tutor:
    """Holds the catalog and the current review-state snapshot.

    Mastery and unlock status are recomputed from the snapshot on every
    query. ``log_attempt`` persists first and swaps the snapshot only after
    the store commit succeeds.
    """

    def __init__(
        self,
        catalog: Catalog,
        store=None,
        tuning: Optional[Tuning] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.catalog = catalog
        self.store = store if store is not None else MemoryStore()
        self.tuning = tuning if tuning is not None else Tuning()
        self.clock = clock
        self._states: dict[int, ReviewState] = {}
        for problem_id, state in self.store.load_review_states().items():
            if problem_id not in catalog.problems:
                logger.warning("Ignoring stored review state for unknown problem {}", problem_id)
                continue
            self._states[problem_id] = state
        self._attempts: list[Attempt] = []
        for attempt in self.store.load_attempts():
            if attempt.problem_id not in catalog.problems or (
                attempt.variant_id is not None and attempt.variant_id not in catalog
            ):
                logger.warning("Ignoring stored attempt for unknown problem {}", attempt.problem_id)
                continue
            self._attempts.append(attempt)

    # --- Queries ---

    def review_state(self, problem_id: int) -> Optional[ReviewState]:
        if problem_id not in self.catalog:
            raise UnknownProblemError(problem_id)
        parent, _ = self.catalog.resolve(problem_id)
        return self._states.get(parent.id)

    def review_states(self) -> dict[int, ReviewState]:
        return dict(self._states)

    def attempts(self) -> list[Attempt]:
        return list(self._attempts)

    def mastery(self, skill_id: int) -> float:
        return skill_mastery(skill_id, self.catalog, self._states, self.tuning)

    def mastery_map(self) -> dict[int, float]:
        return all_mastery(self.catalog, self._states, self.tuning)

    def is_unlocked(self, skill_id: int) -> bool:
        graph = self.catalog.graph
        prereq_mastery = {p: self.mastery(p) for p in graph.prerequisites(skill_id)}
        return graph.is_unlocked(skill_id, prereq_mastery, self.tuning.unlock_threshold)

    def unlocked_skill_ids(self) -> set[int]:
        return self.catalog.graph.unlocked_skills(self.mastery_map(), self.tuning.unlock_threshold)

    def unlocked_skills(self) -> set[Skill]:
        return {self.catalog.graph.skill(sid) for sid in self.unlocked_skill_ids()}

    def due_reviews(self) -> list[ReviewState]:
        now = self.clock()
        return sorted(
            (s for s in self._states.values() if s.due <= now),
            key=lambda s: (s.due, s.ease_factor),
        )

    def recommend(self) -> Optional[Recommendation]:
        mastery = self.mastery_map()
        unlocked = self.catalog.graph.unlocked_skills(mastery, self.tuning.unlock_threshold)
        return select(self.catalog, self._states, mastery, unlocked, self.clock())

    def next_problem(self) -> Optional[Problem]:
        pick = self.recommend()
        return pick.problem if pick else None

    def replayed_states(self) -> dict[int, ReviewState]:
        """Review states rebuilt purely from the attempt log."""
        return replay(self._attempts, self.catalog, self.tuning)

    # --- Commands ---

    def log_attempt(
        self,
        problem_id: int,
        time_spent_seconds: float,
        solved: bool,
        viewed_hint: bool,
    ) -> AttemptResult:
        """Record an attempt and advance the problem's review state.

        Raises:
            InvalidAttemptError: malformed input
            UnknownProblemError: problem id not in the catalog
            PersistenceFailure: store could not commit; nothing changed
        """
        validate_attempt(time_spent_seconds, solved, viewed_hint)
        if problem_id not in self.catalog:
            raise UnknownProblemError(problem_id)
        parent, variant = self.catalog.resolve(problem_id)

        attempt = Attempt(
            problem_id=parent.id,
            timestamp=self.clock(),
            time_spent_seconds=float(time_spent_seconds),
            solved=solved,
            viewed_hint=viewed_hint,
            variant_id=variant.id if variant else None,
        )
        difficulty = variant.difficulty if variant else parent.difficulty
        graph = self.catalog.graph
        affected = [parent.skill_id] + graph.dependents(parent.skill_id)
        before = {sid: self.is_unlocked(sid) for sid in affected}

        new_state = apply_attempt(self._states.get(parent.id), attempt, difficulty, self.tuning)
        self.store.commit(attempt, new_state)
        self._states = {**self._states, parent.id: new_state}
        self._attempts.append(attempt)

        after = {sid: self.is_unlocked(sid) for sid in affected}
        newly_unlocked = frozenset(sid for sid in affected if after[sid] and not before[sid])
        for sid in sorted(newly_unlocked):
            logger.info("Skill unlocked: {}", graph.skill(sid).name)

        return AttemptResult(
            attempt=attempt,
            outcome=new_state.last_outcome,
            review_state=new_state,
            mastery=self.mastery(parent.skill_id),
            unlock_status=after,
            newly_unlocked=newly_unlocked,
        )
