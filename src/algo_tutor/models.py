"""Data classes for the tutor domain model."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @property
    def rank(self) -> int:
        return _DIFFICULTY_RANK[self]


_DIFFICULTY_RANK = {Difficulty.EASY: 1, Difficulty.MEDIUM: 2, Difficulty.HARD: 3}


class Outcome(str, Enum):
    """How an attempt was classified by the scheduler."""
    RESET = "Reset"
    GRIT = "Grit"
    CLEAN = "Clean"
    STRUGGLE = "Struggle"
    SPEED = "Speed"


class Phase(str, Enum):
    NEW = "New"
    LEARNING = "Learning"
    REVIEWING = "Reviewing"
    RESET = "Reset"


class Mode(str, Enum):
    """Which selector tier produced a recommendation."""
    REVIEW = "Review"
    DISCOVERY = "Discovery"
    CRAM = "Cram"


@dataclass(frozen=True)
class Skill:
    id: int
    name: str
    prerequisites: frozenset = field(default_factory=frozenset)


@dataclass(frozen=True)
class Variant:
    """Alternative statement of a problem, credited to its parent."""
    id: int
    title: str
    url: str
    difficulty: Difficulty


@dataclass(frozen=True)
class Problem:
    id: int
    title: str
    url: str
    difficulty: Difficulty
    skill_id: int
    alternatives: tuple = ()


@dataclass(frozen=True)
class ReviewState:
    problem_id: int
    repetitions: int
    interval: int
    ease_factor: float
    last_outcome: Outcome
    last_reviewed: datetime
    due: datetime

    @property
    def phase(self) -> Phase:
        if self.last_outcome is Outcome.RESET:
            return Phase.RESET
        if self.repetitions <= 1:
            return Phase.LEARNING
        return Phase.REVIEWING


@dataclass(frozen=True)
class Attempt:
    problem_id: int
    timestamp: datetime
    time_spent_seconds: float
    solved: bool
    viewed_hint: bool
    variant_id: Optional[int] = None


@dataclass(frozen=True)
class Recommendation:
    problem: Problem
    mode: Mode
    variant: Optional[Variant] = None

    @property
    def title(self) -> str:
        return self.variant.title if self.variant else self.problem.title

    @property
    def url(self) -> str:
        return self.variant.url if self.variant else self.problem.url


@dataclass(frozen=True)
class AttemptResult:
    """What the presentation layer gets back from logging an attempt."""
    attempt: Attempt
    outcome: Outcome
    review_state: ReviewState
    mastery: float
    unlock_status: dict
    newly_unlocked: frozenset = frozenset()
