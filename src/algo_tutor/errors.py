"""Exceptions raised by the tutor core."""


class TutorError(Exception):
    """Base class for every error the tutor reports to its caller."""


class GraphIntegrityError(TutorError):
    """The skill prerequisite graph has a cycle or a dangling edge."""


class CatalogIntegrityError(TutorError):
    """The catalog is malformed (unknown skill, duplicate id, bad difficulty)."""


class UnknownProblemError(TutorError, KeyError):
    """An attempt referenced a problem id that is not in the catalog."""

    def __init__(self, problem_id):
        super().__init__(problem_id)
        self.problem_id = problem_id

    def __str__(self) -> str:
        return f"Unknown problem id: {self.problem_id!r}"


class InvalidAttemptError(TutorError, ValueError):
    """Attempt input was rejected at the boundary (never coerced)."""


class PersistenceFailure(TutorError):
    """The store failed to commit; nothing was applied."""
