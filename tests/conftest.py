from datetime import datetime, timedelta, timezone

import pytest

from algo_tutor.catalog import parse_catalog
from algo_tutor.config import Tuning


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, **kwargs) -> None:
        self.now += timedelta(days=days, **kwargs)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tutor.db")
    return db_path


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def tuning():
    return Tuning()


@pytest.fixture
def ab_catalog():
    """Skill A (root) with one Easy problem; Skill B requires A."""
    return parse_catalog({
        "skills": [
            {"name": "A", "prerequisites": []},
            {"name": "B", "prerequisites": ["A"]},
        ],
        "problems": [
            {"id": 1, "title": "A easy", "difficulty": "Easy", "skill": "A", "url": "https://example.com/1"},
            {"id": 2, "title": "B easy", "difficulty": "Easy", "skill": "B", "url": "https://example.com/2"},
        ],
    })


@pytest.fixture
def small_catalog():
    """Root skill with mixed difficulties, a second root, and a gated skill."""
    return parse_catalog({
        "skills": [
            {"name": "Arrays", "prerequisites": []},
            {"name": "Strings", "prerequisites": []},
            {"name": "Graphs", "prerequisites": ["Arrays", "Strings"]},
        ],
        "problems": [
            {"id": 10, "title": "Arrays medium", "difficulty": "Medium", "skill": "Arrays"},
            {"id": 11, "title": "Arrays easy", "difficulty": "Easy", "skill": "Arrays"},
            {"id": 12, "title": "Arrays hard", "difficulty": "Hard", "skill": "Arrays",
             "alternatives": [{"id": 112, "title": "Arrays hard variant", "difficulty": "Hard"}]},
            {"id": 20, "title": "Strings easy", "difficulty": "Easy", "skill": "Strings"},
            {"id": 30, "title": "Graphs easy", "difficulty": "Easy", "skill": "Graphs"},
        ],
    })
