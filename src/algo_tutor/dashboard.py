"""Skill tree progress, weak skills and study statistics."""
from collections import Counter

from algo_tutor.models import Outcome
from algo_tutor.tutor import Tutor


def get_mastery_label(score: float, threshold: float = 0.70) -> str:
    if score >= 0.9:
        return "MASTERED"
    elif score >= threshold:
        return "SOLID"
    elif score > 0:
        return "LEARNING"
    return "NOT STARTED"


def get_mastery_color(score: float, threshold: float = 0.70) -> str:
    if score >= 0.9:
        return "green"
    elif score >= threshold:
        return "yellow"
    elif score > 0:
        return "dark_orange"
    return "red"


def get_skill_rows(tutor: Tutor) -> list[dict]:
    """One row per skill, prerequisites before dependents."""
    mastery = tutor.mastery_map()
    threshold = tutor.tuning.unlock_threshold
    graph = tutor.catalog.graph
    states = tutor.review_states()
    rows = []
    for skill in graph.topological_order():
        problems = tutor.catalog.problems_for_skill(skill.id)
        blocking = graph.blocking_prerequisites(skill.id, mastery, threshold)
        rows.append({
            "skill_id": skill.id,
            "name": skill.name,
            "mastery": round(mastery[skill.id], 3),
            "label": get_mastery_label(mastery[skill.id], threshold),
            "unlocked": not blocking,
            "blocked_by": [graph.skill(b).name for b in blocking],
            "attempted": sum(1 for p in problems if p.id in states),
            "total": len(problems),
        })
    return rows


def get_weak_skills(tutor: Tutor) -> list[dict]:
    """Unlocked skills with some progress but still below the unlock threshold, weakest first."""
    rows = [
        r for r in get_skill_rows(tutor)
        if r["unlocked"] and r["attempted"] and r["mastery"] < tutor.tuning.unlock_threshold
    ]
    return sorted(rows, key=lambda r: r["mastery"])


def get_study_stats(tutor: Tutor) -> dict:
    attempts = tutor.attempts()
    outcomes = Counter(s.last_outcome for s in tutor.review_states().values())
    solved = sum(1 for a in attempts if a.solved and not a.viewed_hint)
    total_seconds = sum(a.time_spent_seconds for a in attempts)
    return {
        "attempts": len(attempts),
        "unassisted_solves": solved,
        "problems_seen": len(tutor.review_states()),
        "due_reviews": len(tutor.due_reviews()),
        "resets": outcomes[Outcome.RESET],
        "hours_practiced": round(total_seconds / 3600, 1),
    }
