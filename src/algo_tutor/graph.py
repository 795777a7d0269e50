"""Skill dependency graph: prerequisite validation and unlock gating."""
from collections import deque
from typing import Iterable, Mapping

from loguru import logger

from algo_tutor.errors import GraphIntegrityError
from algo_tutor.models import Skill


class SkillGraph:
    """Immutable DAG of skills with edges pointing prerequisite -> dependent.

    The graph is validated once on construction. Unlock queries take the
    current mastery mapping rather than caching any unlock flags, so they are
    always consistent with the latest review states.
    """

    def __init__(self, skills: Iterable[Skill]):
        self._skills: dict[int, Skill] = {}
        for skill in skills:
            if skill.id in self._skills:
                raise GraphIntegrityError(f"Duplicate skill id {skill.id}")
            self._skills[skill.id] = skill

        self._dependents: dict[int, list[int]] = {sid: [] for sid in self._skills}
        for skill in self._skills.values():
            for prereq in sorted(skill.prerequisites):
                if prereq == skill.id:
                    raise GraphIntegrityError(f"Skill {skill.name!r} requires itself")
                if prereq not in self._skills:
                    raise GraphIntegrityError(
                        f"Skill {skill.name!r} requires unknown skill id {prereq}"
                    )
                self._dependents[prereq].append(skill.id)

        self._order = self._topological_sort()
        logger.debug("Skill graph validated: {} skills", len(self._skills))

    def _topological_sort(self) -> list[int]:
        # Kahn's algorithm; any node left unvisited sits on a cycle.
        position = {sid: i for i, sid in enumerate(self._skills)}
        indegree = {sid: len(s.prerequisites) for sid, s in self._skills.items()}
        queue = deque(sid for sid in self._skills if indegree[sid] == 0)
        order = []
        while queue:
            sid = queue.popleft()
            order.append(sid)
            for dep in sorted(self._dependents[sid], key=position.get):
                indegree[dep] -= 1
                if indegree[dep] == 0:
                    queue.append(dep)
        if len(order) != len(self._skills):
            stuck = sorted(self._skills[sid].name for sid in self._skills if indegree[sid] > 0)
            raise GraphIntegrityError(f"Prerequisite cycle among skills: {', '.join(stuck)}")
        return order

    def __contains__(self, skill_id) -> bool:
        return skill_id in self._skills

    def __len__(self) -> int:
        return len(self._skills)

    def skill(self, skill_id: int) -> Skill:
        return self._skills[skill_id]

    def skills(self) -> list[Skill]:
        """Skills in catalog order."""
        return list(self._skills.values())

    def topological_order(self) -> list[Skill]:
        return [self._skills[sid] for sid in self._order]

    def prerequisites(self, skill_id: int) -> frozenset:
        return self._skills[skill_id].prerequisites

    def dependents(self, skill_id: int) -> list[int]:
        return list(self._dependents[skill_id])

    def blocking_prerequisites(
        self, skill_id: int, mastery: Mapping[int, float], threshold: float
    ) -> list[int]:
        """Prerequisites of a skill whose mastery is still below the threshold."""
        return sorted(
            p for p in self._skills[skill_id].prerequisites
            if mastery.get(p, 0.0) < threshold
        )

    def is_unlocked(self, skill_id: int, mastery: Mapping[int, float], threshold: float) -> bool:
        # All prerequisites must clear the threshold; roots are always open.
        return not self.blocking_prerequisites(skill_id, mastery, threshold)

    def unlocked_skills(self, mastery: Mapping[int, float], threshold: float) -> set[int]:
        return {sid for sid in self._skills if self.is_unlocked(sid, mastery, threshold)}
