"""Problem catalog loading and integrity checks."""
import json
from pathlib import Path
from typing import Iterable

import yaml
from loguru import logger

from algo_tutor.errors import CatalogIntegrityError, GraphIntegrityError
from algo_tutor.graph import SkillGraph
from algo_tutor.models import Difficulty, Problem, Skill, Variant


class Catalog:
    """Immutable set of skills and problems, validated at load time."""

    def __init__(self, skills: Iterable[Skill], problems: Iterable[Problem]):
        # Builds (and validates) the graph first so no partial catalog exists.
        self.graph = SkillGraph(skills)
        self.problems: dict[int, Problem] = {}
        self._variant_parent: dict[int, int] = {}
        self._variants: dict[int, Variant] = {}
        self._by_skill: dict[int, list[Problem]] = {s.id: [] for s in self.graph.skills()}

        for problem in problems:
            if not isinstance(problem.difficulty, Difficulty):
                raise CatalogIntegrityError(
                    f"Problem {problem.id} has invalid difficulty {problem.difficulty!r}"
                )
            if problem.skill_id not in self.graph:
                raise CatalogIntegrityError(
                    f"Problem {problem.id} ({problem.title!r}) references unknown skill {problem.skill_id}"
                )
            if problem.id in self.problems:
                raise CatalogIntegrityError(f"Duplicate problem id {problem.id}")
            self.problems[problem.id] = problem
            self._by_skill[problem.skill_id].append(problem)

        for problem in self.problems.values():
            for variant in problem.alternatives:
                if variant.id in self.problems or variant.id in self._variants:
                    raise CatalogIntegrityError(f"Alternative id {variant.id} is already in use")
                self._variants[variant.id] = variant
                self._variant_parent[variant.id] = problem.id

        self._position = {pid: i for i, pid in enumerate(self.problems)}
        self._skill_position = {s.id: i for i, s in enumerate(self.graph.skills())}

    def __contains__(self, problem_id) -> bool:
        return problem_id in self.problems or problem_id in self._variant_parent

    @property
    def skills(self) -> list[Skill]:
        return self.graph.skills()

    def problems_for_skill(self, skill_id: int) -> list[Problem]:
        return list(self._by_skill[skill_id])

    def resolve(self, problem_id: int) -> tuple[Problem, Variant | None]:
        """Map a problem or alternative id to (parent problem, variant or None)."""
        if problem_id in self.problems:
            return self.problems[problem_id], None
        parent = self._variant_parent[problem_id]
        return self.problems[parent], self._variants[problem_id]

    def position(self, problem_id: int) -> int:
        return self._position[problem_id]

    def skill_position(self, skill_id: int) -> int:
        return self._skill_position[skill_id]


def parse_difficulty(value) -> Difficulty:
    try:
        return Difficulty(value)
    except ValueError:
        raise CatalogIntegrityError(f"Unknown difficulty {value!r}") from None


def _parse_variant(data: dict) -> Variant:
    return Variant(
        id=int(data["id"]),
        title=data["title"],
        url=data.get("url", ""),
        difficulty=parse_difficulty(data["difficulty"]),
    )


def parse_catalog(data: dict) -> Catalog:
    """Build a catalog from its JSON/YAML document form.

    Skills reference prerequisites by name and problems reference their
    skill by name. Skill ids default to their 1-based position.
    """
    try:
        raw_skills = data["skills"]
        raw_problems = data.get("problems", [])
    except (KeyError, TypeError, AttributeError):
        raise CatalogIntegrityError("Catalog document must contain a 'skills' list") from None
    try:
        return _build(raw_skills, raw_problems)
    except (KeyError, TypeError, ValueError) as e:
        raise CatalogIntegrityError(f"Malformed catalog entry: {e!r}") from e


def _build(raw_skills: list, raw_problems: list) -> Catalog:
    ids_by_name = {}
    for i, s in enumerate(raw_skills, 1):
        if s["name"] in ids_by_name:
            raise GraphIntegrityError(f"Duplicate skill name {s['name']!r}")
        ids_by_name[s["name"]] = int(s.get("id", i))

    skills = []
    for s in raw_skills:
        prereqs = set()
        for name in s.get("prerequisites", []):
            if name not in ids_by_name:
                raise GraphIntegrityError(f"Skill {s['name']!r} requires unknown skill {name!r}")
            prereqs.add(ids_by_name[name])
        skills.append(Skill(id=ids_by_name[s["name"]], name=s["name"], prerequisites=frozenset(prereqs)))

    problems = []
    for p in raw_problems:
        if p.get("skill") not in ids_by_name:
            raise CatalogIntegrityError(
                f"Problem {p.get('id')} ({p.get('title')!r}) references unknown skill {p.get('skill')!r}"
            )
        problems.append(Problem(
            id=int(p["id"]),
            title=p["title"],
            url=p.get("url", ""),
            difficulty=parse_difficulty(p["difficulty"]),
            skill_id=ids_by_name[p["skill"]],
            alternatives=tuple(_parse_variant(a) for a in p.get("alternatives", [])),
        ))

    return Catalog(skills, problems)


def read_catalog_file(file_path: str) -> dict:
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix == ".json":
        return json.loads(path.read_text())
    elif suffix in (".yaml", ".yml"):
        return yaml.safe_load(path.read_text())
    raise CatalogIntegrityError(f"Unsupported catalog format: {path.name}")


def load_catalog(file_path: str) -> Catalog:
    catalog = parse_catalog(read_catalog_file(file_path))
    logger.info(
        "Loaded catalog {}: {} skills, {} problems",
        Path(file_path).name, len(catalog.skills), len(catalog.problems),
    )
    return catalog
