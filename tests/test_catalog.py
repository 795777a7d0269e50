import json

import pytest

from algo_tutor.catalog import Catalog, load_catalog, parse_catalog
from algo_tutor.config import DEFAULT_CATALOG_PATH
from algo_tutor.errors import CatalogIntegrityError, GraphIntegrityError
from algo_tutor.models import Difficulty, Problem, Skill


def doc(skills=None, problems=None):
    return {
        "skills": skills if skills is not None else [{"name": "A"}, {"name": "B", "prerequisites": ["A"]}],
        "problems": problems or [],
    }


def test_default_catalog_loads():
    catalog = load_catalog(DEFAULT_CATALOG_PATH)
    assert len(catalog.skills) == 18
    assert len(catalog.problems) == 73
    roots = [s.name for s in catalog.skills if not s.prerequisites]
    assert roots == ["Arrays and Hashing"]
    for skill in catalog.skills:
        assert catalog.problems_for_skill(skill.id), f"{skill.name} should have problems"


def test_skill_ids_follow_document_order():
    catalog = parse_catalog(doc())
    assert [(s.id, s.name) for s in catalog.skills] == [(1, "A"), (2, "B")]
    assert catalog.graph.prerequisites(2) == frozenset({1})


def test_problem_with_unknown_skill_rejected():
    with pytest.raises(CatalogIntegrityError):
        parse_catalog(doc(problems=[{"id": 1, "title": "x", "difficulty": "Easy", "skill": "Nope"}]))


def test_problem_with_unknown_skill_id_rejected_directly():
    with pytest.raises(CatalogIntegrityError):
        Catalog([Skill(1, "A")], [Problem(1, "x", "", Difficulty.EASY, skill_id=7)])


def test_unknown_prerequisite_is_graph_error():
    with pytest.raises(GraphIntegrityError):
        parse_catalog(doc(skills=[{"name": "A", "prerequisites": ["Ghost"]}]))


def test_cycle_is_graph_error():
    skills = [{"name": "A", "prerequisites": ["B"]}, {"name": "B", "prerequisites": ["A"]}]
    with pytest.raises(GraphIntegrityError):
        parse_catalog(doc(skills=skills))


def test_malformed_difficulty_rejected():
    with pytest.raises(CatalogIntegrityError, match="difficulty"):
        parse_catalog(doc(problems=[{"id": 1, "title": "x", "difficulty": "Impossible", "skill": "A"}]))


def test_duplicate_problem_id_rejected():
    problems = [
        {"id": 1, "title": "x", "difficulty": "Easy", "skill": "A"},
        {"id": 1, "title": "y", "difficulty": "Hard", "skill": "B"},
    ]
    with pytest.raises(CatalogIntegrityError, match="Duplicate"):
        parse_catalog(doc(problems=problems))


def test_alternative_id_collision_rejected():
    problems = [
        {"id": 1, "title": "x", "difficulty": "Easy", "skill": "A",
         "alternatives": [{"id": 2, "title": "x2", "difficulty": "Easy"}]},
        {"id": 2, "title": "y", "difficulty": "Easy", "skill": "A"},
    ]
    with pytest.raises(CatalogIntegrityError):
        parse_catalog(doc(problems=problems))


def test_missing_field_rejected():
    with pytest.raises(CatalogIntegrityError):
        parse_catalog(doc(problems=[{"id": 1, "difficulty": "Easy", "skill": "A"}]))


def test_document_without_skills_rejected():
    with pytest.raises(CatalogIntegrityError):
        parse_catalog({"problems": []})


def test_resolve_alternative_to_parent():
    problems = [{"id": 1, "title": "x", "difficulty": "Easy", "skill": "A",
                 "alternatives": [{"id": 100, "title": "x-alt", "difficulty": "Medium"}]}]
    catalog = parse_catalog(doc(problems=problems))
    parent, variant = catalog.resolve(100)
    assert parent.id == 1
    assert variant.title == "x-alt"
    assert variant.difficulty is Difficulty.MEDIUM
    assert catalog.resolve(1) == (parent, None)
    assert 100 in catalog
    assert 5 not in catalog


def test_load_yaml_catalog(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(
        "skills:\n"
        "  - name: Arrays\n"
        "  - name: Trees\n"
        "    prerequisites: [Arrays]\n"
        "problems:\n"
        "  - {id: 1, title: Two Sum, difficulty: Easy, skill: Arrays}\n"
    )
    catalog = load_catalog(str(path))
    assert catalog.problems[1].title == "Two Sum"
    assert catalog.graph.prerequisites(2) == frozenset({1})


def test_load_json_catalog(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(doc(problems=[{"id": 5, "title": "x", "difficulty": "Hard", "skill": "B"}])))
    catalog = load_catalog(str(path))
    assert catalog.problems[5].skill_id == 2


def test_unsupported_format_rejected(tmp_path):
    path = tmp_path / "catalog.csv"
    path.write_text("id,title\n")
    with pytest.raises(CatalogIntegrityError):
        load_catalog(str(path))
