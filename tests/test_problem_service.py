"""
Problem catalog filtering, sorting and per-user status
"""
import json

import pytest

from dsalytics.exceptions import InvalidInput, NotFound, StorageFailure
from dsalytics.services.problem_service import ProblemService, problem_service
from dsalytics.utils.cache import cache_service


def _catalog():
    return problem_service.merge_statuses(problem_service.load_catalog(), {})


def test_catalog_loads_bundled_problems():
    catalog = problem_service.load_catalog()

    assert len(catalog) == 12
    assert {p["category"] for p in catalog} == {"dsa", "dbms", "cn", "os", "java", "python", "web"}


def test_catalog_accepts_data_envelope(tmp_path):
    path = tmp_path / "problems.json"
    path.write_text(json.dumps({"data": [{"id": 1, "title": "A", "category": "dsa", "difficulty": "easy"}]}))

    assert ProblemService(str(path)).load_catalog()[0]["title"] == "A"


def test_missing_catalog_is_a_storage_failure(tmp_path):
    with pytest.raises(StorageFailure):
        ProblemService(str(tmp_path / "missing.json")).load_catalog()


def test_filters_combine():
    problems = problem_service.filter_problems(_catalog(), difficulty="medium", category="dsa")

    assert [p["title"] for p in problems] == ["Binary Tree Traversal"]


def test_search_matches_title_and_description():
    assert [p["id"] for p in problem_service.filter_problems(_catalog(), search="LINKED")] == ["10"]
    assert [p["id"] for p in problem_service.filter_problems(_catalog(), search="third normal")] == ["12"]


def test_sort_by_title():
    titles = [p["title"] for p in problem_service.sort_problems(_catalog(), "title", "asc")]

    assert titles[0] == "Binary Tree Traversal"
    assert titles[-1] == "Two Sum"
    assert problem_service.sort_problems(_catalog(), "title", "desc")[0]["title"] == "Two Sum"


def test_sort_by_difficulty_keeps_catalog_order_within_level():
    ordered = problem_service.sort_problems(_catalog(), "difficulty", "asc")

    assert [p["id"] for p in ordered[:4]] == ["1", "6", "10", "12"]
    assert {p["difficulty"] for p in ordered[-3:]} == {"hard"}


def test_list_problems_merges_status_and_counts_before_filtering(db):
    problem_service.set_status(db, "u1", "1", status="solved")
    problem_service.set_status(db, "u1", "5", status="attempted", favorite=True)

    result = problem_service.list_problems(db, "u1", status="solved")

    assert [p["id"] for p in result["problems"]] == ["1"]
    assert result["stats"] == {"total": 12, "solved": 1, "attempted": 1, "unsolved": 10}

    attempted = problem_service.list_problems(db, "u1", status="attempted")["problems"][0]
    assert attempted["favorite"] is True


def test_list_problems_rejects_bad_arguments(db):
    with pytest.raises(InvalidInput):
        problem_service.list_problems(db, "u1", sort_by="popularity")
    with pytest.raises(InvalidInput):
        problem_service.list_problems(db, "u1", order="sideways")
    with pytest.raises(InvalidInput):
        problem_service.list_problems(db, "u1", status="mastered")


def test_set_status_upserts(db):
    problem_service.set_status(db, "u1", "3", status="attempted")
    record = problem_service.set_status(db, "u1", "3", favorite=True)

    assert record.status == "attempted"
    assert record.favorite is True
    assert len(problem_service.get_statuses(db, "u1")) == 1


def test_set_status_validation(db):
    with pytest.raises(InvalidInput):
        problem_service.set_status(db, "u1", "   ", status="solved")
    with pytest.raises(InvalidInput):
        problem_service.set_status(db, "u1", "3", status="done")


def test_list_category():
    assert [p["id"] for p in problem_service.list_category("OS")] == ["5", "11"]

    with pytest.raises(NotFound):
        problem_service.list_category("chemistry")


class FakeRedis:
    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value

    def delete(self, key):
        self.store.pop(key, None)


def test_reload_replaces_cached_catalog(tmp_path, monkeypatch):
    monkeypatch.setattr(cache_service, "redis_client", FakeRedis())
    path = tmp_path / "problems.json"
    path.write_text(json.dumps([{"id": "1", "title": "Old", "category": "dsa", "difficulty": "easy"}]))
    service = ProblemService(str(path))
    service.load_catalog()

    path.write_text(json.dumps([{"id": "1", "title": "New", "category": "dsa", "difficulty": "easy"}]))

    assert service.load_catalog()[0]["title"] == "Old"
    assert service.reload_catalog()[0]["title"] == "New"
    assert service.load_catalog()[0]["title"] == "New"


def test_cache_delete_without_redis_is_a_noop():
    assert cache_service.redis_client is None
    assert cache_service.delete(ProblemService.CATALOG_CACHE_KEY) is False
