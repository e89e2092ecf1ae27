import json

import pytest

from tmc_core.core.update_detector import ExerciseUpdateDetector
from tmc_core.exceptions import DataError
from tmc_core.models import Course, Exercise
from tmc_core.storage import UpdateCache


def _course(**checksums: str) -> Course:
    return Course(
        id=5,
        name="c",
        exercises=[Exercise(name=name, checksum=value) for name, value in checksums.items()],
    )


@pytest.fixture
def cache_file(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(json.dumps({"5": {"A": "h1"}, "9": {"X": "x1"}}), encoding="utf-8")
    return path


def test_new_exercise_is_reported_and_persisted(cache_file):
    detector = ExerciseUpdateDetector(UpdateCache(cache_file))

    changed = detector.detect(_course(A="h1", B="h2"))

    assert [e.name for e in changed] == ["B"]
    stored = json.loads(cache_file.read_text(encoding="utf-8"))
    assert stored["5"] == {"A": "h1", "B": "h2"}
    assert stored["9"] == {"X": "x1"}


def test_changed_checksum_is_reported_once(cache_file):
    detector = ExerciseUpdateDetector(UpdateCache(cache_file))

    changed = detector.detect(_course(A="h2"))

    assert [e.name for e in changed] == ["A"]


def test_unchanged_exercises_are_not_reported_on_second_pass(cache_file):
    cache = UpdateCache(cache_file)
    detector = ExerciseUpdateDetector(cache)
    detector.detect(_course(A="h1", B="h2"))

    assert detector.detect(_course(A="h1", B="h2")) == []
    assert ExerciseUpdateDetector(UpdateCache(cache_file)).detect(_course(A="h1", B="h2")) == []


def test_duplicate_names_are_reported_once(tmp_path):
    course = Course(
        id=1,
        name="c",
        exercises=[Exercise(name="A", checksum="1"), Exercise(name="A", checksum="1")],
    )
    changed = ExerciseUpdateDetector(UpdateCache(tmp_path / "c.json")).detect(course)
    assert len(changed) == 1


def test_course_without_id_is_rejected():
    with pytest.raises(DataError):
        ExerciseUpdateDetector(UpdateCache()).detect(Course(name="anonymous"))


def test_failed_persistence_propagates_and_reports_again(cache_file, monkeypatch):
    cache = UpdateCache(cache_file)

    def broken_store(course_id, checksums):
        raise OSError("disk full")

    monkeypatch.setattr(cache, "store", broken_store)
    with pytest.raises(OSError):
        ExerciseUpdateDetector(cache).detect(_course(A="h1", B="h2"))

    fresh = ExerciseUpdateDetector(UpdateCache(cache_file))
    assert [e.name for e in fresh.detect(_course(A="h1", B="h2"))] == ["B"]


def test_corrupt_cache_file_counts_as_empty(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding="utf-8")
    changed = ExerciseUpdateDetector(UpdateCache(path)).detect(_course(A="h1"))
    assert [e.name for e in changed] == ["A"]
    assert json.loads(path.read_text(encoding="utf-8")) == {"5": {"A": "h1"}}


def test_update_merges_into_course_entry(tmp_path):
    cache = UpdateCache(tmp_path / "cache.json")
    cache.store("1", {"A": "a"})
    cache.update("1", {"B": "b"})
    assert UpdateCache(tmp_path / "cache.json").checksums_for("1") == {"A": "a", "B": "b"}


def test_core_uses_override_cache(core, tmp_path, course):
    override = tmp_path / "override.json"

    first = core.get_new_and_updated_exercises(course, override).result()
    second = core.get_new_and_updated_exercises(course, override).result()

    assert [e.name for e in first] == ["week1-hello", "week1-loops", "week2-secret"]
    assert second == []
    assert json.loads(override.read_text(encoding="utf-8"))["7"]["week1-hello"] == "h1"


def test_core_without_cache_file_remembers_in_memory(core, course):
    assert len(core.get_new_and_updated_exercises(course).result()) == 3
    assert core.get_new_and_updated_exercises(course).result() == []
