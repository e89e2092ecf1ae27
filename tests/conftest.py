from __future__ import annotations

import io
import zipfile
from collections.abc import Mapping
from concurrent.futures import Executor, Future
from pathlib import Path

import pytest

from tmc_core import CoreSettings, TmcCore
from tmc_core.exceptions import NotFoundError
from tmc_core.models import Course, Exercise, HttpResult, Review


class SynchronousExecutor(Executor):
    """Runs every submitted callable immediately on the calling thread."""

    def __init__(self) -> None:
        self.submitted = 0

    def submit(self, fn, /, *args, **kwargs):
        self.submitted += 1
        future: Future = Future()
        try:
            result = fn(*args, **kwargs)
        except BaseException as e:  # noqa: BLE001
            future.set_exception(e)
        else:
            future.set_result(result)
        return future


def make_zip(files: Mapping[str, str | bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def read_tree(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


class FakeService:
    """In-memory stand-in for the exercise service that records every call."""

    def __init__(
        self,
        courses: list[Course] | None = None,
        archives: Mapping[str, bytes] | None = None,
        reviews: list[Review] | None = None,
        valid_credentials: tuple[str, str] = ("student", "secret"),
    ) -> None:
        self.courses = {str(c.id): c for c in courses or []}
        self.archives = dict(archives or {})
        self.reviews = list(reviews or [])
        self.valid_credentials = valid_credentials
        self.calls: list[tuple] = []

    async def authenticate(self, username: str, password: str) -> bool:
        self.calls.append(("authenticate", username))
        return (username, password) == self.valid_credentials

    async def list_courses(self) -> list[Course]:
        self.calls.append(("list_courses",))
        return [c.model_copy(update={"exercises": []}) for c in self.courses.values()]

    async def get_course(self, course_id: str) -> Course:
        self.calls.append(("get_course", course_id))
        if course_id not in self.courses:
            raise NotFoundError(f"no course {course_id}")
        return self.courses[course_id]

    async def get_course_by_url(self, url: str) -> Course:
        self.calls.append(("get_course_by_url", url))
        return next(iter(self.courses.values()))

    async def download_exercise(self, exercise: Exercise) -> bytes:
        self.calls.append(("download_exercise", exercise.name))
        return self.archives[exercise.name]

    async def submit(self, exercise: Exercise, payload: bytes) -> dict:
        self.calls.append(("submit", exercise.name, payload))
        return {"status": "ok", "exercise": exercise.name}

    async def paste(self, exercise: Exercise, payload: bytes) -> str:
        self.calls.append(("paste", exercise.name))
        return f"https://tmc.example/paste/{exercise.name}"

    async def send_feedback(self, answers: Mapping[str, str], url: str) -> HttpResult:
        self.calls.append(("send_feedback", dict(answers), url))
        return HttpResult(status_code=200, data="ok")

    async def get_reviews(self, course: Course) -> list[Review]:
        self.calls.append(("get_reviews", course.id))
        return self.reviews


@pytest.fixture
def course() -> Course:
    return Course(
        id=7,
        name="java-basics",
        exercises=[
            Exercise(id=1, name="week1-hello", checksum="h1"),
            Exercise(id=2, name="week1-loops", checksum="h2"),
            Exercise(id=3, name="week2-secret", checksum="h3", locked=True),
        ],
    )


@pytest.fixture
def archives() -> dict[str, bytes]:
    return {
        "week1-hello": make_zip(
            {
                "week1-hello/build.xml": "<project/>",
                "week1-hello/src/Main.java": "class Main {}",
                "week1-hello/test/MainTest.java": "class MainTest {}",
            }
        ),
        "week1-loops": make_zip(
            {
                "week1-loops/build.xml": "<project/>",
                "week1-loops/src/Loops.java": "class Loops {}",
            }
        ),
    }


@pytest.fixture
def service(course: Course, archives: dict[str, bytes]) -> FakeService:
    return FakeService(courses=[course], archives=archives)


@pytest.fixture
def settings() -> CoreSettings:
    return CoreSettings(server_address="https://tmc.example", max_workers=2)


@pytest.fixture
def executor() -> SynchronousExecutor:
    return SynchronousExecutor()


@pytest.fixture
def core(settings: CoreSettings, service: FakeService, executor: SynchronousExecutor) -> TmcCore:
    return TmcCore(settings, service, executor=executor)
