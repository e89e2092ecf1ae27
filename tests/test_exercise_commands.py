import pytest

from tmc_core import TmcCore
from tmc_core.exceptions import NoExecutorError, NotFoundError


class RecordingRunner:
    def __init__(self, accepts: bool = True) -> None:
        self.accepts = accepts
        self.runs = []

    def recognizes(self, root):
        return self.accepts

    def run_tests(self, root):
        self.runs.append(root)
        return {"status": "PASSED", "root": root.name}


@pytest.fixture
def exercise_dir(tmp_path):
    root = tmp_path / "java-basics" / "week1-hello"
    (root / "src").mkdir(parents=True)
    (root / "build.xml").write_text("<project/>")
    (root / "src" / "Main.java").write_text("class Main {}")
    return root


@pytest.mark.parametrize("operation", ["submit", "test", "paste"])
def test_paths_outside_exercises_fail_without_contacting_service(core, service, tmp_path, operation):
    future = getattr(core, operation)(str(tmp_path))
    with pytest.raises(NotFoundError):
        future.result()
    assert service.calls == []


def test_submit_sends_packed_exercise(core, service, exercise_dir):
    result = core.submit(str(exercise_dir / "src" / "Main.java")).result()

    assert result == {"status": "ok", "exercise": "week1-hello"}
    name, exercise, payload = service.calls[-1]
    assert (name, exercise) == ("submit", "week1-hello")
    assert payload[:2] == b"PK"


def test_submit_unknown_exercise_fails(core, tmp_path):
    root = tmp_path / "java-basics" / "unknown"
    root.mkdir(parents=True)
    (root / "build.xml").write_text("<project/>")
    with pytest.raises(NotFoundError):
        core.submit(str(root)).result()


def test_paste_returns_url(core, exercise_dir):
    assert core.paste(str(exercise_dir)).result() == "https://tmc.example/paste/week1-hello"


def test_test_uses_first_recognizing_runner(settings, service, executor, exercise_dir):
    skipped, chosen = RecordingRunner(accepts=False), RecordingRunner()
    core = TmcCore(settings, service, executor=executor, test_runners=[skipped, chosen])

    result = core.test(str(exercise_dir / "src")).result()

    assert result == {"status": "PASSED", "root": "week1-hello"}
    assert chosen.runs == [exercise_dir.resolve()]
    assert skipped.runs == []
    assert service.calls == []


def test_test_without_runner_fails(core, exercise_dir):
    with pytest.raises(NoExecutorError):
        core.test(str(exercise_dir)).result()
