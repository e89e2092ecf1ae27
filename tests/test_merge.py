import pytest
from conftest import make_zip, read_tree

from tmc_core.exceptions import FilesystemError
from tmc_core.files import ProtectedPaths, ZipArchiver, merge_tree
from tmc_core.files.protected import read_extra_student_files


def _write(root, files):
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def incoming(tmp_path):
    root = tmp_path / "incoming"
    _write(
        root,
        {
            "build.xml": "<project v2/>",
            "src/Main.java": "template",
            "test/MainTest.java": "new tests",
            "lib/helper.jar": "jar",
            "notes.txt": "instructor notes v2",
        },
    )
    return root


@pytest.fixture
def local(tmp_path):
    root = tmp_path / "local"
    _write(
        root,
        {
            "build.xml": "<project v1/>",
            "src/Main.java": "student solution",
            "test/MainTest.java": "old tests",
            "scratch.txt": "my own file",
        },
    )
    return root


def test_protected_source_is_kept_and_scaffolding_refreshed(incoming, local):
    report = merge_tree(incoming, local)
    tree = read_tree(local)

    assert tree["src/Main.java"] == b"student solution"
    assert tree["build.xml"] == b"<project v2/>"
    assert tree["test/MainTest.java"] == b"new tests"
    assert tree["lib/helper.jar"] == b"jar"
    assert tree["scratch.txt"] == b"my own file"
    assert report.protected == ["src/Main.java"]
    assert "lib/helper.jar" in report.added


def test_protected_file_missing_locally_is_added(incoming, tmp_path):
    target = tmp_path / "fresh"
    merge_tree(incoming, target)
    assert (target / "src" / "Main.java").read_text(encoding="utf-8") == "template"


def test_merge_is_idempotent(incoming, local):
    merge_tree(incoming, local)
    first = read_tree(local)
    report = merge_tree(incoming, local)

    assert read_tree(local) == first
    assert not report.changed


def test_declared_extra_student_files_are_protected(incoming, local):
    _write(local, {".tmcproject.yml": "extra_student_files:\n  - notes.txt\n  - test/\n"})
    _write(local, {"notes.txt": "student notes"})

    merge_tree(incoming, local)
    tree = read_tree(local)

    assert tree["notes.txt"] == b"student notes"
    assert tree["test/MainTest.java"] == b"old tests"
    assert tree["build.xml"] == b"<project v2/>"


def test_incoming_declaration_is_used_for_fresh_directories(incoming, tmp_path):
    _write(incoming, {".tmcproject.yml": "extra_student_files: notes.txt\n"})
    protected = ProtectedPaths.for_exercise(tmp_path / "absent", incoming)
    assert protected.is_protected("notes.txt")
    assert protected.is_protected("src/deep/File.java")
    assert not protected.is_protected("srcfile.txt")
    assert not protected.is_protected("build.xml")


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        ("extra_student_files:\n  - a.txt\n  - dir/b.txt\n", ["a.txt", "dir/b.txt"]),
        ("extra_student_files: single.txt\n", ["single.txt"]),
        ("something_else: 1\n", []),
        ("extra_student_files: {a: b}\n", []),
        (": : not yaml [", []),
        ("", []),
    ],
)
def test_reading_declarations(tmp_path, content, expected):
    path = tmp_path / ".tmcproject.yml"
    path.write_text(content, encoding="utf-8")
    assert read_extra_student_files(path) == expected


def test_escaping_entries_are_ignored():
    protected = ProtectedPaths(["../outside", "/abs/file"])
    assert not protected.is_protected("outside")
    assert protected.is_protected("abs/file")


def test_file_over_directory_conflict_raises(incoming, tmp_path):
    target = tmp_path / "target"
    (target / "notes.txt").mkdir(parents=True)
    with pytest.raises(FilesystemError):
        merge_tree(incoming, target)


def test_protected_local_directory_wins_over_incoming_file(incoming, local):
    _write(local, {".tmcproject.yml": "extra_student_files:\n  - notes.txt\n"})
    _write(local, {"notes.txt/today.md": "student journal"})

    report = merge_tree(incoming, local)
    tree = read_tree(local)

    assert tree["notes.txt/today.md"] == b"student journal"
    assert tree["test/MainTest.java"] == b"new tests"
    assert "notes.txt" in report.protected


def test_protected_local_file_wins_over_incoming_directory(tmp_path):
    incoming = tmp_path / "incoming"
    _write(incoming, {"data/input.csv": "a,b", "build.xml": "<project v2/>"})
    local = tmp_path / "local"
    _write(local, {".tmcproject.yml": "extra_student_files: data\n", "data": "mine"})

    report = merge_tree(incoming, local)

    assert (local / "data").read_text(encoding="utf-8") == "mine"
    assert (local / "build.xml").read_text(encoding="utf-8") == "<project v2/>"
    assert report.protected == ["data", "data/input.csv"]


class TestZipArchiver:
    def test_pack_then_extract_keeps_exercise_directory(self, local, tmp_path):
        archiver = ZipArchiver()
        destination = tmp_path / "out"
        destination.mkdir()

        archiver.extract(archiver.pack(local), destination)

        assert read_tree(destination / "local") == read_tree(local)

    def test_rejects_entries_escaping_destination(self, tmp_path):
        with pytest.raises(FilesystemError):
            ZipArchiver().extract(make_zip({"../evil.txt": "x"}), tmp_path)

    def test_rejects_invalid_payload(self, tmp_path):
        with pytest.raises(FilesystemError):
            ZipArchiver().extract(b"not a zip", tmp_path)
