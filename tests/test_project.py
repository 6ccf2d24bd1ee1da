"""Tests for Project: phases, task manifest and the testing helper."""

from __future__ import annotations

import json

from projgen import Component, FileOptions, Project, ProjectOptions, TaskOptions
from projgen.config import DISABLE_POST_ENV, MARKER, TASKS_MANIFEST_FILE
from projgen.files import TextFile
from projgen.io_utils import read_text, write_text
from projgen.testing import synth_snapshot


class Recorder(Component):
    """Component that logs each phase it sees, with whether a.txt exists."""

    def __init__(self, project, label: str, calls: list[str]) -> None:
        super().__init__(project)
        self.label = label
        self.calls = calls

    def _record(self, phase: str) -> None:
        on_disk = (self.project.files.outdir / "a.txt").exists()
        self.calls.append(f"{self.label}:{phase}:{'file' if on_disk else 'nofile'}")

    def pre_synthesize(self) -> None:
        self._record("pre")

    def synthesize(self) -> None:
        self._record("synth")

    def post_synthesize(self) -> None:
        self._record("post")


class TestPhases:
    def test_phase_order(self, make_project):
        calls: list[str] = []
        project = make_project()
        Recorder(project, "one", calls)
        project.add_file("a.txt", "x")
        Recorder(project, "two", calls)
        project.add_post_synth_hook(lambda: calls.append("hook"))

        project.synth()
        assert calls == [
            "one:pre:nofile",
            "two:pre:nofile",
            "one:synth:file",
            "two:synth:file",
            "one:post:file",
            "two:post:file",
            "hook",
        ]

    def test_post_disabled_by_option(self, make_project):
        calls: list[str] = []
        project = make_project(post=False)
        Recorder(project, "only", calls)
        project.add_post_synth_hook(lambda: calls.append("hook"))

        project.synth()
        assert calls == ["only:pre:nofile", "only:synth:nofile"]

    def test_post_disabled_by_env(self, make_project, monkeypatch):
        monkeypatch.setenv(DISABLE_POST_ENV, "1")
        calls: list[str] = []
        project = make_project()
        project.add_post_synth_hook(lambda: calls.append("hook"))

        assert not project.post_enabled
        project.synth()
        assert calls == []

    def test_pre_synthesize_changes_reach_files(self, make_project, tmp_path):
        class AddsLine(Component):
            def __init__(self, project, file):
                super().__init__(project)
                self.file = file

            def pre_synthesize(self):
                self.file.add_line("added late")

        project = make_project()
        target = TextFile(project, "late.txt", ["first"], options=FileOptions(marker=False))
        AddsLine(project, target)
        project.synth()
        assert read_text(tmp_path / "late.txt") == "first\nadded late"


class TestManifest:
    def test_manifest_content(self, make_project, tmp_path):
        project = make_project()
        test = project.add_task("test", TaskOptions(description="Run tests", exec="pytest"))
        build = project.add_task("build", TaskOptions(env={"CI": "1"}))
        build.exec("make")
        build.spawn(test)
        project.synth()

        text = read_text(tmp_path / TASKS_MANIFEST_FILE)
        data = json.loads(text)
        assert data["//"].startswith(MARKER)
        assert list(data["tasks"]) == ["build", "test"]
        assert data["tasks"]["build"] == {
            "name": "build",
            "env": {"CI": "1"},
            "steps": [{"exec": "make"}, {"spawn": "test"}],
        }
        assert data["tasks"]["test"] == {
            "name": "test",
            "description": "Run tests",
            "steps": [{"exec": "pytest"}],
        }

    def test_manifest_written_without_tasks(self, make_project, tmp_path):
        make_project().synth()
        data = json.loads(read_text(tmp_path / TASKS_MANIFEST_FILE))
        assert data["tasks"] == {}

    def test_default_task_when_rc_exists(self, make_project, tmp_path):
        write_text(tmp_path / ".projgenrc.py", "")
        project = make_project()
        default = project.try_find_task("default")
        assert default is not None
        assert [s.exec for s in default.steps] == ["python .projgenrc.py"]

    def test_no_default_task_without_rc(self, make_project):
        assert make_project().try_find_task("default") is None


class TestProjects:
    def test_projects_are_independent(self, tmp_path):
        one = Project(ProjectOptions(name="one", outdir=str(tmp_path / "one")))
        two = Project(ProjectOptions(name="two", outdir=str(tmp_path / "two")))
        one.add_task("build", TaskOptions(exec="make one"))
        two.add_task("build", TaskOptions(exec="make two"))
        one.add_file("a.txt", "one")
        two.add_file("a.txt", "two")

        one.synth()
        two.synth()
        assert read_text(tmp_path / "one" / "a.txt").endswith("one")
        assert read_text(tmp_path / "two" / "a.txt").endswith("two")
        manifest = json.loads(read_text(tmp_path / "two" / TASKS_MANIFEST_FILE))
        assert manifest["tasks"]["build"]["steps"] == [{"exec": "make two"}]


class TestSynthSnapshot:
    def test_snapshot_parses_json_and_skips_hooks(self, make_project):
        calls: list[str] = []
        project = make_project()
        project.add_file("README.md", "# demo", options=None)
        project.add_task("build", TaskOptions(exec="make"))
        project.add_post_synth_hook(lambda: calls.append("hook"))

        out = synth_snapshot(project)
        assert calls == []
        assert project.post_enabled
        assert out["README.md"].endswith("# demo")
        assert out[TASKS_MANIFEST_FILE]["tasks"]["build"]["steps"] == [{"exec": "make"}]
        assert set(out) == {".gitignore", "README.md", TASKS_MANIFEST_FILE}

    def test_snapshot_raw_json(self, make_project):
        out = synth_snapshot(make_project(), parse_json=False)
        assert isinstance(out[TASKS_MANIFEST_FILE], str)
