"""Tests for the task builder (Task) and the per-project registry (Tasks)."""

from __future__ import annotations

import pytest

from projgen.config import StepOptions, TaskOptions
from projgen.errors import DuplicateTaskError, TaskLockedError
from projgen.tasks.registry import Tasks
from projgen.tasks.task import Task


def _steps(task: Task) -> list[dict]:
    return [s.to_dict() for s in task.steps]


# ═══════════════════════════════════════════════════════════════════
#  Step ordering
# ═══════════════════════════════════════════════════════════════════


class TestStepOrder:
    def test_exec_appends_in_order(self):
        task = Task("t")
        task.exec("a")
        task.exec("b")
        assert _steps(task) == [{"exec": "a"}, {"exec": "b"}]

    def test_prepend_exec_goes_first(self):
        task = Task("t")
        task.exec("a")
        task.exec("b")
        task.prepend_exec("c")
        assert _steps(task) == [{"exec": "c"}, {"exec": "a"}, {"exec": "b"}]

    def test_mixed_step_kinds_keep_order(self):
        sub = Task("sub")
        task = Task("t")
        task.say("hello")
        task.spawn(sub)
        task.builtin("release/bump-version")
        task.prepend_say("first")
        task.prepend_spawn("other")
        assert _steps(task) == [
            {"spawn": "other"},
            {"say": "first"},
            {"say": "hello"},
            {"spawn": "sub"},
            {"builtin": "release/bump-version"},
        ]

    def test_exec_option_seeds_first_step(self):
        task = Task("t", TaskOptions(exec="make"))
        task.exec("make install")
        assert _steps(task) == [{"exec": "make"}, {"exec": "make install"}]

    def test_step_options_are_recorded(self):
        task = Task("t")
        task.exec("make", StepOptions(name="compile", env={"CC": "gcc"}, cwd="src"))
        assert _steps(task) == [
            {"name": "compile", "exec": "make", "env": {"CC": "gcc"}, "cwd": "src"},
        ]

    def test_steps_returns_a_copy(self):
        task = Task("t")
        task.exec("a")
        task.steps.clear()
        assert len(task.steps) == 1


class TestReset:
    def test_reset_clears_steps(self):
        task = Task("t")
        task.exec("a")
        task.say("b")
        task.reset()
        assert task.steps == []

    def test_reset_reseeds_with_command(self):
        task = Task("t")
        task.exec("a")
        task.reset("b")
        assert _steps(task) == [{"exec": "b"}]


class TestEnv:
    def test_env_last_write_wins(self):
        task = Task("t", TaskOptions(env={"A": "1"}))
        task.env("A", "2")
        task.env("B", "$(echo x)")
        assert task.env_vars == {"A": "2", "B": "$(echo x)"}


# ═══════════════════════════════════════════════════════════════════
#  Locking
# ═══════════════════════════════════════════════════════════════════


_MUTATIONS = {
    "exec": lambda t: t.exec("x"),
    "spawn": lambda t: t.spawn("x"),
    "say": lambda t: t.say("x"),
    "builtin": lambda t: t.builtin("x"),
    "reset": lambda t: t.reset(),
    "reset_with_command": lambda t: t.reset("x"),
    "env": lambda t: t.env("A", "1"),
    "prepend_exec": lambda t: t.prepend_exec("x"),
    "prepend_spawn": lambda t: t.prepend_spawn("x"),
    "prepend_say": lambda t: t.prepend_say("x"),
}


class TestLocking:
    @pytest.mark.parametrize("op", sorted(_MUTATIONS))
    def test_locked_task_rejects_mutation(self, op):
        task = Task("t")
        task.exec("a")
        task.env("K", "v")
        task.lock()

        with pytest.raises(TaskLockedError):
            _MUTATIONS[op](task)

        assert _steps(task) == [{"exec": "a"}]
        assert task.env_vars == {"K": "v"}

    def test_render_spec_locks_task(self):
        task = Task("t")
        task.exec("a")
        spec = task.render_spec()
        assert task.locked
        with pytest.raises(TaskLockedError):
            task.exec("b")
        assert [s.exec for s in spec.steps] == ["a"]

    def test_rendered_spec_is_a_snapshot(self):
        task = Task("t", TaskOptions(env={"A": "1"}))
        spec = task.render_spec()
        with pytest.raises(TypeError):
            spec.env["A"] = "2"  # type: ignore[index]
        assert isinstance(spec.steps, tuple)

    def test_locked_error_names_task(self):
        task = Task("deploy")
        task.lock()
        with pytest.raises(TaskLockedError, match='"deploy" is locked'):
            task.say("x")


# ═══════════════════════════════════════════════════════════════════
#  Registry
# ═══════════════════════════════════════════════════════════════════


class TestRegistry:
    def test_duplicate_name_rejected_and_first_kept(self):
        tasks = Tasks()
        first = tasks.add_task("build")
        with pytest.raises(DuplicateTaskError):
            tasks.add_task("build", TaskOptions(exec="other"))
        assert tasks.try_find("build") is first
        assert len(tasks.all) == 1

    def test_override_replaces(self):
        tasks = Tasks()
        tasks.add_task("build", TaskOptions(exec="old"))
        new = tasks.add_task("build", TaskOptions(exec="new"), override=True)
        assert tasks.try_find("build") is new
        assert [s.exec for s in new.steps] == ["new"]

    def test_all_in_registration_order(self):
        tasks = Tasks()
        for name in ("z", "a", "m"):
            tasks.add_task(name)
        assert [t.name for t in tasks.all] == ["z", "a", "m"]

    def test_render_manifest_locks_everything(self):
        tasks = Tasks()
        build = tasks.add_task("build", TaskOptions(description="Build"))
        build.exec("make")
        tasks.add_env("CI", "1")
        manifest = tasks.render_manifest()

        assert build.locked
        assert manifest.get("build").description == "Build"
        assert dict(manifest.env) == {"CI": "1"}
        with pytest.raises(TaskLockedError):
            tasks.add_env("OTHER", "x")

    def test_lock_all(self):
        tasks = Tasks()
        a = tasks.add_task("a")
        tasks.lock_all()
        assert a.locked

    @pytest.mark.parametrize("override", [False, True])
    def test_no_new_tasks_after_render(self, override):
        tasks = Tasks()
        first = tasks.add_task("build")
        tasks.render_manifest()

        with pytest.raises(TaskLockedError):
            tasks.add_task("build", override=override)
        with pytest.raises(TaskLockedError):
            tasks.add_task("late")
        assert tasks.all == [first]

    def test_registries_are_independent(self):
        one, two = Tasks(), Tasks()
        one.add_task("build")
        two.add_task("build")
        assert one.try_find("build") is not two.try_find("build")
