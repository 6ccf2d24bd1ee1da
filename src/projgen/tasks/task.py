"""Task: a named, ordered list of steps built up by project components."""

from __future__ import annotations

from projgen.config import StepOptions, TaskOptions
from projgen.errors import TaskLockedError
from projgen.tasks.model import Step, TaskSpec


def _step(options: StepOptions | None, **tag: str) -> Step:
    opts = options or StepOptions()
    return Step(
        name=opts.name,
        env=opts.env,
        cwd=opts.cwd,
        condition=opts.condition,
        **tag,
    )


class Task:
    """A task that can be performed on the project.

    Modeled as a series of shell commands, subtask spawns, messages and
    built-in operations. Steps run in the order they were added::

        build = project.add_task("build")
        build.exec("python -m compileall src")
        build.spawn(test)
        build.prepend_say("building…")
    """

    def __init__(self, name: str, options: TaskOptions | None = None) -> None:
        opts = options or TaskOptions()
        self.name = name
        self.description = opts.description
        self.condition = opts.condition
        self.cwd = opts.cwd
        self.required_env = list(opts.required_env)
        self._env: dict[str, str] = dict(opts.env)
        self._steps: list[Step] = []
        self._locked = False

        if opts.exec:
            self.exec(opts.exec)

    # ── state ───────────────────────────────────────────────────

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def steps(self) -> list[Step]:
        """A copy of the task's steps."""
        return list(self._steps)

    @property
    def env_vars(self) -> dict[str, str]:
        return dict(self._env)

    def lock(self) -> None:
        """Forbid additional changes to this task."""
        self._locked = True

    def _assert_unlocked(self) -> None:
        if self._locked:
            raise TaskLockedError(self.name)

    # ── mutation ────────────────────────────────────────────────

    def reset(self, command: str | None = None, options: StepOptions | None = None) -> None:
        """Remove every step; optionally start over with ``command``."""
        self._assert_unlocked()
        self._steps.clear()
        if command:
            self.exec(command, options)

    def exec(self, command: str, options: StepOptions | None = None) -> None:
        self._assert_unlocked()
        self._steps.append(_step(options, exec=command))

    def spawn(self, subtask: Task | str, options: StepOptions | None = None) -> None:
        self._assert_unlocked()
        self._steps.append(_step(options, spawn=_task_name(subtask)))

    def say(self, message: str, options: StepOptions | None = None) -> None:
        self._assert_unlocked()
        self._steps.append(_step(options, say=message))

    def builtin(self, name: str) -> None:
        """Run a built-in operation, e.g. ``release/bump-version``."""
        self._assert_unlocked()
        self._steps.append(Step(builtin=name))

    def prepend_exec(self, command: str, options: StepOptions | None = None) -> None:
        self._assert_unlocked()
        self._steps.insert(0, _step(options, exec=command))

    def prepend_spawn(self, subtask: Task | str, options: StepOptions | None = None) -> None:
        self._assert_unlocked()
        self._steps.insert(0, _step(options, spawn=_task_name(subtask)))

    def prepend_say(self, message: str, options: StepOptions | None = None) -> None:
        self._assert_unlocked()
        self._steps.insert(0, _step(options, say=message))

    def env(self, name: str, value: str) -> None:
        """Set an environment variable for this task.

        A value wrapped in ``$(...)`` is evaluated in a subshell when the
        task runs and its output is used as the value.
        """
        self._assert_unlocked()
        self._env[name] = value

    # ── rendering ───────────────────────────────────────────────

    def render_spec(self) -> TaskSpec:
        """Snapshot this task into a manifest entry and lock it."""
        self.lock()
        return TaskSpec(
            name=self.name,
            description=self.description,
            env=self._env,
            required_env=tuple(self.required_env),
            steps=tuple(self._steps),
            condition=self.condition,
            cwd=self.cwd,
        )

    def __repr__(self) -> str:
        return f"Task({self.name!r}, steps={len(self._steps)}, locked={self._locked})"


def _task_name(subtask: Task | str) -> str:
    return subtask.name if isinstance(subtask, Task) else subtask
