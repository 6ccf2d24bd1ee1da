"""Per-project task registry."""

from __future__ import annotations

from projgen import log
from projgen.config import TaskOptions
from projgen.errors import DuplicateTaskError, TaskLockedError
from projgen.tasks.model import TaskManifest
from projgen.tasks.task import Task


class Tasks:
    """Registry of the tasks defined by one project.

    Owned by a :class:`~projgen.project.Project`; nothing here is global, so
    any number of projects can be built side by side.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._env: dict[str, str] = {}
        self._locked = False

    @property
    def all(self) -> list[Task]:
        """Tasks in registration order."""
        return list(self._tasks.values())

    @property
    def env(self) -> dict[str, str]:
        return dict(self._env)

    def add_task(
        self,
        name: str,
        options: TaskOptions | None = None,
        *,
        override: bool = False,
    ) -> Task:
        """Define a new task.

        Raises :class:`DuplicateTaskError` if ``name`` is taken, unless
        ``override`` is set, in which case the old task is replaced. Once the
        manifest has been rendered, new tasks raise :class:`TaskLockedError`.
        """
        if self._locked:
            raise TaskLockedError(name)
        if name in self._tasks:
            if not override:
                raise DuplicateTaskError(name)
            log.debug(f"Task {name}: replaced by override")
        task = Task(name, options)
        self._tasks[name] = task
        return task

    def try_find(self, name: str) -> Task | None:
        return self._tasks.get(name)

    def add_env(self, name: str, value: str) -> None:
        """Project-wide environment variable, visible to every task."""
        if self._locked:
            raise TaskLockedError("<project env>")
        self._env[name] = value

    def lock_all(self) -> None:
        for task in self._tasks.values():
            task.lock()
        self._locked = True

    def render_manifest(self) -> TaskManifest:
        """Snapshot every task into a manifest. Rendering locks the tasks."""
        specs = {name: task.render_spec() for name, task in self._tasks.items()}
        self._locked = True
        return TaskManifest(tasks=specs, env=self._env)
