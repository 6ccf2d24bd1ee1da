"""Exception types raised while defining, synthesizing and running a project."""

from __future__ import annotations


class ProjgenError(RuntimeError):
    """Base class for every projgen failure."""


# ── Definition-time errors ──────────────────────────────────────────


class InvalidOptionsError(ProjgenError, ValueError):
    """Raised when an options record fails validation."""


class DuplicateTaskError(ProjgenError):
    def __init__(self, name: str) -> None:
        super().__init__(f'Duplicate task name "{name}"')
        self.name = name


class TaskLockedError(ProjgenError):
    def __init__(self, name: str) -> None:
        super().__init__(f'Task "{name}" is locked for changes')
        self.name = name


class DuplicatePathError(ProjgenError):
    def __init__(self, path: str) -> None:
        super().__init__(
            f'There is already a file under "{path}"; pass override=True to replace it'
        )
        self.path = path


# ── Execution-time errors ───────────────────────────────────────────


class TaskExecutionError(ProjgenError):
    """Failure of a task invocation. ``task`` names the task that failed."""

    def __init__(self, task: str, message: str) -> None:
        super().__init__(f"{task} | {message}")
        self.task = task


class UnknownTaskError(TaskExecutionError):
    def __init__(self, task: str, parent: str | None = None) -> None:
        where = f" (spawned from {parent})" if parent else ""
        super().__init__(task, f'cannot find task named "{task}"{where}')
        self.parent = parent


class TaskCycleError(TaskExecutionError):
    def __init__(self, task: str, chain: list[str]) -> None:
        path = " -> ".join([*chain, task])
        super().__init__(task, f"cycle detected in spawned tasks: {path}")
        self.chain = chain


class MissingEnvError(TaskExecutionError):
    def __init__(self, task: str, missing: list[str]) -> None:
        names = ", ".join(missing)
        super().__init__(task, f"missing required environment variables: {names}")
        self.missing = missing


class StepFailedError(TaskExecutionError):
    def __init__(
        self,
        task: str,
        step_index: int,
        command: str,
        exit_code: int | None,
        reason: str = "",
    ) -> None:
        detail = reason or f"exit code {exit_code}"
        super().__init__(task, f"step {step_index} failed: {command} ({detail})")
        self.step_index = step_index
        self.command = command
        self.exit_code = exit_code


class UnknownBuiltinError(TaskExecutionError):
    def __init__(self, task: str, builtin: str) -> None:
        super().__init__(task, f'unknown builtin task "{builtin}"')
        self.builtin = builtin


class BuiltinError(TaskExecutionError):
    def __init__(self, task: str, builtin: str, message: str) -> None:
        super().__init__(task, f"builtin {builtin}: {message}")
        self.builtin = builtin


# ── Synthesis errors ────────────────────────────────────────────────


class FileSynthError(ProjgenError):
    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
