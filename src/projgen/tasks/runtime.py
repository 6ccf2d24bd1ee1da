"""Task runtime: executes tasks from a serialized manifest.

The runtime only ever sees the :class:`TaskManifest` (normally loaded from
``.projgen/tasks.json``), never the live :class:`~projgen.tasks.task.Task`
objects that produced it.
"""

from __future__ import annotations

import json
import os
import re
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from projgen import log
from projgen.config import TASKS_MANIFEST_FILE
from projgen.errors import (
    BuiltinError,
    MissingEnvError,
    StepFailedError,
    TaskCycleError,
    TaskExecutionError,
    UnknownBuiltinError,
    UnknownTaskError,
)
from projgen.io_utils import read_text
from projgen.tasks.builtins import BUILTINS, BuiltinContext, BuiltinFailure
from projgen.tasks.model import Step, StepKind, TaskManifest, TaskSpec


_SUBSHELL = re.compile(r"^\$\((.*)\)$", re.DOTALL)


class TaskState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class Invocation:
    """Record of one task invocation, kept for diagnostics."""

    name: str
    depth: int
    parent: str | None = None
    state: TaskState = TaskState.PENDING


def load_manifest(workdir: Path) -> TaskManifest:
    """Read the task manifest under *workdir*; missing file means no tasks."""
    path = workdir / TASKS_MANIFEST_FILE
    if not path.is_file():
        return TaskManifest()
    return TaskManifest.from_dict(json.loads(read_text(path)))


class TaskRuntime:
    """Runs tasks defined in a project's task manifest.

    Usage::

        runtime = TaskRuntime(project_dir)
        runtime.run_task("build")          # raises on failure
        runtime.state_of("build")          # TaskState.SUCCEEDED
        print("\\n".join(runtime.inspect_task("build")))
    """

    def __init__(self, workdir: str | Path, manifest: TaskManifest | None = None) -> None:
        self.workdir = Path(workdir).resolve()
        self.manifest = manifest if manifest is not None else load_manifest(self.workdir)
        self.invocations: list[Invocation] = []

    # ── lookup ──────────────────────────────────────────────────

    @property
    def tasks(self) -> list[TaskSpec]:
        return list(self.manifest.tasks.values())

    def try_find_task(self, name: str) -> TaskSpec | None:
        return self.manifest.get(name)

    def state_of(self, name: str) -> TaskState:
        """State of the most recent invocation of *name*."""
        for inv in reversed(self.invocations):
            if inv.name == name:
                return inv.state
        return TaskState.PENDING

    # ── execution ───────────────────────────────────────────────

    def run_task(
        self,
        name: str,
        parents: Sequence[str] = (),
        env: Mapping[str, str] | None = None,
        *,
        inherited: Mapping[str, str] | None = None,
    ) -> TaskState:
        """Run *name* and every subtask it spawns.

        Returns ``SUCCEEDED`` or ``SKIPPED``; any failure is raised as a
        :class:`~projgen.errors.TaskExecutionError` after the invocation has
        been recorded as ``FAILED``.

        *inherited* is the env a parent task passes down; the task's own env
        wins over it. *env* (a spawn step's env) wins over both. Both are
        already evaluated.
        """
        chain = list(parents)
        if name in chain:
            raise TaskCycleError(name, chain)

        spec = self.try_find_task(name)
        if spec is None:
            raise UnknownTaskError(name, chain[-1] if chain else None)

        inv = Invocation(name=name, depth=len(chain), parent=chain[-1] if chain else None)
        self.invocations.append(inv)
        inv.state = TaskState.RUNNING
        log.debug(f"Task {name}: pending -> running")

        try:
            task_env, scoped = self._task_env(spec, inherited or {}, env or {})
            cwd = self._resolve_cwd(spec.cwd)

            if spec.condition and self._condition_says_skip(name, spec.condition, cwd, task_env):
                log.task_line(name, "condition exited with 0 - skipping")
                inv.state = TaskState.SKIPPED
                return inv.state

            missing = [k for k in spec.required_env if not task_env.get(k)]
            if missing:
                raise MissingEnvError(name, missing)

            for index, step in enumerate(spec.steps):
                self._run_step(spec, index, step, cwd, task_env, scoped, [*chain, name])
        except TaskExecutionError:
            inv.state = TaskState.FAILED
            log.debug(f"Task {name}: running -> failed")
            raise

        inv.state = TaskState.SUCCEEDED
        log.debug(f"Task {name}: running -> succeeded")
        return inv.state

    def _run_step(
        self,
        spec: TaskSpec,
        index: int,
        step: Step,
        task_cwd: Path,
        task_env: dict[str, str],
        scoped: dict[str, str],
        chain: list[str],
    ) -> None:
        name = spec.name
        cwd = self._resolve_cwd(step.cwd) if step.cwd else task_cwd
        env = {**task_env, **self._evaluate_env(name, step.env, cwd, task_env)}

        if step.condition and self._condition_says_skip(name, step.condition, cwd, env):
            label = step.name or f"step {index}"
            log.task_line(name, f"{label}: condition exited with 0 - skipping")
            return

        match step.kind:
            case StepKind.SAY:
                log.task_line(name, step.value)
            case StepKind.SPAWN:
                self.run_task(
                    step.value,
                    parents=chain,
                    env={k: env[k] for k in step.env},
                    inherited=scoped,
                )
            case StepKind.BUILTIN:
                self._run_builtin(name, step.value, cwd, env)
            case StepKind.EXEC:
                self._run_exec(name, index, step.value, cwd, env)

    def _run_exec(
        self,
        task: str,
        index: int,
        command: str,
        cwd: Path,
        env: dict[str, str],
    ) -> None:
        log.task_line(task, command)
        try:
            result = subprocess.run(command, shell=True, cwd=cwd, env=env)
        except OSError as exc:
            raise StepFailedError(task, index, command, None, reason=str(exc)) from exc
        if result.returncode != 0:
            raise StepFailedError(task, index, command, result.returncode)

    def _run_builtin(self, task: str, builtin: str, cwd: Path, env: dict[str, str]) -> None:
        handler = BUILTINS.get(builtin)
        if handler is None:
            raise UnknownBuiltinError(task, builtin)
        log.task_line(task, f"builtin: {builtin}")
        try:
            handler(BuiltinContext(task_name=task, cwd=cwd, env=env))
        except (BuiltinFailure, OSError, ValueError) as exc:
            raise BuiltinError(task, builtin, str(exc)) from exc

    # ── environment ─────────────────────────────────────────────

    def _task_env(
        self,
        spec: TaskSpec,
        inherited: Mapping[str, str],
        overrides: Mapping[str, str],
    ) -> tuple[dict[str, str], dict[str, str]]:
        """process env < manifest env < *inherited* < task env < *overrides*.

        Returns the full env and the part of it set by tasks and spawn steps,
        which is what subtasks inherit.
        """
        cwd = self._resolve_cwd(spec.cwd)
        env = dict(os.environ)
        env.update(self._evaluate_env(spec.name, self.manifest.env, cwd, env))
        scoped = dict(inherited)
        env.update(scoped)
        own = self._evaluate_env(spec.name, spec.env, cwd, env)
        scoped.update(own)
        scoped.update(overrides)
        env.update(own)
        env.update(overrides)
        return env, scoped

    def _evaluate_env(
        self,
        task: str,
        values: Mapping[str, str],
        cwd: Path,
        base: Mapping[str, str],
    ) -> dict[str, str]:
        out: dict[str, str] = {}
        for key, value in values.items():
            m = _SUBSHELL.match(value)
            out[key] = self._subshell(task, key, m.group(1), cwd, base) if m else value
        return out

    def _subshell(
        self,
        task: str,
        key: str,
        command: str,
        cwd: Path,
        env: Mapping[str, str],
    ) -> str:
        try:
            result = subprocess.run(
                command,
                shell=True,
                cwd=cwd,
                env=dict(env),
                capture_output=True,
                text=True,
            )
        except OSError as exc:
            raise TaskExecutionError(task, f"unable to evaluate {key}: {exc}") from exc
        if result.returncode != 0:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise TaskExecutionError(task, f"unable to evaluate {key}=$({command}): {detail}")
        return result.stdout.strip()

    # ── helpers ─────────────────────────────────────────────────

    def _resolve_cwd(self, cwd: str | None) -> Path:
        if not cwd:
            return self.workdir
        p = Path(cwd)
        return p if p.is_absolute() else self.workdir / p

    def _condition_says_skip(
        self,
        task: str,
        condition: str,
        cwd: Path,
        env: Mapping[str, str],
    ) -> bool:
        """Exit code 0 means the condition holds and the task is skipped."""
        try:
            result = subprocess.run(
                condition,
                shell=True,
                cwd=cwd,
                env=dict(env),
                capture_output=True,
                text=True,
            )
        except OSError as exc:
            raise TaskExecutionError(task, f"unable to evaluate condition {condition!r}: {exc}") from exc
        log.debug(f"condition {condition!r} exited with {result.returncode}")
        return result.returncode == 0

    # ── inspection ──────────────────────────────────────────────

    def inspect_task(self, name: str) -> list[str]:
        """Describe *name* and its spawned subtasks without running anything."""
        lines: list[str] = []
        self._inspect(name, 0, [], lines)
        return lines

    def _inspect(self, name: str, indent: int, chain: list[str], lines: list[str]) -> None:
        if name in chain:
            raise TaskCycleError(name, chain)
        spec = self.try_find_task(name)
        if spec is None:
            raise UnknownTaskError(name, chain[-1] if chain else None)

        pad = " " * indent
        if spec.description:
            lines.append(f"{pad}description: {spec.description}")
        for key, value in spec.env.items():
            lines.append(f"{pad}env: {key}={value}")
        if spec.condition:
            lines.append(f"{pad}condition: {spec.condition}")

        for step in spec.steps:
            match step.kind:
                case StepKind.SPAWN:
                    lines.append(f"{pad}- {step.spawn}")
                    self._inspect(step.spawn, indent + 2, [*chain, name], lines)
                case _:
                    lines.append(f"{pad}- {step.kind.value}: {step.value}")
