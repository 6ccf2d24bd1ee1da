"""Step, TaskSpec and TaskManifest: the plain data handed to the task runtime."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class StepKind(str, Enum):
    EXEC = "exec"
    SPAWN = "spawn"
    SAY = "say"
    BUILTIN = "builtin"


@dataclass(frozen=True)
class Step:
    """One unit of task execution. Exactly one of the four tags is set."""

    exec: str | None = None
    spawn: str | None = None
    say: str | None = None
    builtin: str | None = None
    name: str | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    cwd: str | None = None
    condition: str | None = None

    def __post_init__(self) -> None:
        tags = [k for k in StepKind if getattr(self, k.value) is not None]
        if len(tags) != 1:
            raise ValueError(
                f"A step needs exactly one of exec/spawn/say/builtin, got {len(tags)}"
            )
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))

    @property
    def kind(self) -> StepKind:
        for k in StepKind:
            if getattr(self, k.value) is not None:
                return k
        raise AssertionError("unreachable")  # pragma: no cover

    @property
    def value(self) -> str:
        return getattr(self, self.kind.value)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.name is not None:
            data["name"] = self.name
        data[self.kind.value] = self.value
        if self.env:
            data["env"] = dict(self.env)
        if self.cwd is not None:
            data["cwd"] = self.cwd
        if self.condition is not None:
            data["condition"] = self.condition
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Step:
        return cls(
            exec=data.get("exec"),
            spawn=data.get("spawn"),
            say=data.get("say"),
            builtin=data.get("builtin"),
            name=data.get("name"),
            env=data.get("env") or {},
            cwd=data.get("cwd"),
            condition=data.get("condition"),
        )


@dataclass(frozen=True)
class TaskSpec:
    """Immutable manifest entry for one task."""

    name: str
    description: str | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    required_env: tuple[str, ...] = ()
    steps: tuple[Step, ...] = ()
    condition: str | None = None
    cwd: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))
        object.__setattr__(self, "required_env", tuple(self.required_env))
        object.__setattr__(self, "steps", tuple(self.steps))

    def spawned(self) -> list[str]:
        """Names of the subtasks this task spawns, in step order."""
        return [s.spawn for s in self.steps if s.spawn is not None]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.description is not None:
            data["description"] = self.description
        if self.env:
            data["env"] = dict(self.env)
        if self.required_env:
            data["requiredEnv"] = list(self.required_env)
        if self.steps:
            data["steps"] = [s.to_dict() for s in self.steps]
        if self.condition is not None:
            data["condition"] = self.condition
        if self.cwd is not None:
            data["cwd"] = self.cwd
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TaskSpec:
        return cls(
            name=data["name"],
            description=data.get("description"),
            env=data.get("env") or {},
            required_env=tuple(data.get("requiredEnv") or ()),
            steps=tuple(Step.from_dict(s) for s in data.get("steps") or ()),
            condition=data.get("condition"),
            cwd=data.get("cwd"),
        )


@dataclass(frozen=True)
class TaskManifest:
    """All tasks of a project plus the project-wide environment."""

    tasks: Mapping[str, TaskSpec] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        ordered = {name: self.tasks[name] for name in sorted(self.tasks)}
        object.__setattr__(self, "tasks", MappingProxyType(ordered))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))

    def get(self, name: str) -> TaskSpec | None:
        return self.tasks.get(name)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "tasks": {name: spec.to_dict() for name, spec in self.tasks.items()},
        }
        if self.env:
            data["env"] = dict(self.env)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TaskManifest:
        raw = copy.deepcopy(dict(data))
        tasks = {
            name: TaskSpec.from_dict({"name": name, **spec})
            for name, spec in (raw.get("tasks") or {}).items()
        }
        return cls(tasks=tasks, env=raw.get("env") or {})
