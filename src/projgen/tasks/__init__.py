"""Task model, per-project registry and the standalone task runtime."""

from projgen.tasks.model import Step, StepKind, TaskManifest, TaskSpec
from projgen.tasks.registry import Tasks
from projgen.tasks.runtime import TaskRuntime, TaskState
from projgen.tasks.task import Task

__all__ = [
    "Step",
    "StepKind",
    "Task",
    "TaskManifest",
    "TaskRuntime",
    "TaskSpec",
    "TaskState",
    "Tasks",
]
