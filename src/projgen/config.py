"""Configuration defaults, env vars, and option records for projgen."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from projgen.errors import InvalidOptionsError


VERSION = "0.4.0"

PROJGEN_DIR = ".projgen"
TASKS_MANIFEST_FILE = f"{PROJGEN_DIR}/tasks.json"
DEFAULT_RC = ".projgenrc.py"

# Set to "true" to skip post-synthesis hooks (used by ``projgen --no-post``).
DISABLE_POST_ENV = "PROJGEN_DISABLE_POST"

MARKER = f'~~ Generated by projgen. To modify, edit {DEFAULT_RC} and run "projgen".'


def _require_text(value: str | None, what: str) -> None:
    if value is not None and not value.strip():
        raise InvalidOptionsError(f"{what} must be a non-empty string")


def _check_env(env: dict[str, str], what: str) -> None:
    for key, value in env.items():
        if not key or not key.strip():
            raise InvalidOptionsError(f"{what}: environment variable names cannot be empty")
        if not isinstance(value, str):
            raise InvalidOptionsError(
                f"{what}: value for {key!r} must be a string, got {type(value).__name__}"
            )


def post_disabled_by_env() -> bool:
    return os.environ.get(DISABLE_POST_ENV, "").strip().lower() in ("1", "true", "yes")


@dataclass
class ProjectOptions:
    """Options for :class:`projgen.project.Project`."""

    name: str

    # Output directory; defaults to the current working directory.
    outdir: str = ""

    # Run post-synthesis hooks (dependency installs and the like).
    post: bool = True

    # Overwrite readonly files even if they were modified by hand.
    force: bool = False

    # Generate a .gitignore that lists non-committed files.
    gitignore: bool = True

    def __post_init__(self) -> None:
        _require_text(self.name, "project name")
        if not self.outdir:
            self.outdir = str(Path.cwd())
        if post_disabled_by_env():
            self.post = False


@dataclass
class TaskOptions:
    """Options for a new task."""

    description: str | None = None

    # Shell command to run as the first step of the task.
    exec: str | None = None

    env: dict[str, str] = field(default_factory=dict)

    # Shell expression; exit code 0 skips the task.
    condition: str | None = None

    cwd: str | None = None

    # Variables that must be set and non-empty when the task runs.
    required_env: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        _require_text(self.exec, "exec")
        _require_text(self.condition, "condition")
        _require_text(self.cwd, "cwd")
        _check_env(self.env, "task options")
        for name in self.required_env:
            _require_text(name, "required_env entry")
        self.env = dict(self.env)
        self.required_env = list(self.required_env)


@dataclass
class StepOptions:
    """Per-step options shared by exec/spawn/say steps."""

    name: str | None = None
    env: dict[str, str] = field(default_factory=dict)
    cwd: str | None = None

    # Shell expression; exit code 0 skips this step only.
    condition: str | None = None

    def __post_init__(self) -> None:
        _require_text(self.name, "step name")
        _require_text(self.cwd, "step cwd")
        _require_text(self.condition, "step condition")
        _check_env(self.env, "step options")
        self.env = dict(self.env)


@dataclass
class FileOptions:
    """Options common to every synthesized file."""

    # Stamp the file with the generated-file marker.
    marker: bool = True

    # Make the file read-only on disk and protect it against hand edits.
    readonly: bool = True

    # Whether the file is checked into version control.
    committed: bool = True

    executable: bool = False

    # Replace a file registered earlier for the same path.
    override: bool = False
