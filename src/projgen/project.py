"""Project: the composition root that owns components, files and tasks."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from projgen import log
from projgen.component import Component
from projgen.config import (
    DEFAULT_RC,
    TASKS_MANIFEST_FILE,
    FileOptions,
    ProjectOptions,
    TaskOptions,
)
from projgen.files.engine import FileRegistry, SynthReport
from projgen.files.ignore import IgnoreFile
from projgen.files.marker import marker_line
from projgen.files.text import TextFile
from projgen.tasks.registry import Tasks
from projgen.tasks.task import Task

GITIGNORE = ".gitignore"


class TaskManifestFile:
    """``.projgen/tasks.json``, written after every other file."""

    path = TASKS_MANIFEST_FILE
    marker = True
    readonly = True
    executable = False
    create_only = False

    def __init__(self, tasks: Tasks) -> None:
        self._tasks = tasks

    def snapshot(self) -> dict[str, Any]:
        return self._tasks.render_manifest().to_dict()

    def render(self, snapshot: dict[str, Any]) -> str:
        return json.dumps({"//": marker_line(), **snapshot}, indent=2, ensure_ascii=False) + "\n"


class Project:
    """Root of a component tree.

    Usage::

        project = Project(ProjectOptions(name="demo", outdir="out"))
        TextFile(project, "README.md", ["# demo"])
        project.add_task("build", TaskOptions(exec="make"))
        project.synth()
    """

    def __init__(self, options: ProjectOptions) -> None:
        self.options = options
        self.name = options.name
        self.outdir = str(Path(options.outdir).resolve())
        self.components: list[Component] = []
        self.tasks = Tasks()
        self.files = FileRegistry(self.outdir, force=options.force)
        self._post_hooks: list[Callable[[], None]] = []

        self.tasks_file = TaskManifestFile(self.tasks)
        self.files.reserve(self.tasks_file.path)

        if options.gitignore:
            IgnoreFile(self, GITIGNORE)

        if (Path(self.outdir) / DEFAULT_RC).is_file():
            self.add_task(
                "default",
                TaskOptions(
                    description="Synthesize project files",
                    exec=f"python {DEFAULT_RC}",
                ),
            )

    # ── registration ────────────────────────────────────────────

    def add_component(self, component: Component) -> None:
        self.components.append(component)

    def add_task(
        self,
        name: str,
        options: TaskOptions | None = None,
        *,
        override: bool = False,
    ) -> Task:
        return self.tasks.add_task(name, options, override=override)

    def try_find_task(self, name: str) -> Task | None:
        return self.tasks.try_find(name)

    def add_file(
        self,
        path: str,
        contents: str | Callable[[], str],
        options: FileOptions | None = None,
    ) -> TextFile:
        """Register a plain text file whose content is *contents* (or its result)."""
        return TextFile(self, path, contents=contents, options=options)

    def add_post_synth_hook(self, hook: Callable[[], None]) -> None:
        self._post_hooks.append(hook)

    @property
    def gitignore(self) -> IgnoreFile | None:
        """The ignore file currently registered at ``.gitignore``, if any."""
        file = self.files.try_find(GITIGNORE)
        return file if isinstance(file, IgnoreFile) else None

    @property
    def post_enabled(self) -> bool:
        return self.options.post

    # ── synthesis ───────────────────────────────────────────────

    def synth(self) -> SynthReport:
        """Render and write every file, then the task manifest, then run hooks."""
        log.debug(f"Synthesizing {self.name} into {self.outdir}")

        for comp in self.components:
            comp.pre_synthesize()

        report = self.files.synthesize_all()
        report.record(self.tasks_file.path, self.files.synthesize(self.tasks_file))

        for comp in self.components:
            comp.synthesize()

        if self.post_enabled:
            for comp in self.components:
                comp.post_synthesize()
            for hook in self._post_hooks:
                hook()
        else:
            log.debug("Post-synthesis steps disabled")

        changed = len(report.written)
        log.success(f"Synthesis complete ({changed} file{'s' if changed != 1 else ''} written)")
        return report
