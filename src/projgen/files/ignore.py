"""Ignore files (.gitignore, .npmignore, ...)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from projgen.config import FileOptions
from projgen.files.base import FileBase
from projgen.files.marker import marker_line

if TYPE_CHECKING:
    from projgen.project import Project


class IgnoreFile(FileBase):
    """Ignore patterns, kept unique and in the order they were added.

    Including a pattern that was excluded earlier removes the exclusion and
    adds a ``!pattern`` line, and vice versa.
    """

    def __init__(self, project: Project, path: str, options: FileOptions | None = None) -> None:
        super().__init__(project, path, options)
        self._patterns: list[str] = []

    @property
    def patterns(self) -> list[str]:
        return list(self._patterns)

    def exclude(self, *patterns: str) -> None:
        for pattern in patterns:
            self._add(pattern, f"!{pattern}")

    def include(self, *patterns: str) -> None:
        for pattern in patterns:
            self._add(f"!{pattern}", pattern)

    def _add(self, line: str, opposite: str) -> None:
        if opposite in self._patterns:
            self._patterns.remove(opposite)
        if line not in self._patterns:
            self._patterns.append(line)

    def snapshot(self) -> tuple[str, ...]:
        return tuple(self._patterns)

    def render(self, snapshot: tuple[str, ...]) -> str:
        lines = [f"# {marker_line()}"] if self.marker else []
        lines.extend(snapshot)
        return "\n".join(lines) + "\n"
