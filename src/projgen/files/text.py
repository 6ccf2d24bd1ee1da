"""Plain text files."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from projgen.config import FileOptions
from projgen.errors import InvalidOptionsError
from projgen.files.base import FileBase
from projgen.files.marker import marker_line

if TYPE_CHECKING:
    from projgen.project import Project


class TextFile(FileBase):
    """A text file built from lines, a string, or a function returning a string.

    Lines are joined with ``\\n`` as given. When ``marker`` is on, a comment
    line holding the marker is written first, using ``comment`` as prefix.
    """

    def __init__(
        self,
        project: Project,
        path: str,
        lines: Iterable[str] | None = None,
        *,
        contents: str | Callable[[], str] | None = None,
        comment: str = "#",
        options: FileOptions | None = None,
    ) -> None:
        if lines is not None and contents is not None:
            raise InvalidOptionsError(f"{path}: pass either lines or contents, not both")
        super().__init__(project, path, options)
        self.comment = comment
        self._lines = list(lines or [])
        self._contents = contents

    def add_line(self, line: str) -> None:
        if self._contents is not None:
            raise InvalidOptionsError(f"{self.path}: cannot add lines to a file built from contents")
        self._lines.append(line)

    def snapshot(self) -> str:
        if callable(self._contents):
            return self._contents()
        if self._contents is not None:
            return self._contents
        return "\n".join(self._lines)

    def render(self, snapshot: str) -> str:
        if not self.marker:
            return snapshot
        return f"{self.comment} {marker_line()}\n{snapshot}"
