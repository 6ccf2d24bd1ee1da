"""FileBase: a component that owns exactly one generated file."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

from projgen.component import Component
from projgen.config import FileOptions
from projgen.errors import InvalidOptionsError

if TYPE_CHECKING:
    from projgen.project import Project


def normalize_path(path: str) -> str:
    """Normalize a project-relative path; reject absolute and escaping paths."""
    if not path or not path.strip():
        raise InvalidOptionsError("file path cannot be empty")
    p = PurePosixPath(path.replace("\\", "/"))
    if p.is_absolute() or ".." in p.parts:
        raise InvalidOptionsError(f"file path must stay inside the project: {path!r}")
    return p.as_posix()


class FileBase(Component, ABC):
    """Base class for synthesized files.

    Subclasses implement the two rendering phases:

    * :meth:`snapshot` captures the owner's state as an immutable value.
    * :meth:`render` turns that snapshot into the file content, or ``None``
      to skip the file in this pass.

    Both run at synthesis time, once per pass, so content reflects every
    change made to the component up to that point.
    """

    # Sample files are written once and then belong to the user.
    create_only = False

    def __init__(self, project: Project, path: str, options: FileOptions | None = None) -> None:
        opts = options or FileOptions()
        self.path = normalize_path(path)
        self.marker = opts.marker
        self.readonly = opts.readonly
        self.committed = opts.committed
        self.executable = opts.executable
        self.override = opts.override
        replaced = project.files.register(self)
        if replaced is not None:
            project.components.remove(replaced)
        super().__init__(project)

    @property
    def absolute_path(self) -> Path:
        return Path(self.project.outdir) / self.path

    def snapshot(self) -> Any:
        return None

    @abstractmethod
    def render(self, snapshot: Any) -> str | None:
        ...

    def pre_synthesize(self) -> None:
        gitignore = self.project.gitignore
        if not self.committed and gitignore is not None and gitignore is not self:
            gitignore.exclude(f"/{self.path}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r})"
