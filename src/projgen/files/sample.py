"""Sample files: written once if absent, then owned by the user."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from projgen.component import Component
from projgen.config import FileOptions
from projgen.errors import InvalidOptionsError
from projgen.files.base import FileBase
from projgen.io_utils import read_text

if TYPE_CHECKING:
    from projgen.project import Project


def _sample_options() -> FileOptions:
    return FileOptions(marker=False, readonly=False, committed=True)


class SampleFile(FileBase):
    """Initial content for a file the user is expected to edit."""

    create_only = True

    def __init__(
        self,
        project: Project,
        path: str,
        *,
        contents: str | None = None,
        source_path: str | Path | None = None,
    ) -> None:
        if (contents is None) == (source_path is None):
            raise InvalidOptionsError(f"{path}: pass exactly one of contents or source_path")
        super().__init__(project, path, _sample_options())
        self.contents = contents
        self.source_path = Path(source_path) if source_path is not None else None

    def snapshot(self) -> str:
        if self.source_path is None:
            return self.contents or ""
        return read_text(self.source_path)

    def render(self, snapshot: str) -> str:
        return snapshot


class SampleDir(Component):
    """A directory of sample files.

    Files come from ``source_dir`` (copied recursively) and from ``files``
    (relative path -> contents); an entry in ``files`` wins over a copied file
    with the same name.
    """

    def __init__(
        self,
        project: Project,
        dir: str,
        *,
        files: dict[str, str] | None = None,
        source_dir: str | Path | None = None,
    ) -> None:
        if not files and source_dir is None:
            raise InvalidOptionsError(f"{dir}: SampleDir needs files or source_dir")
        super().__init__(project)
        self.dir = dir.rstrip("/")
        self.files: list[SampleFile] = []

        sources: dict[str, Path] = {}
        if source_dir is not None:
            root = Path(source_dir)
            if not root.is_dir():
                raise InvalidOptionsError(f"{dir}: source_dir {root} is not a directory")
            for path in sorted(root.rglob("*")):
                if path.is_file():
                    sources[path.relative_to(root).as_posix()] = path

        explicit = files or {}
        for rel, src in sources.items():
            if rel not in explicit:
                self.files.append(SampleFile(project, f"{self.dir}/{rel}", source_path=src))
        for rel, text in explicit.items():
            self.files.append(SampleFile(project, f"{self.dir}/{rel}", contents=text))
