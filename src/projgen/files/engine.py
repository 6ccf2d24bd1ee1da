"""File registry and the write-on-diff synthesis pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from projgen import log
from projgen.errors import DuplicatePathError, FileSynthError
from projgen.files import marker
from projgen.io_utils import (
    is_writable,
    make_executable,
    make_readonly,
    read_bytes_or_none,
    write_bytes,
)

if TYPE_CHECKING:
    from projgen.files.base import FileBase


class SynthesizedFile(Protocol):
    """What the engine needs from a file: a path, flags and the two render phases."""

    path: str
    marker: bool
    readonly: bool
    executable: bool
    create_only: bool

    def snapshot(self) -> Any: ...

    def render(self, snapshot: Any) -> str | None: ...


class SynthOutcome(str, Enum):
    WRITTEN = "written"
    UNCHANGED = "unchanged"
    PRESERVED = "preserved"
    SKIPPED = "skipped"


@dataclass
class SynthReport:
    """Per-path outcomes of one synthesis pass, in the order files were visited."""

    outcomes: dict[str, SynthOutcome] = field(default_factory=dict)

    def record(self, path: str, outcome: SynthOutcome) -> None:
        self.outcomes[path] = outcome

    def merge(self, other: SynthReport) -> None:
        self.outcomes.update(other.outcomes)

    def paths(self, outcome: SynthOutcome) -> list[str]:
        return [p for p, o in self.outcomes.items() if o == outcome]

    @property
    def written(self) -> list[str]:
        return self.paths(SynthOutcome.WRITTEN)

    @property
    def unchanged(self) -> list[str]:
        return self.paths(SynthOutcome.UNCHANGED)

    @property
    def preserved(self) -> list[str]:
        return self.paths(SynthOutcome.PRESERVED)

    @property
    def skipped(self) -> list[str]:
        return self.paths(SynthOutcome.SKIPPED)


class FileRegistry:
    """The set of files a project generates, keyed by relative path.

    A path can be claimed once. A later file may take over the path only by
    declaring ``override=True``; it then replaces the earlier file in place.
    """

    def __init__(self, outdir: str | Path, *, force: bool = False) -> None:
        self.outdir = Path(outdir)
        self.force = force
        self._files: dict[str, FileBase] = {}
        self._reserved: set[str] = set()

    @property
    def files(self) -> list[FileBase]:
        return list(self._files.values())

    def try_find(self, path: str) -> FileBase | None:
        return self._files.get(path)

    def reserve(self, path: str) -> None:
        """Claim *path* for a file written outside :meth:`synthesize_all`."""
        if path in self._files or path in self._reserved:
            raise DuplicatePathError(path)
        self._reserved.add(path)

    def register(self, file: FileBase) -> FileBase | None:
        """Claim ``file.path`` for *file*; return the file it replaced, if any."""
        path = file.path
        if path in self._reserved:
            raise DuplicatePathError(path)
        replaced = self._files.get(path)
        if replaced is not None:
            if not file.override:
                raise DuplicatePathError(path)
            log.debug(f"{path}: {type(replaced).__name__} replaced by override")
        self._files[path] = file
        return replaced

    # ── synthesis ───────────────────────────────────────────────

    def synthesize_all(self) -> SynthReport:
        report = SynthReport()
        for file in self.files:
            report.record(file.path, self.synthesize(file))
        return report

    def synthesize(self, file: SynthesizedFile) -> SynthOutcome:
        content = file.render(file.snapshot())
        if content is None:
            return SynthOutcome.SKIPPED
        if file.marker:
            content = marker.stamp(content)
        data = content.encode("utf-8")

        target = self.outdir / file.path
        try:
            existing = read_bytes_or_none(target)
        except OSError as exc:
            raise FileSynthError(file.path, f"cannot read existing file: {exc}") from exc

        if existing is not None:
            if file.create_only:
                return SynthOutcome.SKIPPED
            if existing == data:
                self._apply_mode(file, target)
                return SynthOutcome.UNCHANGED
            if self._is_protected(file, content, existing):
                log.warn(
                    f"{file.path} was modified by hand; leaving it untouched "
                    "(remove the file or synthesize with force to regenerate it)"
                )
                return SynthOutcome.PRESERVED

        try:
            write_bytes(target, data)
            self._apply_mode(file, target)
        except OSError as exc:
            raise FileSynthError(file.path, f"cannot write file: {exc}") from exc
        log.debug(f"{file.path}: written ({len(data)} bytes)")
        return SynthOutcome.WRITTEN

    def _is_protected(self, file: SynthesizedFile, content: str, existing: bytes) -> bool:
        if self.force or not (file.readonly and file.marker):
            return False
        # Some renderings cannot carry the marker (a JSON list, say); there is
        # nothing to tell generated output from hand edits for those.
        if marker.check(content) == marker.MarkerStatus.MISSING:
            return False
        status = marker.check(existing.decode("utf-8", errors="replace"))
        return status != marker.MarkerStatus.INTACT

    @staticmethod
    def _apply_mode(file: SynthesizedFile, target: Path) -> None:
        if file.executable:
            make_executable(target)
        if file.readonly and is_writable(target):
            make_readonly(target)
