"""Structured files (JSON, YAML) rendered from a Python object."""

from __future__ import annotations

import copy
import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import yaml

from projgen.config import FileOptions
from projgen.errors import InvalidOptionsError
from projgen.files.base import FileBase
from projgen.files.marker import marker_line

if TYPE_CHECKING:
    from projgen.project import Project

_DELETE = object()


class ObjectFile(FileBase):
    """A file rendered from a JSON-like object.

    ``obj`` may be a value or a zero-argument callable; a callable is invoked
    when the file is rendered. Overrides are applied to a deep copy, so the
    caller's object is never mutated.
    """

    def __init__(
        self,
        project: Project,
        path: str,
        obj: Any | Callable[[], Any] = None,
        *,
        options: FileOptions | None = None,
    ) -> None:
        super().__init__(project, path, options)
        self._obj = {} if obj is None else obj
        self._overrides: list[tuple[list[str], Any]] = []

    def add_override(self, path: str, value: Any) -> None:
        """Set a value at a dotted path (``"compilerOptions.strict"``), creating parents."""
        self._overrides.append((_split(path), copy.deepcopy(value)))

    def add_deletion_override(self, path: str) -> None:
        self._overrides.append((_split(path), _DELETE))

    def snapshot(self) -> Any:
        obj = self._obj() if callable(self._obj) else self._obj
        obj = copy.deepcopy(obj)
        for keys, value in self._overrides:
            if not isinstance(obj, dict):
                raise InvalidOptionsError(f"{self.path}: overrides need a mapping at the root")
            _apply(obj, keys, value)
        return obj


class JsonFile(ObjectFile):
    """JSON file. The marker is stored under the ``"//"`` key."""

    def render(self, snapshot: Any) -> str | None:
        if snapshot is None:
            return None
        if self.marker and isinstance(snapshot, dict):
            snapshot = {"//": marker_line(), **snapshot}
        return json.dumps(snapshot, indent=2, ensure_ascii=False) + "\n"


class YamlFile(ObjectFile):
    """YAML file. The marker is written as a leading comment."""

    def render(self, snapshot: Any) -> str | None:
        if snapshot is None:
            return None
        body = yaml.safe_dump(
            snapshot,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )
        if self.marker:
            body = f"# {marker_line()}\n\n{body}"
        return body


def _split(path: str) -> list[str]:
    keys = [k for k in path.split(".") if k]
    if not keys:
        raise InvalidOptionsError(f"invalid override path: {path!r}")
    return keys


def _apply(obj: dict[str, Any], keys: list[str], value: Any) -> None:
    node = obj
    for key in keys[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            if value is _DELETE:
                return
            child = node[key] = {}
        node = child
    if value is _DELETE:
        node.pop(keys[-1], None)
    else:
        node[keys[-1]] = copy.deepcopy(value)
