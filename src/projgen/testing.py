"""Helpers for asserting on synthesized output in tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from projgen.io_utils import read_text
from projgen.project import Project


def synth_snapshot(project: Project, *, parse_json: bool = True) -> dict[str, Any]:
    """Synthesize *project* without post hooks and return ``{path: content}``.

    JSON files are parsed unless ``parse_json`` is off. Paths are relative
    to the project's outdir and use forward slashes.
    """
    post = project.options.post
    project.options.post = False
    try:
        project.synth()
    finally:
        project.options.post = post

    root = Path(project.outdir)
    snapshot: dict[str, Any] = {}
    for path in sorted(root.rglob("*")):
        if not path.is_file() or ".git" in path.relative_to(root).parts:
            continue
        rel = path.relative_to(root).as_posix()
        text = read_text(path)
        snapshot[rel] = json.loads(text) if parse_json and rel.endswith(".json") else text
    return snapshot
