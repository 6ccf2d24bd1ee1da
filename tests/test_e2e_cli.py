"""End-to-end tests through a real interpreter process (opt-in via --run-e2e)."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from projgen.config import DEFAULT_RC
from projgen.io_utils import read_text, write_text


RC = """\
from projgen import Project, ProjectOptions, TaskOptions

project = Project(ProjectOptions(name="e2e"))
sub = project.add_task("sub", TaskOptions(exec="echo step2 >> out.log"))
build = project.add_task("build")
build.exec("echo step1 >> out.log")
build.spawn(sub)
project.synth()
"""


def _projgen(cwd: Path, *args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "projgen", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=60,
    )


@pytest.mark.e2e
def test_e2e_synth_then_run_task(tmp_path: Path) -> None:
    write_text(tmp_path / DEFAULT_RC, RC)

    synth = _projgen(tmp_path)
    assert synth.returncode == 0, synth.stderr
    assert (tmp_path / ".projgen" / "tasks.json").is_file()

    run = _projgen(tmp_path, "build")
    assert run.returncode == 0, run.stderr
    assert read_text(tmp_path / "out.log").splitlines() == ["step1", "step2"]
