"""Shared fixtures for projgen tests.

File handling in tests:
- Use tmp_path for any directory or file creation so tests are isolated and cleaned up.
- Use projgen.io_utils read_text/write_text for consistent UTF-8 I/O.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from projgen.config import DISABLE_POST_ENV, ProjectOptions
from projgen.io_utils import write_text
from projgen.project import Project
from projgen.tasks.runtime import TaskRuntime


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register opt-in switch for tests that spawn the installed console script."""
    parser.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="Run end-to-end tests marked with 'e2e'.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip e2e tests unless explicitly enabled."""
    if config.getoption("--run-e2e"):
        return

    skip_e2e = pytest.mark.skip(
        reason="E2E tests are skipped by default. Use --run-e2e to include them.",
    )
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


@pytest.fixture(autouse=True)
def _no_post_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Never inherit PROJGEN_DISABLE_POST from the developer's shell."""
    monkeypatch.delenv(DISABLE_POST_ENV, raising=False)


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a minimal git repo for testing."""
    subprocess.run(["git", "init"], cwd=tmp_path, capture_output=True, check=True)
    subprocess.run(
        ["git", "config", "user.name", "Test"], cwd=tmp_path, capture_output=True
    )
    subprocess.run(
        ["git", "config", "user.email", "test@test"], cwd=tmp_path, capture_output=True
    )
    write_text(tmp_path / "README.md", "# Test")
    subprocess.run(["git", "add", "README.md"], cwd=tmp_path, capture_output=True)
    subprocess.run(
        ["git", "commit", "-m", "Initial"], cwd=tmp_path, capture_output=True
    )
    return tmp_path


def _make_project(outdir: Path, name: str = "test-project", **kwargs: object) -> Project:
    return Project(ProjectOptions(name=name, outdir=str(outdir), **kwargs))  # type: ignore[arg-type]


@pytest.fixture
def make_project(tmp_path: Path):
    """Factory fixture: a Project writing into tmp_path (or a given outdir)."""

    def _make(outdir: Path | None = None, **kwargs: object) -> Project:
        return _make_project(outdir or tmp_path, **kwargs)

    return _make


@pytest.fixture
def runtime_for():
    """Build a TaskRuntime from a project's rendered manifest, without synthesizing."""

    def _runtime(project: Project) -> TaskRuntime:
        return TaskRuntime(project.outdir, project.tasks.render_manifest())

    return _runtime
