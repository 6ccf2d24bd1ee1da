"""projgen CLI.

Running ``projgen`` with no subcommand executes ``.projgenrc.py`` (which
builds a project and calls ``synth()``). Every task in
``.projgen/tasks.json`` is also available as a subcommand.
"""

from __future__ import annotations

import os
import runpy
import time
from pathlib import Path

import click

from projgen import __version__, log
from projgen.config import DEFAULT_RC, DISABLE_POST_ENV
from projgen.errors import ProjgenError, TaskExecutionError
from projgen.tasks.model import TaskManifest, TaskSpec
from projgen.tasks.runtime import TaskRuntime, load_manifest


CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

WATCH_INTERVAL = 1.0


def _load_runtime() -> TaskRuntime:
    workdir = Path.cwd()
    try:
        manifest = load_manifest(workdir)
    except (OSError, ValueError, KeyError) as exc:
        log.warn(f"Ignoring unreadable task manifest: {exc}")
        manifest = TaskManifest()
    return TaskRuntime(workdir, manifest)


# ── Click group that discovers task subcommands ─────────────────────


class ProjgenGroup(click.Group):
    """Expose every task from the manifest as a subcommand."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        names = set(super().list_commands(ctx))
        names.update(spec.name for spec in _load_runtime().tasks)
        return sorted(names)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        cmd = super().get_command(ctx, cmd_name)
        if cmd is not None:
            return cmd
        spec = _load_runtime().try_find_task(cmd_name)
        if spec is None:
            return None
        return _task_command(spec)


def _task_command(spec: TaskSpec) -> click.Command:
    task_name = spec.name

    @click.command(name=task_name, help=spec.description or "", context_settings=CONTEXT_SETTINGS)
    @click.option("-i", "--inspect", is_flag=True, help="Show all steps in this task")
    @click.pass_context
    def run(ctx: click.Context, inspect: bool) -> None:
        runtime = _load_runtime()
        try:
            if inspect:
                for line in runtime.inspect_task(task_name):
                    click.echo(line)
                return
            runtime.run_task(task_name)
        except TaskExecutionError as exc:
            log.error(str(exc))
            ctx.exit(1)

    return run


# ── Synthesis ───────────────────────────────────────────────────────


def synth_from_rc(rc: Path, *, post: bool = True) -> bool:
    """Execute the rc file. Returns ``True`` when it ran without error."""
    if not rc.is_file():
        log.error(f"Unable to find {rc}. Create one that builds a Project and calls synth().")
        return False

    previous = os.environ.get(DISABLE_POST_ENV)
    if not post:
        os.environ[DISABLE_POST_ENV] = "true"
    try:
        log.debug(f"Running {rc}")
        runpy.run_path(str(rc), run_name="__main__")
        return True
    except ProjgenError as exc:
        log.error(str(exc))
        return False
    except Exception as exc:  # rc files are arbitrary user code
        log.error(f"{rc} failed: {type(exc).__name__}: {exc}")
        return False
    finally:
        if previous is None:
            os.environ.pop(DISABLE_POST_ENV, None)
        else:
            os.environ[DISABLE_POST_ENV] = previous


def watch(rc: Path, *, post: bool, interval: float = WATCH_INTERVAL) -> None:
    """Re-run the rc file whenever it changes, until interrupted."""
    log.info(f"Watching {rc} for changes (Ctrl-C to stop)…")
    last = rc.stat().st_mtime if rc.exists() else 0.0
    try:
        while True:
            time.sleep(interval)
            if not rc.exists():
                continue
            mtime = rc.stat().st_mtime
            if mtime != last:
                last = mtime
                synth_from_rc(rc, post=post)
    except KeyboardInterrupt:
        log.info("Stopped watching")


@click.group(
    cls=ProjgenGroup,
    invoke_without_command=True,
    context_settings=CONTEXT_SETTINGS,
)
@click.option(
    "--post/--no-post",
    default=True,
    help="Run post-synthesis steps such as installing dependencies",
)
@click.option("-w", "--watch", "watch_mode", is_flag=True, help="Keep running and resynthesize when the rc file changes")
@click.option("--rc", default=DEFAULT_RC, show_default=True, help="Path to the rc file")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="projgen")
@click.pass_context
def main(ctx: click.Context, post: bool, watch_mode: bool, rc: str, verbose: bool) -> None:
    """projgen: synthesize project files and run project tasks.

    \b
    EXAMPLES:
      projgen                  # run .projgenrc.py and synthesize
      projgen --no-post        # synthesize without installing anything
      projgen build            # run the "build" task
      projgen build --inspect  # show what "build" would do
    """
    log.set_verbose(verbose)

    if ctx.invoked_subcommand is not None:
        return

    rc_path = Path(rc)
    ok = synth_from_rc(rc_path, post=post)
    if watch_mode:
        watch(rc_path, post=post)
    if not ok:
        ctx.exit(1)
