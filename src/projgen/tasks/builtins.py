"""Built-in operations that task steps can invoke by name."""

from __future__ import annotations

import json
import re
import subprocess
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from projgen import log
from projgen.io_utils import read_text, write_text


DEFAULT_VERSION_FILE = "version.json"
DEFAULT_CHANGELOG = "CHANGELOG.md"
INITIAL_VERSION = "0.0.0"

_SEMVER = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


class BuiltinFailure(Exception):
    """Raised by a handler; the runtime wraps it with task context."""


@dataclass(frozen=True)
class BuiltinContext:
    task_name: str
    cwd: Path
    env: Mapping[str, str]

    def path_from_env(self, key: str) -> Path | None:
        """Path named by *key*, or ``None`` when the variable is unset or empty."""
        raw = self.env.get(key)
        return self.resolve(raw) if raw else None

    def path_or_default(self, key: str, default: str) -> Path:
        return self.resolve(self.env.get(key) or default)

    def resolve(self, raw: str) -> Path:
        p = Path(raw)
        return p if p.is_absolute() else self.cwd / p


Handler = Callable[[BuiltinContext], None]


def read_version(ctx: BuiltinContext) -> tuple[Path, str]:
    path = ctx.path_or_default("VERSION_FILE", DEFAULT_VERSION_FILE)
    if not path.is_file():
        return path, INITIAL_VERSION
    try:
        data = json.loads(read_text(path))
    except json.JSONDecodeError as exc:
        raise BuiltinFailure(f"{path} is not valid JSON: {exc}") from exc
    version = str(data.get("version") or INITIAL_VERSION)
    if not _SEMVER.match(version):
        raise BuiltinFailure(f"{path}: unsupported version {version!r}")
    return path, version


def _write_version(path: Path, version: str) -> None:
    data: dict[str, object] = {}
    if path.is_file():
        data = json.loads(read_text(path))
    data["version"] = version
    write_text(path, json.dumps(data, indent=2) + "\n")


def bump(version: str, kind: str) -> str:
    m = _SEMVER.match(version)
    if not m:
        raise BuiltinFailure(f"cannot bump {version!r}")
    major, minor, patch = (int(x) for x in m.groups())
    match kind:
        case "major":
            return f"{major + 1}.0.0"
        case "minor":
            return f"{major}.{minor + 1}.0"
        case "patch":
            return f"{major}.{minor}.{patch + 1}"
        case _:
            raise BuiltinFailure(f"BUMP must be major, minor or patch (got {kind!r})")


def bump_version(ctx: BuiltinContext) -> None:
    path, current = read_version(ctx)
    new = bump(current, ctx.env.get("BUMP", "patch") or "patch")
    _write_version(path, new)
    bumpfile = ctx.path_from_env("BUMPFILE")
    if bumpfile is not None:
        write_text(bumpfile, new + "\n")
    log.info(f"Bumped version {current} -> {new}")


def reset_version(ctx: BuiltinContext) -> None:
    path, _ = read_version(ctx)
    _write_version(path, INITIAL_VERSION)


def update_changelog(ctx: BuiltinContext) -> None:
    _, version = read_version(ctx)
    changelog = ctx.path_or_default("CHANGELOG", DEFAULT_CHANGELOG)
    existing = read_text(changelog) if changelog.is_file() else ""
    heading = f"## {version}"
    if any(line.strip() == heading for line in existing.splitlines()):
        log.debug(f"{changelog.name} already has an entry for {version}")
        return
    notes = ctx.env.get("RELEASE_NOTES", "").strip()
    entry = heading + "\n\n" + (notes + "\n\n" if notes else "")
    write_text(changelog, entry + existing)


def tag_version(ctx: BuiltinContext) -> None:
    _, version = read_version(ctx)
    tag = f"{ctx.env.get('RELEASE_TAG_PREFIX', '')}v{version}"
    r = subprocess.run(
        ["git", "tag", "-a", tag, "-m", tag],
        cwd=ctx.cwd,
        env=dict(ctx.env),
        capture_output=True,
        text=True,
    )
    if r.returncode != 0:
        raise BuiltinFailure(r.stderr.strip() or f"git tag exited with {r.returncode}")
    log.info(f"Tagged {tag}")


BUILTINS: dict[str, Handler] = {
    "release/bump-version": bump_version,
    "release/reset-version": reset_version,
    "release/update-changelog": update_changelog,
    "release/tag-version": tag_version,
}
