"""Wrappers for file I/O with consistent encoding (UTF-8) and permissions."""

from __future__ import annotations

import hashlib
import os
import stat
from pathlib import Path
from typing import Any

PathLike = Path | str

_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH
_EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def _as_path(path: PathLike) -> Path:
    return path if isinstance(path, Path) else Path(path)


def read_text(path: PathLike, errors: str = "strict", **kwargs: Any) -> str:
    """Read path as text with UTF-8 encoding. Forwards extra kwargs to Path.read_text."""
    return _as_path(path).read_text(encoding="utf-8", errors=errors, **kwargs)


def write_text(path: PathLike, text: str, **kwargs: Any) -> None:
    """Write text to path with UTF-8 encoding, creating parent directories."""
    p = _as_path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8", **kwargs)


def read_bytes_or_none(path: PathLike) -> bytes | None:
    """Return the file's bytes, or ``None`` when it does not exist."""
    p = _as_path(path)
    if not p.is_file():
        return None
    return p.read_bytes()


def write_bytes(path: PathLike, data: bytes) -> None:
    """Write bytes, clearing a read-only bit left by a previous synthesis."""
    p = _as_path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    if p.exists():
        make_writable(p)
    p.write_bytes(data)


def make_readonly(path: PathLike) -> None:
    p = _as_path(path)
    os.chmod(p, stat.S_IMODE(p.stat().st_mode) & ~_WRITE_BITS)


def make_writable(path: PathLike) -> None:
    p = _as_path(path)
    os.chmod(p, stat.S_IMODE(p.stat().st_mode) | stat.S_IWUSR)


def make_executable(path: PathLike) -> None:
    p = _as_path(path)
    os.chmod(p, stat.S_IMODE(p.stat().st_mode) | _EXEC_BITS)


def is_writable(path: PathLike) -> bool:
    return bool(_as_path(path).stat().st_mode & stat.S_IWUSR)


def sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()
