"""Generated-file marker with an embedded content checksum.

A marked file carries ``MARKER checksum: sha256:<hex>`` somewhere in its
content. The digest is computed over the whole content with the hex part
set to zeros, so any later hand edit changes what the digest should be.
"""

from __future__ import annotations

import re
from enum import Enum

from projgen.config import MARKER
from projgen.io_utils import sha256_hex

_BLANK = "0" * 64
_CHECKSUM_TAG = "checksum: sha256:"
_CHECKSUM_RE = re.compile(re.escape(_CHECKSUM_TAG) + r"([0-9a-f]{64})")


class MarkerStatus(str, Enum):
    INTACT = "intact"
    MODIFIED = "modified"
    MISSING = "missing"


def marker_line() -> str:
    """Marker text with a blank checksum; :func:`stamp` fills it in."""
    return f"{MARKER} {_CHECKSUM_TAG}{_BLANK}"


def stamp(content: str) -> str:
    """Replace the blank checksum in *content* with the real digest."""
    if _CHECKSUM_TAG + _BLANK not in content:
        return content
    digest = sha256_hex(content)
    return content.replace(_CHECKSUM_TAG + _BLANK, _CHECKSUM_TAG + digest, 1)


def check(content: str) -> MarkerStatus:
    m = _CHECKSUM_RE.search(content)
    if m is None:
        return MarkerStatus.MISSING
    blanked = content[: m.start(1)] + _BLANK + content[m.end(1) :]
    if sha256_hex(blanked) == m.group(1):
        return MarkerStatus.INTACT
    return MarkerStatus.MODIFIED
