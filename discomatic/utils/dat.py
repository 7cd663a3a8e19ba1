"""ClrMamePro DAT line helpers.

Dump tools describe each track (or the whole image) with one XML-ish line::

    <rom name="game (Track 1).bin" size="1234" crc="0a1b2c3d" md5="..." sha1="..." />

Only the four checksum attributes matter to discomatic.  A line that does not
match is reported as "not found" (``None``), never as an error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional

DAT_LINE_RE = re.compile(
    r'<rom name=".*?" size="(.*?)" crc="(.*?)" md5="(.*?)" sha1="(.*?)"'
)


@dataclass(frozen=True)
class DatEntry:
    size: int
    crc32: str
    md5: str
    sha1: str


def parse_dat_line(line: str | None) -> Optional[DatEntry]:
    """Return the checksum attributes of a DAT *line* or ``None``."""
    if not line or not line.strip():
        return None
    match = DAT_LINE_RE.search(line)
    if match is None:
        return None
    try:
        size = int(match.group(1))
    except ValueError:
        size = -1
    return DatEntry(size=size, crc32=match.group(2), md5=match.group(3), sha1=match.group(4))


def iter_dat_entries(data: str | None) -> Iterator[DatEntry]:
    """Yield every parsable entry of a multi-line DAT block."""
    for line in (data or "").split("\n"):
        entry = parse_dat_line(line)
        if entry is not None:
            yield entry


def format_dat_line(name: str, size: int, crc32: str, md5: str, sha1: str) -> str:
    """Render one DAT line in the layout the parsers expect."""
    return f'<rom name="{name}" size="{size}" crc="{crc32}" md5="{md5}" sha1="{sha1}" />'
