"""Small readers shared by the backend log parsers.

Every function returns ``None`` when the file is missing or the expected
structure is absent; a malformed log never raises.
"""

from __future__ import annotations

import os
import re
from typing import List, Optional

_PVD_HEADER = "========== LBA[000016, 0x00010]"
_PVD_ROWS = ("0320", "0330", "0340", "0350", "0360", "0370")


def read_text(path: str) -> Optional[str]:
    """Return the file content with ``\\n`` line endings, or ``None``."""
    if not os.path.isfile(path):
        return None
    with open(path, encoding="utf-8", errors="replace") as stream:
        return "\n".join(line.rstrip("\r\n") for line in stream)


def read_bytes(path: str, limit: int | None = None) -> Optional[bytes]:
    if not os.path.isfile(path):
        return None
    with open(path, "rb") as stream:
        return stream.read() if limit is None else stream.read(limit)


def format_hex_block(data: bytes, bytes_per_line: int = 16, group: int = 2) -> str:
    """Render *data* as upper-case hex, ``group`` bytes per word.

    >>> format_hex_block(bytes(range(4)), bytes_per_line=4)
    '0001 0203'
    """
    lines = []
    for start in range(0, len(data), bytes_per_line):
        chunk = data[start:start + bytes_per_line]
        words = [chunk[i:i + group].hex().upper() for i in range(0, len(chunk), group)]
        lines.append(" ".join(words))
    return "\n".join(lines)


def dat_lines(path: str) -> List[str]:
    """Return the ``<rom .../>`` lines of a DAT file (empty when missing)."""
    text = read_text(path)
    if text is None:
        return []
    return [line.strip() for line in text.split("\n") if line.strip().startswith("<rom")]


def read_pvd(main_info_path: str) -> Optional[str]:
    """Return the Primary Volume Descriptor rows ``0320``-``0370``.

    The rows follow the LBA 16 main-channel header in ``_mainInfo.txt``.
    """
    text = read_text(main_info_path)
    if text is None:
        return None

    rows: List[str] = []
    in_sector = False
    for line in text.split("\n"):
        if line.startswith(_PVD_HEADER):
            in_sector = True
            continue
        if not in_sector:
            continue
        if line.startswith("=========="):
            break
        stripped = line.strip()
        if stripped.startswith(_PVD_ROWS):
            rows.append(stripped)
    if not rows:
        return None
    return "\n".join(rows) + "\n"


def search_int(pattern: str, text: Optional[str], flags: int = re.MULTILINE) -> Optional[int]:
    """Return the first group of *pattern* in *text* as ``int`` or ``None``."""
    if not text:
        return None
    match = re.search(pattern, text, flags)
    if match is None:
        return None
    value = match.group(1).strip()
    try:
        return int(value, 16) if value.lower().startswith("0x") else int(value)
    except ValueError:
        return None


def search_str(pattern: str, text: Optional[str], flags: int = re.MULTILINE) -> Optional[str]:
    if not text:
        return None
    match = re.search(pattern, text, flags)
    return match.group(1).strip() if match else None
