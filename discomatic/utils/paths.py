"""Output path normalization.

Dump tools write a family of files next to ``<directory>/<filename>``; the
pair chosen by the user therefore has to be safe for every one of them.
:func:`normalize_output_paths` re-splits the pair, replaces characters that
are invalid in paths or filenames and never raises.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Tuple

import structlog

log = structlog.get_logger()

_CONTROL_CHARS = "".join(chr(i) for i in range(32))
_INVALID_PATH_CHARS = '"<>|' + _CONTROL_CHARS
_INVALID_FILENAME_CHARS = '"<>|:*?\\/' + _CONTROL_CHARS

_SEPARATORS = tuple(s for s in (os.sep, os.altsep) if s)


def _replace_all(value: str, chars: str) -> str:
    for char in chars:
        value = value.replace(char, "_")
    return value


def normalize_output_paths(
    directory: Optional[str],
    filename: Optional[str],
    replace_periods: bool,
) -> Tuple[Optional[str], Optional[str]]:
    """Return a sanitized ``(directory, filename)`` pair.

    The two parts are joined and split again so a filename carrying
    sub-directories ends up in the directory part.  Afterwards:

    * every colon in the directory except the last one becomes ``_``
      (the last one may be a drive designator);
    * invalid path characters in the directory and invalid filename
      characters in the filename become ``_``;
    * with *replace_periods*, periods in the filename stem become ``_``
      while the extension is kept;
    * a trailing separator on the input directory is preserved;
    * a doubled separator on a root directory is collapsed.

    Blank input, ``None`` input or any error returns the inputs unchanged.

    Args:
        directory: Output directory as typed by the user.
        filename: Output filename, with or without extension.
        replace_periods: Replace periods inside the filename stem.

    Returns:
        The normalized ``(directory, filename)`` tuple.
    """
    original = (directory, filename)
    if directory is None or filename is None:
        return original

    try:
        ended_with_separator = directory.endswith(_SEPARATORS)

        if not (directory + filename).strip():
            return original

        combined = os.path.join(directory, filename)
        directory = os.path.dirname(combined)
        filename = os.path.basename(combined)

        last_colon = directory.rfind(":")
        if last_colon > 0:
            directory = directory[:last_colon].replace(":", "_") + directory[last_colon:]

        directory = _replace_all(directory, _INVALID_PATH_CHARS)
        filename = _replace_all(filename, _INVALID_FILENAME_CHARS)

        if replace_periods:
            stem, ext = os.path.splitext(filename)
            filename = stem.replace(".", "_") + ext

        if ended_with_separator and not directory.endswith(_SEPARATORS):
            directory += os.sep

        if directory and os.path.isdir(directory):
            candidate = Path(directory)
            if candidate.parent == candidate:
                directory = directory.replace(os.sep * 2, os.sep)
    except (TypeError, ValueError, OSError) as exc:
        log.debug("paths.normalize_failed", directory=original[0], filename=original[1], error=str(exc))
        return original

    return directory, filename


def base_path(directory: str, filename: str) -> str:
    """Return ``directory/<filename without extension>``.

    This is the prefix every backend appends its suffixes to.
    """
    stem = os.path.splitext(os.path.basename(filename))[0]
    return os.path.join(directory, stem)
