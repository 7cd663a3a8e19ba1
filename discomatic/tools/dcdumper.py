"""DCDumper verification backend (Dreamcast GD-ROM).

The ``.gdi`` descriptor lists one track file per line::

    3
    1 0 4 2352 track01.bin 0
    2 600 0 2352 "track 02.raw" 0

Every listed track must exist next to the descriptor; each one is hashed
into a DAT line.
"""

from __future__ import annotations

import os
import re
from typing import List, Tuple

import structlog

from discomatic.models import BackendKind, Drive
from discomatic.record import SubmissionRecord
from discomatic.utils.dat import format_dat_line
from discomatic.utils.hashing import hash_file

from ._logs import read_text
from .base import OutputFile, VerificationOnlyParameters

log = structlog.get_logger()

_GDI_LINE_RE = re.compile(r'^\s*(\d+)\s+\d+\s+\d+\s+\d+\s+("[^"]+"|\S+)\s+-?\d+\s*$')


def gdi_tracks(gdi_text: str | None) -> List[Tuple[int, str]]:
    """Return ``(track_number, file_name)`` pairs from a GDI descriptor."""
    tracks = []
    for line in (gdi_text or "").split("\n")[1:]:
        match = _GDI_LINE_RE.match(line)
        if match:
            tracks.append((int(match.group(1)), match.group(2).strip('"')))
    return tracks


class DCDumperParameters(VerificationOnlyParameters):
    kind = BackendKind.DCDUMPER

    def output_files(self) -> List[OutputFile]:
        return [OutputFile(".gdi", pre_check=True, is_log=False, artifact="gdi")]

    def _track_paths(self, base_path: str) -> List[str]:
        directory = os.path.dirname(base_path)
        return [
            os.path.join(directory, name)
            for _, name in gdi_tracks(read_text(base_path + ".gdi"))
        ]

    def check_outputs_exist(self, base_path: str, pre_check: bool) -> Tuple[bool, List[str]]:
        """Also require every track file the descriptor lists."""
        _, missing = super().check_outputs_exist(base_path, pre_check)
        if not pre_check:
            missing += [p for p in self._track_paths(base_path) if not os.path.isfile(p)]
        return not missing, missing

    def extract_submission_fields(
        self,
        record: SubmissionRecord,
        base_path: str,
        drive: Drive | None,
        include_artifacts: bool,
    ) -> None:
        lines = []
        for path in self._track_paths(base_path):
            hashes = hash_file(path)
            if hashes is None:
                log.warning("dcdumper.track_unreadable", path=path)
                continue
            lines.append(
                format_dat_line(os.path.basename(path), hashes.size, hashes.crc32, hashes.md5, hashes.sha1)
            )
        if lines:
            record.tracks_and_write_offsets.clrmamepro_data = "\n".join(lines)
        if include_artifacts:
            self.attach_artifacts(record, base_path)
