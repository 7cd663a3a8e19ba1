"""dd for Windows backend.

Only raw sector copies are possible, so the image itself is the single
output and its digests are computed locally with :func:`hash_file`.
"""

from __future__ import annotations

import os
import re
from typing import Dict, List, Optional

import structlog

from discomatic.config.schema import Options
from discomatic.models import BackendKind, DiscSystem, Drive, MediaType
from discomatic.record import SubmissionRecord
from discomatic.utils.dat import format_dat_line
from discomatic.utils.hashing import hash_file

from .base import BackendParameters, OutputFile, parse_int, quote, split_arguments

log = structlog.get_logger()

_BLOCK_SIZE_RE = re.compile(r"^\d+[kKmMgG]?$")
_SWITCHES = ("--progress", "--size")
_STANDALONE = frozenset({"--list", "--version"})
#: ``key=value`` operands in emission order.
OPERANDS = ("bs", "count", "seek", "skip")

_UNSUPPORTED = frozenset(
    {
        MediaType.GDROM,
        MediaType.NINTENDO_GAMECUBE_GAME_DISC,
        MediaType.NINTENDO_WII_OPTICAL_DISC,
        MediaType.UMD,
        MediaType.LASERDISC,
        MediaType.NONE,
    }
)


def input_device(drive: Drive) -> str:
    """Return the ``if=`` value for *drive* (``\\\\?\\D:`` for letters)."""
    return f"\\\\?\\{drive.letter}:" if drive.letter else drive.name


def image_extension(media_type: MediaType | None) -> str:
    if media_type is MediaType.FLOPPY_DISK or (media_type is not None and media_type.is_removable_storage):
        return ".img"
    return ".iso"


class DDParameters(BackendParameters):
    """Command line and outputs of dd."""

    kind = BackendKind.DD

    def __init__(self, argument_string: str | None = None, **kwargs) -> None:
        self.switches: List[str] = []
        self.filter: Optional[str] = None
        self.operands: Dict[str, str] = {}
        super().__init__(argument_string, **kwargs)

    @classmethod
    def build(
        cls,
        system: DiscSystem | None,
        media_type: MediaType | None,
        drive: Drive | None,
        filename: str,
        speed: int | None,
        options: Options,
    ) -> "DDParameters":
        params = cls(system=system, media_type=media_type, executable_path=options.dd_path)
        if media_type is None or media_type in _UNSUPPORTED or drive is None:
            log.debug("dd.unsupported", system=system, media_type=media_type)
            return params

        params.base_command = "copy"
        params.drive = input_device(drive)
        if not os.path.splitext(filename)[1]:
            filename += image_extension(media_type)
        params.filename = filename
        params.switches = ["--progress"]
        params.operands["bs"] = "1M"
        params._valid = params._check()
        return params

    def generate(self) -> Optional[str]:
        if not self._valid:
            return None
        if self.base_command in _STANDALONE:
            return self.base_command
        parts = [switch for switch in _SWITCHES if switch in self.switches]
        if self.filter is not None:
            parts.append(f"--filter={self.filter}")
        parts += [f"{key}={self.operands[key]}" for key in OPERANDS if key in self.operands]
        parts += [f"if={self.drive}", f"of={quote(self.filename)}"]
        return " ".join(parts)

    def parse(self, argument_string: str) -> bool:
        self.base_command = self.drive = self.filename = self.filter = None
        self.switches = []
        self.operands = {}
        self._valid = self._parse_tokens(split_arguments(argument_string)) and self._check()
        return self._valid

    def _parse_tokens(self, tokens: List[str]) -> bool:
        if not tokens:
            return False
        if tokens[0] in _STANDALONE:
            self.base_command = tokens[0]
            return len(tokens) == 1

        self.base_command = "copy"
        for token in tokens:
            if token in _SWITCHES:
                if token in self.switches:
                    return False
                self.switches.append(token)
            elif token.startswith("--filter="):
                self.filter = token.split("=", 1)[1]
            elif "=" in token:
                key, value = token.split("=", 1)
                if key == "if":
                    self.drive = value
                elif key == "of":
                    self.filename = value
                elif key in OPERANDS and key not in self.operands:
                    self.operands[key] = value
                else:
                    return False
            else:
                return False
        return True

    def _check(self) -> bool:
        if self.base_command in _STANDALONE:
            return not (self.switches or self.operands or self.filter)
        if self.base_command != "copy" or not self.drive or not self.filename:
            return False
        if "bs" in self.operands and not _BLOCK_SIZE_RE.match(self.operands["bs"]):
            return False
        for key in ("count", "seek", "skip"):
            if key in self.operands:
                value = parse_int(self.operands[key])
                if value is None or value < 0:
                    return False
        return not (self.filter is not None and not self.filter)

    def _image_suffix(self) -> str:
        if self.filename:
            extension = os.path.splitext(self.filename)[1]
            if extension:
                return extension
        return image_extension(self.media_type)

    def output_files(self) -> List[OutputFile]:
        if self.base_command in _STANDALONE:
            return []
        return [OutputFile(self._image_suffix(), pre_check=True, is_log=False)]

    def extract_submission_fields(
        self,
        record: SubmissionRecord,
        base_path: str,
        drive: Drive | None,
        include_artifacts: bool,
    ) -> None:
        image = base_path + self._image_suffix()
        hashes = hash_file(image)
        if hashes is None:
            log.warning("dd.hash_unavailable", path=image)
            return
        checksums = record.size_and_checksums
        checksums.size = hashes.size
        checksums.crc32 = hashes.crc32
        checksums.md5 = hashes.md5
        checksums.sha1 = hashes.sha1
        record.tracks_and_write_offsets.clrmamepro_data = format_dat_line(
            os.path.basename(image), hashes.size, hashes.crc32, hashes.md5, hashes.sha1
        )
