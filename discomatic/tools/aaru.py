"""Aaru backend.

Aaru writes an ``.aaruf`` image together with a CICM XML sidecar.  The
sidecar is the only log parsed: it carries per-track checksums for CD
media, whole-disc checksums otherwise, the layer sector counts and the
read offset.
"""

from __future__ import annotations

import os
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

import structlog

from discomatic.config.schema import Options
from discomatic.models import BackendKind, DiscSystem, Drive, MediaType
from discomatic.record import SubmissionRecord
from discomatic.utils.dat import format_dat_line

from .base import BackendParameters, OutputFile, parse_int, quote, split_arguments

log = structlog.get_logger()

EXTENSION = ".aaruf"
MAX_SPEED = 72

_PRE_FLAGS = ("--debug", "--verbose")
#: Dump flags in emission order; ``True`` marks flags that take a value.
DUMP_FLAGS: Dict[str, bool] = {
    "--first-pregap": False,
    "--fix-offset": False,
    "--force": False,
    "--retry-passes": True,
    "--speed": True,
    "--subchannel": True,
    "--encoding": True,
    "--format": True,
}
_INT_FLAGS = frozenset({"--retry-passes", "--speed"})
_SUBCHANNELS = frozenset({"any", "rw", "rw-or-pq", "pq", "none"})
_INFO_COMMANDS = frozenset({"media info", "device info"})

_UNSUPPORTED = frozenset(
    {
        MediaType.UMD,
        MediaType.NINTENDO_GAMECUBE_GAME_DISC,
        MediaType.NINTENDO_WII_OPTICAL_DISC,
        MediaType.LASERDISC,
        MediaType.NONE,
    }
)


def device_name(drive: Drive) -> str:
    """Aaru addresses Windows drives as ``D:``."""
    return f"{drive.letter}:" if drive.letter else drive.name


class AaruParameters(BackendParameters):
    """Command line and outputs of ``aaru media dump``."""

    kind = BackendKind.AARU

    def __init__(self, argument_string: str | None = None, **kwargs) -> None:
        self.pre_flags: List[str] = []
        self.flags: Dict[str, Optional[str]] = {}
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
    ) -> "AaruParameters":
        params = cls(system=system, media_type=media_type, executable_path=options.aaru_path)
        if media_type is None or media_type in _UNSUPPORTED or drive is None:
            log.debug("aaru.unsupported", system=system, media_type=media_type)
            return params

        params.base_command = "media dump"
        params.drive = device_name(drive)
        stem, extension = os.path.splitext(filename)
        params.filename = (stem if extension else filename) + EXTENSION

        if options.aaru_debug:
            params.pre_flags.append("--debug")
        if options.aaru_verbose:
            params.pre_flags.append("--verbose")

        if media_type is MediaType.CDROM:
            params.flags["--first-pregap"] = None
            params.flags["--fix-offset"] = None
        if options.aaru_force_dumping:
            params.flags["--force"] = None
        params.flags["--retry-passes"] = str(options.aaru_reread_count)
        if media_type.supports_drive_speed:
            chosen = speed if speed is not None else options.preferred_speed(media_type)
            if chosen is not None:
                params.speed = max(0, min(chosen, MAX_SPEED))
                params.flags["--speed"] = str(params.speed)
        if media_type is MediaType.CDROM:
            params.flags["--subchannel"] = "any"

        params._valid = params._check()
        return params

    # ------------------------------------------------------------------ #
    def generate(self) -> Optional[str]:
        if not self._valid:
            return None
        parts = [flag for flag in _PRE_FLAGS if flag in self.pre_flags]
        parts.append(self.base_command)
        if self.base_command in _INFO_COMMANDS:
            parts.append(self.drive)
            return " ".join(parts)
        for flag in DUMP_FLAGS:
            if flag in self.flags:
                parts.append(flag)
                if self.flags[flag] is not None:
                    parts.append(self.flags[flag])
        parts += [self.drive, quote(self.filename)]
        return " ".join(parts)

    def parse(self, argument_string: str) -> bool:
        self.base_command = self.drive = self.filename = None
        self.speed = None
        self.pre_flags = []
        self.flags = {}
        self._valid = self._parse_tokens(split_arguments(argument_string)) and self._check()
        return self._valid

    def _parse_tokens(self, tokens: List[str]) -> bool:
        index = 0
        while index < len(tokens) and tokens[index] in _PRE_FLAGS:
            if tokens[index] in self.pre_flags:
                return False
            self.pre_flags.append(tokens[index])
            index += 1
        if index + 2 > len(tokens):
            return False
        command = f"{tokens[index]} {tokens[index + 1]}".lower()
        index += 2
        if command in _INFO_COMMANDS:
            self.base_command = command
            if len(tokens) - index != 1:
                return False
            self.drive = tokens[index]
            return True
        if command != "media dump":
            return False
        self.base_command = command

        positional: List[str] = []
        while index < len(tokens):
            token = tokens[index]
            index += 1
            if not token.startswith("--"):
                positional.append(token)
                continue
            if token not in DUMP_FLAGS or token in self.flags:
                return False
            if DUMP_FLAGS[token]:
                if index >= len(tokens):
                    return False
                self.flags[token] = tokens[index]
                index += 1
            else:
                self.flags[token] = None
        if len(positional) != 2:
            return False
        self.drive, self.filename = positional
        if "--speed" in self.flags:
            self.speed = parse_int(self.flags["--speed"])
        return True

    def _check(self) -> bool:
        if self.base_command in _INFO_COMMANDS:
            return bool(self.drive) and not self.flags
        if self.base_command != "media dump" or not self.drive or not self.filename:
            return False
        for flag in _INT_FLAGS:
            if flag in self.flags:
                value = parse_int(self.flags[flag])
                if value is None or value < 0:
                    return False
        if "--speed" in self.flags and not 0 <= parse_int(self.flags["--speed"]) <= MAX_SPEED:
            return False
        if "--subchannel" in self.flags and self.flags["--subchannel"] not in _SUBCHANNELS:
            return False
        return True

    # ------------------------------------------------------------------ #
    def output_files(self) -> List[OutputFile]:
        if self.base_command in _INFO_COMMANDS:
            return []
        return [
            OutputFile(EXTENSION, pre_check=True, is_log=False),
            OutputFile(".cicm.xml", pre_check=True, artifact="cicm"),
            OutputFile(".error.log", artifact="error_log"),
            OutputFile(".ibg", required=False),
            OutputFile(".log", artifact="log"),
            OutputFile(".mhddlog.bin", required=False),
            OutputFile(".resume.xml", artifact="resume"),
        ]

    def extract_submission_fields(
        self,
        record: SubmissionRecord,
        base_path: str,
        drive: Drive | None,
        include_artifacts: bool,
    ) -> None:
        sidecar = _parse_xml(base_path + ".cicm.xml")
        if sidecar is not None:
            stem = os.path.basename(base_path)
            if self.media_type in (MediaType.CDROM, MediaType.GDROM):
                _fill_tracks(record, sidecar, stem)
            else:
                _fill_disc(record, sidecar, stem)

        resume = _parse_xml(base_path + ".resume.xml")
        if resume is not None:
            bad_blocks = [
                el for el in resume.iter()
                if _local(el.tag) == "BadBlocks"
            ]
            count = sum(
                1 for group in bad_blocks for el in group.iter() if _local(el.tag) == "Block"
            )
            record.common_disc_info.errors_count = str(count)

        if include_artifacts:
            self.attach_artifacts(record, base_path)


# --------------------------------------------------------------------------- #
# CICM sidecar helpers                                                        #
# --------------------------------------------------------------------------- #
def _local(tag: str) -> str:
    """Strip an XML namespace from *tag*."""
    return tag.rsplit("}", 1)[-1]


def _parse_xml(path: str) -> Optional[ET.Element]:
    if not os.path.isfile(path):
        return None
    try:
        return ET.parse(path).getroot()
    except ET.ParseError as exc:
        log.warning("aaru.xml_invalid", path=path, error=str(exc))
        return None


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _find(element: ET.Element, name: str) -> Optional[ET.Element]:
    for el in element.iter():
        if _local(el.tag) == name:
            return el
    return None


def _checksums(element: ET.Element) -> Dict[str, str]:
    """Return ``{type: value}`` from a ``Checksums`` child of *element*."""
    group = _child(element, "Checksums")
    if group is None:
        return {}
    return {
        (c.get("type") or "").lower(): (c.text or "").strip().lower()
        for c in group
        if _local(c.tag) == "Checksum"
    }


def _int_text(element: Optional[ET.Element]) -> Optional[int]:
    return parse_int((element.text or "").strip()) if element is not None else None


_CUE_TRACK_TYPES = {
    "audio": "AUDIO",
    "mode0": "MODE0/2352",
    "mode1": "MODE1/2352",
    "mode2": "MODE2/2352",
    "mode2form1": "MODE2/2352",
    "mode2form2": "MODE2/2352",
    "mode2formless": "MODE2/2352",
    "cdmode1": "MODE1/2352",
    "cdmode2formless": "MODE2/2352",
    "cdmode2form1": "MODE2/2352",
    "cdmode2form2": "MODE2/2352",
}


def _fill_tracks(record: SubmissionRecord, sidecar: ET.Element, stem: str) -> None:
    tracks = [el for el in sidecar.iter() if _local(el.tag) == "Track"]
    single = len(tracks) == 1
    dat_lines: List[str] = []
    cue_lines: List[str] = []
    for position, track in enumerate(tracks, start=1):
        sequence = _child(track, "Sequence")
        number = _int_text(_child(sequence, "TrackNumber")) if sequence is not None else None
        number = number or position
        name = f"{stem}.bin" if single else f"{stem} (Track {number}).bin"
        size = _int_text(_child(track, "Size")) or 0
        sums = _checksums(track)
        dat_lines.append(
            format_dat_line(name, size, sums.get("crc32", ""), sums.get("md5", ""), sums.get("sha1", ""))
        )
        type_element = _child(track, "TrackType")
        track_type = (type_element.text or "").strip().lower() if type_element is not None else ""
        cue_lines += [
            f'FILE "{name}" BINARY',
            f"  TRACK {number:02d} {_CUE_TRACK_TYPES.get(track_type, 'MODE1/2352')}",
            "    INDEX 01 00:00:00",
        ]

    if dat_lines:
        record.tracks_and_write_offsets.clrmamepro_data = "\n".join(dat_lines)
        record.tracks_and_write_offsets.cuesheet = "\n".join(cue_lines)
    offset = _int_text(_find(sidecar, "Offset"))
    if offset is not None:
        record.tracks_and_write_offsets.other_write_offsets = str(offset)


def _fill_disc(record: SubmissionRecord, sidecar: ET.Element, stem: str) -> None:
    disc = _find(sidecar, "OpticalDisc")
    if disc is None:
        disc = _find(sidecar, "BlockMedia")
    if disc is None:
        return
    sums = _checksums(disc)
    size = _int_text(_child(disc, "Size")) or 0
    checksums = record.size_and_checksums
    checksums.size = size
    checksums.crc32 = sums.get("crc32")
    checksums.md5 = sums.get("md5")
    checksums.sha1 = sums.get("sha1")
    if sums:
        record.tracks_and_write_offsets.clrmamepro_data = format_dat_line(
            f"{stem}.iso", size, sums.get("crc32", ""), sums.get("md5", ""), sums.get("sha1", "")
        )

    layers = _child(disc, "Layers")
    if layers is None:
        return
    sectors = [
        _int_text(el) or 0 for el in layers.iter() if _local(el.tag) == "Sectors"
    ]
    running = 0
    for attr, count in zip(("layerbreak", "layerbreak2", "layerbreak3"), sectors[:-1]):
        running += count
        setattr(checksums, attr, running)
