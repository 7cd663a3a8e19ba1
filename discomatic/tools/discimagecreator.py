"""DiscImageCreator backend.

Command grammar::

    <command> <drive> "<file>" [speed] [start end] [flags]    # dump commands
    <command> <drive>                                           # drive utilities
    version

``speed`` is positional and mandatory for the CD family and ``dvd``;
``audio``/``data`` additionally take a start and end LBA.  Flags are
validated against :data:`FLAGS`, which also fixes the order in which
:meth:`DiscImageCreatorParameters.generate` emits them.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

import structlog

from discomatic.config.schema import Options
from discomatic.models import BackendKind, DiscSystem, Drive, MediaType, YesNo
from discomatic.record import SubmissionRecord
from discomatic.utils.dat import parse_dat_line

from ._logs import dat_lines, format_hex_block, read_bytes, read_pvd, read_text, search_int
from .base import BackendParameters, OutputFile, parse_int, quote, split_arguments

log = structlog.get_logger()

# --------------------------------------------------------------------------- #
# Command table                                                               #
# --------------------------------------------------------------------------- #
CD_COMMANDS: FrozenSet[str] = frozenset({"audio", "cd", "data", "gd"})
DUMP_COMMANDS: FrozenSet[str] = CD_COMMANDS | {"bd", "disk", "dvd", "fd", "sacd", "xbox"}
DRIVE_COMMANDS: FrozenSet[str] = frozenset({"close", "eject", "reset", "start", "stop"})
COMMANDS: FrozenSet[str] = DUMP_COMMANDS | DRIVE_COMMANDS | {"version"}

#: Commands taking a positional drive speed, with their upper bound.
SPEED_LIMITS: Dict[str, int] = {"audio": 72, "cd": 72, "data": 72, "gd": 72, "dvd": 16}
#: Commands taking a positional start and end LBA after the speed.
LBA_COMMANDS: FrozenSet[str] = frozenset({"audio", "data"})

_CD_ONLY = frozenset({"audio", "cd", "data"})
_DVD = frozenset({"dvd"})
_QUIET = DUMP_COMMANDS - {"disk", "fd"}


@dataclass(frozen=True)
class FlagSpec:
    """Arity and scope of one flag.

    ``choices`` restricts values to fixed strings; otherwise values are ints.
    """

    min_values: int
    max_values: int
    commands: FrozenSet[str]
    choices: Optional[Tuple[str, ...]] = None

    def accepts(self, value: str) -> bool:
        if value.startswith("/"):
            return False
        if self.choices is not None:
            return value.lower() in self.choices
        return parse_int(value) is not None


FLAGS: Dict[str, FlagSpec] = {
    "/a": FlagSpec(1, 1, _CD_ONLY),
    "/aj": FlagSpec(0, 0, _CD_ONLY),
    "/be": FlagSpec(0, 1, CD_COMMANDS, ("raw", "pack")),
    "/d8": FlagSpec(0, 0, CD_COMMANDS),
    "/c2": FlagSpec(0, 4, CD_COMMANDS),
    "/mr": FlagSpec(0, 1, _CD_ONLY),
    "/am": FlagSpec(0, 0, _CD_ONLY),
    "/nl": FlagSpec(0, 0, _CD_ONLY),
    "/ns": FlagSpec(0, 0, _CD_ONLY),
    "/sf": FlagSpec(0, 1, _CD_ONLY),
    "/ss": FlagSpec(0, 0, _CD_ONLY),
    "/np": FlagSpec(0, 0, CD_COMMANDS),
    "/nq": FlagSpec(0, 0, CD_COMMANDS),
    "/nr": FlagSpec(0, 0, _CD_ONLY),
    "/r": FlagSpec(0, 0, _CD_ONLY),
    "/s": FlagSpec(1, 1, CD_COMMANDS, ("0", "1", "2")),
    "/vn": FlagSpec(1, 1, _CD_ONLY),
    "/vnc": FlagSpec(0, 0, _CD_ONLY),
    "/vnx": FlagSpec(0, 0, _CD_ONLY),
    "/c": FlagSpec(0, 0, _DVD),
    "/raw": FlagSpec(0, 0, _DVD),
    "/rr": FlagSpec(0, 1, _DVD),
    "/fix": FlagSpec(1, 1, _DVD),
    "/ps": FlagSpec(1, 1, _DVD),
    "/sk": FlagSpec(2, 2, frozenset({"bd", "dvd", "xbox"})),
    "/q": FlagSpec(0, 0, _QUIET),
}

_EXCLUSIVE_FLAGS = (("/be", "/d8"),)

_DEFAULT_SPEED = 8
_DEFAULT_DVD_REREAD = 10

# --------------------------------------------------------------------------- #
# Media helpers                                                               #
# --------------------------------------------------------------------------- #
_EXTENSIONS: Dict[MediaType, str] = {
    MediaType.CDROM: ".bin",
    MediaType.GDROM: ".bin",
    MediaType.DVD: ".iso",
    MediaType.HDDVD: ".iso",
    MediaType.BLURAY: ".iso",
    MediaType.NINTENDO_WII_OPTICAL_DISC: ".iso",
    MediaType.LASERDISC: ".raw",
    MediaType.NINTENDO_GAMECUBE_GAME_DISC: ".raw",
    MediaType.FLOPPY_DISK: ".img",
    MediaType.HARD_DISK: ".img",
    MediaType.COMPACT_FLASH: ".img",
    MediaType.SD_CARD: ".img",
    MediaType.FLASH_DRIVE: ".img",
}


def extension_for(media_type: MediaType | None) -> Optional[str]:
    """Return the image extension DiscImageCreator writes for *media_type*."""
    if media_type is None:
        return None
    return _EXTENSIONS.get(media_type)


def command_for(system: DiscSystem | None, media_type: MediaType | None) -> Optional[str]:
    """Return the dump command for a (system, media type) pair."""
    if media_type in (MediaType.CDROM,):
        return "cd"
    if media_type is MediaType.GDROM:
        return "gd"
    if media_type is MediaType.DVD:
        if system in (DiscSystem.MICROSOFT_XBOX, DiscSystem.MICROSOFT_XBOX_360):
            return "xbox"
        return "dvd"
    if media_type is MediaType.HDDVD:
        return "dvd"
    if media_type is MediaType.BLURAY:
        return "bd"
    if media_type is MediaType.FLOPPY_DISK:
        return "fd"
    if media_type is not None and media_type.is_removable_storage:
        return "disk"
    return None


# --------------------------------------------------------------------------- #
# Parameters                                                                  #
# --------------------------------------------------------------------------- #
class DiscImageCreatorParameters(BackendParameters):
    """Command line and outputs of DiscImageCreator."""

    kind = BackendKind.DISC_IMAGE_CREATOR

    def __init__(self, argument_string: str | None = None, **kwargs) -> None:
        self.flags: Dict[str, List[str]] = {}
        self.start_lba: Optional[int] = None
        self.end_lba: Optional[int] = None
        super().__init__(argument_string, **kwargs)

    # ------------------------------------------------------------------ #
    # Building                                                           #
    # ------------------------------------------------------------------ #
    @classmethod
    def build(
        cls,
        system: DiscSystem | None,
        media_type: MediaType | None,
        drive: Drive | None,
        filename: str,
        speed: int | None,
        options: Options,
    ) -> "DiscImageCreatorParameters":
        params = cls(system=system, media_type=media_type, executable_path=options.dic_path)
        command = command_for(system, media_type)
        if command is None or drive is None:
            log.debug("dic.unsupported", system=system, media_type=media_type)
            return params

        params.base_command = command
        params.drive = drive.device

        extension = extension_for(media_type)
        if extension and not os.path.splitext(filename)[1]:
            filename += extension
        params.filename = filename

        if command in SPEED_LIMITS:
            chosen = speed if speed is not None else options.preferred_speed(media_type)
            chosen = _DEFAULT_SPEED if chosen is None else chosen
            params.speed = max(0, min(chosen, SPEED_LIMITS[command]))

        if command in ("cd", "gd"):
            params.flags["/c2"] = [str(options.dic_c2_reread_count)]
        if command == "cd":
            if system is DiscSystem.SONY_PLAYSTATION:
                params.flags["/am"] = []
                params.flags["/nl"] = []
            if system in (DiscSystem.IBM_PC, DiscSystem.APPLE_MACINTOSH) or options.dic_paranoid_mode:
                params.flags["/ns"] = []
                params.flags["/sf"] = []
                params.flags["/ss"] = []
        if command == "dvd":
            if options.dic_use_cmi_flag:
                params.flags["/c"] = []
            if options.dic_paranoid_mode:
                params.flags["/raw"] = []
            if options.dic_dvd_reread_count != _DEFAULT_DVD_REREAD:
                params.flags["/rr"] = [str(options.dic_dvd_reread_count)]
        if options.dic_quiet_mode and command in _QUIET:
            params.flags["/q"] = []

        params._valid = params._check()
        return params

    @classmethod
    def drive_command(cls, command: str, drive: Drive, executable_path: str | None) -> "DiscImageCreatorParameters":
        """Return parameters for a drive utility command such as ``eject``."""
        params = cls(executable_path=executable_path)
        params.base_command = command
        params.drive = drive.device
        params._valid = params._check()
        return params

    # ------------------------------------------------------------------ #
    # Generation and parsing                                             #
    # ------------------------------------------------------------------ #
    def generate(self) -> Optional[str]:
        if not self._valid:
            return None
        command = self.base_command
        if command == "version":
            return command
        if command in DRIVE_COMMANDS:
            return f"{command} {self.drive}"

        parts = [command, self.drive, quote(self.filename)]
        if command in SPEED_LIMITS:
            parts.append(str(self.speed))
        if command in LBA_COMMANDS:
            parts += [str(self.start_lba), str(self.end_lba)]
        for flag in FLAGS:
            if flag in self.flags:
                parts.append(flag)
                parts.extend(self.flags[flag])
        return " ".join(parts)

    def parse(self, argument_string: str) -> bool:
        self.base_command = self.drive = self.filename = None
        self.speed = self.start_lba = self.end_lba = None
        self.flags = {}
        self._valid = self._parse_tokens(split_arguments(argument_string)) and self._check()
        return self._valid

    def _parse_tokens(self, tokens: List[str]) -> bool:
        if not tokens:
            return False
        command = tokens[0].lower()
        if command not in COMMANDS:
            return False
        self.base_command = command
        if command == "version":
            return len(tokens) == 1
        if command in DRIVE_COMMANDS:
            if len(tokens) != 2:
                return False
            self.drive = tokens[1]
            return True

        if len(tokens) < 3:
            return False
        self.drive, self.filename = tokens[1], tokens[2]
        index = 3
        if command in SPEED_LIMITS:
            if index >= len(tokens):
                return False
            self.speed = parse_int(tokens[index])
            index += 1
        if command in LBA_COMMANDS:
            if index + 2 > len(tokens):
                return False
            self.start_lba = parse_int(tokens[index])
            self.end_lba = parse_int(tokens[index + 1])
            index += 2

        while index < len(tokens):
            flag = tokens[index].lower()
            spec = FLAGS.get(flag)
            if spec is None or flag in self.flags:
                return False
            index += 1
            values: List[str] = []
            while (
                index < len(tokens)
                and len(values) < spec.max_values
                and spec.accepts(tokens[index])
            ):
                values.append(tokens[index].lower() if spec.choices else tokens[index])
                index += 1
            if len(values) < spec.min_values:
                return False
            self.flags[flag] = values
        return True

    def _check(self) -> bool:
        """Structural validation of the current state."""
        command = self.base_command
        if command not in COMMANDS:
            return False
        if command == "version":
            return not self.flags
        if not self.drive:
            return False
        if command in DRIVE_COMMANDS:
            return not self.flags
        if not self.filename:
            return False
        if command in SPEED_LIMITS:
            if self.speed is None or not 0 <= self.speed <= SPEED_LIMITS[command]:
                return False
        if command in LBA_COMMANDS:
            if self.start_lba is None or self.end_lba is None or self.start_lba > self.end_lba:
                return False
        for flag, values in self.flags.items():
            spec = FLAGS.get(flag)
            if spec is None or command not in spec.commands:
                return False
            if not spec.min_values <= len(values) <= spec.max_values:
                return False
            if not all(spec.accepts(v) for v in values):
                return False
        for first, second in _EXCLUSIVE_FLAGS:
            if first in self.flags and second in self.flags:
                return False
        return True

    # ------------------------------------------------------------------ #
    # Output contract                                                    #
    # ------------------------------------------------------------------ #
    def _command(self) -> Optional[str]:
        return self.base_command or command_for(self.system, self.media_type)

    def output_files(self) -> List[OutputFile]:
        command = self._command()
        if command in CD_COMMANDS:
            files = [
                OutputFile(".cue", pre_check=True, is_log=False, artifact="cue"),
                OutputFile(".dat", pre_check=True, artifact="dat"),
                OutputFile(".sub", pre_check=True, artifact="sub"),
                OutputFile(".ccd", required=False, artifact="ccd"),
                OutputFile("_disc.txt", pre_check=True, artifact="disc"),
                OutputFile("_drive.txt", artifact="drive"),
                OutputFile("_img.cue", required=False, artifact="img_cue"),
                OutputFile(".img_EdcEcc.txt", required=False, artifact="img_edcecc"),
                OutputFile("_mainError.txt", artifact="main_error"),
                OutputFile("_mainInfo.txt", artifact="main_info"),
                OutputFile("_subError.txt", artifact="sub_error"),
                OutputFile("_subInfo.txt", artifact="sub_info"),
                OutputFile("_subIntention.txt", required=False, artifact="sub_intention"),
                OutputFile("_subReadable.txt", required=False),
                OutputFile("_volDesc.txt", artifact="vol_desc"),
            ]
            if "/c2" in self.flags:
                files += [
                    OutputFile(".c2", required=False),
                    OutputFile("_c2Error.txt", artifact="c2_error"),
                ]
            return files

        if command in ("dvd", "xbox", "sacd", "bd"):
            files = [
                OutputFile(".dat", pre_check=True, artifact="dat"),
                OutputFile("_disc.txt", pre_check=True, artifact="disc"),
                OutputFile("_drive.txt", artifact="drive"),
                OutputFile("_mainError.txt", artifact="main_error"),
                OutputFile("_mainInfo.txt", artifact="main_info"),
                OutputFile("_volDesc.txt", required=command != "sacd", artifact="vol_desc"),
            ]
            if command == "bd":
                files.append(OutputFile("_PIC.bin", artifact="pic"))
            return files

        if command in ("fd", "disk"):
            return [
                OutputFile(".dat", pre_check=True, artifact="dat"),
                OutputFile("_disc.txt", pre_check=True, artifact="disc"),
            ]
        return []

    # ------------------------------------------------------------------ #
    # Extraction                                                         #
    # ------------------------------------------------------------------ #
    def extract_submission_fields(
        self,
        record: SubmissionRecord,
        base_path: str,
        drive: Drive | None,
        include_artifacts: bool,
    ) -> None:
        command = self._command()
        lines = dat_lines(base_path + ".dat")
        dat = "\n".join(lines) if lines else None
        disc_text = read_text(base_path + "_disc.txt")

        record.tracks_and_write_offsets.clrmamepro_data = dat
        if command in CD_COMMANDS:
            record.tracks_and_write_offsets.cuesheet = read_text(base_path + ".cue")
            offset = search_int(
                r"Combined Offset\(Byte\)\s*-?\d+,\s*\(Samples\)\s*(-?\d+)", disc_text
            )
            if offset is not None:
                record.tracks_and_write_offsets.other_write_offsets = str(offset)

            edc_log = read_text(base_path + ".img_EdcEcc.txt")
            errors = _error_count(edc_log)
            if errors is not None:
                record.common_disc_info.errors_count = str(errors)
            if self.system is DiscSystem.SONY_PLAYSTATION:
                record.edc.edc = _playstation_edc(edc_log)
        else:
            entry = parse_dat_line(lines[0]) if lines else None
            if entry is not None:
                checksums = record.size_and_checksums
                checksums.size = entry.size
                checksums.crc32 = entry.crc32
                checksums.md5 = entry.md5
                checksums.sha1 = entry.sha1

            if command == "bd":
                pic = read_bytes(base_path + "_PIC.bin")
                if pic:
                    record.extras.pic = format_hex_block(pic[:0x84], bytes_per_line=16, group=16)
                    _apply_layerbreaks(record, bluray_layer_sizes(pic))
            else:
                layerbreak = search_int(r"LayerZeroSector:\s*(\d+)", disc_text)
                if layerbreak:
                    record.size_and_checksums.layerbreak = layerbreak

        pvd = read_pvd(base_path + "_mainInfo.txt")
        if pvd:
            record.extras.pvd = pvd

        if include_artifacts:
            self.attach_artifacts(record, base_path)
        log.debug("dic.extracted", base_path=base_path, command=command)


# --------------------------------------------------------------------------- #
# Log readers                                                                 #
# --------------------------------------------------------------------------- #
def _error_count(edc_log: Optional[str]) -> Optional[int]:
    """Return the EDC/ECC error total from ``.img_EdcEcc.txt``."""
    if edc_log is None:
        return None
    total = search_int(r"^\s*Total errors\s*:\s*(\d+)", edc_log)
    if total is not None:
        return total
    return sum(1 for line in edc_log.split("\n") if line.lstrip().startswith("[ERROR]"))


_SECTOR_MODE_RE = re.compile(
    r"^\s*LBA\[\s*\d+,\s*0x[0-9a-f]+\]:\s*mode 2 (form 2|no edc)\b",
    re.IGNORECASE | re.MULTILINE,
)


def _playstation_edc(edc_log: Optional[str]) -> YesNo:
    """Decide whether Mode 2 Form 2 sectors carry an EDC.

    The EccEdc report tags each Mode 2 sector as ``mode 2 form 2`` (EDC
    present) or ``mode 2 no edc``.  One Form 2 sector is enough for "Yes";
    only ``no edc`` sectors mean "No"; neither leaves the field undetermined.
    """
    if edc_log is None:
        return YesNo.NULL
    kinds = {kind.lower() for kind in _SECTOR_MODE_RE.findall(edc_log)}
    if "form 2" in kinds:
        return YesNo.YES
    if "no edc" in kinds:
        return YesNo.NO
    return YesNo.NULL


_DI_UNIT_SIZE = 64
_PIC_HEADER_SIZE = 4


def bluray_layer_sizes(pic: bytes) -> List[int]:
    """Return the user-data size of each layer described in a BD PIC.

    Disc information units start after the 4-byte header and are 64 bytes
    each; bytes 16-19 and 20-23 hold the first and last PSN of the layer.
    """
    sizes: List[int] = []
    offset = _PIC_HEADER_SIZE
    while offset + _DI_UNIT_SIZE <= len(pic) and pic[offset:offset + 2] == b"DI":
        unit = pic[offset:offset + _DI_UNIT_SIZE]
        first = int.from_bytes(unit[16:20], "big")
        last = int.from_bytes(unit[20:24], "big")
        if last >= first:
            sizes.append(last - first + 1)
        offset += _DI_UNIT_SIZE
    return sizes


def _apply_layerbreaks(record: SubmissionRecord, sizes: List[int]) -> None:
    """Store cumulative layer sizes as layerbreaks (one fewer than layers)."""
    checksums = record.size_and_checksums
    running = 0
    breaks = []
    for size in sizes[:-1]:
        running += size
        breaks.append(running)
    for attr, value in zip(("layerbreak", "layerbreak2", "layerbreak3"), breaks):
        setattr(checksums, attr, value)
