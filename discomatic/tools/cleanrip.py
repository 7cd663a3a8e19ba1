"""CleanRip verification backend (GameCube and Wii).

CleanRip runs on the console itself; discomatic only reads what it left
behind: the ISO, the BCA and the ``-dumpinfo.txt`` digest summary.
"""

from __future__ import annotations

import os
from typing import Dict, List, Optional, Tuple

import structlog

from discomatic.models import BackendKind, DiscSystem, Drive, Region
from discomatic.record import SubmissionRecord
from discomatic.utils.dat import format_dat_line

from ._logs import format_hex_block, read_bytes, read_text, search_str
from .base import OutputFile, VerificationOnlyParameters

log = structlog.get_logger()

_HEADER_SIZE = 8

#: Game ID region character -> (serial suffix, catalog region).
REGION_CODES: Dict[str, Tuple[str, Region]] = {
    "E": ("USA", Region.USA),
    "J": ("JPN", Region.JAPAN),
    "P": ("EUR", Region.EUROPE),
    "K": ("KOR", Region.KOREA),
    "D": ("NOE", Region.GERMANY),
    "F": ("FRA", Region.FRANCE),
    "S": ("ESP", Region.SPAIN),
    "I": ("ITA", Region.ITALY),
}


def parse_disc_header(header: bytes, system: DiscSystem | None) -> Dict[str, object]:
    """Decode serial, region and version from the first bytes of the ISO.

    Returns an empty mapping when the header is too short.
    """
    if len(header) < _HEADER_SIZE:
        return {}
    game_id = header[:6].decode("ascii", errors="replace")
    fields: Dict[str, object] = {"version": f"1.0{header[7]}"}

    region = REGION_CODES.get(game_id[3])
    if region is not None:
        suffix, fields["region"] = region
        id4 = game_id[:4]
        if system is DiscSystem.NINTENDO_WII:
            fields["serial"] = f"RVL-{id4}-{suffix}"
        else:
            fields["serial"] = f"DL-DOL-{id4}-{suffix}"
    return fields


class CleanRipParameters(VerificationOnlyParameters):
    kind = BackendKind.CLEANRIP

    def output_files(self) -> List[OutputFile]:
        return [
            OutputFile(".iso", pre_check=True, is_log=False),
            OutputFile(".bca", artifact="bca"),
            OutputFile("-dumpinfo.txt", artifact="dumpinfo"),
        ]

    def extract_submission_fields(
        self,
        record: SubmissionRecord,
        base_path: str,
        drive: Drive | None,
        include_artifacts: bool,
    ) -> None:
        info = read_text(base_path + "-dumpinfo.txt")
        checksums = record.size_and_checksums
        checksums.crc32 = _lower(search_str(r"^CRC32:\s*(\S+)", info))
        checksums.md5 = _lower(search_str(r"^MD5:\s*(\S+)", info))
        checksums.sha1 = _lower(search_str(r"^SHA-1:\s*(\S+)", info))

        iso = base_path + ".iso"
        if os.path.isfile(iso):
            checksums.size = os.path.getsize(iso)
            if checksums.crc32 and checksums.md5 and checksums.sha1:
                record.tracks_and_write_offsets.clrmamepro_data = format_dat_line(
                    os.path.basename(iso), checksums.size, checksums.crc32, checksums.md5, checksums.sha1
                )
            header = read_bytes(iso, limit=_HEADER_SIZE) or b""
            fields = parse_disc_header(header, self.system)
            common = record.common_disc_info
            if "serial" in fields:
                common.serial = fields["serial"]
                common.region = fields["region"]
            if "version" in fields:
                record.version_and_editions.version = fields["version"]

        bca = read_bytes(base_path + ".bca")
        if bca:
            record.extras.bca = format_hex_block(bca)

        if include_artifacts:
            self.attach_artifacts(record, base_path)
        log.debug("cleanrip.extracted", base_path=base_path)


def _lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if value else None
