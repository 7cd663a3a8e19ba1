"""
PlayStation boot executable helpers.

``SYSTEM.CNF`` on PlayStation and PlayStation 2 discs names the boot
executable, whose name doubles as the disc serial::

    BOOT2 = cdrom0:\\SLUS_203.12;1

The serial (``SLUS-20312``) and the region implied by its prefix are used to
pre-fill unset record fields.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Optional, Tuple

import structlog

from discomatic.models import Region
from discomatic.record import SubmissionRecord

from .types import Placeholders

log = structlog.get_logger()

_BOOT_RE = re.compile(
    r"^\s*BOOT2?\s*=\s*cdrom0?:\\*(?:[^\\;]*\\)*([A-Za-z]{4})[_-](\d{3})\.?(\d{2})",
    re.MULTILINE,
)

#: Third letter of the serial prefix -> region.
_PREFIX_REGIONS: Dict[str, Region] = {
    "U": Region.USA,
    "E": Region.EUROPE,
    "P": Region.JAPAN,
    "K": Region.KOREA,
    "A": Region.ASIA,
}


def parse_system_cnf(text: str) -> Optional[Tuple[str, Optional[Region]]]:
    """Return ``(serial, region)`` from ``SYSTEM.CNF`` contents.

    >>> parse_system_cnf("BOOT2 = cdrom0:\\\\SLUS_203.12;1")
    ('SLUS-20312', <Region.USA: 'U'>)
    """
    match = _BOOT_RE.search(text)
    if match is None:
        return None
    prefix = match.group(1).upper()
    serial = f"{prefix}-{match.group(2)}{match.group(3)}"
    return serial, _PREFIX_REGIONS.get(prefix[2])


def fill_from_system_cnf(record: SubmissionRecord, mount_path: Path | None) -> bool:
    """Pre-fill serial and region from the mounted disc; return whether it was found."""
    if mount_path is None:
        return False
    cnf = Path(mount_path) / "SYSTEM.CNF"
    if not cnf.is_file():
        return False
    parsed = parse_system_cnf(cnf.read_text(encoding="ascii", errors="replace"))
    if parsed is None:
        log.debug("playstation.no_boot_line", path=str(cnf))
        return False
    serial, region = parsed
    common = record.common_disc_info
    if Placeholders().is_placeholder(common.serial):
        common.serial = serial
    if common.region is None and region is not None:
        common.region = region
    return True
