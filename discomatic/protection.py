"""
Copy-protection collaborators used by the extraction pipeline.

:class:`ProtectionScanner` is the narrow interface the pipeline calls.  The
shipped :class:`DefaultProtectionScanner` delegates signature scanning to an
external command configured as ``protection_scanner`` and implements two
small checks in-tree:

* **anti-modchip** – the PlayStation warning screen strings are searched for
  in the files of the mounted disc;
* **LibCrypt** – sectors whose Q-subchannel CRC is deliberately broken come
  in pairs five sectors apart.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol, Tuple

import structlog

from discomatic.config.schema import Options

log = structlog.get_logger()

ANTI_MODCHIP_EN = (
    "     SOFTWARE TERMINATED\nCONSOLE MAY HAVE BEEN MODIFIED\n     CALL 1-888-780-7690"
)
ANTI_MODCHIP_JP = "強制終了しました。\n本体が改造されている\nおそれがあります。"

_SIGNATURES = (
    ANTI_MODCHIP_EN.encode("ascii"),
    ANTI_MODCHIP_JP.encode("shift_jis"),
)

SUBCHANNEL_SECTOR_SIZE = 96
LIBCRYPT_PAIR_DISTANCE = 5


class ProtectionScanner(Protocol):
    def scan(self, path: str | Path) -> Tuple[bool, str]:
        """Return ``(ok, description)`` for the media mounted at *path*."""

    def anti_modchip_detected(self, path: str | Path) -> bool:
        """Return whether anti-modchip strings exist under *path*."""

    def libcrypt_detected(self, sub_path: str | Path) -> Optional[bool]:
        """Return the LibCrypt verdict for a ``.sub`` file; ``None`` when unreadable."""


# --------------------------------------------------------------------------- #
# Q-subchannel helpers                                                        #
# --------------------------------------------------------------------------- #
def deinterleave_q(sector: bytes) -> bytes:
    """Extract the 12-byte Q channel from one 96-byte interleaved subcode sector."""
    q = bytearray(12)
    for index, value in enumerate(sector[:SUBCHANNEL_SECTOR_SIZE]):
        if value & 0x40:
            q[index // 8] |= 0x80 >> (index % 8)
    return bytes(q)


def crc16_ccitt(data: bytes) -> int:
    crc = 0
    for byte in data:
        crc ^= byte << 8
        for _ in range(8):
            crc = ((crc << 1) ^ 0x1021) if crc & 0x8000 else crc << 1
            crc &= 0xFFFF
    return crc


def q_crc_valid(q: bytes) -> bool:
    """The stored Q CRC is the bitwise inverse of CRC-16/CCITT over 10 bytes."""
    stored = int.from_bytes(q[10:12], "big")
    return (crc16_ccitt(q[:10]) ^ 0xFFFF) == stored


def bad_q_sectors(data: bytes) -> List[int]:
    """Return the indexes of sectors whose Q CRC does not match."""
    bad = []
    for index in range(len(data) // SUBCHANNEL_SECTOR_SIZE):
        start = index * SUBCHANNEL_SECTOR_SIZE
        if not q_crc_valid(deinterleave_q(data[start:start + SUBCHANNEL_SECTOR_SIZE])):
            bad.append(index)
    return bad


def has_libcrypt_pairs(bad: List[int]) -> bool:
    """Every broken sector must have a partner exactly five sectors away."""
    if not bad:
        return False
    found = set(bad)
    return all(
        (s + LIBCRYPT_PAIR_DISTANCE) in found or (s - LIBCRYPT_PAIR_DISTANCE) in found
        for s in bad
    )


# --------------------------------------------------------------------------- #
# Default scanner                                                             #
# --------------------------------------------------------------------------- #
class DefaultProtectionScanner:
    """Scanner wired from :class:`~discomatic.config.schema.Options`."""

    def __init__(self, options: Options) -> None:
        self.command = options.protection_scanner

    def scan(self, path: str | Path) -> Tuple[bool, str]:
        if not self.command:
            return False, "No protection scanner configured"
        cmd = [self.command, str(path)]
        log.info("protection.scan", cmd=cmd)
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as exc:
            log.warning("protection.scan_failed", error=str(exc))
            return False, str(exc)
        if result.returncode != 0:
            log.warning("protection.scan_failed", returncode=result.returncode)
            return False, (result.stderr or result.stdout).strip()
        found = result.stdout.strip()
        return True, found or "None found"

    def anti_modchip_detected(self, path: str | Path) -> bool:
        root = Path(path)
        if not root.is_dir():
            return False
        for directory, _, files in os.walk(root):
            for name in files:
                candidate = Path(directory) / name
                try:
                    content = candidate.read_bytes()
                except OSError as exc:
                    log.debug("protection.unreadable", path=str(candidate), error=str(exc))
                    continue
                if any(signature in content for signature in _SIGNATURES):
                    log.info("protection.anti_modchip", path=str(candidate))
                    return True
        return False

    def libcrypt_detected(self, sub_path: str | Path) -> Optional[bool]:
        path = Path(sub_path)
        if not path.is_file():
            return None
        try:
            data = path.read_bytes()
        except OSError as exc:
            log.warning("protection.sub_unreadable", path=str(path), error=str(exc))
            return None
        return has_libcrypt_pairs(bad_q_sectors(data))
