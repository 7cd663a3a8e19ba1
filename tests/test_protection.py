import subprocess
from pathlib import Path

from discomatic.protection import (
    ANTI_MODCHIP_EN,
    ANTI_MODCHIP_JP,
    DefaultProtectionScanner,
    bad_q_sectors,
    crc16_ccitt,
    deinterleave_q,
    has_libcrypt_pairs,
    q_crc_valid,
)

from .utils import make_options


def _interleave(q: bytes) -> bytes:
    """Spread 12 Q bytes over a 96-byte subcode sector (bit 6 of each byte)."""
    sector = bytearray(96)
    for index in range(96):
        if q[index // 8] & (0x80 >> (index % 8)):
            sector[index] = 0x40
    return bytes(sector)


def _good_sector(lba: int) -> bytes:
    body = bytes([0x41, 0x01, 0x01]) + lba.to_bytes(7, "big")
    crc = crc16_ccitt(body) ^ 0xFFFF
    return _interleave(body + crc.to_bytes(2, "big"))


def _subchannel(sectors: int, bad: set) -> bytes:
    return b"".join(
        bytes(96) if index in bad else _good_sector(index) for index in range(sectors)
    )


def test_q_round_trip() -> None:
    """Verify Q round trip behavior."""
    sector = _good_sector(42)
    q = deinterleave_q(sector)
    assert q_crc_valid(q)
    assert not q_crc_valid(bytes(12))


def test_bad_sectors_and_pairs() -> None:
    """Verify bad sectors and pairs behavior."""
    data = _subchannel(20, {3, 8})
    assert bad_q_sectors(data) == [3, 8]
    assert has_libcrypt_pairs([3, 8])
    assert not has_libcrypt_pairs([3])
    assert not has_libcrypt_pairs([])


def test_libcrypt_detected(tmp_path: Path) -> None:
    """Verify libcrypt detected behavior."""
    scanner = DefaultProtectionScanner(make_options())
    paired = tmp_path / "paired.sub"
    paired.write_bytes(_subchannel(20, {3, 8}))
    clean = tmp_path / "clean.sub"
    clean.write_bytes(_subchannel(20, set()))

    assert scanner.libcrypt_detected(paired) is True
    assert scanner.libcrypt_detected(clean) is False
    assert scanner.libcrypt_detected(tmp_path / "missing.sub") is None


def test_anti_modchip_strings(tmp_path: Path) -> None:
    """Verify anti modchip strings behavior."""
    scanner = DefaultProtectionScanner(make_options())
    disc = tmp_path / "disc"
    (disc / "DATA").mkdir(parents=True)
    (disc / "DATA" / "MAIN.EXE").write_bytes(b"\x00" + ANTI_MODCHIP_EN.encode("ascii"))
    assert scanner.anti_modchip_detected(disc)

    other = tmp_path / "other"
    other.mkdir()
    (other / "SLPS_000.01").write_bytes(ANTI_MODCHIP_JP.encode("shift_jis")[:-2])
    assert not scanner.anti_modchip_detected(other)
    assert not scanner.anti_modchip_detected(tmp_path / "absent")


def test_scan_without_command() -> None:
    """Verify scan without command behavior."""
    ok, message = DefaultProtectionScanner(make_options()).scan("/mnt/disc")
    assert not ok
    assert message == "No protection scanner configured"


def test_scan_runs_command(monkeypatch) -> None:
    """Verify scan runs command behavior."""
    called = {}

    class Done:
        returncode = 0
        stdout = ""
        stderr = ""

    def fake_run(cmd, capture_output, text, check):
        called["cmd"] = cmd
        return Done()

    monkeypatch.setattr(subprocess, "run", fake_run)

    scanner = DefaultProtectionScanner(make_options(protection_scanner="protectionid"))
    assert scanner.scan("/mnt/disc") == (True, "None found")
    assert called["cmd"] == ["protectionid", "/mnt/disc"]
