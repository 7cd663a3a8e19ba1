from pathlib import Path

from click.testing import CliRunner

from discomatic.cli import main
from discomatic.report.writer import SUBMISSION_TEXT


def _config(tmp_path: Path, text: str) -> str:
    path = tmp_path / "options.yaml"
    path.write_text(text)
    return str(path)


def test_help_lists_commands() -> None:
    """Verify help lists commands behavior."""
    result = CliRunner().invoke(main, ["--help"])
    assert result.exit_code == 0
    for name in ("dump", "hash", "params", "verify"):
        assert name in result.output


def test_hash_dat_line(tmp_path: Path) -> None:
    """Verify hash DAT line behavior."""
    target = tmp_path / "track.bin"
    target.write_bytes(b"abc")

    result = CliRunner().invoke(main, ["hash", "--dat", str(target)])

    assert result.exit_code == 0, result.output
    assert result.output.strip().splitlines()[-1] == (
        '<rom name="track.bin" size="3" crc="352441c2" '
        'md5="900150983cd24fb0d6963f7d28e17f72" '
        'sha1="a9993e364706816aba3e25717850c26c9cd0d89d" />'
    )


def test_hash_plain(tmp_path: Path) -> None:
    """Verify hash plain behavior."""
    target = tmp_path / "track.bin"
    target.write_bytes(b"abc")

    result = CliRunner().invoke(main, ["hash", str(target)])

    assert result.exit_code == 0, result.output
    assert "Size: 3" in result.output
    assert "CRC32: 352441c2" in result.output


def test_params_prints_command(tmp_path: Path) -> None:
    """Verify params prints command behavior."""
    config = _config(tmp_path, "dic_path: /opt/dic\n")
    args = ["-c", config, "params", "-s", "ss", "-m", "CDROM", "-d", "D", "-o", "out", "-f", "game"]

    result = CliRunner().invoke(main, args)

    assert result.exit_code == 0, result.output
    assert result.output.strip().splitlines()[-1] == '/opt/dic cd D "out/game.bin" 24 /c2 20'


def test_params_rejects_invalid_pair(tmp_path: Path) -> None:
    """Verify params rejects invalid pair behavior."""
    args = ["params", "-s", "psx", "-m", "DVD", "-d", "D", "-o", str(tmp_path), "-f", "game"]
    result = CliRunner().invoke(main, args)
    assert result.exit_code == 2
    assert "not a valid media type" in result.output


def test_unknown_system(tmp_path: Path) -> None:
    """Verify unknown system behavior."""
    args = ["params", "-s", "no-such-system", "-m", "CDROM", "-o", str(tmp_path), "-f", "game"]
    result = CliRunner().invoke(main, args)
    assert result.exit_code == 2
    assert "unknown system" in result.output


def test_missing_options_file(tmp_path: Path) -> None:
    """Verify missing options file behavior."""
    args = ["-c", str(tmp_path / "absent.yaml"), "params", "-s", "ss", "-m", "CDROM",
            "-o", str(tmp_path), "-f", "game"]
    result = CliRunner().invoke(main, args)
    assert result.exit_code == 1
    assert "Options file not found" in result.output


def test_verify_needs_drive_for_dumping_backend(tmp_path: Path) -> None:
    """Verify verify needs drive for dumping backend behavior."""
    args = ["verify", "-s", "ss", "-m", "CDROM", "-o", str(tmp_path), "-f", "game"]
    result = CliRunner().invoke(main, args)
    assert result.exit_code == 2
    assert "needs --drive or --parameters" in result.output


def test_verify_refuses_unfinished_dump(tmp_path: Path) -> None:
    """Verify verify refuses unfinished dump behavior."""
    args = ["verify", "-s", "ss", "-m", "CDROM", "-d", "D", "-o", str(tmp_path), "-f", "game"]
    result = CliRunner().invoke(main, args)
    assert result.exit_code == 1
    assert "Output does not look like a finished dump" in result.output


def test_verify_cleanrip_writes_report(tmp_path: Path) -> None:
    """Verify verify cleanrip writes report behavior."""
    out = tmp_path / "out"
    out.mkdir()
    (out / "game.iso").write_bytes(b"GALE01\x00\x01" + b"\x00" * 8)
    (out / "game.bca").write_bytes(bytes(4))
    (out / "game-dumpinfo.txt").write_text("CRC32: 0a1b2c3d\nMD5: ab\nSHA-1: cd\n")
    config = _config(tmp_path, "compress_log_files: false\n")
    args = ["-c", config, "verify", "-s", "gc", "-m", "NintendoGameCubeGameDisc",
            "-b", "cleanrip", "-o", str(out), "-f", "game"]

    result = CliRunner().invoke(main, args)

    assert result.exit_code == 0, result.output
    assert "Submission information process complete!" in result.output
    report = (out / SUBMISSION_TEXT).read_text()
    assert "DL-DOL-GALE-USA" in report
