from pathlib import Path

import pytest

from discomatic.models import DiscSystem, Drive, MediaType
from discomatic.record import SubmissionRecord
from discomatic.tools import DDParameters

from .utils import make_options


@pytest.mark.parametrize(
    "text, valid",
    [
        ("", False),
        ("--version", True),
        ("--list --progress", False),
        ('--progress bs=1M if=\\\\?\\D: of="game.iso"', True),
        ("bs=1x if=D of=game.iso", False),
        ("count=-1 if=D of=game.iso", False),
        ("if=D", False),
        ("--filter= if=D of=game.iso", False),
        ("stray if=D of=game.iso", False),
    ],
)
def test_parameter_validity(text, valid) -> None:
    """Verify parameter validity behavior."""
    assert DDParameters(text).is_valid() is valid


def test_build_and_round_trip() -> None:
    """Verify build and round trip behavior."""
    params = DDParameters.build(
        DiscSystem.IBM_PC, MediaType.DVD, Drive(name="D"), "out/game", None, make_options(),
    )
    generated = params.generate()
    assert generated == '--progress bs=1M if=\\\\?\\D: of="out/game.iso"'
    assert DDParameters(generated).generate() == generated


def test_floppy_uses_img_extension() -> None:
    """Verify floppy uses img extension behavior."""
    params = DDParameters.build(
        DiscSystem.IBM_PC, MediaType.FLOPPY_DISK, Drive(name="A"), "disk", None, make_options(),
    )
    assert params.filename == "disk.img"
    assert [f.suffix for f in params.output_files()] == [".img"]


def test_extract_hashes_image(tmp_path: Path) -> None:
    """Verify extract hashes image behavior."""
    (tmp_path / "game.iso").write_bytes(b"abc")
    params = DDParameters('if=D of="game.iso"', media_type=MediaType.DVD)
    record = SubmissionRecord()

    params.extract_submission_fields(record, str(tmp_path / "game"), None, False)

    assert record.size_and_checksums.size == 3
    assert record.size_and_checksums.md5 == "900150983cd24fb0d6963f7d28e17f72"
    assert 'name="game.iso"' in record.tracks_and_write_offsets.clrmamepro_data
