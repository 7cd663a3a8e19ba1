from pathlib import Path

import pytest

from discomatic.models import DiscSystem, Drive, DriveKind, MediaType, YesNo
from discomatic.record import SubmissionRecord
from discomatic.tools import DiscImageCreatorParameters, ToolSpec
from discomatic.tools.discimagecreator import _playstation_edc

from .utils import PVD_ROWS, make_options, write_dic_cd_outputs, write_dic_dvd_outputs


def _parse(text, system=DiscSystem.IBM_PC, media=MediaType.CDROM):
    return DiscImageCreatorParameters(text, system=system, media_type=media)


@pytest.mark.parametrize(
    "text, valid",
    [
        ("", False),
        ("   ", False),
        ("cd F test.bin 8 /c2 20", True),
        ('cd D "my game.bin" 72', True),
        ("cd D test.bin 73", False),
        ("cd D test.bin", False),
        ("fd A test.img", True),
        ("dvd X test.iso 8 /raw", True),
        ("dvd X test.iso 17", False),
        ("dvd X test.iso 8 /c2", False),
        ("cd D test.bin 8 /be /d8", False),
        ("cd D test.bin 8 /be raw", True),
        ("cd D test.bin 8 /s 3", False),
        ("cd D test.bin 8 /a", False),
        ("audio D test.bin 8 0 100", True),
        ("audio D test.bin 8 100 0", False),
        ("data D test.bin 8", False),
        ("bd D test.iso /sk 1 2", True),
        ("stop D", True),
        ("stop D extra", False),
        ("version", True),
        ("frobnicate D", False),
    ],
)
def test_parameter_validity(text, valid) -> None:
    """Verify parameter validity behavior."""
    assert _parse(text).is_valid() is valid


@pytest.mark.parametrize(
    "text",
    [
        "cd F test.bin 8 /c2 20",
        "cd D test.bin 24 /c2 20 /am /nl /q",
        "dvd D test.iso 16 /c /raw /rr 5",
        "audio D test.bin 8 0 100 /c2 20",
        "eject D",
        "version",
    ],
)
def test_round_trip(text) -> None:
    """Generating from parsed arguments reproduces the canonical string."""
    params = _parse(text)
    assert params.is_valid()
    regenerated = params.generate()
    assert _parse(regenerated).generate() == regenerated


def test_flags_are_emitted_in_canonical_order() -> None:
    """Verify flags are emitted in canonical order behavior."""
    params = _parse("cd D test.bin 8 /q /nl /c2 20 /am")
    assert params.generate() == 'cd D "test.bin" 8 /c2 20 /am /nl /q'


def test_invalid_parameters_generate_none() -> None:
    """Verify invalid parameters generate none behavior."""
    assert _parse("cd D test.bin").generate() is None


def test_build_playstation_cd(tmp_path: Path) -> None:
    """Verify build playstation CD behavior."""
    options = make_options(dic_quiet_mode=True)
    params = DiscImageCreatorParameters.build(
        DiscSystem.SONY_PLAYSTATION,
        MediaType.CDROM,
        Drive(name="D"),
        str(tmp_path / "game"),
        None,
        options,
    )

    assert params.is_valid()
    assert params.generate() == f'cd D "{tmp_path / "game.bin"}" 24 /c2 20 /am /nl /q'
    assert params.build_spec() == ToolSpec(
        "DiscImageCreator",
        ["cd", "D", str(tmp_path / "game.bin"), "24", "/c2", "20", "/am", "/nl", "/q"],
    )


def test_build_clamps_speed_and_adds_dvd_flags() -> None:
    """Verify build clamps speed and adds DVD flags behavior."""
    options = make_options(dic_paranoid_mode=True, dic_use_cmi_flag=True, dic_dvd_reread_count=3)
    params = DiscImageCreatorParameters.build(
        DiscSystem.SONY_PLAYSTATION_2, MediaType.DVD, Drive(name="E"), "out/game", 48, options,
    )
    assert params.speed == 16
    assert params.generate() == 'dvd E "out/game.iso" 16 /c /raw /rr 3'


def test_build_xbox_uses_xbox_command() -> None:
    """Verify build xbox uses xbox command behavior."""
    params = DiscImageCreatorParameters.build(
        DiscSystem.MICROSOFT_XBOX, MediaType.DVD, Drive(name="D"), "game", None, make_options(),
    )
    assert params.base_command == "xbox"
    assert params.is_valid()


def test_build_unsupported_media_is_invalid() -> None:
    """Verify build unsupported media is invalid behavior."""
    params = DiscImageCreatorParameters.build(
        DiscSystem.SONY_PSP, MediaType.UMD, Drive(name="D"), "game", None, make_options(),
    )
    assert not params.is_valid()
    assert params.generate() is None


def test_drive_command() -> None:
    """Verify drive command behavior."""
    params = DiscImageCreatorParameters.drive_command(
        "eject", Drive(name="F:", kind=DriveKind.OPTICAL), "DiscImageCreator"
    )
    assert params.generate() == "eject F"


def test_missing_subchannel_is_reported(tmp_path: Path) -> None:
    """Verify missing subchannel is reported behavior."""
    write_dic_cd_outputs(tmp_path, sub=None)
    params = _parse("cd D game.bin 8 /c2 20", system=DiscSystem.SONY_PLAYSTATION)

    ok, missing = params.check_outputs_exist(str(tmp_path / "game"), pre_check=False)

    assert not ok
    assert missing == [str(tmp_path / "game.sub")]


def test_pre_check_is_lenient(tmp_path: Path) -> None:
    """Verify pre check is lenient behavior."""
    base = tmp_path / "game"
    for suffix in (".cue", ".dat", ".sub", "_disc.txt"):
        Path(f"{base}{suffix}").write_text("")
    params = _parse("cd D game.bin 8")

    assert params.check_outputs_exist(str(base), pre_check=True) == (True, [])
    assert params.check_outputs_exist(str(base), pre_check=False)[0] is False


def test_extract_cd_fields(tmp_path: Path) -> None:
    """Verify extract CD fields behavior."""
    edc_log = "LBA[000019, 0x00013]: mode 2 no edc\nTotal errors: 0\n"
    write_dic_cd_outputs(tmp_path, edc_log=edc_log)
    params = _parse("cd D game.bin 8 /c2 20", system=DiscSystem.SONY_PLAYSTATION)
    record = SubmissionRecord()

    params.extract_submission_fields(record, str(tmp_path / "game"), Drive(name="D"), True)

    tracks = record.tracks_and_write_offsets
    assert tracks.clrmamepro_data.count("<rom") == 2
    assert tracks.cuesheet.startswith('FILE "game (Track 1).bin"')
    assert tracks.other_write_offsets == "588"
    assert record.common_disc_info.errors_count == "0"
    assert record.edc.edc is YesNo.NO
    assert record.extras.pvd == "\n".join(PVD_ROWS) + "\n"
    assert "cue" in record.artifacts and "sub" in record.artifacts


def test_extract_dvd_fields(tmp_path: Path) -> None:
    """Verify extract DVD fields behavior."""
    write_dic_dvd_outputs(tmp_path, layerbreak=2084960)
    params = _parse("dvd D game.iso 8", system=DiscSystem.SONY_PLAYSTATION_2, media=MediaType.DVD)
    record = SubmissionRecord()

    params.extract_submission_fields(record, str(tmp_path / "game"), None, False)

    checksums = record.size_and_checksums
    assert checksums.size == 4_700_000_000
    assert checksums.crc32 == "deadbeef"
    assert checksums.layerbreak == 2084960
    assert record.artifacts == {}


def test_log_files_exclude_images(tmp_path: Path) -> None:
    """Verify log files exclude images behavior."""
    write_dic_cd_outputs(tmp_path)
    params = _parse("cd D game.bin 8 /c2 20")
    logs = params.log_file_paths(str(tmp_path / "game"))

    assert str(tmp_path / "game.dat") in logs
    assert str(tmp_path / "game.cue") not in logs


@pytest.mark.parametrize(
    "edc_log, expected",
    [
        (None, YesNo.NULL),
        ("Total errors: 0\n", YesNo.NULL),
        ("LBA[000019, 0x00013]: mode 2 no edc\n", YesNo.NO),
        ("LBA[000019, 0x00013]: Mode 2 Form 2\n", YesNo.YES),
        ("LBA[000019, 0x00013]: mode 2 no edc\nLBA[000020, 0x00014]: mode 2 form 2\n", YesNo.YES),
        ("[INFO] no mode 2 form 2 sector found\n", YesNo.NULL),
    ],
)
def test_playstation_edc_from_sector_lines(edc_log, expected) -> None:
    """Verify PlayStation EDC from sector lines behavior."""
    assert _playstation_edc(edc_log) is expected
