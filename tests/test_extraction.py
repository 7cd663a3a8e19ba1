from pathlib import Path

import pytest

from discomatic.models import (
    DiscCategory,
    DiscSystem,
    Drive,
    LanguageSelection,
    MediaType,
    YesNo,
    media_types_for,
)
from discomatic.pipelines import ExtractionEngine, ExtractionStatus
from discomatic.pipelines.extraction import (
    CHECK_PROTECTION,
    LIBCRYPT_NO_SUBCHANNEL,
    OTHER_EDITIONS_DEFAULT,
    SCAN_ERROR,
)
from discomatic.pipelines.types import OPTIONAL, REQUIRED, REQUIRED_IF_EXISTS
from discomatic.record import SubmissionRecord
from discomatic.report import format_output_data
from discomatic.report import template as t
from discomatic.tools import DiscImageCreatorParameters

from .utils import (
    SHA1_TRACK1,
    SHA1_TRACK2,
    FakeCatalog,
    FakeScanner,
    LayeredParameters,
    make_options,
    write_dic_cd_outputs,
    write_dic_dvd_outputs,
)

LOGIN = dict(catalog_username="dumper", catalog_password="secret")


def _engine(system, media, drive, options=None, **collaborators):
    options = options or make_options()
    params = DiscImageCreatorParameters.build(system, media, drive, "game", None, options)
    messages = []
    engine = ExtractionEngine(options, params, progress=messages.append, **collaborators)
    return engine, messages


def test_playstation_cd_with_catalog_match(tmp_path: Path) -> None:
    """Verify PlayStation CD with catalog match behavior."""
    out = tmp_path / "out"
    write_dic_cd_outputs(out)
    drive = Drive(name="D", mount_path=tmp_path / "mount")
    catalog = FakeCatalog(
        results={SHA1_TRACK1: [10, 11], SHA1_TRACK2: [11, 12]},
        fields={11: {"title": "Catalog Title", "serial": "SLUS-00001", "dumpers": ["bob"]}},
    )
    scanner = FakeScanner(anti_modchip=True, libcrypt=False)
    engine, messages = _engine(
        DiscSystem.SONY_PLAYSTATION, MediaType.CDROM, drive,
        make_options(**LOGIN), catalog=catalog, scanner=scanner,
    )

    result = engine.extract(str(out), "game", drive, DiscSystem.SONY_PLAYSTATION, MediaType.CDROM)

    assert result.status is ExtractionStatus.COMPLETE
    record = result.record
    assert catalog.queries == [SHA1_TRACK1, SHA1_TRACK2]
    assert record.matched_ids == [11]
    assert record.common_disc_info.title == "Catalog Title"
    assert record.common_disc_info.serial == "SLUS-00001"
    assert record.dumpers_and_status.dumpers == ["dumper", "bob"]
    assert record.copy_protection.anti_modchip is YesNo.YES
    assert record.copy_protection.libcrypt is YesNo.NO
    assert record.tracks_and_write_offsets.other_write_offsets == "588"
    assert len(record.tracks_and_write_offsets.clrmamepro_data.split("\n")) == 2
    assert record.common_disc_info.layer0_mastering_ring == REQUIRED_IF_EXISTS
    assert record.common_disc_info.category is DiscCategory.GAMES
    assert record.common_disc_info.comments == OPTIONAL
    assert record.version_and_editions.other_editions == OTHER_EDITIONS_DEFAULT
    assert any(m.message == "Match finding complete! Matched IDs: 11" for m in messages)


def test_libcrypt_reported_from_sub_intention(tmp_path: Path) -> None:
    """Verify libcrypt reported from sub intention behavior."""
    out = tmp_path / "out"
    write_dic_cd_outputs(out, sub_intention="MSF: 03:08:05 Q-Data: 41 01 01\n")
    drive = Drive(name="D")
    engine, _ = _engine(
        DiscSystem.SONY_PLAYSTATION, MediaType.CDROM, drive, scanner=FakeScanner(libcrypt=True),
    )

    record = engine.extract(str(out), "game", drive, DiscSystem.SONY_PLAYSTATION, MediaType.CDROM).record

    assert record.copy_protection.libcrypt is YesNo.YES
    assert record.copy_protection.libcrypt_data.startswith("MSF: 03:08:05")


def test_missing_subchannel(tmp_path: Path) -> None:
    """A missing .sub stops the run; the LibCrypt check alone reports it as undetermined."""
    out = tmp_path / "out"
    write_dic_cd_outputs(out, sub=None)
    drive = Drive(name="D")
    engine, _ = _engine(DiscSystem.SONY_PLAYSTATION, MediaType.CDROM, drive, scanner=FakeScanner())

    result = engine.extract(str(out), "game", drive, DiscSystem.SONY_PLAYSTATION, MediaType.CDROM)
    assert result.status is ExtractionStatus.INCOMPLETE
    assert result.missing == [str(out / "game.sub")]
    assert result.record is None

    record = SubmissionRecord()
    engine._check_libcrypt(record, str(out / "game"))
    assert record.copy_protection.libcrypt is YesNo.NULL
    assert record.copy_protection.libcrypt_data == LIBCRYPT_NO_SUBCHANNEL


def test_invalid_pair_fails(tmp_path: Path) -> None:
    """Verify invalid pair fails behavior."""
    engine, _ = _engine(DiscSystem.SONY_PLAYSTATION, MediaType.CDROM, Drive(name="D"))
    result = engine.extract(str(tmp_path), "game", None, DiscSystem.SONY_PLAYSTATION, MediaType.DVD)
    assert result.status is ExtractionStatus.FAILED
    assert "not a valid media type" in result.error

    assert engine.extract(str(tmp_path), "game", None, None, MediaType.CDROM).status is ExtractionStatus.FAILED


def test_dvd_checksums_replace_track_data(tmp_path: Path) -> None:
    """Verify DVD checksums replace track data behavior."""
    out = tmp_path / "out"
    write_dic_dvd_outputs(out, layerbreak=1000)
    drive = Drive(name="E")
    engine, _ = _engine(DiscSystem.SONY_PLAYSTATION_2, MediaType.DVD, drive, scanner=FakeScanner())

    result = engine.extract(str(out), "game", drive, DiscSystem.SONY_PLAYSTATION_2, MediaType.DVD)

    record = result.record
    assert record.size_and_checksums.crc32 == "deadbeef"
    assert record.size_and_checksums.size == 4_700_000_000
    assert record.tracks_and_write_offsets.clrmamepro_data is None
    assert record.size_and_checksums.layerbreak == 1000
    assert record.common_disc_info.layer1_mastering_ring == REQUIRED_IF_EXISTS
    assert LanguageSelection.OPTIONS_MENU in record.common_disc_info.language_selection
    assert record.matched_ids is None


def test_pc_protection_scan(tmp_path: Path) -> None:
    """Verify PC protection scan behavior."""
    out = tmp_path / "out"
    write_dic_cd_outputs(out)
    drive = Drive(name="D")

    scanner = FakeScanner()
    engine, _ = _engine(
        DiscSystem.IBM_PC, MediaType.CDROM, drive, make_options(scan_for_protection=True), scanner=scanner,
    )
    record = engine.extract(str(out), "game", drive, DiscSystem.IBM_PC, MediaType.CDROM).record
    assert record.copy_protection.protection == "SafeDisc 2"
    assert scanner.scanned == ["D"]
    assert record.common_disc_info.comments == "[T:ISBN] " + OPTIONAL

    broken, _ = _engine(
        DiscSystem.IBM_PC, MediaType.CDROM, drive, make_options(scan_for_protection=True),
        scanner=FakeScanner(scan_result=(False, "crashed")),
    )
    record = broken.extract(str(out), "game", drive, DiscSystem.IBM_PC, MediaType.CDROM).record
    assert record.copy_protection.protection == SCAN_ERROR

    disabled, _ = _engine(DiscSystem.IBM_PC, MediaType.CDROM, drive, scanner=FakeScanner())
    record = disabled.extract(str(out), "game", drive, DiscSystem.IBM_PC, MediaType.CDROM).record
    assert record.copy_protection.protection == CHECK_PROTECTION


def test_catalog_unreachable(tmp_path: Path) -> None:
    """Verify catalog unreachable behavior."""
    out = tmp_path / "out"
    write_dic_cd_outputs(out)
    drive = Drive(name="D")
    engine, messages = _engine(
        DiscSystem.SEGA_SATURN, MediaType.CDROM, drive, make_options(**LOGIN),
        catalog=FakeCatalog(login=None), scanner=FakeScanner(),
    )

    result = engine.extract(str(out), "game", drive, DiscSystem.SEGA_SATURN, MediaType.CDROM)

    assert result.ok
    assert result.record.matched_ids == []
    assert result.record.common_disc_info.title == REQUIRED
    failures = [m.message for m in messages if not m.success]
    assert failures == ["There was an unknown error connecting to Redump"]


def test_no_common_match(tmp_path: Path) -> None:
    """Verify no common match behavior."""
    out = tmp_path / "out"
    write_dic_cd_outputs(out)
    drive = Drive(name="D")
    catalog = FakeCatalog(results={SHA1_TRACK1: [1], SHA1_TRACK2: [2]})
    engine, messages = _engine(
        DiscSystem.SEGA_SATURN, MediaType.CDROM, drive, make_options(**LOGIN),
        catalog=catalog, scanner=FakeScanner(),
    )

    record = engine.extract(str(out), "game", drive, DiscSystem.SEGA_SATURN, MediaType.CDROM).record

    assert record.matched_ids == []
    assert messages[-1].message == "Match finding complete! No matches found"


def test_placeholders_disabled(tmp_path: Path) -> None:
    """Verify placeholders disabled behavior."""
    out = tmp_path / "out"
    write_dic_cd_outputs(out)
    drive = Drive(name="D")
    engine, _ = _engine(
        DiscSystem.SEGA_SATURN, MediaType.CDROM, drive, make_options(add_placeholders=False),
        scanner=FakeScanner(),
    )

    record = engine.extract(str(out), "game", drive, DiscSystem.SEGA_SATURN, MediaType.CDROM).record

    assert record.common_disc_info.title == ""
    assert record.version_and_editions.other_editions == ""
    assert record.common_disc_info.category is DiscCategory.GAMES


SYSTEM_MEDIA_PAIRS = [
    (system, media) for system in DiscSystem for media in media_types_for(system)
]


@pytest.mark.parametrize("layerbreaks", [0, 1, 2, 3])
@pytest.mark.parametrize("system, media", SYSTEM_MEDIA_PAIRS)
def test_every_pair_gets_category_and_layer_groups(tmp_path: Path, system, media, layerbreaks) -> None:
    """Every valid pair yields a category and one ringcode group per layer."""
    params = LayeredParameters(layerbreaks, system=system, media_type=media)
    engine = ExtractionEngine(make_options(), params, scanner=FakeScanner())

    result = engine.extract(str(tmp_path), "game", None, system, media)

    assert result.status is ExtractionStatus.COMPLETE, result.error
    record = result.record
    assert record.common_disc_info.category is not None
    assert record.size_and_checksums.layerbreak_count() == layerbreaks

    lines = format_output_data(record)
    start = lines.index(t.SECTION_RINGCODE) + 1
    ringcode = []
    for line in lines[start:]:
        if not line.startswith("\t\t"):
            break
        ringcode.append(line)
    rings = [line for line in ringcode if f" {t.MASTERING_RING}: " in line]
    assert len(rings) == layerbreaks + 1
    if layerbreaks:
        assert all(line.startswith("\t\tLayer ") for line in rings)
    else:
        assert rings[0].startswith(f"\t\t{t.DATA_SIDE} ")
