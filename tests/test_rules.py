from pathlib import Path

from discomatic.models import DiscCategory, DiscSystem, LanguageSelection, MediaType, Region
from discomatic.pipelines._media_rules import UMD_CHECKSUM_NOTE, apply_media_rules
from discomatic.pipelines._system_rules import apply_static_rule, rule_for
from discomatic.pipelines.playstation import fill_from_system_cnf, parse_system_cnf
from discomatic.pipelines.types import OPTIONAL, REQUIRED, REQUIRED_IF_EXISTS, Placeholders
from discomatic.record import SubmissionRecord

PH = Placeholders()


def test_pc_adds_isbn_comment() -> None:
    """Verify PC adds ISBN comment behavior."""
    record = SubmissionRecord()
    apply_static_rule(record, rule_for(DiscSystem.IBM_PC), PH)
    assert record.common_disc_info.comments == "[T:ISBN] " + OPTIONAL

    record.common_disc_info.comments = "Already here"
    apply_static_rule(record, rule_for(DiscSystem.IBM_PC), PH)
    assert record.common_disc_info.comments == "Already here"


def test_static_rule_fields() -> None:
    """Verify static rule fields behavior."""
    ps2 = SubmissionRecord()
    apply_static_rule(ps2, rule_for(DiscSystem.SONY_PLAYSTATION_2), PH)
    assert ps2.common_disc_info.language_selection == [
        LanguageSelection.BIOS_SETTINGS,
        LanguageSelection.LANGUAGE_SELECTOR,
        LanguageSelection.OPTIONS_MENU,
    ]

    ps3 = SubmissionRecord()
    apply_static_rule(ps3, rule_for(DiscSystem.SONY_PLAYSTATION_3), PH)
    assert ps3.extras.disc_key == REQUIRED
    assert ps3.extras.disc_id == REQUIRED

    audio = SubmissionRecord()
    apply_static_rule(audio, rule_for(DiscSystem.AUDIO_CD), PH)
    assert audio.common_disc_info.category is DiscCategory.AUDIO


def test_region_only_fills_unset() -> None:
    """Verify region only fills unset behavior."""
    record = SubmissionRecord()
    record.common_disc_info.region = Region.USA
    apply_static_rule(record, rule_for(DiscSystem.NEC_PC98), PH)
    assert record.common_disc_info.region is Region.USA
    assert record.common_disc_info.exe_date == REQUIRED

    fresh = SubmissionRecord()
    apply_static_rule(fresh, rule_for(DiscSystem.NEC_PC98), PH)
    assert fresh.common_disc_info.region is Region.JAPAN


def test_unknown_system_is_untouched() -> None:
    """Verify unknown system is untouched behavior."""
    record = SubmissionRecord()
    apply_static_rule(record, rule_for(None), PH)
    assert record == SubmissionRecord()


def test_cd_layout() -> None:
    """Verify CD layout behavior."""
    record = SubmissionRecord()
    apply_media_rules(record, MediaType.CDROM, PH)
    common = record.common_disc_info
    assert common.layer0_mastering_ring == REQUIRED_IF_EXISTS
    assert common.layer0_additional_mould == REQUIRED_IF_EXISTS
    assert common.layer1_mould_sid == REQUIRED_IF_EXISTS
    assert common.layer1_mastering_ring is None


def test_dvd_layers_follow_layerbreaks() -> None:
    """Verify DVD layers follow layerbreaks behavior."""
    single = SubmissionRecord()
    apply_media_rules(single, MediaType.DVD, PH)
    assert single.common_disc_info.layer1_mastering_ring is None

    dual = SubmissionRecord()
    dual.size_and_checksums.layerbreak = 100
    apply_media_rules(dual, MediaType.DVD, PH)
    assert dual.common_disc_info.layer1_mastering_ring == REQUIRED_IF_EXISTS
    assert dual.common_disc_info.layer2_mastering_ring is None

    quad = SubmissionRecord()
    quad.size_and_checksums.layerbreak = 1
    quad.size_and_checksums.layerbreak2 = 2
    quad.size_and_checksums.layerbreak3 = 3
    apply_media_rules(quad, MediaType.BLURAY, PH)
    assert quad.common_disc_info.layer3_toolstamp == REQUIRED_IF_EXISTS


def test_umd_checksums_and_dat() -> None:
    """Verify UMD checksums and DAT behavior."""
    record = SubmissionRecord()
    record.tracks_and_write_offsets.clrmamepro_data = "<rom />"
    apply_media_rules(record, MediaType.UMD, PH)
    assert record.size_and_checksums.md5 == REQUIRED + UMD_CHECKSUM_NOTE
    assert record.tracks_and_write_offsets.clrmamepro_data is None

    quiet = SubmissionRecord()
    apply_media_rules(quiet, MediaType.UMD, Placeholders(enabled=False))
    assert quiet.size_and_checksums.sha1 == ""
    assert quiet.common_disc_info.layer0_mastering_ring == ""


def test_gamecube_bca_placeholder() -> None:
    """Verify GameCube BCA placeholder behavior."""
    record = SubmissionRecord()
    apply_media_rules(record, MediaType.NINTENDO_GAMECUBE_GAME_DISC, PH)
    assert record.extras.bca == REQUIRED

    kept = SubmissionRecord()
    kept.extras.bca = "0001"
    apply_media_rules(kept, MediaType.NINTENDO_GAMECUBE_GAME_DISC, PH)
    assert kept.extras.bca == "0001"


def test_parse_system_cnf() -> None:
    """Verify parse system CNF behavior."""
    assert parse_system_cnf("BOOT2 = cdrom0:\\SLUS_203.12;1\nVER = 1.00\n") == (
        "SLUS-20312",
        Region.USA,
    )
    assert parse_system_cnf("BOOT = cdrom:\\SCES_012.34;1") == ("SCES-01234", Region.EUROPE)
    assert parse_system_cnf("VMODE = NTSC") is None


def test_fill_from_system_cnf(tmp_path: Path) -> None:
    """Verify fill from system CNF behavior."""
    (tmp_path / "SYSTEM.CNF").write_text("BOOT = cdrom:\\SLPS_000.01;1\n")
    record = SubmissionRecord()
    record.common_disc_info.serial = REQUIRED

    assert fill_from_system_cnf(record, tmp_path)
    assert record.common_disc_info.serial == "SLPS-00001"
    assert record.common_disc_info.region is Region.JAPAN

    assert not fill_from_system_cnf(SubmissionRecord(), None)
    assert not fill_from_system_cnf(SubmissionRecord(), tmp_path / "missing")
