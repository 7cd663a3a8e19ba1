import pytest

from discomatic.models import DiscSystem, MediaType, Region, YesNo
from discomatic.record import SubmissionRecord
from discomatic.report import add_if_exists, fixed_media_type, format_output_data
from discomatic.report import template as t


def _cd_record() -> SubmissionRecord:
    record = SubmissionRecord()
    common = record.common_disc_info
    common.system = DiscSystem.SONY_PLAYSTATION
    common.media = MediaType.CDROM
    common.title = "Game"
    common.region = Region.USA
    common.comments = "  first\nsecond  "
    record.tracks_and_write_offsets.clrmamepro_data = '<rom name="game.bin" size="1" />'
    record.tracks_and_write_offsets.cuesheet = 'FILE "game.bin" BINARY'
    record.tracks_and_write_offsets.other_write_offsets = "0"
    return record


def test_add_if_exists() -> None:
    """Verify add if exists behavior."""
    output = []
    add_if_exists(output, "Skip", None, 1)
    add_if_exists(output, "Empty", [], 1)
    add_if_exists(output, "List", ["a", "b"], 1)
    add_if_exists(output, "Block", "one\r\ntwo", 0)
    assert output == ["\tList: a, b", "Block:", "", "one", "two", ""]


@pytest.mark.parametrize(
    "media, kwargs, expected",
    [
        (MediaType.DVD, {}, "DVD-5"),
        (MediaType.DVD, {"layerbreak": 10}, "DVD-9"),
        (MediaType.BLURAY, {}, "BD-25"),
        (MediaType.BLURAY, {"size": 30_000_000_000}, "BD-33"),
        (MediaType.BLURAY, {"layerbreak": 1}, "BD-50"),
        (MediaType.BLURAY, {"layerbreak": 1, "size": 60_000_000_000}, "BD-66"),
        (MediaType.BLURAY, {"layerbreak": 1, "layerbreak2": 2}, "BD-100"),
        (MediaType.BLURAY, {"layerbreak": 1, "layerbreak2": 2, "layerbreak3": 3}, "BD-128"),
        (MediaType.UMD, {"layerbreak": 1}, "UMD-DL"),
        (MediaType.CDROM, {}, "CD-ROM"),
        (None, {}, None),
    ],
)
def test_fixed_media_type(media, kwargs, expected) -> None:
    """Verify fixed media type behavior."""
    assert fixed_media_type(media, **kwargs) == expected


def test_cd_report_sections() -> None:
    """Verify CD report sections behavior."""
    lines = format_output_data(_cd_record())

    assert lines[0] == t.SECTION_COMMON
    assert "\tTitle: Game" in lines
    assert "\tMedia Type: CD-ROM" in lines
    assert f"\tLanguages: {t.LANGUAGE_DEFAULT}" in lines
    assert t.SECTION_EDC in lines
    assert "\tEDC: Undetermined" in lines
    assert t.SECTION_TRACKS in lines
    assert t.SECTION_CHECKSUMS not in lines
    assert t.SECTION_PROTECTION not in lines
    assert t.SECTION_EXTRAS not in lines
    # Comments are trimmed before rendering as a block.
    index = lines.index("\tComments:")
    assert lines[index + 2:index + 4] == ["first", "second"]
    for previous, current in zip(lines, lines[1:]):
        assert previous.strip() or current.strip()


def test_protection_section_for_playstation() -> None:
    """Verify protection section for PlayStation behavior."""
    record = _cd_record()
    record.copy_protection.anti_modchip = YesNo.NO
    lines = format_output_data(record)

    assert t.SECTION_PROTECTION in lines
    assert "\tAnti-modchip: No" in lines
    assert "\tLibCrypt: Undetermined" in lines


def test_dvd_size_and_layers() -> None:
    """Verify DVD size and layers behavior."""
    record = SubmissionRecord()
    common = record.common_disc_info
    common.system = DiscSystem.SONY_PLAYSTATION_2
    common.media = MediaType.DVD
    common.layer0_mastering_ring = "A"
    common.layer1_mastering_ring = "B"
    checksums = record.size_and_checksums
    checksums.size = 100
    checksums.crc32 = "deadbeef"
    checksums.layerbreak = 50

    lines = format_output_data(record)

    assert "\tMedia Type: DVD-9" in lines
    assert f"\t\tLayer 0 (Outer) {t.MASTERING_RING}: A" in lines
    assert f"\t\tLayer 1 (Inner) {t.MASTERING_RING}: B" in lines
    assert t.SECTION_CHECKSUMS in lines
    assert t.SECTION_TRACKS not in lines
    assert "\tLayerbreak: 50" in lines
    assert "\tSize: 100" in lines
    assert t.SECTION_EDC not in lines


def test_single_layer_uses_sides() -> None:
    """Verify single layer uses sides behavior."""
    record = _cd_record()
    record.common_disc_info.layer1_mould_sid = "IFPI 01"
    lines = format_output_data(record)
    assert f"\t\t{t.LABEL_SIDE} {t.MOULD_SID}: IFPI 01" in lines


def test_single_layer_ringcode_order() -> None:
    """Both sides list ring, SID, toolstamp, mould SID and additional mould."""
    record = _cd_record()
    common = record.common_disc_info
    for layer, prefix in ((0, "D"), (1, "L")):
        setattr(common, f"layer{layer}_mastering_ring", f"{prefix}-RING")
        setattr(common, f"layer{layer}_mastering_sid", f"{prefix}-SID")
        setattr(common, f"layer{layer}_toolstamp", f"{prefix}-TOOL")
        setattr(common, f"layer{layer}_mould_sid", f"{prefix}-MOULD")
        setattr(common, f"layer{layer}_additional_mould", f"{prefix}-ADD")

    lines = format_output_data(record)

    start = lines.index(t.SECTION_RINGCODE) + 1
    expected = []
    for side, prefix in ((t.DATA_SIDE, "D"), (t.LABEL_SIDE, "L")):
        expected += [
            f"\t\t{side} {t.MASTERING_RING}: {prefix}-RING",
            f"\t\t{side} {t.MASTERING_SID}: {prefix}-SID",
            f"\t\t{side} {t.TOOLSTAMP}: {prefix}-TOOL",
            f"\t\t{side} {t.MOULD_SID}: {prefix}-MOULD",
            f"\t\t{side} {t.ADDITIONAL_MOULD}: {prefix}-ADD",
        ]
    assert lines[start:start + 10] == expected


def test_broken_record_returns_none() -> None:
    """Verify broken record returns none behavior."""
    record = _cd_record()
    record.common_disc_info.category = "not a category"
    assert format_output_data(record) is None


def test_format_is_deterministic() -> None:
    """Verify format is deterministic behavior."""
    record = _cd_record()
    assert format_output_data(record) == format_output_data(record)
