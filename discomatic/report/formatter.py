"""
Render a :class:`~discomatic.record.SubmissionRecord` as report lines.

:func:`format_output_data` is a pure function: the same record always gives
the same list of lines.  Sections appear in a fixed order; optional sections
(EDC, Extras, Copy Protection) are emitted only when they carry data, and
exactly one of "Tracks and Write Offsets" or "Size & Checksum" closes the
report.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple, Union

import structlog

from discomatic.models import DiscSystem, MediaType, YesNo
from discomatic.record import CommonDiscInfo, SubmissionRecord

from . import template as t

log = structlog.get_logger()

_BD_66_MIN_SIZE = 53_687_063_712
_BD_33_MIN_SIZE = 26_843_531_856

Value = Union[None, str, int, Sequence[object]]


# --------------------------------------------------------------------------- #
# Helpers                                                                     #
# --------------------------------------------------------------------------- #
def add_if_exists(output: List[str], key: str, value: Value, indent: int) -> None:
    """Append ``key: value`` to *output*, or a labeled block for multi-line values.

    ``None`` and empty lists are skipped; lists are joined with ``", "``.
    """
    if value is None:
        return
    if isinstance(value, (list, tuple)):
        if not value:
            return
        value = ", ".join(str(item) for item in value)
    text = str(value).replace("\r\n", "\n")
    prefix = "\t" * indent
    if "\n" in text:
        output.append(f"{prefix}{key}:")
        output.append("")
        output.extend(text.split("\n"))
        output.append("")
    else:
        output.append(f"{prefix}{key}: {text}")


def collapse_blank_lines(lines: Iterable[str]) -> List[str]:
    result: List[str] = []
    for line in lines:
        if not line.strip() and result and not result[-1].strip():
            continue
        result.append(line)
    return result


def fixed_media_type(
    media_type: MediaType | None,
    size: int = 0,
    layerbreak: int = 0,
    layerbreak2: int = 0,
    layerbreak3: int = 0,
) -> Optional[str]:
    """Return the media name adjusted for layer count and capacity.

    >>> fixed_media_type(MediaType.DVD, layerbreak=2084960)
    'DVD-9'
    """
    if media_type is None:
        return None
    if media_type is MediaType.DVD:
        return "DVD-9" if layerbreak else "DVD-5"
    if media_type is MediaType.BLURAY:
        if layerbreak3:
            return "BD-128"
        if layerbreak2:
            return "BD-100"
        if layerbreak and size > _BD_66_MIN_SIZE:
            return "BD-66"
        if layerbreak:
            return "BD-50"
        if size > _BD_33_MIN_SIZE:
            return "BD-33"
        return "BD-25"
    if media_type is MediaType.UMD:
        return "UMD-DL" if layerbreak else "UMD-SL"
    return media_type.long_name


def _layer_labels(layers: int, reverse: bool) -> List[str]:
    """Return the per-layer label prefix; only the first and last are oriented."""
    inner, outer = ("(Outer)", "(Inner)") if reverse else ("(Inner)", "(Outer)")
    labels = [f"Layer {n}" for n in range(layers)]
    labels[0] += f" {inner}"
    labels[-1] += f" {outer}"
    return labels


_SIDE_FIELDS = (
    ("mastering_ring", t.MASTERING_RING),
    ("mastering_sid", t.MASTERING_SID),
    ("toolstamp", t.TOOLSTAMP),
    ("mould_sid", t.MOULD_SID),
    ("additional_mould", t.ADDITIONAL_MOULD),
)


def _ringcode_lines(output: List[str], common: CommonDiscInfo, layers: int, reverse: bool) -> None:
    if layers == 1:
        # Layer 0 fields describe the data side, layer 1 fields the label side.
        for layer, side in enumerate((t.DATA_SIDE, t.LABEL_SIDE)):
            for field, label in _SIDE_FIELDS:
                add_if_exists(output, f"{side} {label}", getattr(common, f"layer{layer}_{field}"), 2)
        return

    labels = _layer_labels(layers, reverse)
    for layer, label in enumerate(labels):
        add_if_exists(output, f"{label} {t.MASTERING_RING}", getattr(common, f"layer{layer}_mastering_ring"), 2)
        add_if_exists(output, f"{label} {t.MASTERING_SID}", getattr(common, f"layer{layer}_mastering_sid"), 2)
        add_if_exists(output, f"{label} {t.TOOLSTAMP}", getattr(common, f"layer{layer}_toolstamp"), 2)
        if layer == 0:
            add_if_exists(output, f"{t.DATA_SIDE} {t.MOULD_SID}", common.layer0_mould_sid, 2)
            add_if_exists(output, f"{t.DATA_SIDE} {t.ADDITIONAL_MOULD}", common.layer0_additional_mould, 2)
        elif layer == 1:
            add_if_exists(output, f"{t.LABEL_SIDE} {t.MOULD_SID}", common.layer1_mould_sid, 2)
            add_if_exists(output, f"{t.LABEL_SIDE} {t.ADDITIONAL_MOULD}", common.layer1_additional_mould, 2)


def _trimmed(value: Optional[str]) -> Optional[str]:
    return value.strip() if value is not None else None


def _has_protection(record: SubmissionRecord) -> bool:
    protection = record.copy_protection
    return (
        protection.protection is not None
        or protection.anti_modchip is not YesNo.NULL
        or protection.libcrypt is not YesNo.NULL
    )


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #
def format_output_data(record: SubmissionRecord) -> Optional[List[str]]:
    """Return the report lines for *record*, or ``None`` when rendering fails."""
    try:
        return collapse_blank_lines(_format(record))
    except Exception:  # noqa: BLE001 – callers treat None as "formatting failed"
        log.exception("report.format_failed")
        return None


def _format(record: SubmissionRecord) -> List[str]:
    common = record.common_disc_info
    checksums = record.size_and_checksums
    system = common.system
    output: List[str] = [t.SECTION_COMMON]

    add_if_exists(output, t.TITLE, common.title, 1)
    add_if_exists(output, t.FOREIGN_TITLE, common.foreign_title, 1)
    add_if_exists(output, t.DISC_NUMBER, common.disc_number, 1)
    add_if_exists(output, t.DISC_TITLE, common.disc_title, 1)
    add_if_exists(output, t.SYSTEM, system.long_name if system else None, 1)
    add_if_exists(
        output,
        t.MEDIA_TYPE,
        fixed_media_type(
            common.media,
            checksums.size,
            checksums.layerbreak,
            checksums.layerbreak2,
            checksums.layerbreak3,
        ),
        1,
    )
    add_if_exists(output, t.CATEGORY, common.category.long_name if common.category else None, 1)
    add_if_exists(output, t.MATCHING_IDS, record.matched_ids, 1)
    add_if_exists(output, t.REGION, common.region.long_name if common.region else t.REGION_DEFAULT, 1)
    languages = common.languages if common.languages is not None else [None]
    add_if_exists(
        output,
        t.LANGUAGES,
        [lang.long_name if lang is not None else t.LANGUAGE_DEFAULT for lang in languages],
        1,
    )
    add_if_exists(
        output,
        t.LANGUAGE_SELECTION,
        [sel.long_name for sel in common.language_selection] if common.language_selection else None,
        1,
    )
    add_if_exists(output, t.SERIAL, common.serial, 1)

    output += ["", t.SECTION_RINGCODE]
    _ringcode_lines(
        output,
        common,
        checksums.layerbreak_count() + 1,
        system in t.REVERSED_LAYER_SYSTEMS,
    )

    add_if_exists(output, t.BARCODE, common.barcode, 1)
    add_if_exists(output, t.EXE_DATE, common.exe_date, 1)
    add_if_exists(output, t.ERROR_COUNT, common.errors_count, 1)
    add_if_exists(output, t.COMMENTS, _trimmed(common.comments), 1)
    add_if_exists(output, t.CONTENTS, _trimmed(common.contents), 1)

    output += ["", t.SECTION_VERSION]
    add_if_exists(output, t.VERSION, record.version_and_editions.version, 1)
    add_if_exists(output, t.EDITION, record.version_and_editions.other_editions, 1)

    if system is DiscSystem.SONY_PLAYSTATION:
        output += ["", t.SECTION_EDC]
        add_if_exists(output, t.EDC, record.edc.edc.long_name, 1)

    extras = record.extras
    if extras.pvd is not None or extras.pic is not None or extras.bca is not None:
        output += ["", t.SECTION_EXTRAS]
        add_if_exists(output, t.PVD, extras.pvd, 1)
        add_if_exists(output, t.DISC_KEY, extras.disc_key, 1)
        add_if_exists(output, t.DISC_ID, extras.disc_id, 1)
        add_if_exists(output, t.PIC, extras.pic, 1)
        add_if_exists(output, t.HEADER, extras.header, 1)
        add_if_exists(output, t.BCA, extras.bca, 1)
        add_if_exists(output, t.SECURITY_SECTOR_RANGES, extras.security_sector_ranges, 1)

    if _has_protection(record):
        protection = record.copy_protection
        output += ["", t.SECTION_PROTECTION]
        if system is DiscSystem.SONY_PLAYSTATION:
            add_if_exists(output, t.ANTI_MODCHIP, protection.anti_modchip.long_name, 1)
            add_if_exists(output, t.LIBCRYPT, protection.libcrypt.long_name, 1)
            add_if_exists(output, t.SUBINTENTION, protection.libcrypt_data, 1)
        add_if_exists(output, t.COPY_PROTECTION, protection.protection, 1)
        add_if_exists(output, t.SUBINTENTION, protection.securom_data, 1)

    tracks = record.tracks_and_write_offsets
    if (tracks.clrmamepro_data or "").strip():
        output += ["", t.SECTION_TRACKS]
        add_if_exists(output, t.DAT, tracks.clrmamepro_data + "\n", 1)
        add_if_exists(output, t.CUESHEET, tracks.cuesheet, 1)
        add_if_exists(output, t.WRITE_OFFSET, tracks.other_write_offsets, 1)
    else:
        output += ["", t.SECTION_CHECKSUMS]
        for label, value in _layerbreak_rows(checksums.layerbreak, checksums.layerbreak2, checksums.layerbreak3):
            add_if_exists(output, label, value, 1)
        add_if_exists(output, t.SIZE, checksums.size, 1)
        add_if_exists(output, t.CRC32, checksums.crc32, 1)
        add_if_exists(output, t.MD5, checksums.md5, 1)
        add_if_exists(output, t.SHA1, checksums.sha1, 1)

    return output


def _layerbreak_rows(*layerbreaks: int) -> List[Tuple[str, int]]:
    labels = (t.LAYERBREAK, f"{t.LAYERBREAK} 2", f"{t.LAYERBREAK} 3")
    return [(label, value) for label, value in zip(labels, layerbreaks) if value]


def format_json(record: SubmissionRecord) -> str:
    """Serialize *record* to indented JSON."""
    return record.model_dump_json(indent=4)
