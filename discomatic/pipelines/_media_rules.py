"""
Per-media-family placeholder rules.

Each rule receives the record after backend extraction and marks the
ringcode fields a human has to read off the physical disc.  The number of
layer groups follows the layerbreaks: one group per layer, up to four for
the DVD family.
"""

from __future__ import annotations

from typing import Callable, Dict, Sequence

from discomatic.models import MediaType
from discomatic.record import SubmissionRecord

from .types import Placeholders

MediaRule = Callable[[SubmissionRecord, Placeholders], None]

UMD_CHECKSUM_NOTE = " [Not automatically generated for UMD]"

_RING = ("mastering_ring", "mastering_sid", "toolstamp")


def _mark(record: SubmissionRecord, layer: int, names: Sequence[str], value: str) -> None:
    common = record.common_disc_info
    for name in names:
        setattr(common, f"layer{layer}_{name}", value)


def _cd_layout(record: SubmissionRecord, ph: Placeholders) -> None:
    value = ph.required_if_exists
    _mark(record, 0, (*_RING, "mould_sid", "additional_mould"), value)
    _mark(record, 1, ("mould_sid",), value)


def _dvd_layout(record: SubmissionRecord, ph: Placeholders) -> None:
    layers = record.size_and_checksums.layerbreak_count() + 1
    if layers == 1:
        _cd_layout(record, ph)
        return
    value = ph.required_if_exists
    _mark(record, 0, (*_RING, "mould_sid", "additional_mould"), value)
    _mark(record, 1, (*_RING, "mould_sid"), value)
    for layer in range(2, layers):
        _mark(record, layer, _RING, value)


def _gamecube(record: SubmissionRecord, ph: Placeholders) -> None:
    _cd_layout(record, ph)
    if record.extras.bca is None:
        record.extras.bca = ph.required


def _wii(record: SubmissionRecord, ph: Placeholders) -> None:
    _dvd_layout(record, ph)
    record.extras.disc_key = ph.required
    if record.extras.bca is None:
        record.extras.bca = ph.required


def _umd(record: SubmissionRecord, ph: Placeholders) -> None:
    value = ph.required_if_exists
    _mark(record, 0, (*_RING, "mould_sid"), value)
    if record.size_and_checksums.layerbreak:
        _mark(record, 1, _RING, value)

    note = ph.required + UMD_CHECKSUM_NOTE if ph.enabled else ""
    checksums = record.size_and_checksums
    for name in ("crc32", "md5", "sha1"):
        if getattr(checksums, name) is None:
            setattr(checksums, name, note)
    record.tracks_and_write_offsets.clrmamepro_data = None


MEDIA_RULES: Dict[MediaType, MediaRule] = {
    MediaType.CDROM: _cd_layout,
    MediaType.GDROM: _cd_layout,
    MediaType.DVD: _dvd_layout,
    MediaType.HDDVD: _dvd_layout,
    MediaType.BLURAY: _dvd_layout,
    MediaType.NINTENDO_GAMECUBE_GAME_DISC: _gamecube,
    MediaType.NINTENDO_WII_OPTICAL_DISC: _wii,
    MediaType.UMD: _umd,
}


def apply_media_rules(record: SubmissionRecord, media_type: MediaType | None, ph: Placeholders) -> None:
    """Apply the rule registered for *media_type*; unknown media are left alone."""
    rule = MEDIA_RULES.get(media_type)
    if rule is not None:
        rule(record, ph)
