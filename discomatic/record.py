"""
Normalized submission record produced by the extraction pipeline.

The record mirrors the sections of a catalog submission.  It is created with
placeholder values, enriched by the backend parsers and the rule tables in
:mod:`discomatic.pipelines`, optionally edited by a human review callback and
finally rendered by :mod:`discomatic.report`.

All models are mutable: the extraction pipeline owns the single instance for
the duration of one run and writes to it in place.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from discomatic.models import (
    DiscCategory,
    DiscSystem,
    Language,
    LanguageSelection,
    MediaType,
    Region,
    YesNo,
)


class CommonDiscInfo(BaseModel):
    system: Optional[DiscSystem] = None
    media: Optional[MediaType] = None
    title: Optional[str] = None
    foreign_title: Optional[str] = None
    disc_number: Optional[str] = None
    disc_title: Optional[str] = None
    category: Optional[DiscCategory] = None
    region: Optional[Region] = None
    languages: Optional[List[Language]] = None
    language_selection: Optional[List[LanguageSelection]] = None
    serial: Optional[str] = None

    # Ringcode information, one group per physical layer.
    layer0_mastering_ring: Optional[str] = None
    layer0_mastering_sid: Optional[str] = None
    layer0_toolstamp: Optional[str] = None
    layer0_mould_sid: Optional[str] = None
    layer0_additional_mould: Optional[str] = None
    layer1_mastering_ring: Optional[str] = None
    layer1_mastering_sid: Optional[str] = None
    layer1_toolstamp: Optional[str] = None
    layer1_mould_sid: Optional[str] = None
    layer1_additional_mould: Optional[str] = None
    layer2_mastering_ring: Optional[str] = None
    layer2_mastering_sid: Optional[str] = None
    layer2_toolstamp: Optional[str] = None
    layer3_mastering_ring: Optional[str] = None
    layer3_mastering_sid: Optional[str] = None
    layer3_toolstamp: Optional[str] = None

    barcode: Optional[str] = None
    exe_date: Optional[str] = None
    errors_count: Optional[str] = None
    comments: Optional[str] = None
    contents: Optional[str] = None


class VersionAndEditions(BaseModel):
    version: Optional[str] = None
    other_editions: Optional[str] = None


class EDC(BaseModel):
    edc: YesNo = YesNo.NULL


class Extras(BaseModel):
    pvd: Optional[str] = None
    disc_key: Optional[str] = None
    disc_id: Optional[str] = None
    pic: Optional[str] = None
    header: Optional[str] = None
    bca: Optional[str] = None
    security_sector_ranges: Optional[str] = None


class CopyProtection(BaseModel):
    anti_modchip: YesNo = YesNo.NULL
    libcrypt: YesNo = YesNo.NULL
    libcrypt_data: Optional[str] = None
    protection: Optional[str] = None
    securom_data: Optional[str] = None


class DumpersAndStatus(BaseModel):
    dumpers: List[str] = Field(default_factory=list)
    other_dumpers: Optional[str] = None


class TracksAndWriteOffsets(BaseModel):
    clrmamepro_data: Optional[str] = None
    cuesheet: Optional[str] = None
    other_write_offsets: Optional[str] = None


class SizeAndChecksums(BaseModel):
    """Whole-image size and digests plus layerbreak offsets.

    A layerbreak of ``0`` means "not present"; the number of non-zero
    layerbreaks selects the single/dual/triple/quad layer report branch.
    """

    size: int = 0
    crc32: Optional[str] = None
    md5: Optional[str] = None
    sha1: Optional[str] = None
    layerbreak: int = 0
    layerbreak2: int = 0
    layerbreak3: int = 0

    def layerbreak_count(self) -> int:
        """Return how many layerbreaks are set (0-3)."""
        if self.layerbreak3:
            return 3
        if self.layerbreak2:
            return 2
        if self.layerbreak:
            return 1
        return 0


class SubmissionRecord(BaseModel):
    """Full submission record for one dumped disc."""

    common_disc_info: CommonDiscInfo = Field(default_factory=CommonDiscInfo)
    version_and_editions: VersionAndEditions = Field(default_factory=VersionAndEditions)
    edc: EDC = Field(default_factory=EDC)
    extras: Extras = Field(default_factory=Extras)
    copy_protection: CopyProtection = Field(default_factory=CopyProtection)
    dumpers_and_status: DumpersAndStatus = Field(default_factory=DumpersAndStatus)
    tracks_and_write_offsets: TracksAndWriteOffsets = Field(default_factory=TracksAndWriteOffsets)
    size_and_checksums: SizeAndChecksums = Field(default_factory=SizeAndChecksums)
    matched_ids: Optional[List[int]] = None
    added: Optional[datetime] = None
    last_modified: Optional[datetime] = None
    artifacts: Dict[str, str] = Field(default_factory=dict)
