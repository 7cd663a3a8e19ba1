"""
Declarative per-system rules.

A :class:`SystemRule` lists what a platform adds to the record.  Static
defaults are applied by :func:`apply_static_rule`; the scan flags
(``protection_scan``, ``anti_modchip``, ``libcrypt``) are read by the
extraction engine, which owns the scanner collaborator.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from pydantic import BaseModel

from discomatic.models import DiscCategory, DiscSystem, LanguageSelection, Region
from discomatic.record import SubmissionRecord

from .types import Placeholders

ISBN_COMMENT = "[T:ISBN] "


class SystemRule(BaseModel, frozen=True):
    region: Optional[Region] = None
    exe_date: bool = False
    category: Optional[DiscCategory] = None
    protection_placeholder: bool = False
    isbn_comment: bool = False
    protection_scan: bool = False
    anti_modchip: bool = False
    libcrypt: bool = False
    language_selection: Tuple[LanguageSelection, ...] = ()
    disc_key: bool = False
    disc_id: bool = False


_EXE_DATE = SystemRule(exe_date=True)
_JAPAN = SystemRule(region=Region.JAPAN)
_PC_FAMILY = SystemRule(isbn_comment=True, protection_scan=True)

SYSTEM_RULES: Dict[DiscSystem, SystemRule] = {
    DiscSystem.ACORN_ARCHIMEDES: SystemRule(region=Region.UK),
    DiscSystem.AUDIO_CD: SystemRule(category=DiscCategory.AUDIO),
    DiscSystem.DVD_AUDIO: SystemRule(category=DiscCategory.AUDIO),
    DiscSystem.SUPER_AUDIO_CD: SystemRule(category=DiscCategory.AUDIO),
    DiscSystem.BANDAI_PLAYDIA: SystemRule(region=Region.JAPAN, exe_date=True),
    DiscSystem.BD_VIDEO: SystemRule(category=DiscCategory.BONUS_DISCS, protection_placeholder=True),
    DiscSystem.DVD_VIDEO: SystemRule(category=DiscCategory.BONUS_DISCS),
    DiscSystem.COMMODORE_AMIGA_CD: _EXE_DATE,
    DiscSystem.COMMODORE_AMIGA_CD32: SystemRule(region=Region.EUROPE, exe_date=True),
    DiscSystem.COMMODORE_AMIGA_CDTV: SystemRule(region=Region.EUROPE, exe_date=True),
    DiscSystem.FUJITSU_FM_TOWNS: SystemRule(region=Region.JAPAN, exe_date=True),
    DiscSystem.FUJITSU_FM_TOWNS_MARTY: _JAPAN,
    DiscSystem.INCREDIBLE_TECHNOLOGIES_EAGLE: _EXE_DATE,
    DiscSystem.KONAMI_E_AMUSEMENT: _EXE_DATE,
    DiscSystem.KONAMI_FIREBEAT: _EXE_DATE,
    DiscSystem.KONAMI_SYSTEM_GV: _EXE_DATE,
    DiscSystem.KONAMI_SYSTEM_573: _EXE_DATE,
    DiscSystem.KONAMI_TWINKLE: _EXE_DATE,
    DiscSystem.MATTEL_HYPERSCAN: _EXE_DATE,
    DiscSystem.NAMCO_SEGA_NINTENDO_TRIFORCE: _EXE_DATE,
    DiscSystem.NAVISOFT_NAVIKEN: SystemRule(region=Region.JAPAN, exe_date=True),
    DiscSystem.NEC_PC88: _JAPAN,
    DiscSystem.NEC_PC98: SystemRule(region=Region.JAPAN, exe_date=True),
    DiscSystem.NEC_PCFX: _JAPAN,
    DiscSystem.SEGA_CHIHIRO: _EXE_DATE,
    DiscSystem.SEGA_DREAMCAST: _EXE_DATE,
    DiscSystem.SEGA_NAOMI: _EXE_DATE,
    DiscSystem.SEGA_NAOMI_2: _EXE_DATE,
    DiscSystem.SEGA_TITAN_VIDEO: _EXE_DATE,
    DiscSystem.SHARP_X68000: _JAPAN,
    DiscSystem.SNK_NEO_GEO_CD: _EXE_DATE,
    DiscSystem.TOMY_KISS_SITE: _JAPAN,
    DiscSystem.ZAPIT_GAME_WAVE: SystemRule(protection_placeholder=True),
    DiscSystem.APPLE_MACINTOSH: _PC_FAMILY,
    DiscSystem.ENHANCED_CD: _PC_FAMILY,
    DiscSystem.IBM_PC: _PC_FAMILY,
    DiscSystem.PALM_OS: _PC_FAMILY,
    DiscSystem.POCKET_PC: _PC_FAMILY,
    DiscSystem.RAINBOW_DISC: _PC_FAMILY,
    DiscSystem.SONY_PLAYSTATION: SystemRule(anti_modchip=True, libcrypt=True),
    DiscSystem.SONY_PLAYSTATION_2: SystemRule(
        language_selection=(
            LanguageSelection.BIOS_SETTINGS,
            LanguageSelection.LANGUAGE_SELECTOR,
            LanguageSelection.OPTIONS_MENU,
        )
    ),
    DiscSystem.SONY_PLAYSTATION_3: SystemRule(disc_key=True, disc_id=True),
}

_NO_RULE = SystemRule()


def rule_for(system: DiscSystem | None) -> SystemRule:
    return SYSTEM_RULES.get(system, _NO_RULE)


def apply_static_rule(record: SubmissionRecord, rule: SystemRule, ph: Placeholders) -> None:
    """Apply defaults that need no collaborator."""
    common = record.common_disc_info
    if rule.region is not None and common.region is None:
        common.region = rule.region
    if rule.exe_date:
        common.exe_date = ph.required
    if rule.category is not None and common.category is None:
        common.category = rule.category
    if rule.protection_placeholder:
        record.copy_protection.protection = ph.required_if_exists
    if rule.isbn_comment and not (common.comments or "").strip():
        common.comments = ISBN_COMMENT + ph.optional
    if rule.language_selection:
        common.language_selection = list(rule.language_selection)
    if rule.disc_key:
        record.extras.disc_key = ph.required
    if rule.disc_id:
        record.extras.disc_id = ph.required
