"""
Domain-level enumerations and request models shared across the tool, pipeline
and CLI layers.

The module provides:

* **Disc identity** – :class:`DiscSystem` and :class:`MediaType` together with
  the validity relation :func:`media_types_for`.
* **Catalog vocabularies** – :class:`DiscCategory`, :class:`Region`,
  :class:`Language`, :class:`LanguageSelection` and the tri-state
  :class:`YesNo`.  Each exposes a ``long_name`` used by the report and a
  lenient ``from_text`` lookup used when scraping catalog pages.
* **Backends and drives** – :class:`BackendKind`, :class:`DriveKind` and
  :class:`Drive`.
* **`DumpRequest`** – the immutable transport object handed to the
  orchestrator.
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, model_validator


class _Vocabulary(str, Enum):
    """Shared helpers for string enums that carry a display name."""

    @property
    def long_name(self) -> str:
        return _LONG_NAMES.get(self, self.value)

    @classmethod
    def from_text(cls, text: str | None):
        """Return the member whose value or long name matches *text*.

        Matching ignores case and surrounding whitespace.  ``None`` is
        returned when nothing matches.
        """
        if not text:
            return None
        needle = text.strip().lower()
        for member in cls:
            if needle in {member.value.lower(), member.long_name.lower(), member.name.lower()}:
                return member
        return None


# --------------------------------------------------------------------------- #
# 1 – Disc identity
# --------------------------------------------------------------------------- #
class DiscSystem(_Vocabulary):
    """Logical platform of a disc, keyed by its catalog short code."""

    ACORN_ARCHIMEDES = "archcd"
    APPLE_MACINTOSH = "mac"
    AUDIO_CD = "audio-cd"
    BANDAI_PLAYDIA = "qis"
    BD_VIDEO = "bd-video"
    COMMODORE_AMIGA_CD = "acd"
    COMMODORE_AMIGA_CD32 = "cd32"
    COMMODORE_AMIGA_CDTV = "cdtv"
    DVD_AUDIO = "dvd-audio"
    DVD_VIDEO = "dvd-video"
    ENHANCED_CD = "enhanced-cd"
    FUJITSU_FM_TOWNS = "fmt"
    FUJITSU_FM_TOWNS_MARTY = "fmtm"
    IBM_PC = "pc"
    INCREDIBLE_TECHNOLOGIES_EAGLE = "ite"
    KONAMI_E_AMUSEMENT = "kea"
    KONAMI_FIREBEAT = "kfb"
    KONAMI_SYSTEM_GV = "ksgv"
    KONAMI_SYSTEM_573 = "ks573"
    KONAMI_TWINKLE = "kt"
    MATTEL_HYPERSCAN = "hs"
    MICROSOFT_XBOX = "xbox"
    MICROSOFT_XBOX_360 = "xbox360"
    NAMCO_SEGA_NINTENDO_TRIFORCE = "trf"
    NAVISOFT_NAVIKEN = "navi21"
    NEC_PC88 = "pc-88"
    NEC_PC98 = "pc-98"
    NEC_PCFX = "pc-fx"
    NEC_PC_ENGINE_CD = "pce"
    NINTENDO_GAMECUBE = "gc"
    NINTENDO_WII = "wii"
    PALM_OS = "palm"
    PANASONIC_3DO = "3do"
    PHILIPS_CDI = "cdi"
    POCKET_PC = "ppc"
    RAINBOW_DISC = "rainbow"
    SEGA_CHIHIRO = "chihiro"
    SEGA_DREAMCAST = "dc"
    SEGA_MEGA_CD = "mcd"
    SEGA_NAOMI = "naomi"
    SEGA_NAOMI_2 = "naomi2"
    SEGA_SATURN = "ss"
    SEGA_TITAN_VIDEO = "stv"
    SHARP_X68000 = "x68k"
    SNK_NEO_GEO_CD = "ngcd"
    SONY_PLAYSTATION = "psx"
    SONY_PLAYSTATION_2 = "ps2"
    SONY_PLAYSTATION_3 = "ps3"
    SONY_PLAYSTATION_4 = "ps4"
    SONY_PSP = "psp"
    SUPER_AUDIO_CD = "sacd"
    TOMY_KISS_SITE = "ksite"
    ZAPIT_GAME_WAVE = "gamewave"


class MediaType(_Vocabulary):
    """Physical media format."""

    CDROM = "CDROM"
    GDROM = "GDROM"
    DVD = "DVD"
    HDDVD = "HDDVD"
    BLURAY = "BluRay"
    NINTENDO_GAMECUBE_GAME_DISC = "NintendoGameCubeGameDisc"
    NINTENDO_WII_OPTICAL_DISC = "NintendoWiiOpticalDisc"
    UMD = "UMD"
    LASERDISC = "LaserDisc"
    FLOPPY_DISK = "FloppyDisk"
    HARD_DISK = "HardDisk"
    COMPACT_FLASH = "CompactFlash"
    SD_CARD = "SDCard"
    FLASH_DRIVE = "FlashDrive"
    NONE = "NONE"

    @property
    def supports_drive_speed(self) -> bool:
        """Whether dumping tools accept a read speed for this media."""
        return self in _SPEED_MEDIA

    @property
    def is_removable_storage(self) -> bool:
        return self in {
            MediaType.COMPACT_FLASH,
            MediaType.SD_CARD,
            MediaType.FLASH_DRIVE,
            MediaType.HARD_DISK,
        }


_SPEED_MEDIA = frozenset(
    {
        MediaType.CDROM,
        MediaType.GDROM,
        MediaType.DVD,
        MediaType.HDDVD,
        MediaType.BLURAY,
        MediaType.NINTENDO_GAMECUBE_GAME_DISC,
        MediaType.NINTENDO_WII_OPTICAL_DISC,
    }
)


# --------------------------------------------------------------------------- #
# 2 – Catalog vocabularies
# --------------------------------------------------------------------------- #
class DiscCategory(_Vocabulary):
    GAMES = "Games"
    DEMOS = "Demos"
    VIDEO = "Video"
    AUDIO = "Audio"
    MULTIMEDIA = "Multimedia"
    APPLICATIONS = "Applications"
    COVERDISCS = "Coverdiscs"
    EDUCATIONAL = "Educational"
    BONUS_DISCS = "BonusDiscs"
    PREPRODUCTION = "Preproduction"
    ADD_ONS = "AddOns"


class Region(_Vocabulary):
    """Release region, keyed by catalog region code."""

    ASIA = "A"
    AUSTRALIA = "Au"
    BRAZIL = "B"
    CANADA = "Ca"
    CHINA = "C"
    EUROPE = "E"
    FRANCE = "F"
    GERMANY = "G"
    ITALY = "I"
    JAPAN = "J"
    KOREA = "K"
    NETHERLANDS = "N"
    RUSSIA = "R"
    SPAIN = "S"
    SWEDEN = "Sw"
    TAIWAN = "T"
    UK = "Uk"
    USA = "U"
    WORLD = "W"


class Language(_Vocabulary):
    """Disc language, keyed by ISO 639-1 code."""

    ARABIC = "ar"
    CHINESE = "zh"
    CZECH = "cs"
    DANISH = "da"
    DUTCH = "nl"
    ENGLISH = "en"
    FINNISH = "fi"
    FRENCH = "fr"
    GERMAN = "de"
    GREEK = "el"
    HEBREW = "he"
    HUNGARIAN = "hu"
    ITALIAN = "it"
    JAPANESE = "ja"
    KOREAN = "ko"
    NORWEGIAN = "no"
    POLISH = "pl"
    PORTUGUESE = "pt"
    RUSSIAN = "ru"
    SPANISH = "es"
    SWEDISH = "sv"
    TURKISH = "tr"


class LanguageSelection(_Vocabulary):
    BIOS_SETTINGS = "BiosSettings"
    LANGUAGE_SELECTOR = "LanguageSelector"
    OPTIONS_MENU = "OptionsMenu"


class YesNo(_Vocabulary):
    """Tri-state outcome of a detection pass."""

    NULL = "NULL"
    NO = "No"
    YES = "Yes"


# --------------------------------------------------------------------------- #
# 3 – Backends and drives
# --------------------------------------------------------------------------- #
class BackendKind(str, Enum):
    AARU = "Aaru"
    DD = "DD"
    DISC_IMAGE_CREATOR = "DiscImageCreator"
    CLEANRIP = "CleanRip"
    UMD_IMAGE_CREATOR = "UmdImageCreator"
    DCDUMPER = "DCDumper"

    @property
    def supports_dumping(self) -> bool:
        """``False`` for tools whose output is only verified, never produced."""
        return self in {BackendKind.AARU, BackendKind.DD, BackendKind.DISC_IMAGE_CREATOR}


class DriveKind(str, Enum):
    OPTICAL = "optical"
    FLOPPY = "floppy"
    REMOVABLE = "removable"
    HARD_DISK = "hard_disk"


_LETTER_RE = re.compile(r"^([A-Za-z]):?[\\/]?$")


class Drive(BaseModel, frozen=True):
    """Identity of the drive being dumped.

    Attributes:
        name: Drive letter (``"D"``, ``"D:"``) or device path (``/dev/sr0``).
        kind: Physical drive category.
        mount_path: Directory where the filesystem of the inserted media can
            be read.  Only needed by scans that walk the disc contents.
    """

    name: str
    kind: DriveKind = DriveKind.OPTICAL
    mount_path: Optional[Path] = None

    @property
    def letter(self) -> Optional[str]:
        match = _LETTER_RE.match(self.name)
        return match.group(1).upper() if match else None

    @property
    def device(self) -> str:
        """Identifier passed to dumping tools."""
        return self.letter or self.name

    def holds(self, path: str | Path) -> bool:
        """Return ``True`` when *path* lives on this drive."""
        full = str(Path(path).expanduser().resolve())
        if self.letter:
            return full[:1].upper() == self.letter
        if self.mount_path is not None:
            mount = str(Path(self.mount_path).expanduser().resolve())
            return full == mount or full.startswith(mount.rstrip("/") + "/")
        return False


# --------------------------------------------------------------------------- #
# 4 – Validity relation
# --------------------------------------------------------------------------- #
_CD = [MediaType.CDROM]
_CD_DVD = [MediaType.CDROM, MediaType.DVD]

_SYSTEM_MEDIA: Dict[DiscSystem, List[MediaType]] = {
    DiscSystem.APPLE_MACINTOSH: [MediaType.CDROM, MediaType.DVD, MediaType.FLOPPY_DISK],
    DiscSystem.BD_VIDEO: [MediaType.BLURAY],
    DiscSystem.DVD_AUDIO: [MediaType.DVD],
    DiscSystem.DVD_VIDEO: [MediaType.DVD],
    DiscSystem.IBM_PC: [
        MediaType.CDROM,
        MediaType.DVD,
        MediaType.BLURAY,
        MediaType.FLOPPY_DISK,
        MediaType.HARD_DISK,
        MediaType.COMPACT_FLASH,
        MediaType.SD_CARD,
        MediaType.FLASH_DRIVE,
    ],
    DiscSystem.KONAMI_FIREBEAT: _CD_DVD,
    DiscSystem.MICROSOFT_XBOX: _CD_DVD,
    DiscSystem.MICROSOFT_XBOX_360: [MediaType.CDROM, MediaType.DVD, MediaType.HDDVD],
    DiscSystem.NAMCO_SEGA_NINTENDO_TRIFORCE: [MediaType.GDROM],
    DiscSystem.NEC_PC98: [MediaType.CDROM, MediaType.DVD, MediaType.FLOPPY_DISK],
    DiscSystem.NINTENDO_GAMECUBE: [MediaType.NINTENDO_GAMECUBE_GAME_DISC],
    DiscSystem.NINTENDO_WII: [MediaType.NINTENDO_WII_OPTICAL_DISC],
    DiscSystem.SEGA_CHIHIRO: [MediaType.GDROM],
    DiscSystem.SEGA_DREAMCAST: [MediaType.CDROM, MediaType.GDROM],
    DiscSystem.SEGA_NAOMI: [MediaType.CDROM, MediaType.GDROM],
    DiscSystem.SEGA_NAOMI_2: [MediaType.CDROM, MediaType.GDROM],
    DiscSystem.SHARP_X68000: [MediaType.CDROM, MediaType.FLOPPY_DISK],
    DiscSystem.SONY_PLAYSTATION_2: _CD_DVD,
    DiscSystem.SONY_PLAYSTATION_3: [MediaType.BLURAY],
    DiscSystem.SONY_PLAYSTATION_4: [MediaType.BLURAY],
    DiscSystem.SONY_PSP: [MediaType.UMD],
    DiscSystem.ZAPIT_GAME_WAVE: [MediaType.DVD],
}


def media_types_for(system: DiscSystem | None) -> List[MediaType]:
    """Return the media types a disc of *system* may legally be.

    Systems without an explicit entry are CD-only.  ``None`` yields an empty
    list so that an unset system never validates.
    """
    if system is None:
        return []
    return list(_SYSTEM_MEDIA.get(system, _CD))


# --------------------------------------------------------------------------- #
# 5 – Request model
# --------------------------------------------------------------------------- #
class DumpRequest(BaseModel, frozen=True):
    """Immutable description of one dump.

    ``output_filename`` may carry an extension; the tool layer strips it when
    deriving the base path.
    """

    output_directory: str
    output_filename: str
    drive: Optional[Drive] = None
    system: Optional[DiscSystem] = None
    media_type: MediaType = MediaType.NONE
    backend: BackendKind = BackendKind.DISC_IMAGE_CREATOR
    drive_speed: Optional[int] = None

    @model_validator(mode="after")
    def _media_matches_system(self):
        """Reject (system, media type) pairs outside :func:`media_types_for`."""
        if self.media_type not in media_types_for(self.system):
            system = self.system.long_name if self.system else "no system"
            raise ValueError(
                f"{self.media_type.long_name} is not a valid media type for {system}"
            )
        return self


# --------------------------------------------------------------------------- #
# Display names
# --------------------------------------------------------------------------- #
_LONG_NAMES: Dict[Enum, str] = {
    DiscSystem.ACORN_ARCHIMEDES: "Acorn Archimedes",
    DiscSystem.APPLE_MACINTOSH: "Apple Macintosh",
    DiscSystem.AUDIO_CD: "Audio CD",
    DiscSystem.BANDAI_PLAYDIA: "Bandai Playdia Quick Interactive System",
    DiscSystem.BD_VIDEO: "BD-Video",
    DiscSystem.COMMODORE_AMIGA_CD: "Commodore Amiga CD",
    DiscSystem.COMMODORE_AMIGA_CD32: "Commodore Amiga CD32",
    DiscSystem.COMMODORE_AMIGA_CDTV: "Commodore Amiga CDTV",
    DiscSystem.DVD_AUDIO: "DVD-Audio",
    DiscSystem.DVD_VIDEO: "DVD-Video",
    DiscSystem.ENHANCED_CD: "Enhanced CD",
    DiscSystem.FUJITSU_FM_TOWNS: "Fujitsu FM Towns series",
    DiscSystem.FUJITSU_FM_TOWNS_MARTY: "Fujitsu FM Towns Marty",
    DiscSystem.IBM_PC: "IBM PC compatible",
    DiscSystem.INCREDIBLE_TECHNOLOGIES_EAGLE: "Incredible Technologies Eagle",
    DiscSystem.KONAMI_E_AMUSEMENT: "Konami e-Amusement",
    DiscSystem.KONAMI_FIREBEAT: "Konami FireBeat",
    DiscSystem.KONAMI_SYSTEM_GV: "Konami System GV",
    DiscSystem.KONAMI_SYSTEM_573: "Konami System 573",
    DiscSystem.KONAMI_TWINKLE: "Konami Twinkle",
    DiscSystem.MATTEL_HYPERSCAN: "Mattel HyperScan",
    DiscSystem.MICROSOFT_XBOX: "Microsoft Xbox",
    DiscSystem.MICROSOFT_XBOX_360: "Microsoft Xbox 360",
    DiscSystem.NAMCO_SEGA_NINTENDO_TRIFORCE: "Namco / Sega / Nintendo Triforce",
    DiscSystem.NAVISOFT_NAVIKEN: "Navisoft Naviken 2.1",
    DiscSystem.NEC_PC88: "NEC PC-88 series",
    DiscSystem.NEC_PC98: "NEC PC-98 series",
    DiscSystem.NEC_PCFX: "NEC PC-FX & PC-FXGA",
    DiscSystem.NEC_PC_ENGINE_CD: "NEC PC Engine CD & TurboGrafx CD",
    DiscSystem.NINTENDO_GAMECUBE: "Nintendo GameCube",
    DiscSystem.NINTENDO_WII: "Nintendo Wii",
    DiscSystem.PALM_OS: "Palm OS",
    DiscSystem.PANASONIC_3DO: "Panasonic 3DO Interactive Multiplayer",
    DiscSystem.PHILIPS_CDI: "Philips CD-i",
    DiscSystem.POCKET_PC: "Pocket PC",
    DiscSystem.RAINBOW_DISC: "Rainbow Disc",
    DiscSystem.SEGA_CHIHIRO: "Sega Chihiro",
    DiscSystem.SEGA_DREAMCAST: "Sega Dreamcast",
    DiscSystem.SEGA_MEGA_CD: "Sega Mega CD & Sega CD",
    DiscSystem.SEGA_NAOMI: "Sega Naomi",
    DiscSystem.SEGA_NAOMI_2: "Sega Naomi 2",
    DiscSystem.SEGA_SATURN: "Sega Saturn",
    DiscSystem.SEGA_TITAN_VIDEO: "Sega Titan Video",
    DiscSystem.SHARP_X68000: "Sharp X68000",
    DiscSystem.SNK_NEO_GEO_CD: "SNK Neo Geo CD",
    DiscSystem.SONY_PLAYSTATION: "Sony PlayStation",
    DiscSystem.SONY_PLAYSTATION_2: "Sony PlayStation 2",
    DiscSystem.SONY_PLAYSTATION_3: "Sony PlayStation 3",
    DiscSystem.SONY_PLAYSTATION_4: "Sony PlayStation 4",
    DiscSystem.SONY_PSP: "Sony PlayStation Portable",
    DiscSystem.SUPER_AUDIO_CD: "Super Audio CD",
    DiscSystem.TOMY_KISS_SITE: "Tomy Kiss-Site",
    DiscSystem.ZAPIT_GAME_WAVE: "ZAPiT Games Game Wave Family Entertainment System",
    MediaType.CDROM: "CD-ROM",
    MediaType.GDROM: "GD-ROM",
    MediaType.DVD: "DVD",
    MediaType.HDDVD: "HD-DVD",
    MediaType.BLURAY: "BD",
    MediaType.NINTENDO_GAMECUBE_GAME_DISC: "GameCube Game Disc",
    MediaType.NINTENDO_WII_OPTICAL_DISC: "Wii Optical Disc",
    MediaType.UMD: "UMD",
    MediaType.LASERDISC: "LD-ROM / LV-ROM",
    MediaType.FLOPPY_DISK: "Floppy Disk",
    MediaType.HARD_DISK: "Hard Disk",
    MediaType.COMPACT_FLASH: "CompactFlash",
    MediaType.SD_CARD: "SD Card",
    MediaType.FLASH_DRIVE: "Flash Drive",
    MediaType.NONE: "Unknown",
    DiscCategory.BONUS_DISCS: "Bonus Discs",
    DiscCategory.ADD_ONS: "Add-Ons",
    Region.ASIA: "Asia",
    Region.AUSTRALIA: "Australia",
    Region.BRAZIL: "Brazil",
    Region.CANADA: "Canada",
    Region.CHINA: "China",
    Region.EUROPE: "Europe",
    Region.FRANCE: "France",
    Region.GERMANY: "Germany",
    Region.ITALY: "Italy",
    Region.JAPAN: "Japan",
    Region.KOREA: "Korea",
    Region.NETHERLANDS: "Netherlands",
    Region.RUSSIA: "Russia",
    Region.SPAIN: "Spain",
    Region.SWEDEN: "Sweden",
    Region.TAIWAN: "Taiwan",
    Region.UK: "UK",
    Region.USA: "USA",
    Region.WORLD: "World",
    LanguageSelection.BIOS_SETTINGS: "Bios settings",
    LanguageSelection.LANGUAGE_SELECTOR: "Language selector",
    LanguageSelection.OPTIONS_MENU: "Options menu",
    YesNo.NULL: "Undetermined",
}
_LONG_NAMES.update({lang: lang.name.capitalize() for lang in Language})
