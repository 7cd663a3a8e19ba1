"""Labels and section headers of the plain-text submission report."""

from __future__ import annotations

from discomatic.models import DiscSystem

TITLE = "Title"
FOREIGN_TITLE = "Foreign Title (Non-latin)"
DISC_NUMBER = "Disc Number / Letter"
DISC_TITLE = "Disc Title"
SYSTEM = "System"
MEDIA_TYPE = "Media Type"
CATEGORY = "Category"
MATCHING_IDS = "Matching IDs"
REGION = "Region"
LANGUAGES = "Languages"
LANGUAGE_SELECTION = "Language Selection Via"
SERIAL = "Disc Serial"
MASTERING_RING = "Mastering Code (laser branded/etched)"
MASTERING_SID = "Mastering SID Code"
TOOLSTAMP = "Toolstamp or Mastering Code (engraved/stamped)"
MOULD_SID = "Mould SID Code"
ADDITIONAL_MOULD = "Additional Mould"
BARCODE = "Barcode"
EXE_DATE = "EXE/Build Date"
ERROR_COUNT = "Error Count"
COMMENTS = "Comments"
CONTENTS = "Contents"
VERSION = "Version"
EDITION = "Edition/Release"
EDC = "EDC"
PVD = "Primary Volume Descriptor (PVD)"
DISC_KEY = "Disc Key"
DISC_ID = "Disc ID"
PIC = "Permanent Information & Control (PIC)"
HEADER = "Header"
BCA = "BCA"
SECURITY_SECTOR_RANGES = "Security Sector Ranges"
ANTI_MODCHIP = "Anti-modchip"
LIBCRYPT = "LibCrypt"
SUBINTENTION = "SubIntention Data (SecuROM/LibCrypt)"
COPY_PROTECTION = "Copy Protection"
DAT = "DAT"
CUESHEET = "Cuesheet"
WRITE_OFFSET = "Write Offset"
LAYERBREAK = "Layerbreak"
SIZE = "Size"
CRC32 = "CRC32"
MD5 = "MD5"
SHA1 = "SHA1"

SECTION_COMMON = "Common Disc Info:"
SECTION_RINGCODE = "\tRingcode Information:"
SECTION_VERSION = "Version and Editions:"
SECTION_EDC = "EDC:"
SECTION_EXTRAS = "Extras:"
SECTION_PROTECTION = "Copy Protection:"
SECTION_TRACKS = "Tracks and Write Offsets:"
SECTION_CHECKSUMS = "Size & Checksum:"

REGION_DEFAULT = "SPACE! (CHANGE THIS)"
LANGUAGE_DEFAULT = "Klingon (CHANGE THIS)"

DATA_SIDE = "Data Side"
LABEL_SIDE = "Label Side"

#: Systems whose layer 0 is mastered from the outside in.
REVERSED_LAYER_SYSTEMS = frozenset(
    {
        DiscSystem.SONY_PLAYSTATION_2,
        DiscSystem.SONY_PLAYSTATION_3,
        DiscSystem.SONY_PLAYSTATION_4,
    }
)
