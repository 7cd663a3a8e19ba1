"""Test helpers for discomatic modules."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from discomatic.config.schema import Options
from discomatic.models import BackendKind
from discomatic.tools import BackendParameters, OutputFile
from discomatic.utils.dat import format_dat_line

SHA1_TRACK1 = "a" * 40
SHA1_TRACK2 = "b" * 40
MD5 = "900150983cd24fb0d6963f7d28e17f72"

PVD_ROWS = [
    "0320 : 20 20 20 20 20 20 20 20  20 20 20 20 20 20 20 20",
    "0330 : 20 20 20 20 20 20 20 20  20 20 20 20 20 31 39 39   1999",
    "0340 : 39 30 33 30 31 31 32 30  30 30 30 30 30 00 31 39   9030112000000.19",
    "0350 : 39 39 30 33 30 31 31 32  30 30 30 30 30 30 00 30   99030112000000.0",
    "0360 : 30 30 30 30 30 30 30 30  30 30 30 30 30 30 30 00   000000000000000.",
    "0370 : 01 00 00 00 00 00 00 00  00 00 00 00 00 00 00 00   ................",
]


def make_options(**overrides) -> Options:
    """Return options that never touch the network or a real scanner."""
    values = dict(
        compress_log_files=False,
        scan_for_protection=False,
        protection_scanner=None,
    )
    values.update(overrides)
    return Options(**values)


def dat_text(names_and_sha1: List[tuple[str, str]]) -> str:
    lines = [
        format_dat_line(name, 2352, "0a1b2c3d", MD5, sha1)
        for name, sha1 in names_and_sha1
    ]
    return "\n".join(lines)


def main_info_text() -> str:
    return "\n".join(
        ["========== LBA[000016, 0x00010]: Main Channel ==========", *PVD_ROWS,
         "========== LBA[000017, 0x00011]: Main Channel =========="]
    ) + "\n"


def write_dic_cd_outputs(
    directory: Path,
    stem: str = "game",
    *,
    tracks: int = 2,
    sub: Optional[bytes] = b"\x00" * 96,
    sub_intention: Optional[str] = None,
    edc_log: Optional[str] = None,
    c2: bool = True,
) -> Dict[str, Path]:
    """Create the files DiscImageCreator leaves after a ``cd`` dump."""
    directory.mkdir(parents=True, exist_ok=True)
    base = directory / stem
    names = [
        (f"{stem} (Track {n}).bin", SHA1_TRACK1 if n == 1 else SHA1_TRACK2)
        for n in range(1, tracks + 1)
    ]
    files = {
        ".cue": f'FILE "{stem} (Track 1).bin" BINARY\n  TRACK 01 MODE2/2352\n    INDEX 01 00:00:00\n',
        ".dat": "<datafile>\n" + dat_text(names) + "\n</datafile>\n",
        "_disc.txt": "========== Offset ==========\n Combined Offset(Byte)   2352, (Samples)    588\n",
        "_drive.txt": "drive\n",
        "_mainError.txt": "",
        "_mainInfo.txt": main_info_text(),
        "_subError.txt": "",
        "_subInfo.txt": "",
        "_volDesc.txt": "volume\n",
    }
    if c2:
        files["_c2Error.txt"] = ""
    if edc_log is not None:
        files[".img_EdcEcc.txt"] = edc_log
    if sub_intention is not None:
        files["_subIntention.txt"] = sub_intention

    paths = {}
    for suffix, content in files.items():
        path = Path(f"{base}{suffix}")
        path.write_text(content, encoding="utf-8")
        paths[suffix] = path
    if sub is not None:
        sub_path = Path(f"{base}.sub")
        sub_path.write_bytes(sub)
        paths[".sub"] = sub_path
    return paths


def write_dic_dvd_outputs(directory: Path, stem: str = "game", *, layerbreak: int = 0) -> Dict[str, Path]:
    """Create the files DiscImageCreator leaves after a ``dvd`` dump."""
    directory.mkdir(parents=True, exist_ok=True)
    base = directory / stem
    disc = "========== DVD Structure ==========\n"
    if layerbreak:
        disc += f"\tLayerZeroSector: {layerbreak}\n"
    files = {
        ".dat": format_dat_line(f"{stem}.iso", 4_700_000_000, "deadbeef", MD5, SHA1_TRACK1) + "\n",
        "_disc.txt": disc,
        "_drive.txt": "",
        "_mainError.txt": "",
        "_mainInfo.txt": main_info_text(),
        "_volDesc.txt": "",
    }
    paths = {}
    for suffix, content in files.items():
        path = Path(f"{base}{suffix}")
        path.write_text(content, encoding="utf-8")
        paths[suffix] = path
    return paths


class LayeredParameters(BackendParameters):
    """Backend stand-in whose dump is complete and has *layerbreaks* layerbreaks."""

    kind = BackendKind.AARU

    def __init__(self, layerbreaks: int = 0, **kwargs):
        super().__init__(**kwargs)
        self.layerbreaks = layerbreaks
        self._valid = True

    @classmethod
    def build(cls, system, media_type, drive, filename, speed, options):
        return cls(system=system, media_type=media_type)

    def generate(self):
        return ""

    def parse(self, argument_string):
        return True

    def output_files(self) -> List[OutputFile]:
        return []

    def extract_submission_fields(self, record, base_path, drive, include_artifacts):
        checksums = record.size_and_checksums
        checksums.size = 8_500_000_000
        for index, name in enumerate(("layerbreak", "layerbreak2", "layerbreak3")[: self.layerbreaks]):
            setattr(checksums, name, 1_000_000 * (index + 1))
        for layer in range(self.layerbreaks + 1):
            setattr(record.common_disc_info, f"layer{layer}_mastering_ring", f"RING {layer}")


# ---------------------------------------------------------------------------
# Fakes for injected collaborators
# ---------------------------------------------------------------------------
class FakeEngine:
    """Records every call instead of launching a process."""

    def __init__(self, returncode: int = 0, on_run=None):
        self.calls: List[dict] = []
        self.returncode = returncode
        self.cancelled = False
        self.on_run = on_run

    def run(self, executable, args, *, cwd=None, confirm=False):
        self.calls.append(dict(executable=executable, args=list(args), cwd=cwd, confirm=confirm))
        if self.on_run is not None:
            self.on_run()
        return self.returncode

    def cancel(self):
        self.cancelled = True


class FakeScanner:
    """Protection scanner with canned answers."""

    def __init__(self, scan_result=(True, "SafeDisc 2"), anti_modchip=False, libcrypt=False):
        self.scan_result = scan_result
        self.anti_modchip = anti_modchip
        self.libcrypt = libcrypt
        self.scanned: List[str] = []

    def scan(self, path):
        self.scanned.append(str(path))
        return self.scan_result

    def anti_modchip_detected(self, path):
        return self.anti_modchip

    def libcrypt_detected(self, sub_path):
        return self.libcrypt


class FakeCatalog:
    """Catalog client answering from dictionaries."""

    def __init__(self, login=True, results=None, fields=None):
        self._login = login
        self.results = results or {}
        self.fields = fields or {}
        self.queries: List[str] = []

    def login(self):
        return self._login

    def search(self, query):
        self.queries.append(query)
        return self.results.get(query, [])

    def disc_fields(self, disc_id):
        return self.fields.get(disc_id)
