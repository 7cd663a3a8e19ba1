"""
Write report artifacts into the output directory.

Every writer returns ``True`` on success and ``False`` on I/O failure; the
failure is logged but never raised so that a dump is not lost because a
report could not be written.
"""

from __future__ import annotations

import gzip
import os
import zipfile
from typing import List, Sequence

import structlog

from discomatic.record import SubmissionRecord
from discomatic.tools import BackendParameters
from discomatic.utils.paths import base_path

from .formatter import format_json

log = structlog.get_logger()

SUBMISSION_TEXT = "!submissionInfo.txt"
SUBMISSION_JSON = "!submissionInfo.json.gz"
LOG_ARCHIVE_SUFFIX = "_logs.zip"


def write_output_data(output_dir: str, lines: Sequence[str]) -> bool:
    """Write *lines* to ``!submissionInfo.txt`` (one entry per line)."""
    path = os.path.join(output_dir, SUBMISSION_TEXT)
    try:
        os.makedirs(output_dir or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as stream:
            for line in lines:
                stream.write(f"{line}\n")
    except OSError as exc:
        log.error("report.write_failed", path=path, error=str(exc))
        return False
    log.info("report.written", path=path)
    return True


def write_output_json(output_dir: str, record: SubmissionRecord) -> bool:
    """Write the gzipped JSON form of *record* to ``!submissionInfo.json.gz``."""
    path = os.path.join(output_dir, SUBMISSION_JSON)
    try:
        os.makedirs(output_dir or ".", exist_ok=True)
        with gzip.open(path, "wt", encoding="utf-8") as stream:
            stream.write(format_json(record))
    except OSError as exc:
        log.error("report.json_failed", path=path, error=str(exc))
        return False
    log.info("report.json_written", path=path)
    return True


def compress_log_files(output_dir: str, output_filename: str, parameters: BackendParameters) -> bool:
    """Archive the backend logs into ``<base>_logs.zip`` and delete the originals.

    Archive entries are stored relative to *output_dir*.  Nothing is deleted
    unless the archive was written completely.
    """
    base = base_path(output_dir, output_filename)
    files: List[str] = parameters.log_file_paths(base)
    if not files:
        return True

    archive = base + LOG_ARCHIVE_SUFFIX
    try:
        with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for path in files:
                zf.write(path, arcname=os.path.relpath(path, output_dir or "."))
    except (OSError, zipfile.BadZipFile) as exc:
        log.error("report.compress_failed", archive=archive, error=str(exc))
        return False

    for path in files:
        try:
            os.remove(path)
        except OSError as exc:
            log.warning("report.remove_failed", path=path, error=str(exc))
    log.info("report.logs_compressed", archive=archive, files=len(files))
    return True
