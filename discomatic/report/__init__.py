"""
Report rendering and output writers.

* :func:`format_output_data` – record → plain-text lines
* :func:`format_json` – record → JSON
* :func:`write_output_data`, :func:`write_output_json`,
  :func:`compress_log_files` – files in the output directory
"""

from __future__ import annotations

from .formatter import add_if_exists, fixed_media_type, format_json, format_output_data
from .writer import compress_log_files, write_output_data, write_output_json

__all__: list[str] = [
    "add_if_exists",
    "fixed_media_type",
    "format_json",
    "format_output_data",
    "compress_log_files",
    "write_output_data",
    "write_output_json",
]
