"""
Public façade for the *utils* package.

Anything imported here becomes part of the *stable* public API.
Internal helpers live in their own modules and are **not** re-exported.
"""

from __future__ import annotations

from .dat import DatEntry, format_dat_line, iter_dat_entries, parse_dat_line
from .errors import (
    CatalogConnectionError,
    CatalogError,
    ConfigurationError,
    DiscomaticError,
    HasherStateError,
)
from .hashing import FileHashes, Hash, Hasher, get_hasher, hash_file, hashers_for
from .paths import base_path, normalize_output_paths
from .results import ProgressSink, Result, log_progress

__all__: list[str] = [
    "DatEntry",
    "format_dat_line",
    "iter_dat_entries",
    "parse_dat_line",
    "CatalogConnectionError",
    "CatalogError",
    "ConfigurationError",
    "DiscomaticError",
    "HasherStateError",
    "FileHashes",
    "Hash",
    "Hasher",
    "get_hasher",
    "hash_file",
    "hashers_for",
    "base_path",
    "normalize_output_paths",
    "ProgressSink",
    "Result",
    "log_progress",
]
