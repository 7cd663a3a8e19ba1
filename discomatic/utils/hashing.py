"""
Incremental multi-algorithm hashing.

A :class:`Hasher` wraps exactly one digest context.  Callers that need
several algorithms create one hasher per bit of a :class:`Hash` flag set via
:func:`hashers_for`, feed every chunk to each of them and finalize them all
once the stream is exhausted.  :func:`hash_file` does exactly that for a file
on disk and is what the backend parsers use to compute DAT-style checksums.

CRC32 digests are returned as four bytes, most significant byte first, so the
hex form matches the ``crc`` attribute of a ClrMamePro DAT line.
"""

from __future__ import annotations

import hashlib
import zlib
from dataclasses import dataclass, field
from enum import IntFlag
from pathlib import Path
from typing import Dict, List, Optional

import structlog

from discomatic.utils.errors import HasherStateError

log = structlog.get_logger()

_CHUNK_SIZE = 1024 * 1024


class Hash(IntFlag):
    CRC32 = 1
    MD5 = 2
    SHA1 = 4
    SHA256 = 8
    SHA384 = 16
    SHA512 = 32

    STANDARD = CRC32 | MD5 | SHA1
    ALL = CRC32 | MD5 | SHA1 | SHA256 | SHA384 | SHA512


_SINGLE_BITS = (Hash.CRC32, Hash.MD5, Hash.SHA1, Hash.SHA256, Hash.SHA384, Hash.SHA512)

_HASHLIB_NAMES = {
    Hash.MD5: "md5",
    Hash.SHA1: "sha1",
    Hash.SHA256: "sha256",
    Hash.SHA384: "sha384",
    Hash.SHA512: "sha512",
}


class _Crc32:
    """Minimal hashlib-style adapter around :func:`zlib.crc32`."""

    def __init__(self) -> None:
        self._value = 0

    def update(self, data: bytes) -> None:
        self._value = zlib.crc32(data, self._value)

    def digest(self) -> bytes:
        return (self._value & 0xFFFFFFFF).to_bytes(4, "big")


class Hasher:
    """Digest accumulator for a single algorithm.

    Args:
        hash_type: Exactly one :class:`Hash` bit.

    Raises:
        ValueError: If *hash_type* is empty or combines several algorithms.
    """

    def __init__(self, hash_type: Hash) -> None:
        try:
            hash_type = Hash(hash_type)
        except ValueError as exc:
            raise ValueError(f"Unknown hash selection: {hash_type!r}") from exc
        if hash_type not in _SINGLE_BITS:
            raise ValueError(
                f"A Hasher handles exactly one algorithm, got {hash_type!r}"
            )

        self.hash_type = hash_type
        self._context = _Crc32() if hash_type is Hash.CRC32 else hashlib.new(_HASHLIB_NAMES[hash_type])
        self._digest: Optional[bytes] = None

    @property
    def finalized(self) -> bool:
        return self._digest is not None

    def process(self, buffer: bytes, size: Optional[int] = None) -> None:
        """Feed ``buffer[:size]`` (the whole buffer when *size* is ``None``).

        Raises:
            HasherStateError: If the hasher was already terminated.
        """
        if self.finalized:
            raise HasherStateError("Cannot process data after terminate()")
        view = memoryview(buffer)
        self._context.update(view if size is None else view[:size])

    def terminate(self) -> None:
        """Finalize the digest.

        Raises:
            HasherStateError: On a second call.
        """
        if self.finalized:
            raise HasherStateError("Hasher was already terminated")
        self._digest = self._context.digest()
        self._context = None

    def get_digest(self) -> Optional[bytes]:
        """Return the raw digest or ``None`` before :meth:`terminate`."""
        return self._digest

    def get_digest_hex(self) -> Optional[str]:
        """Return the lowercase hex digest or ``None`` before :meth:`terminate`."""
        if self._digest is None:
            return None
        return self._digest.hex()


def get_hasher(hash_type: Hash | int) -> Optional[Hasher]:
    """Return a :class:`Hasher` or ``None`` when *hash_type* is malformed."""
    try:
        return Hasher(hash_type)
    except ValueError:
        return None


def hashers_for(hash_types: Hash | int) -> List[Hasher]:
    """Return one hasher per algorithm bit set in *hash_types*."""
    flags = Hash(hash_types)
    return [Hasher(bit) for bit in _SINGLE_BITS if bit in flags]


@dataclass
class FileHashes:
    """Size and lowercase hex digests of one file."""

    size: int
    digests: Dict[Hash, str] = field(default_factory=dict)

    @property
    def crc32(self) -> Optional[str]:
        return self.digests.get(Hash.CRC32)

    @property
    def md5(self) -> Optional[str]:
        return self.digests.get(Hash.MD5)

    @property
    def sha1(self) -> Optional[str]:
        return self.digests.get(Hash.SHA1)


def hash_file(
    path: str | Path,
    hash_types: Hash | int = Hash.STANDARD,
    chunk_size: int = _CHUNK_SIZE,
) -> Optional[FileHashes]:
    """Stream *path* through every requested hasher.

    Returns:
        A :class:`FileHashes`, or ``None`` when the file is missing or cannot
        be read.
    """
    path = Path(path)
    if not path.is_file():
        return None

    hashers = hashers_for(hash_types)
    size = 0
    buffer = bytearray(chunk_size)
    try:
        with path.open("rb") as stream:
            while True:
                read = stream.readinto(buffer)
                if not read:
                    break
                size += read
                for hasher in hashers:
                    hasher.process(buffer, read)
    except OSError as exc:
        log.warning("hash.read_failed", path=str(path), error=str(exc))
        return None

    for hasher in hashers:
        hasher.terminate()
    return FileHashes(
        size=size,
        digests={h.hash_type: h.get_digest_hex() for h in hashers},
    )
