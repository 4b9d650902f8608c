"""On-disk layout of an asset pack.

All integers little endian::

    header   <8sHHIIQQII>  magic, format version, flags, entry count,
                           directory size, data size (decompressed),
                           stored data size, data CRC32, directory CRC32
    directory              entry_count * (<H key length, UTF-8 key, <QQ offset, length)
    data                   one region, zlib-compressed when FLAG_COMPRESSED

Offsets in the directory are relative to the start of the decompressed data
region.
"""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass
from typing import Dict, Iterable, List

from ..errors import archive_error, E_BAD_MAGIC, E_BAD_VERSION, E_DIRECTORY, E_TRUNCATED

__all__ = [
    "MAGIC",
    "FORMAT_VERSION",
    "FLAG_COMPRESSED",
    "HEADER_SIZE",
    "ArchiveHeader",
    "ArchiveEntry",
    "normalize_key",
    "pack_header",
    "unpack_header",
    "parse_header",
    "pack_directory",
    "parse_directory",
    "compute_crc32",
    "inflate",
]

MAGIC = b"ASSETPAK"
FORMAT_VERSION = 1
FLAG_COMPRESSED = 0x1
MAX_KEY_LENGTH = 0xFFFF

_HEADER = struct.Struct("<8sHHIIQQII")
_KEY_LEN = struct.Struct("<H")
_RANGE = struct.Struct("<QQ")
HEADER_SIZE = _HEADER.size


@dataclass(frozen=True, slots=True)
class ArchiveHeader:
    magic: bytes
    version: int
    flags: int
    entry_count: int
    directory_size: int
    data_size: int
    stored_size: int
    data_crc32: int
    directory_crc32: int

    @property
    def compressed(self) -> bool:
        return bool(self.flags & FLAG_COMPRESSED)


@dataclass(frozen=True, slots=True)
class ArchiveEntry:
    key: str
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


def normalize_key(path: str, suffix: str = "") -> str:
    """Canonical entry key: forward slashes, lower case, no leading ``./``."""
    key = (str(path) + suffix).replace("\\", "/").lower()
    while key.startswith("./"):
        key = key[2:]
    return key


def compute_crc32(data: bytes | memoryview) -> int:
    return zlib.crc32(data) & 0xFFFFFFFF


def inflate(stored: bytes, data_size: int) -> bytes:
    """Decompress at most ``data_size + 1`` bytes of a zlib stream.

    A longer result means the header understates the data region; callers
    reject it on the size check. Raises ``zlib.error`` on a corrupt or
    truncated stream.
    """
    d = zlib.decompressobj()
    data = d.decompress(stored, data_size + 1)
    if len(data) <= data_size and not d.eof:
        raise zlib.error("incomplete or truncated stream")
    return data


def pack_header(header: ArchiveHeader) -> bytes:
    return _HEADER.pack(
        header.magic,
        header.version,
        header.flags,
        header.entry_count,
        header.directory_size,
        header.data_size,
        header.stored_size,
        header.data_crc32,
        header.directory_crc32,
    )


def unpack_header(data: bytes) -> ArchiveHeader:
    """Decode header fields without validating them."""
    return ArchiveHeader(*_HEADER.unpack_from(data, 0))


def parse_header(data: bytes) -> ArchiveHeader:
    if len(data) < HEADER_SIZE:
        raise archive_error(
            E_TRUNCATED, f"File too small for header: {len(data)}<{HEADER_SIZE}"
        )
    header = unpack_header(data)
    if header.magic != MAGIC:
        raise archive_error(E_BAD_MAGIC, f"Bad magic {header.magic!r}")
    if header.version != FORMAT_VERSION:
        raise archive_error(
            E_BAD_VERSION,
            f"Unsupported format version {header.version} (expected {FORMAT_VERSION})",
        )
    return header


def pack_directory(entries: Iterable[ArchiveEntry]) -> bytes:
    out = bytearray()
    for e in entries:
        raw = e.key.encode("utf-8")
        if len(raw) > MAX_KEY_LENGTH:
            raise ValueError(f"Entry key too long ({len(raw)} bytes): {e.key[:64]}...")
        out += _KEY_LEN.pack(len(raw)) + raw + _RANGE.pack(e.offset, e.length)
    return bytes(out)


def parse_directory(data: bytes, entry_count: int, data_size: int) -> List[ArchiveEntry]:
    """Decode and bounds-check the directory; raises ``ArchiveFormatError``."""
    entries: List[ArchiveEntry] = []
    seen: Dict[str, int] = {}
    pos = 0
    for i in range(entry_count):
        if pos + _KEY_LEN.size > len(data):
            raise archive_error(E_DIRECTORY, f"Directory truncated at entry {i}")
        (key_len,) = _KEY_LEN.unpack_from(data, pos)
        pos += _KEY_LEN.size
        if pos + key_len + _RANGE.size > len(data):
            raise archive_error(E_DIRECTORY, f"Directory truncated at entry {i}")
        try:
            key = data[pos : pos + key_len].decode("utf-8")
        except UnicodeDecodeError as exc:
            raise archive_error(E_DIRECTORY, f"Entry {i} key is not UTF-8") from exc
        pos += key_len
        offset, length = _RANGE.unpack_from(data, pos)
        pos += _RANGE.size
        if offset + length > data_size:
            raise archive_error(
                E_DIRECTORY,
                f"Entry {key} range {offset}+{length} exceeds data size {data_size}",
            )
        if key in seen:
            raise archive_error(E_DIRECTORY, f"Duplicate entry key {key}")
        seen[key] = i
        entries.append(ArchiveEntry(key, offset, length))
    if pos != len(data):
        raise archive_error(
            E_DIRECTORY,
            f"Directory has {len(data) - pos} trailing bytes after {entry_count} entries",
        )
    return entries
