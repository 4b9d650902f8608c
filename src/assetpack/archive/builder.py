"""Accumulates compiled blobs and serialises them into one pack file."""

from __future__ import annotations

import zlib
from pathlib import Path
from typing import Dict, List

from ..errors import DuplicateEntryError, AssetPackError, E_DUP_ENTRY, E_WRITE_IO
from ..logging import get_logger, section
from ..reporting import TaskStatus, get_reporter
from .format import (
    FLAG_COMPRESSED,
    FORMAT_VERSION,
    MAGIC,
    ArchiveEntry,
    ArchiveHeader,
    compute_crc32,
    normalize_key,
    pack_directory,
    pack_header,
)

__all__ = ["ArchiveBuilder", "DEFAULT_COMPRESSION_LEVEL"]

DEFAULT_COMPRESSION_LEVEL = 6


class ArchiveBuilder:
    """Write-side of a pack. Entries keep insertion order.

    ``compression_level`` follows zlib (0-9); level 0 stores the data region
    uncompressed and clears ``FLAG_COMPRESSED``.
    """

    def __init__(self, compression_level: int = DEFAULT_COMPRESSION_LEVEL):
        if not 0 <= compression_level <= 9:
            raise ValueError(
                f"compression_level must be in 0..9, got {compression_level}"
            )
        self.compression_level = compression_level
        self._entries: List[ArchiveEntry] = []
        self._index: Dict[str, int] = {}
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize_key(key) in self._index

    @property
    def entries(self) -> List[ArchiveEntry]:
        return list(self._entries)

    @property
    def data_size(self) -> int:
        return len(self._data)

    def add(self, key: str, data: bytes | bytearray | memoryview) -> ArchiveEntry:
        norm = normalize_key(key)
        if norm in self._index:
            raise DuplicateEntryError(
                code=E_DUP_ENTRY,
                message=f"Duplicate archive entry {norm}",
                context={"key": norm},
            )
        entry = ArchiveEntry(norm, len(self._data), len(data))
        self._data += data
        self._index[norm] = len(self._entries)
        self._entries.append(entry)
        return entry

    def to_bytes(self) -> bytes:
        directory = pack_directory(self._entries)
        raw = bytes(self._data)
        if self.compression_level > 0:
            stored = zlib.compress(raw, self.compression_level)
            flags = FLAG_COMPRESSED
        else:
            stored = raw
            flags = 0
        header = ArchiveHeader(
            magic=MAGIC,
            version=FORMAT_VERSION,
            flags=flags,
            entry_count=len(self._entries),
            directory_size=len(directory),
            data_size=len(raw),
            stored_size=len(stored),
            data_crc32=compute_crc32(raw),
            directory_crc32=compute_crc32(directory),
        )
        return pack_header(header) + directory + stored

    def write(self, path: str | Path) -> int:
        """Serialise to ``path`` and return the number of bytes written."""
        out = Path(path)
        logger = get_logger()
        rep = get_reporter()
        with section(f"Write pack {out.name}"):
            rep.start_task("write.pack", "Compress & write", total=None)
            payload = self.to_bytes()
            try:
                out.parent.mkdir(parents=True, exist_ok=True)
                out.write_bytes(payload)
            except OSError as exc:
                rep.end_task("write.pack", TaskStatus.FAILED)
                raise AssetPackError(
                    code=E_WRITE_IO,
                    message=f"Cannot write pack {out}: {exc}",
                    context={"path": str(out)},
                ) from exc
            rep.end_task(
                "write.pack", entries=len(self._entries), bytes=len(payload)
            )
        logger.info(
            "Wrote pack %s size=%d bytes entries=%d data=%d",
            out,
            len(payload),
            len(self._entries),
            len(self._data),
        )
        return len(payload)
