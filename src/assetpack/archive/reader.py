"""Read-only view over a loaded pack file."""

from __future__ import annotations

import zlib
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from ..errors import (
    MissingEntryError,
    archive_error,
    E_CRC_MISMATCH,
    E_DECOMPRESS,
    E_ENTRY_MISSING,
    E_SIZE_MISMATCH,
    E_SOURCE_READ,
    E_TRUNCATED,
)
from ..logging import get_logger
from .format import (
    HEADER_SIZE,
    ArchiveEntry,
    ArchiveHeader,
    compute_crc32,
    inflate,
    normalize_key,
    parse_directory,
    parse_header,
)

__all__ = ["AssetPack"]


class AssetPack:
    """An immutable, fully decompressed pack.

    The data region is decompressed once in :meth:`load`; lookups return
    read-only memoryviews into it and never touch the file again. Instances
    are safe to share between threads.
    """

    __slots__ = ("path", "header", "_entries", "_index", "_data")

    def __init__(
        self,
        path: str,
        header: ArchiveHeader,
        entries: List[ArchiveEntry],
        data: bytes,
    ):
        self.path = path
        self.header = header
        self._entries = tuple(entries)
        self._index: Dict[str, ArchiveEntry] = {e.key: e for e in entries}
        self._data = memoryview(data).toreadonly()

    @classmethod
    def load(cls, path: str | Path) -> "AssetPack":
        p = Path(path)
        try:
            raw = p.read_bytes()
        except OSError as exc:
            raise archive_error(
                E_SOURCE_READ, f"Cannot read pack {p}: {exc}", {"path": str(p)}
            ) from exc
        pack = cls.from_bytes(raw, str(p))
        get_logger().debug(
            "Loaded pack %s entries=%d data=%d", p, len(pack), pack.data_size
        )
        return pack

    @classmethod
    def from_bytes(cls, raw: bytes, path: str = "<memory>") -> "AssetPack":
        header = parse_header(raw)
        dir_end = HEADER_SIZE + header.directory_size
        if dir_end > len(raw):
            raise archive_error(
                E_TRUNCATED,
                f"Directory exceeds file size: {dir_end}>{len(raw)}",
                {"path": path},
            )
        directory = raw[HEADER_SIZE:dir_end]
        if compute_crc32(directory) != header.directory_crc32:
            raise archive_error(
                E_CRC_MISMATCH, "Directory CRC mismatch", {"path": path}
            )
        stored = raw[dir_end:]
        if len(stored) != header.stored_size:
            raise archive_error(
                E_SIZE_MISMATCH,
                f"Stored data size mismatch: header={header.stored_size} actual={len(stored)}",
                {"path": path},
            )
        if header.compressed:
            try:
                data = inflate(stored, header.data_size)
            except zlib.error as exc:
                raise archive_error(
                    E_DECOMPRESS, f"Cannot decompress data region: {exc}", {"path": path}
                ) from exc
        else:
            data = stored
        if len(data) != header.data_size:
            raise archive_error(
                E_SIZE_MISMATCH,
                f"Data size mismatch: header={header.data_size} actual={len(data)}",
                {"path": path},
            )
        if compute_crc32(data) != header.data_crc32:
            raise archive_error(E_CRC_MISMATCH, "Data CRC mismatch", {"path": path})
        entries = parse_directory(directory, header.entry_count, header.data_size)
        return cls(path, header, entries, data)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize_key(key) in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def keys(self) -> List[str]:
        return [e.key for e in self._entries]

    @property
    def entries(self) -> tuple[ArchiveEntry, ...]:
        return self._entries

    @property
    def data_size(self) -> int:
        return len(self._data)

    def lookup(self, path: str, suffix: str = "") -> Optional[memoryview]:
        entry = self._index.get(normalize_key(path, suffix))
        if entry is None:
            return None
        return self._data[entry.offset : entry.end]

    def require(self, path: str, suffix: str = "") -> memoryview:
        view = self.lookup(path, suffix)
        if view is None:
            key = normalize_key(path, suffix)
            raise MissingEntryError(
                code=E_ENTRY_MISSING,
                message=f"Entry {key} not found in {self.path}",
                context={"key": key},
            )
        return view

    def __repr__(self) -> str:
        return f"AssetPack(path={self.path!r}, entries={len(self)})"
