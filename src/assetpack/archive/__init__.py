"""Path-keyed pack container: builder (write side) and AssetPack (read side)."""

from .builder import ArchiveBuilder, DEFAULT_COMPRESSION_LEVEL
from .format import (
    FORMAT_VERSION,
    MAGIC,
    ArchiveEntry,
    ArchiveHeader,
    normalize_key,
)
from .inspector import inspect_pack, validate_pack
from .reader import AssetPack

__all__ = [
    "ArchiveBuilder",
    "DEFAULT_COMPRESSION_LEVEL",
    "FORMAT_VERSION",
    "MAGIC",
    "ArchiveEntry",
    "ArchiveHeader",
    "normalize_key",
    "inspect_pack",
    "validate_pack",
    "AssetPack",
]
