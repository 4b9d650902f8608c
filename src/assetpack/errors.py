"""Error definitions for assetpack."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

E_SOURCE_READ = "E_SOURCE_READ"
E_IMAGE_DECODE = "E_IMAGE_DECODE"
E_INDEX_OUT_OF_RANGE = "E_INDEX_OUT_OF_RANGE"
E_UNTERMINATED_STRING = "E_UNTERMINATED_STRING"
E_TRUNCATED = "E_TRUNCATED"
E_INVALID_PARAM = "E_INVALID_PARAM"
E_BAD_ENCODING = "E_BAD_ENCODING"
E_SIZE_MISMATCH = "E_SIZE_MISMATCH"
E_ENTRY_MISSING = "E_ENTRY_MISSING"
E_DUP_ENTRY = "E_DUP_ENTRY"
E_BAD_MAGIC = "E_BAD_MAGIC"
E_BAD_VERSION = "E_BAD_VERSION"
E_CRC_MISMATCH = "E_CRC_MISMATCH"
E_DECOMPRESS = "E_DECOMPRESS"
E_DIRECTORY = "E_DIRECTORY"
E_WRITE_IO = "E_WRITE_IO"
E_MANIFEST = "E_MANIFEST"
E_UNKNOWN_KIND = "E_UNKNOWN_KIND"
E_BUILD_FAILED = "E_BUILD_FAILED"


@dataclass
class AssetPackError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class AssetCompileError(AssetPackError):
    """Fatal for one asset; the batch carries on with the others."""


class SourceReadError(AssetCompileError):
    pass


class ImageDecodeError(AssetCompileError):
    pass


class MeshIndexError(AssetCompileError):
    pass


class CorruptDataError(AssetPackError):
    """A compiled blob failed structural validation on decode."""


class ArchiveFormatError(AssetPackError):
    """The archive file cannot be loaded; partial loads are not supported."""


class DuplicateEntryError(AssetPackError):
    pass


class MissingEntryError(AssetPackError):
    """A required entry is absent from a loaded pack."""


class ManifestError(AssetPackError):
    pass


def corrupt(
    code: str, message: str, context: Optional[Dict[str, Any]] = None
) -> CorruptDataError:
    return CorruptDataError(code=code, message=message, context=context)


def archive_error(
    code: str, message: str, context: Optional[Dict[str, Any]] = None
) -> ArchiveFormatError:
    return ArchiveFormatError(code=code, message=message, context=context)


__all__ = [
    "AssetPackError",
    "AssetCompileError",
    "SourceReadError",
    "ImageDecodeError",
    "MeshIndexError",
    "CorruptDataError",
    "ArchiveFormatError",
    "DuplicateEntryError",
    "MissingEntryError",
    "ManifestError",
    "corrupt",
    "archive_error",
    "E_SOURCE_READ",
    "E_IMAGE_DECODE",
    "E_INDEX_OUT_OF_RANGE",
    "E_UNTERMINATED_STRING",
    "E_TRUNCATED",
    "E_INVALID_PARAM",
    "E_BAD_ENCODING",
    "E_SIZE_MISMATCH",
    "E_ENTRY_MISSING",
    "E_DUP_ENTRY",
    "E_BAD_MAGIC",
    "E_BAD_VERSION",
    "E_CRC_MISMATCH",
    "E_DECOMPRESS",
    "E_DIRECTORY",
    "E_WRITE_IO",
    "E_MANIFEST",
    "E_UNKNOWN_KIND",
    "E_BUILD_FAILED",
]
