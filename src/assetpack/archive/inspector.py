"""Pack inspection utilities.

Public functions:
- inspect_pack(path) -> dict
- validate_pack(info) -> list[str]

Unlike :meth:`AssetPack.load`, inspection never raises on a malformed file;
problems are reported in the returned structure.
"""

from __future__ import annotations

import zlib
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List

from ..errors import AssetPackError
from .format import (
    FORMAT_VERSION,
    HEADER_SIZE,
    MAGIC,
    compute_crc32,
    inflate,
    parse_directory,
    unpack_header,
)

__all__ = ["inspect_pack", "validate_pack"]


def _header_dict(data: bytes) -> Dict[str, Any] | None:
    if len(data) < HEADER_SIZE:
        return None
    header = unpack_header(data)
    info = asdict(header)
    info["magic"] = header.magic.decode("latin-1")
    info["magic_ok"] = header.magic == MAGIC
    info["version_ok"] = header.version == FORMAT_VERSION
    info["compressed"] = header.compressed
    return info


def inspect_pack(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    data = p.read_bytes()
    result: Dict[str, Any] = {"path": str(p), "file_size": len(data)}
    header = _header_dict(data)
    result["header"] = header
    if header is None:
        result["errors"] = [f"File too small for header: {len(data)}<{HEADER_SIZE}"]
        return result
    errors: List[str] = []
    dir_end = HEADER_SIZE + header["directory_size"]
    directory = data[HEADER_SIZE:dir_end]
    header["directory_crc_match"] = (
        dir_end <= len(data)
        and compute_crc32(directory) == header["directory_crc32"]
    )
    stored = data[dir_end:] if dir_end <= len(data) else b""
    result["stored_size_actual"] = len(stored)
    payload: bytes | None = None
    if header["compressed"]:
        try:
            payload = inflate(stored, header["data_size"])
        except zlib.error as exc:
            errors.append(f"Decompression failed: {exc}")
    else:
        payload = stored
    if payload is not None:
        result["data_size_actual"] = len(payload)
        header["data_crc_match"] = (
            compute_crc32(payload) == header["data_crc32"]
        )
    else:
        header["data_crc_match"] = False
    if dir_end <= len(data):
        try:
            entries = parse_directory(
                directory, header["entry_count"], header["data_size"]
            )
        except AssetPackError as exc:
            errors.append(exc.message)
        else:
            result["entries"] = [
                {"key": e.key, "offset": e.offset, "length": e.length}
                for e in entries
            ]
    result["errors"] = errors
    return result


def validate_pack(info: Dict[str, Any]) -> List[str]:
    issues: List[str] = list(info.get("errors", []))
    header = info.get("header")
    if header is None:
        return issues
    if not header["magic_ok"]:
        issues.append("Header magic mismatch")
    if not header["version_ok"]:
        issues.append(
            f"Unsupported format version {header['version']} (expected {FORMAT_VERSION})"
        )
    if HEADER_SIZE + header["directory_size"] > info["file_size"]:
        issues.append("Directory exceeds file size")
    elif not header["directory_crc_match"]:
        issues.append("Directory CRC mismatch")
    if info.get("stored_size_actual") != header["stored_size"]:
        issues.append(
            f"Stored data size mismatch: header={header['stored_size']} "
            f"actual={info.get('stored_size_actual')}"
        )
    actual = info.get("data_size_actual")
    if actual is not None:
        if actual != header["data_size"]:
            issues.append(
                f"Data size mismatch: header={header['data_size']} actual={actual}"
            )
        if not header["data_crc_match"]:
            issues.append("Data CRC mismatch")
    return issues
