"""Optional JSON build manifest summarising a written pack.

Only produced when the caller asks for it (``--emit-manifest``). Lists every
entry with its range and checksums plus whole-file hashes and the compile
outcome.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

from .archive import AssetPack
from .archive.format import compute_crc32
from .pipeline import CompileReport

__all__ = ["build_manifest", "manifest_dict"]

MANIFEST_VERSION = 1


def manifest_dict(
    pack: AssetPack,
    report: CompileReport,
    *,
    file_crc32: int,
    file_sha256: str,
    asset_list_hash: str | None = None,
) -> dict[str, Any]:
    entries = []
    for e in pack.entries:
        view = pack.require(e.key)
        entries.append(
            {
                "key": e.key,
                "offset": e.offset,
                "length": e.length,
                "crc32": f"{compute_crc32(view):08x}",
                "sha256": hashlib.sha256(view).hexdigest(),
            }
        )
    d: dict[str, Any] = {
        "version": MANIFEST_VERSION,
        "format_version": pack.header.version,
        "compressed": pack.header.compressed,
        "file_size": report.bytes_written,
        "data_size": pack.data_size,
        "counts": {
            "assets": report.total,
            "compiled": report.compiled,
            "failed": report.failed,
            "entries": len(entries),
            "warnings": report.warnings,
        },
        "entries": entries,
        "crc32": f"{file_crc32:08x}",
        "sha256": file_sha256,
        "asset_list_hash": asset_list_hash,
    }
    if report.failures:
        d["failures"] = [f.to_dict() for f in report.failures]
    return d


def build_manifest(
    pack_path: Path,
    report: CompileReport,
    output_path: Path,
    *,
    asset_list_hash: str | None = None,
) -> dict[str, Any]:
    file_bytes = pack_path.read_bytes()
    pack = AssetPack.from_bytes(file_bytes, str(pack_path))
    data = manifest_dict(
        pack,
        report,
        file_crc32=compute_crc32(file_bytes),
        file_sha256=hashlib.sha256(file_bytes).hexdigest(),
        asset_list_hash=asset_list_hash,
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True)
        f.write("\n")
    return data
