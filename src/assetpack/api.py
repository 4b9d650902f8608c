"""High-level API for assetpack: build, inspect and validate packs."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .archive import DEFAULT_COMPRESSION_LEVEL
from .archive.inspector import (
    inspect_pack as _inspect_pack_impl,
    validate_pack as _validate_pack_impl,
)
from .logging import get_logger
from .manifest import build_manifest
from .pipeline import (
    AssetList,
    CompileReport,
    compile_full_pack,
    load_asset_list,
)
from .reporting import get_reporter, task

__all__ = [
    "BuildOptions",
    "BuildResult",
    "build_pack",
    "inspect_pack",
    "validate_pack",
    "load_asset_list",
]


@dataclass(slots=True)
class BuildOptions:
    asset_list: Path
    output_path: Path
    jobs: int = 1
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    # Optional path; when provided a manifest JSON will be emitted alongside the pack
    manifest_path: Path | None = None


@dataclass(slots=True)
class BuildResult:
    output_file: Path
    bytes_written: int
    report: CompileReport

    @property
    def ok(self) -> bool:
        return self.report.ok


def build_pack(options: BuildOptions) -> BuildResult:
    logger = get_logger()
    rep = get_reporter()
    assets: AssetList = load_asset_list(options.asset_list)
    rep.summary("load", assets=len(assets), base_dir=assets.base_dir, jobs=options.jobs)
    report = compile_full_pack(
        options.output_path,
        assets.assets,
        base_dir=assets.base_dir,
        jobs=options.jobs,
        compression_level=options.compression_level,
    )
    if options.manifest_path is not None:
        with task("manifest.emit", "Emit manifest"):
            list_hash = hashlib.sha256(options.asset_list.read_bytes()).hexdigest()
            data = build_manifest(
                options.output_path,
                report,
                options.manifest_path,
                asset_list_hash=list_hash,
            )
        logger.info("Emitted manifest: %s", options.manifest_path.name)
        rep.summary(
            "manifest",
            entries=data["counts"]["entries"],
            crc32=data["crc32"],
            sha256=data["sha256"][:12],
        )
    rep.summary(
        "pack",
        file=options.output_path.name,
        bytes=report.bytes_written,
        entries=report.entries,
        failed=report.failed,
    )
    return BuildResult(
        output_file=options.output_path,
        bytes_written=report.bytes_written,
        report=report,
    )


def inspect_pack(path: str | Path) -> dict[str, Any]:
    return _inspect_pack_impl(path)


def validate_pack(path: str | Path) -> list[str]:
    info = _inspect_pack_impl(path)
    return _validate_pack_impl(info)
